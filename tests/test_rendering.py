"""Tests for framebuffer conversion helpers."""

import numpy as np
import pytest
from chip8jax import framebuffer_to_rgb, framebuffer_to_text, create_color_scheme, create_state


def test_framebuffer_to_rgb_unscaled():
    display = create_state().display.at[2, 5].set(True)

    rgb = framebuffer_to_rgb(display, scale=1)

    assert rgb.shape == (32, 64, 3)
    assert rgb.dtype == np.uint8
    assert tuple(rgb[2, 5]) == (255, 255, 255)
    assert tuple(rgb[0, 0]) == (0, 0, 0)


def test_framebuffer_to_rgb_scaled():
    display = np.zeros((32, 64), dtype=bool)
    display[31, 63] = True

    rgb = framebuffer_to_rgb(display, scale=3)

    assert rgb.shape == (96, 192, 3)
    assert (rgb[93:, 189:] == 255).all()
    assert (rgb[:93, :189] == 0).all()


def test_framebuffer_to_rgb_colors():
    on_color, off_color = create_color_scheme("blue")
    display = np.zeros((32, 64), dtype=bool)
    display[0, 0] = True

    rgb = framebuffer_to_rgb(display, scale=1, on_color=on_color, off_color=off_color)

    assert tuple(rgb[0, 0]) == on_color
    assert tuple(rgb[0, 1]) == off_color


def test_invalid_scale():
    with pytest.raises(ValueError):
        framebuffer_to_rgb(np.zeros((32, 64), dtype=bool), scale=0)


@pytest.mark.parametrize("scheme", ["white", "classic", "amber", "blue", "retro"])
def test_color_schemes(scheme):
    on_color, off_color = create_color_scheme(scheme)
    assert len(on_color) == len(off_color) == 3
    assert on_color != off_color


def test_unknown_color_scheme():
    with pytest.raises(ValueError, match="Unknown color scheme"):
        create_color_scheme("plaid")


def test_framebuffer_to_text():
    display = np.zeros((32, 64), dtype=bool)
    display[0, 0] = display[1, 63] = True

    lines = framebuffer_to_text(display).splitlines()

    assert len(lines) == 32
    assert all(len(line) == 64 for line in lines)
    assert lines[0] == "#" + "." * 63
    assert lines[1] == "." * 63 + "#"
    assert set(lines[2]) == {"."}
