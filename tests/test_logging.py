"""Tests for the console logger."""

import pytest
from chip8jax.logging import ConsoleLogger


def test_messages_below_level_are_dropped(capsys):
    logger = ConsoleLogger(log_level="WARNING", use_colors=False, show_timestamps=False)

    logger.info("hidden")
    logger.warning("shown")

    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "[ WARNING][chip8jax] shown" in out


def test_set_level(capsys):
    logger = ConsoleLogger(log_level="ERROR", use_colors=False, show_timestamps=False)
    logger.set_level("debug")

    logger.debug("trace line")

    assert "trace line" in capsys.readouterr().out


def test_unknown_level():
    with pytest.raises(ValueError):
        ConsoleLogger(log_level="VERBOSE")
    with pytest.raises(ValueError):
        ConsoleLogger().set_level("LOUD")


def test_writes_to_given_stream(tmp_path):
    path = tmp_path / "trace.log"
    with open(path, "w") as stream:
        logger = ConsoleLogger(use_colors=True, show_timestamps=False, stream=stream)
        logger.error("bad fetch")

    assert path.read_text() == "[   ERROR][chip8jax] bad fetch\n"


def test_log_state(capsys, fresh_state):
    logger = ConsoleLogger(log_level="DEBUG", use_colors=False, show_timestamps=False)
    state = fresh_state.replace(V=fresh_state.V.at[0xA].set(0x3C))

    logger.log_state(state)

    out = capsys.readouterr().out
    assert "PC=0x200 I=0x000 DT=0 ST=0" in out
    assert "VA=3c" in out
    assert "Stack (0): []" in out


def test_log_state_below_level(capsys, fresh_state):
    logger = ConsoleLogger(log_level="INFO", use_colors=False, show_timestamps=False)

    logger.log_state(fresh_state)

    assert capsys.readouterr().out == ""
