"""Test configuration and fixtures for CHIP-8 machine tests."""

import pytest
import jax.numpy as jnp
from chip8jax import create_state, Machine, PROGRAM_START
from chip8jax.logging import ConsoleLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def logger():
    """Logger that prints everything, without timestamps or colours."""
    return ConsoleLogger(log_level="DEBUG", use_colors=False, show_timestamps=False)


@pytest.fixture
def machine(logger):
    """Provide a seeded machine running without jit."""
    return Machine(seed=0, logger=logger, jit=False)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def assemble(*instructions):
    """Big-endian program image from 16-bit opcodes."""
    return b"".join(instruction.to_bytes(2, "big") for instruction in instructions)


def program_state(*instructions):
    """Fresh state with the given opcodes loaded at 0x200."""
    state = create_state()
    return setup_sprite_in_memory(state, PROGRAM_START, list(assemble(*instructions)))
