"""CHIP-8 machine state structures."""

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode

from chip8jax.constants import (
    MEMORY_SIZE, PROGRAM_START, REGISTER_COUNT, STACK_SIZE, KEYPAD_SIZE,
    SCREEN_WIDTH, SCREEN_HEIGHT, FAULT_NONE,
)


class StackState(PyTreeNode):
    """Return addresses for subroutine calls."""
    data: jnp.ndarray     # uint16[STACK_SIZE]
    pointer: jnp.ndarray  # uint8, number of addresses on the stack


class MachineState(PyTreeNode):
    """Main CHIP-8 machine state.

    The display is row-major: ``display[y, x]`` is the pixel in column ``x``
    of row ``y``, ``True`` meaning lit.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray
    pc: jnp.ndarray
    display: jnp.ndarray
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    fault: jnp.ndarray
    awaiting_key: jnp.ndarray
    sound_active: jnp.ndarray


def create_stack() -> StackState:
    """Create an empty call stack."""
    return StackState(
        data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
        pointer=jnp.zeros((), dtype=jnp.uint8),
    )


def create_state(rng: jax.random.PRNGKey = jax.random.PRNGKey(0)) -> MachineState:
    """Create initial machine state: everything zeroed, PC at the program start."""
    return MachineState(
        rng=rng,
        memory=jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8),
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_),
        stack=create_stack(),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(KEYPAD_SIZE, dtype=jnp.bool_),
        V=jnp.zeros(REGISTER_COUNT, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        fault=jnp.asarray(FAULT_NONE, dtype=jnp.uint8),
        awaiting_key=jnp.zeros((), dtype=jnp.bool_),
        sound_active=jnp.zeros((), dtype=jnp.bool_),
    )


def with_fault(state: MachineState, code: int) -> MachineState:
    """Record a fault code for the current cycle."""
    return state.replace(fault=jnp.asarray(code, dtype=jnp.uint8))
