"""CHIP-8 memory and register operations."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import MachineState, with_fault
from chip8jax.decode import DecodedInstruction
from chip8jax.constants import MEMORY_SIZE, FAULT_MEMORY


def guard_memory_range(state: MachineState, updated: MachineState, start, length) -> MachineState:
    """Keep ``updated`` only if ``[start, start + length)`` lies inside memory.

    Out-of-range accesses are fatal: the original state is returned with a
    memory fault recorded, so nothing is written.
    """
    length = jnp.asarray(length, dtype=jnp.int32)
    end = jnp.asarray(start, dtype=jnp.int32) + length
    in_bounds = (length == 0) | (end <= MEMORY_SIZE)
    return jax.lax.cond(
        in_bounds,
        lambda: updated,
        lambda: with_fault(state, FAULT_MEMORY),
    )


def execute_set(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """6XKK - Set VX = KK."""
    return state.replace(V=state.V.at[instruction.x].set(jnp.astype(instruction.kk, jnp.uint8)))


def execute_add(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """7XKK - Add KK to VX, wrapping. VF is not touched."""
    result = state.V[instruction.x] + jnp.astype(instruction.kk, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(result))


def execute_set_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """CXKK - Set VX = random byte & KK."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.bits(subkey, shape=(), dtype=jnp.uint8)
    masked = random_value & jnp.astype(instruction.kk, jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=key)
