"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import MachineState
from chip8jax.decode import DecodedInstruction
from chip8jax.constants import FONT_START, FONT_SPRITE_BYTES, MEMORY_SIZE, REGISTER_COUNT
from chip8jax.instructions.memory import guard_memory_range


def execute_get_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX1E - Add VX to I, wrapping at 16 bits."""
    return state.replace(I=state.I + jnp.astype(state.V[instruction.x], jnp.uint16))


def execute_wait_for_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX0A - Wait for key press.

    Stores the lowest pressed key. With no key down PC is rewound so the same
    instruction runs again next cycle, and the machine reports it is waiting.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(jnp.argmax(state.keypad), jnp.uint8)
        return state.replace(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(pc=state.pc - 2, awaiting_key=jnp.ones((), dtype=jnp.bool_))

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def execute_font_character(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * FONT_SPRITE_BYTES
    return state.replace(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.astype(state.I, jnp.int32) + jnp.arange(3)
    new_memory = state.memory.at[indices].set(digits, mode="drop")
    return guard_memory_range(state, state.replace(memory=new_memory), state.I, 3)


def _register_window(state: MachineState, instruction: DecodedInstruction):
    """Addresses I..I+15 and which of them belong to V0..VX."""
    register_mask = jnp.arange(REGISTER_COUNT) <= instruction.x
    addresses = jnp.astype(state.I, jnp.int32) + jnp.arange(REGISTER_COUNT)
    return register_mask, addresses


def execute_store_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    register_mask, addresses = _register_window(state, instruction)
    # Unselected registers target an out-of-range slot and are dropped
    targets = jnp.where(register_mask, addresses, MEMORY_SIZE)
    new_memory = state.memory.at[targets].set(state.V, mode="drop")
    updated = state.replace(memory=new_memory)
    return guard_memory_range(state, updated, state.I, jnp.astype(instruction.x, jnp.int32) + 1)


def execute_load_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    register_mask, addresses = _register_window(state, instruction)
    memory_values = state.memory[jnp.clip(addresses, 0, MEMORY_SIZE - 1)]
    new_V = jnp.where(register_mask, memory_values, state.V)
    updated = state.replace(V=new_V)
    return guard_memory_range(state, updated, state.I, jnp.astype(instruction.x, jnp.int32) + 1)
