"""Main CHIP-8 execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import MachineState, with_fault
from chip8jax.decode import decode, Operation
from chip8jax.errors import RomLoadError
from chip8jax.constants import (
    PROGRAM_START, MEMORY_SIZE, FONT_START, FONT_DATA, FAULT_NONE, FAULT_MEMORY,
)
from chip8jax.instructions.system import execute_unknown, execute_clear_screen, execute_return
from chip8jax.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key, execute_skip_if_not_key,
)
from chip8jax.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left,
)
from chip8jax.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8jax.instructions.display import execute_display
from chip8jax.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)

HANDLERS = {
    Operation.UNKNOWN: execute_unknown,
    Operation.CLEAR_SCREEN: execute_clear_screen,
    Operation.RETURN: execute_return,
    Operation.JUMP: execute_jump,
    Operation.CALL: execute_call,
    Operation.SKIP_EQ_IMM: execute_skip_if_equal_immediate,
    Operation.SKIP_NE_IMM: execute_skip_if_not_equal_immediate,
    Operation.SKIP_EQ_REG: execute_skip_if_equal_register,
    Operation.LOAD_IMM: execute_set,
    Operation.ADD_IMM: execute_add,
    Operation.MOVE: execute_alu_set,
    Operation.OR: execute_alu_or,
    Operation.AND: execute_alu_and,
    Operation.XOR: execute_alu_xor,
    Operation.ADD: execute_alu_add,
    Operation.SUB: execute_alu_sub_xy,
    Operation.SHR: execute_alu_shift_right,
    Operation.SUBN: execute_alu_sub_yx,
    Operation.SHL: execute_alu_shift_left,
    Operation.SKIP_NE_REG: execute_skip_if_not_equal_register,
    Operation.LOAD_INDEX: execute_set_index,
    Operation.JUMP_OFFSET: execute_jump_with_offset,
    Operation.RANDOM: execute_random,
    Operation.DRAW: execute_display,
    Operation.SKIP_KEY: execute_skip_if_key,
    Operation.SKIP_NOT_KEY: execute_skip_if_not_key,
    Operation.GET_DELAY: execute_get_delay_timer,
    Operation.WAIT_KEY: execute_wait_for_key,
    Operation.SET_DELAY: execute_set_delay_timer,
    Operation.SET_SOUND: execute_set_sound_timer,
    Operation.ADD_INDEX: execute_add_to_index,
    Operation.FONT: execute_font_character,
    Operation.BCD: execute_bcd_conversion,
    Operation.STORE: execute_store_registers,
    Operation.LOAD: execute_load_registers,
}

# Branch list for jax.lax.switch, indexed by Operation value
_BRANCHES = [HANDLERS[op] for op in sorted(Operation)]


def execute(state: MachineState, instruction: int) -> MachineState:
    """Execute single CHIP-8 instruction.

    PC is expected to already point past the instruction (see ``fetch``).
    """
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.op, _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: MachineState) -> tuple[MachineState, jnp.ndarray]:
    """Fetch next instruction from memory and advance PC past it.

    Fetching past the end of memory records a memory fault, leaves PC where
    it is and yields instruction 0.
    """
    in_bounds = jnp.astype(state.pc, jnp.int32) + 1 < MEMORY_SIZE
    high = state.memory[jnp.clip(jnp.astype(state.pc, jnp.int32), 0, MEMORY_SIZE - 1)]
    low = state.memory[jnp.clip(jnp.astype(state.pc, jnp.int32) + 1, 0, MEMORY_SIZE - 1)]
    instruction = jnp.where(in_bounds, _pack_u16(high, low), jnp.zeros((), dtype=jnp.uint16))

    state = jax.lax.cond(
        in_bounds,
        lambda s: s.replace(pc=s.pc + 2),
        lambda s: with_fault(s, FAULT_MEMORY),
        state
    )
    return state, instruction


def step(state: MachineState) -> tuple[MachineState, jnp.ndarray]:
    """Run one fetch-decode-execute cycle.

    ``fault`` and ``awaiting_key`` describe this cycle only. A memory fault
    aborts the cycle: the returned state is the one passed in, with the fault
    recorded.
    """
    initial = state.replace(
        fault=jnp.asarray(FAULT_NONE, dtype=jnp.uint8),
        awaiting_key=jnp.zeros((), dtype=jnp.bool_),
    )
    state, instruction = fetch(initial)
    state = jax.lax.cond(
        state.fault == FAULT_NONE,
        execute,
        lambda s, _: s,
        state, instruction
    )
    state = jax.lax.cond(
        state.fault == FAULT_MEMORY,
        lambda: with_fault(initial, FAULT_MEMORY),
        lambda: state,
    )
    return state, instruction


def tick_timers(state: MachineState) -> MachineState:
    """Decrement delay and sound timers once; call at 60Hz.

    Timers stop at zero. ``sound_active`` is set when the sound timer was
    running at the start of the tick, i.e. a tone should play for this frame.
    """
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
        sound_active=state.sound_timer > 0,
    )


def run_instruction(state, _):
    state, _ = step(state)
    return state, None


@partial(jax.jit, static_argnums=1)
def run_cycles(state: MachineState, n: int) -> MachineState:
    """Run ``n`` cycles in one compiled loop.

    Only the last cycle's fault survives. A memory fault freezes the machine,
    so it is still visible after the loop.
    """
    state, _ = jax.lax.scan(run_instruction, state, length=n)
    return state


def load_image(state: MachineState, data: bytes) -> MachineState:
    """Copy a program image verbatim into memory starting at 0x200."""
    capacity = MEMORY_SIZE - PROGRAM_START
    if len(data) > capacity:
        raise RomLoadError(f"Program image is {len(data)} bytes, only {capacity} fit in memory")
    if not data:
        return state
    rom_array = jnp.array(list(data), dtype=jnp.uint8)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: MachineState, filename: str) -> MachineState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as exc:
        raise RomLoadError(f"Cannot read ROM {filename!r}: {exc}") from exc
    return load_image(state, rom_data)


def load_font(state: MachineState) -> MachineState:
    """Write the built-in hexadecimal font where FX29 expects it."""
    font = jnp.array(FONT_DATA, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(font))
