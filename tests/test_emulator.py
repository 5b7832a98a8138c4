"""Tests for the fetch/step cycle, timers and program loading."""

import jax.numpy as jnp
import pytest
from chip8jax import (
    fetch, step, tick_timers, run_cycles, load_image, load_rom, load_font,
    RomLoadError, MEMORY_SIZE, PROGRAM_START, FONT_START,
    FAULT_NONE, FAULT_MEMORY, FAULT_UNKNOWN_OPCODE, FAULT_STACK_UNDERFLOW,
)
from chip8jax.constants import FONT_DATA
from conftest import assemble, program_state


class TestInitialState:

    def test_everything_zero_but_pc(self, fresh_state):
        assert fresh_state.pc == PROGRAM_START
        assert fresh_state.memory.shape == (MEMORY_SIZE,)
        assert jnp.sum(fresh_state.memory) == 0
        assert jnp.sum(fresh_state.V) == 0
        assert fresh_state.I == 0
        assert fresh_state.stack.pointer == 0
        assert fresh_state.delay_timer == 0
        assert fresh_state.sound_timer == 0
        assert fresh_state.display.shape == (32, 64)
        assert not fresh_state.display.any()
        assert not fresh_state.keypad.any()
        assert fresh_state.fault == FAULT_NONE


class TestFetch:

    def test_fetch_is_big_endian(self):
        state = program_state(0xA2F0)

        state, instruction = fetch(state)

        assert instruction == 0xA2F0
        assert state.pc == PROGRAM_START + 2

    def test_fetch_at_last_word(self, fresh_state):
        state = fresh_state.replace(pc=jnp.asarray(MEMORY_SIZE - 2, dtype=jnp.uint16))

        state, _ = fetch(state)

        assert state.fault == FAULT_NONE
        assert state.pc == MEMORY_SIZE

    def test_fetch_past_end_faults(self, fresh_state):
        state = fresh_state.replace(pc=jnp.asarray(MEMORY_SIZE - 1, dtype=jnp.uint16))

        state, instruction = fetch(state)

        assert state.fault == FAULT_MEMORY
        assert state.pc == MEMORY_SIZE - 1
        assert instruction == 0


class TestStep:

    def test_clear_then_jump_to_self(self):
        """CLS; JP 0x202 settles into a steady loop."""
        state = program_state(0x00E0, 0x1202)
        state = state.replace(display=state.display.at[3, 4].set(True))

        state, _ = step(state)
        assert not state.display.any()
        assert state.pc == 0x202

        state, instruction = step(state)
        assert instruction == 0x1202
        assert state.pc == 0x202

        settled = state
        state, _ = step(state)
        assert state.pc == settled.pc
        assert (state.V == settled.V).all()
        assert (state.display == settled.display).all()

    def test_default_advance(self):
        state = program_state(0x6A42)

        state, instruction = step(state)

        assert instruction == 0x6A42
        assert state.V[0xA] == 0x42
        assert state.pc == PROGRAM_START + 2

    def test_call_then_return(self):
        """CALL 0x300 then RET lands just after the call."""
        state = program_state(0x2300)
        state = state.replace(memory=state.memory.at[0x300].set(0x00).at[0x301].set(0xEE))

        state, _ = step(state)
        assert state.pc == 0x300
        state, _ = step(state)

        assert state.pc == PROGRAM_START + 2
        assert state.stack.pointer == 0

    def test_return_with_empty_stack(self):
        """RET on an empty stack is reported and PC does not move."""
        state = program_state(0x00EE)

        state, _ = step(state)

        assert state.fault == FAULT_STACK_UNDERFLOW
        assert state.pc == PROGRAM_START
        assert state.stack.pointer == 0

    def test_unknown_opcode_advances(self):
        state = program_state(0x5121, 0x6105)

        state, _ = step(state)
        assert state.fault == FAULT_UNKNOWN_OPCODE
        assert state.pc == PROGRAM_START + 2

        state, _ = step(state)
        assert state.fault == FAULT_NONE
        assert state.V[1] == 0x05

    def test_memory_fault_rolls_back_cycle(self):
        """An out-of-range operand aborts the whole cycle, PC included."""
        state = program_state(0xF233)  # BCD at I
        state = state.replace(I=state.I + MEMORY_SIZE)

        state, instruction = step(state)

        assert instruction == 0xF233
        assert state.fault == FAULT_MEMORY
        assert state.pc == PROGRAM_START

    def test_wait_for_key_spins(self):
        state = program_state(0xF50A, 0x6101)

        for _ in range(3):
            state, _ = step(state)
            assert state.pc == PROGRAM_START
            assert state.awaiting_key

        state = state.replace(keypad=state.keypad.at[0x9].set(True))
        state, _ = step(state)

        assert state.V[5] == 0x9
        assert state.pc == PROGRAM_START + 2
        assert not state.awaiting_key

    def test_run_cycles_matches_stepping(self):
        state = program_state(0x6003, 0x7001, 0x3006, 0x1202, 0x1208)

        stepped = state
        for _ in range(10):
            stepped, _ = step(stepped)
        batched = run_cycles(state, 10)

        assert batched.pc == stepped.pc
        assert (batched.V == stepped.V).all()
        assert batched.V[0] == 6
        assert batched.pc == 0x208


class TestTimers:

    def test_delay_timer_floors_at_zero(self, fresh_state):
        state = fresh_state.replace(delay_timer=fresh_state.delay_timer + 1)

        state = tick_timers(state)
        assert state.delay_timer == 0

        state = tick_timers(state)
        assert state.delay_timer == 0

    def test_sound_active_while_running(self, fresh_state):
        state = fresh_state.replace(sound_timer=fresh_state.sound_timer + 2)

        state = tick_timers(state)
        assert state.sound_timer == 1
        assert state.sound_active

        state = tick_timers(state)
        assert state.sound_timer == 0
        assert state.sound_active  # transition to zero still sounds this frame

        state = tick_timers(state)
        assert not state.sound_active


class TestLoading:

    def test_load_image_at_program_start(self, fresh_state):
        image = assemble(0x00E0, 0x1200)

        state = load_image(fresh_state, image)

        assert [int(b) for b in state.memory[PROGRAM_START:PROGRAM_START + 4]] == [0x00, 0xE0, 0x12, 0x00]
        assert state.memory[PROGRAM_START - 1] == 0

    def test_load_image_fills_memory(self, fresh_state):
        image = bytes([0xAB]) * (MEMORY_SIZE - PROGRAM_START)

        state = load_image(fresh_state, image)

        assert state.memory[MEMORY_SIZE - 1] == 0xAB

    def test_load_image_too_large(self, fresh_state):
        image = bytes(MEMORY_SIZE - PROGRAM_START + 1)

        with pytest.raises(RomLoadError):
            load_image(fresh_state, image)

    def test_load_empty_image(self, fresh_state):
        state = load_image(fresh_state, b"")
        assert jnp.sum(state.memory) == 0

    def test_load_rom_from_file(self, fresh_state, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(assemble(0xA22A, 0x600C))

        state = load_rom(fresh_state, str(rom))

        assert state.memory[PROGRAM_START] == 0xA2
        assert state.memory[PROGRAM_START + 3] == 0x0C

    def test_load_rom_missing_file(self, fresh_state, tmp_path):
        with pytest.raises(RomLoadError) as excinfo:
            load_rom(fresh_state, str(tmp_path / "missing.ch8"))
        assert isinstance(excinfo.value, OSError)
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)

    def test_load_font(self, fresh_state):
        state = load_font(fresh_state)

        assert [int(b) for b in state.memory[FONT_START:FONT_START + len(FONT_DATA)]] == FONT_DATA
        assert state.memory[PROGRAM_START] == 0
