"""CHIP-8 virtual machine package."""

from chip8jax.state import MachineState, StackState, create_state
from chip8jax.emulator import (
    execute, fetch, step, tick_timers, run_cycles, load_image, load_rom, load_font,
)
from chip8jax.decode import DecodedInstruction, Operation, decode, disassemble
from chip8jax.errors import Chip8Error, MemoryFault, RomLoadError
from chip8jax.machine import Machine
from chip8jax.constants import *
from chip8jax.rendering import framebuffer_to_rgb, framebuffer_to_text, create_color_scheme

__all__ = [
    "MachineState",
    "StackState",
    "create_state",
    "fetch",
    "execute",
    "step",
    "tick_timers",
    "run_cycles",
    "load_image",
    "load_rom",
    "load_font",
    "DecodedInstruction",
    "Operation",
    "decode",
    "disassemble",
    "Chip8Error",
    "MemoryFault",
    "RomLoadError",
    "Machine",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "STACK_SIZE",
    "FLAG_REGISTER",
    "framebuffer_to_rgb",
    "framebuffer_to_text",
    "create_color_scheme",
]
