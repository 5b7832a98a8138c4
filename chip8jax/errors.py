"""Exceptions raised at the edges of the CHIP-8 core."""

from typing import Optional


class Chip8Error(Exception):
    """Base class for all CHIP-8 errors."""


class MemoryFault(Chip8Error):
    """Fatal access outside the addressable memory range."""

    def __init__(self, pc: int, opcode: Optional[int] = None, message: Optional[str] = None):
        self.pc = pc
        self.opcode = opcode
        if message is None:
            if opcode is None:
                message = f"Instruction fetch outside memory at PC={pc:#05x}"
            else:
                message = f"Memory access outside range by {opcode:#06x} at PC={pc:#05x}"
        super().__init__(message)


class RomLoadError(Chip8Error, OSError):
    """Program image could not be read or does not fit in memory."""
