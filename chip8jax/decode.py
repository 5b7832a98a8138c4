"""CHIP-8 instruction decoding."""

from enum import IntEnum

import jax.numpy as jnp
from chex import dataclass


class Operation(IntEnum):
    """Every instruction the interpreter understands.

    Values index the handler table used by ``execute``.
    """
    UNKNOWN = 0
    CLEAR_SCREEN = 1   # 00E0
    RETURN = 2         # 00EE
    JUMP = 3           # 1NNN
    CALL = 4           # 2NNN
    SKIP_EQ_IMM = 5    # 3XKK
    SKIP_NE_IMM = 6    # 4XKK
    SKIP_EQ_REG = 7    # 5XY0
    LOAD_IMM = 8       # 6XKK
    ADD_IMM = 9        # 7XKK
    MOVE = 10          # 8XY0
    OR = 11            # 8XY1
    AND = 12           # 8XY2
    XOR = 13           # 8XY3
    ADD = 14           # 8XY4
    SUB = 15           # 8XY5
    SHR = 16           # 8XY6
    SUBN = 17          # 8XY7
    SHL = 18           # 8XYE
    SKIP_NE_REG = 19   # 9XY0
    LOAD_INDEX = 20    # ANNN
    JUMP_OFFSET = 21   # BNNN
    RANDOM = 22        # CXKK
    DRAW = 23          # DXYN
    SKIP_KEY = 24      # EX9E
    SKIP_NOT_KEY = 25  # EXA1
    GET_DELAY = 26     # FX07
    WAIT_KEY = 27      # FX0A
    SET_DELAY = 28     # FX15
    SET_SOUND = 29     # FX18
    ADD_INDEX = 30     # FX1E
    FONT = 31          # FX29
    BCD = 32           # FX33
    STORE = 33         # FX55
    LOAD = 34          # FX65


# mask, expected value, operation
OPCODE_PATTERNS = (
    (0xFFFF, 0x00E0, Operation.CLEAR_SCREEN),
    (0xFFFF, 0x00EE, Operation.RETURN),
    (0xF000, 0x1000, Operation.JUMP),
    (0xF000, 0x2000, Operation.CALL),
    (0xF000, 0x3000, Operation.SKIP_EQ_IMM),
    (0xF000, 0x4000, Operation.SKIP_NE_IMM),
    (0xF00F, 0x5000, Operation.SKIP_EQ_REG),
    (0xF000, 0x6000, Operation.LOAD_IMM),
    (0xF000, 0x7000, Operation.ADD_IMM),
    (0xF00F, 0x8000, Operation.MOVE),
    (0xF00F, 0x8001, Operation.OR),
    (0xF00F, 0x8002, Operation.AND),
    (0xF00F, 0x8003, Operation.XOR),
    (0xF00F, 0x8004, Operation.ADD),
    (0xF00F, 0x8005, Operation.SUB),
    (0xF00F, 0x8006, Operation.SHR),
    (0xF00F, 0x8007, Operation.SUBN),
    (0xF00F, 0x800E, Operation.SHL),
    (0xF00F, 0x9000, Operation.SKIP_NE_REG),
    (0xF000, 0xA000, Operation.LOAD_INDEX),
    (0xF000, 0xB000, Operation.JUMP_OFFSET),
    (0xF000, 0xC000, Operation.RANDOM),
    (0xF000, 0xD000, Operation.DRAW),
    (0xF0FF, 0xE09E, Operation.SKIP_KEY),
    (0xF0FF, 0xE0A1, Operation.SKIP_NOT_KEY),
    (0xF0FF, 0xF007, Operation.GET_DELAY),
    (0xF0FF, 0xF00A, Operation.WAIT_KEY),
    (0xF0FF, 0xF015, Operation.SET_DELAY),
    (0xF0FF, 0xF018, Operation.SET_SOUND),
    (0xF0FF, 0xF01E, Operation.ADD_INDEX),
    (0xF0FF, 0xF029, Operation.FONT),
    (0xF0FF, 0xF033, Operation.BCD),
    (0xF0FF, 0xF055, Operation.STORE),
    (0xF0FF, 0xF065, Operation.LOAD),
)

MNEMONICS = {
    Operation.UNKNOWN: "DW {raw:#06x}",
    Operation.CLEAR_SCREEN: "CLS",
    Operation.RETURN: "RET",
    Operation.JUMP: "JP {nnn:#05x}",
    Operation.CALL: "CALL {nnn:#05x}",
    Operation.SKIP_EQ_IMM: "SE V{x:X}, {kk:#04x}",
    Operation.SKIP_NE_IMM: "SNE V{x:X}, {kk:#04x}",
    Operation.SKIP_EQ_REG: "SE V{x:X}, V{y:X}",
    Operation.LOAD_IMM: "LD V{x:X}, {kk:#04x}",
    Operation.ADD_IMM: "ADD V{x:X}, {kk:#04x}",
    Operation.MOVE: "LD V{x:X}, V{y:X}",
    Operation.OR: "OR V{x:X}, V{y:X}",
    Operation.AND: "AND V{x:X}, V{y:X}",
    Operation.XOR: "XOR V{x:X}, V{y:X}",
    Operation.ADD: "ADD V{x:X}, V{y:X}",
    Operation.SUB: "SUB V{x:X}, V{y:X}",
    Operation.SHR: "SHR V{x:X}",
    Operation.SUBN: "SUBN V{x:X}, V{y:X}",
    Operation.SHL: "SHL V{x:X}",
    Operation.SKIP_NE_REG: "SNE V{x:X}, V{y:X}",
    Operation.LOAD_INDEX: "LD I, {nnn:#05x}",
    Operation.JUMP_OFFSET: "JP V0, {nnn:#05x}",
    Operation.RANDOM: "RND V{x:X}, {kk:#04x}",
    Operation.DRAW: "DRW V{x:X}, V{y:X}, {n}",
    Operation.SKIP_KEY: "SKP V{x:X}",
    Operation.SKIP_NOT_KEY: "SKNP V{x:X}",
    Operation.GET_DELAY: "LD V{x:X}, DT",
    Operation.WAIT_KEY: "LD V{x:X}, K",
    Operation.SET_DELAY: "LD DT, V{x:X}",
    Operation.SET_SOUND: "LD ST, V{x:X}",
    Operation.ADD_INDEX: "ADD I, V{x:X}",
    Operation.FONT: "LD F, V{x:X}",
    Operation.BCD: "LD B, V{x:X}",
    Operation.STORE: "LD [I], V{x:X}",
    Operation.LOAD: "LD V{x:X}, [I]",
}


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    op: int   # Operation value
    x: int    # Second nibble (VX register)
    y: int    # Third nibble (VY register)
    n: int    # Fourth nibble (4-bit immediate)
    kk: int   # Last byte (8-bit immediate)
    nnn: int  # Last 12 bits (12-bit address)


def classify(instruction) -> jnp.ndarray:
    """Map a 16-bit opcode to its ``Operation`` value (``UNKNOWN`` if none match)."""
    raw = jnp.asarray(instruction, dtype=jnp.uint16)
    return jnp.select(
        [(raw & mask) == value for mask, value, _ in OPCODE_PATTERNS],
        [int(op) for _, _, op in OPCODE_PATTERNS],
        default=int(Operation.UNKNOWN),
    )


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into its operation and operands."""
    instruction = jnp.asarray(instruction, dtype=jnp.uint16)
    return DecodedInstruction(
        raw=instruction,
        op=classify(instruction),
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        kk=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def disassemble(instruction: int) -> str:
    """Render an opcode as assembly text, e.g. ``LD I, 0x2a0``."""
    decoded = decode(instruction)
    fields = {name: int(getattr(decoded, name)) for name in ("raw", "x", "y", "n", "kk", "nnn")}
    return MNEMONICS[Operation(int(decoded.op))].format(**fields)
