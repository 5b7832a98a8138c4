"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chip8jax.state import MachineState
from chip8jax.decode import DecodedInstruction
from chip8jax.constants import FLAG_REGISTER


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy


def alu_add(vx, vy) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.int32) + jnp.astype(vy, jnp.int32)
    carry = jnp.astype(result > 0xFF, jnp.uint8)
    return jnp.astype(result & 0xFF, jnp.uint8), carry


def alu_sub_xy(vx, vy) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    no_borrow = jnp.astype(vx >= vy, jnp.uint8)
    return vx - vy, no_borrow


def alu_shift_right(vx, vy) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XY6 - Shift right: VX >>= 1, VF = shifted out bit."""
    return vx >> 1, vx & 1


def alu_sub_yx(vx, vy) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    no_borrow = jnp.astype(vy >= vx, jnp.uint8)
    return vy - vx, no_borrow


def alu_shift_left(vx, vy) -> tuple[jnp.ndarray, jnp.ndarray]:
    """8XYE - Shift left: VX <<= 1.

    VF takes bit 3 of the pre-shift VX (``VX & 0x08``), not bit 7.
    """
    shifted_bit = (vx & 0x08) >> 3
    return vx << 1, shifted_bit


def make_alu_instruction(operation, sets_flag: bool = True):
    """Factory for 8XYN handlers.

    ``operation`` maps ``(vx, vy)`` to the new VX, or to ``(vx, vf)`` when
    ``sets_flag``. The flag is written after VX, so it wins when X is F.
    """
    def alu_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        if sets_flag:
            result, vf = operation(vx, vy)
            new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(vf, jnp.uint8))
        else:
            result = operation(vx, vy)
            new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        return state.replace(V=new_V)
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set, sets_flag=False)
execute_alu_or = make_alu_instruction(alu_or, sets_flag=False)
execute_alu_and = make_alu_instruction(alu_and, sets_flag=False)
execute_alu_xor = make_alu_instruction(alu_xor, sets_flag=False)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
