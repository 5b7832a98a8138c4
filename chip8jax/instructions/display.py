"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8jax.state import MachineState
from chip8jax.decode import DecodedInstruction
from chip8jax.constants import (
    SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MAX_SPRITE_HEIGHT, MEMORY_SIZE, FLAG_REGISTER,
)
from chip8jax.instructions.memory import guard_memory_range

# Row and bit offsets covering the largest possible sprite
sprite_rows = jnp.arange(MAX_SPRITE_HEIGHT + 1)
sprite_cols = jnp.arange(SPRITE_WIDTH)


def sprite_mask(state: MachineState, x, y, height) -> jnp.ndarray:
    """Boolean screen mask of the pixels a sprite at (x, y) would toggle.

    Both coordinates wrap around the screen edges pixel by pixel.
    """
    addresses = jnp.clip(jnp.astype(state.I, jnp.int32) + sprite_rows, 0, MEMORY_SIZE - 1)
    sprite_bytes = state.memory[addresses]
    bits = (sprite_bytes[:, None] >> (7 - sprite_cols)[None, :]) & 1
    bits = (bits == 1) & (sprite_rows < height)[:, None]

    rows = (jnp.astype(y, jnp.int32) + sprite_rows) % SCREEN_HEIGHT
    cols = (jnp.astype(x, jnp.int32) + sprite_cols) % SCREEN_WIDTH
    # Rows and columns never alias: sprites are at most 16x8 on a 32x64 screen
    return jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_).at[rows[:, None], cols[None, :]].set(bits)


def execute_display(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - XOR an N-byte sprite from memory[I] onto the screen at (VX, VY).

    VF is set to 1 if any lit pixel is turned off, 0 otherwise.
    """
    mask = sprite_mask(state, state.V[instruction.x], state.V[instruction.y], instruction.n)
    collision = jnp.any(state.display & mask)

    updated = state.replace(
        display=state.display ^ mask,
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
    return guard_memory_range(state, updated, state.I, instruction.n)
