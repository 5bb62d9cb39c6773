"""CHIP-8 display operations."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import EmulatorState
from chip8jax.decode import DecodedInstruction
from chip8jax.constants import SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, FLAG_REGISTER
from chip8jax.errors import Fault
from chip8jax.instructions.system import fail

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_layer(state: EmulatorState, x, y, height) -> jnp.ndarray:
    """Boolean (W, H) mask of the sprite at I placed at (x, y) with toroidal wrap."""
    col_offset = (xx - (x % SCREEN_WIDTH)) % SCREEN_WIDTH
    row_offset = (yy - (y % SCREEN_HEIGHT)) % SCREEN_HEIGHT
    in_sprite = (col_offset < 8) & (row_offset < height)

    # Row fetch wraps around memory; the bounds check happens before drawing.
    sprite_bytes = state.memory[(state.I.astype(jnp.int32) + row_offset) % MEMORY_SIZE]
    shift = jnp.where(in_sprite, 7 - col_offset, 0)
    return ((sprite_bytes >> shift) & 1).astype(jnp.bool_) & in_sprite


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision."""
    height = jnp.asarray(instruction.z, dtype=jnp.int32)

    def _draw(state):
        sprite = sprite_layer(
            state,
            state.V[instruction.x].astype(jnp.int32),
            state.V[instruction.y].astype(jnp.int32),
            height,
        )
        collision = jnp.any(state.display & sprite)
        return state.replace(
            display=state.display ^ sprite,
            display_changed=state.display_changed | jnp.any(sprite),
            V=state.V.at[FLAG_REGISTER].set(collision.astype(jnp.uint8)),
        )

    return jax.lax.cond(
        state.I.astype(jnp.int32) + height > MEMORY_SIZE,
        lambda s: fail(s, instruction, Fault.MEMORY_OUT_OF_BOUNDS),
        _draw,
        state
    )
