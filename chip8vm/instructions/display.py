"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import (
    ADDRESS_MASK, FLAG_REGISTER, PIXEL_ON, PIXEL_OFF, SCREEN_WIDTH, SCREEN_HEIGHT, SCREEN_SIZE
)

# Pre-computed coordinates of every framebuffer cell, row-major
yy, xx = jnp.divmod(jnp.arange(SCREEN_SIZE), SCREEN_WIDTH)


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """DXYN - Draw the N-row sprite at memory[I] to (VX, VY), XORing pixels.

    The origin wraps onto the screen; the sprite itself is clipped at the
    right and bottom edges. VF is set when a lit pixel is switched off.
    """
    sprite_x = jnp.astype(state.V[instruction.x], jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(state.V[instruction.y], jnp.int32) % SCREEN_HEIGHT

    in_sprite = (xx >= sprite_x) & (xx < sprite_x + 8) & (yy >= sprite_y) & (yy < sprite_y + instruction.n)

    row_offset = yy - sprite_y
    col_offset = jnp.clip(xx - sprite_x, 0, 7)
    sprite_bytes = state.memory[(state.I + row_offset) & ADDRESS_MASK]
    sprite = (((sprite_bytes >> (7 - col_offset)) & 1) == 1) & in_sprite

    lit = state.framebuffer != PIXEL_OFF
    collision = jnp.any(lit & sprite)

    return state.replace(
        framebuffer=jnp.where(lit ^ sprite, jnp.uint32(PIXEL_ON), jnp.uint32(PIXEL_OFF)),
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collision, jnp.uint8))
    )
