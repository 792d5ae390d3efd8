"""Test configuration and fixtures for CHIP-8 emulator tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, SCREEN_WIDTH


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def pixel(state, x, y):
    """Whether the framebuffer pixel at (x, y) is lit."""
    return bool(state.framebuffer[y * SCREEN_WIDTH + x] != 0)


def lit_pixel_count(state):
    return int(jnp.sum(state.framebuffer != 0))
