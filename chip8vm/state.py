"""CHIP-8 emulator state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, field, PyTreeNode

from chip8vm.constants import (
    MEMORY_SIZE, NUM_REGISTERS, NUM_KEYS, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_SIZE, STACK_SIZE
)
from chip8vm.errors import FAULT_NONE


def _zeros(shape, dtype):
    return field(default_factory=lambda: jnp.zeros(shape, dtype=dtype))


@dataclass(frozen=True)
class StackState:
    """Return-address stack; ``pointer`` is the next free slot."""
    data: jnp.ndarray = _zeros(STACK_SIZE, jnp.uint16)
    pointer: jnp.ndarray = _zeros((), jnp.uint8)


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    The framebuffer is flat and row-major (``y * SCREEN_WIDTH + x``) with one
    ``uint32`` per pixel, ``PIXEL_ON`` when lit and ``PIXEL_OFF`` otherwise.
    """
    rng: jax.random.PRNGKey
    memory: jnp.ndarray = _zeros(MEMORY_SIZE, jnp.uint8)
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    opcode: jnp.ndarray = _zeros((), jnp.uint16)
    framebuffer: jnp.ndarray = _zeros(SCREEN_SIZE, jnp.uint32)
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = _zeros((), jnp.uint8)
    sound_timer: jnp.ndarray = _zeros((), jnp.uint8)
    keypad: jnp.ndarray = _zeros(NUM_KEYS, jnp.bool_)
    V: jnp.ndarray = _zeros(NUM_REGISTERS, jnp.uint8)
    I: jnp.ndarray = _zeros((), jnp.uint16)
    fault: jnp.ndarray = field(default_factory=lambda: jnp.asarray(FAULT_NONE, dtype=jnp.uint8))


def create_state(rng: jax.random.PRNGKey = None) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    if rng is None:
        rng = jax.random.PRNGKey(0)
    state = EmulatorState(rng)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def is_sound_active(state: EmulatorState) -> jnp.ndarray:
    """Whether the host should be playing the tone."""
    return state.sound_timer > 0
