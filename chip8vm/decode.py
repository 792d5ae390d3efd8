"""CHIP-8 instruction decoding."""

import numpy as np
import jax.numpy as jnp
from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    opcode: int  # First nibble (family)
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (sprite height / sub-selector)
    nn: int      # Last byte (KK immediate / F-family sub-selector)
    nnn: int     # Last 12 bits (address)


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        opcode=(instruction & 0xF000) >> 12,
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


def build_selector_table(size: int, assignments: dict[int, int], fallback: int):
    """Lookup table mapping a sub-selector value to a ``jax.lax.switch`` branch.

    Selectors missing from ``assignments`` map to ``fallback``, which callers
    point at a no-op handler.
    """
    table = np.full(size, fallback, dtype=np.int32)
    for selector, branch in assignments.items():
        table[selector] = branch
    return jnp.asarray(table)
