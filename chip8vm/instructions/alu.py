"""CHIP-8 ALU operations (8xxx).

Each operation maps the register file to a new register file. Operations that
report through VF write the flag first and then compute the result from the
updated registers, so ``X == F`` or ``Y == F`` leaves the same values the
original CHIP-8 interpreter does. 8XY4 is the exception: its sum is taken before
the flag is written.
"""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction, build_selector_table
from chip8vm.constants import FLAG_REGISTER


def _set_flag(V: jnp.ndarray, condition) -> jnp.ndarray:
    return V.at[FLAG_REGISTER].set(jnp.astype(condition, jnp.uint8))


def alu_set(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY0 - Set: VX = VY."""
    return V.at[x].set(V[y])


def alu_or(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY1 - Binary OR: VX |= VY."""
    return V.at[x].set(V[x] | V[y])


def alu_and(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY2 - Binary AND: VX &= VY."""
    return V.at[x].set(V[x] & V[y])


def alu_xor(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY3 - Logical XOR: VX ^= VY."""
    return V.at[x].set(V[x] ^ V[y])


def alu_add(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY4 - Add: VX += VY, VF = carry."""
    total = jnp.astype(V[x], jnp.int32) + jnp.astype(V[y], jnp.int32)
    V = _set_flag(V, total > 255)
    return V.at[x].set(jnp.astype(total & 0xFF, jnp.uint8))


def alu_sub_xy(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY5 - Subtract: VX -= VY, VF = VX > VY."""
    V = _set_flag(V, V[x] > V[y])
    return V.at[x].set(V[x] - V[y])


def alu_shift_right(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY6 - Shift right: VF = LSB of VX, VX >>= 1."""
    V = _set_flag(V, V[x] & 1)
    return V.at[x].set(V[x] >> 1)


def alu_sub_yx(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XY7 - Subtract: VX = VY - VX, VF = VY > VX."""
    V = _set_flag(V, V[y] > V[x])
    return V.at[x].set(V[y] - V[x])


def alu_shift_left(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """8XYE - Shift left: VF = MSB of VX, VX <<= 1."""
    V = _set_flag(V, (V[x] & 0x80) >> 7)
    return V.at[x].set(V[x] << 1)


def alu_undefined(V: jnp.ndarray, x: int, y: int) -> jnp.ndarray:
    """Unassigned 8XYN selector."""
    return V


_ALU_BRANCHES = build_selector_table(
    16,
    {0x0: 0, 0x1: 1, 0x2: 2, 0x3: 3, 0x4: 4, 0x5: 5, 0x6: 6, 0x7: 7, 0xE: 8},
    fallback=9,
)


def execute_alu_operation(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """8XYN - ALU operations dispatcher."""
    new_V = jax.lax.switch(
        _ALU_BRANCHES[instruction.n],
        [alu_set, alu_or, alu_and, alu_xor, alu_add,
         alu_sub_xy, alu_shift_right, alu_sub_yx, alu_shift_left, alu_undefined],
        state.V, instruction.x, instruction.y
    )
    return state.replace(V=new_V)
