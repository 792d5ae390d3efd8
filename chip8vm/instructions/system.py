"""CHIP-8 system instructions (0x0xxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction, build_selector_table
from chip8vm.errors import FAULT_STACK_UNDERFLOW
from chip8vm.stack import pop, is_empty


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """No operation."""
    return state


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(framebuffer=jnp.zeros_like(state.framebuffer))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine.

    Returning with an empty stack leaves pc where it is and raises the
    underflow fault bit.
    """
    def underflow(state):
        return state.replace(fault=state.fault | FAULT_STACK_UNDERFLOW)

    def do_return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(is_empty(state.stack), underflow, do_return, state)


_SYSTEM_BRANCHES = build_selector_table(16, {0x0: 0, 0xE: 1}, fallback=2)


def execute_system_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Dispatch system instructions on the low nibble."""
    return jax.lax.switch(
        _SYSTEM_BRANCHES[instruction.n],
        [execute_clear_screen, execute_return, no_op],
        state, instruction
    )
