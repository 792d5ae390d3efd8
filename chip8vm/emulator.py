"""Main CHIP-8 emulator execution engine."""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
import numpy as np
from chip8vm.state import EmulatorState
from chip8vm.decode import decode
from chip8vm.constants import ADDRESS_MASK, PROGRAM_START, MAX_PROGRAM_SIZE
from chip8vm.errors import RomLoadError, RomTooLargeError
from chip8vm.logging import get_logger, fori_loop_with_progress
from chip8vm.instructions.system import execute_system_instruction
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset, execute_key_instruction
)
from chip8vm.instructions.alu import execute_alu_operation
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import execute_misc_instruction

FAMILY_HANDLERS = (
    execute_system_instruction,
    execute_jump,
    execute_call,
    execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate,
    execute_skip_if_equal_register,
    execute_set,
    execute_add,
    execute_alu_operation,
    execute_skip_if_not_equal_register,
    execute_set_index,
    execute_jump_with_offset,
    execute_random,
    execute_display,
    execute_key_instruction,
    execute_misc_instruction,
)


def execute(state: EmulatorState, instruction: int) -> EmulatorState:
    """Execute single CHIP-8 instruction."""
    decoded_instruction = decode(instruction)
    return jax.lax.switch(decoded_instruction.opcode, FAMILY_HANDLERS, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[EmulatorState, jnp.uint16]:
    """Fetch the big-endian word at pc and advance pc past it."""
    high = state.memory[state.pc & ADDRESS_MASK]
    low = state.memory[(state.pc + 1) & ADDRESS_MASK]
    instruction = _pack_u16(high, low)
    return state.replace(pc=state.pc + 2, opcode=instruction), instruction


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Decrement the delay and sound timers when nonzero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def cycle(state: EmulatorState) -> EmulatorState:
    """Run one fetch, execute and timer tick."""
    state, instruction = fetch(state)
    state = execute(state, instruction)
    return tick_timers(state)


@partial(jax.jit, static_argnums=(1, 2))
def run_cycles(state: EmulatorState, num_cycles: int, show_progress: bool = False) -> EmulatorState:
    """Run ``num_cycles`` cycles in a single compiled loop."""
    def body(i, state):
        return cycle(state)

    if show_progress and num_cycles > 0:
        body = fori_loop_with_progress(num_cycles, desc=f"Running {num_cycles:,} cycles")(body)

    return jax.lax.fori_loop(0, num_cycles, body, state)


def load_program(state: EmulatorState, data) -> EmulatorState:
    """Copy program bytes into memory starting at 0x200.

    Raises:
        RomTooLargeError: if the program does not fit in memory. ``state``
            is left as it was.
    """
    rom_data = np.frombuffer(bytes(data), dtype=np.uint8)
    if len(rom_data) > MAX_PROGRAM_SIZE:
        raise RomTooLargeError(len(rom_data), MAX_PROGRAM_SIZE)
    rom_array = jnp.asarray(rom_data)
    new_memory = state.memory.at[PROGRAM_START:PROGRAM_START + len(rom_data)].set(rom_array)
    return state.replace(memory=new_memory)


def load_rom(state: EmulatorState, filename: str) -> EmulatorState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    try:
        with open(filename, 'rb') as f:
            rom_data = f.read()
    except OSError as e:
        raise RomLoadError(f"Cannot read ROM '{filename}': {e}") from e

    state = load_program(state, rom_data)
    get_logger().info(f"Loaded ROM '{filename}' ({len(rom_data)} bytes)")
    return state
