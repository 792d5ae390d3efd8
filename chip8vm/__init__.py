"""CHIP-8 emulator package."""

from chip8vm.state import EmulatorState, StackState, create_state, is_sound_active
from chip8vm.emulator import execute, fetch, tick_timers, cycle, run_cycles, load_program, load_rom
from chip8vm.decode import DecodedInstruction, decode
from chip8vm.constants import *
from chip8vm.errors import (
    Chip8Error, RomLoadError, RomTooLargeError,
    FAULT_NONE, FAULT_STACK_OVERFLOW, FAULT_STACK_UNDERFLOW, describe_faults
)
from chip8vm.rendering import framebuffer_to_grid, framebuffer_to_rgb, framebuffer_to_text, create_color_scheme, save_frame

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "is_sound_active",
    "fetch",
    "execute",
    "tick_timers",
    "cycle",
    "run_cycles",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "decode",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "PIXEL_ON",
    "PIXEL_OFF",
    "Chip8Error",
    "RomLoadError",
    "RomTooLargeError",
    "FAULT_NONE",
    "FAULT_STACK_OVERFLOW",
    "FAULT_STACK_UNDERFLOW",
    "describe_faults",
    "framebuffer_to_grid",
    "framebuffer_to_rgb",
    "framebuffer_to_text",
    "create_color_scheme",
    "save_frame",
]
