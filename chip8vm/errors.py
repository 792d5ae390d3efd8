"""Errors raised while loading programs, and runtime fault flags.

Instructions never raise: anything the original CHIP-8 interpreter leaves
undefined is resolved to a defined outcome and, for the stack, recorded as a
bit in ``EmulatorState.fault`` so the host can inspect it between cycles.
"""

FAULT_NONE = 0x00
FAULT_STACK_OVERFLOW = 0x01
FAULT_STACK_UNDERFLOW = 0x02

FAULT_NAMES = {
    FAULT_STACK_OVERFLOW: "stack_overflow",
    FAULT_STACK_UNDERFLOW: "stack_underflow",
}


class Chip8Error(Exception):
    """Base class for chip8vm errors."""


class RomLoadError(Chip8Error):
    """ROM file could not be read."""


class RomTooLargeError(Chip8Error, ValueError):
    """Program does not fit between PROGRAM_START and the end of memory."""

    def __init__(self, size: int, capacity: int):
        super().__init__(f"Program is {size} bytes, only {capacity} bytes fit in memory")
        self.size = size
        self.capacity = capacity


def describe_faults(fault) -> list[str]:
    """Names of the fault bits set in ``fault``."""
    fault = int(fault)
    return [name for bit, name in FAULT_NAMES.items() if fault & bit]
