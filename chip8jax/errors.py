"""CHIP-8 fault codes and exceptions.

Jitted code cannot raise, so a fatal condition is recorded in the emulator
state as a :class:`Fault` code and turned into an exception at the Python
boundary by :func:`raise_for_fault`.
"""

from enum import IntEnum
from typing import Optional


class Fault(IntEnum):
    """Reason a machine halted."""
    NONE = 0
    UNHANDLED_OPCODE = 1
    STACK_UNDERFLOW = 2
    STACK_OVERFLOW = 3
    MEMORY_OUT_OF_BOUNDS = 4
    PC_OUT_OF_RANGE = 5


class Chip8Error(Exception):
    """Base class for interpreter errors."""


class LoadError(Chip8Error):
    """Program could not be loaded (missing, empty or oversized)."""


class HaltError(Chip8Error):
    """Fatal runtime condition. The halted state is kept for inspection."""

    def __init__(self, message: str, state=None, fault: Fault = Fault.NONE,
                 address: int = 0, opcode: int = 0):
        super().__init__(message)
        self.state = state
        self.fault = fault
        self.address = address
        self.opcode = opcode


class DecodeError(HaltError):
    """Unhandled opcode."""


class BoundsError(HaltError):
    """Stack underflow/overflow or out-of-bounds memory or PC."""

    def __init__(self, reason: str, **kwargs):
        super().__init__(reason, **kwargs)
        self.reason = reason


def fault_reason(fault: Fault, address: int, opcode: int, index: int) -> str:
    """Diagnostic string for a recorded fault."""
    if fault == Fault.UNHANDLED_OPCODE:
        return f"Unhandled opcode 0x{opcode:04X} at 0x{address:03X}"
    if fault == Fault.STACK_UNDERFLOW:
        return f"Stack underflow: return with empty call stack at 0x{address:03X}"
    if fault == Fault.STACK_OVERFLOW:
        return f"Stack overflow: call at 0x{address:03X} exceeds 16 nested calls"
    if fault == Fault.MEMORY_OUT_OF_BOUNDS:
        return (f"Memory access out of bounds: opcode 0x{opcode:04X} at 0x{address:03X} "
                f"with I=0x{index:04X}")
    if fault == Fault.PC_OUT_OF_RANGE:
        return f"Program counter 0x{address:04X} outside program space"
    return "Halted"


def fault_error(state) -> Optional[HaltError]:
    """Build the exception matching the fault recorded in ``state``, if any."""
    fault = Fault(int(state.fault))
    if not bool(state.halted) or fault == Fault.NONE:
        return None

    address = int(state.fault_pc)
    opcode = int(state.fault_opcode)
    reason = fault_reason(fault, address, opcode, int(state.I))
    kwargs = dict(state=state, fault=fault, address=address, opcode=opcode)

    if fault == Fault.UNHANDLED_OPCODE:
        return DecodeError(reason, **kwargs)
    return BoundsError(reason, **kwargs)


def raise_for_fault(state) -> None:
    """Raise the exception matching the fault recorded in ``state``, if any."""
    error = fault_error(state)
    if error is not None:
        raise error
