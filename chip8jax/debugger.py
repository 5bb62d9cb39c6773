"""Step/run debug gate consulted before each instruction.

The gate only knows about :class:`Command` values; where they come from (a
terminal prompt, a test script, a GUI) is up to the caller.
"""

from enum import Enum
from typing import Callable, Optional

import numpy as np

from chip8jax.state import EmulatorState
from chip8jax.decode import describe
from chip8jax.keypad import pressed_keys, is_waiting
from chip8jax.constants import MEMORY_SIZE


class StepMode(Enum):
    STEP_INTO = "step_into"
    RUN = "run"


class Command(Enum):
    HELP = "help"
    REGISTERS = "registers"
    DISPLAY = "display"
    STEP = "step"
    RUN = "run"
    QUIT = "quit"


COMMAND_KEYS = {
    "h": Command.HELP,
    "?": Command.HELP,
    "r": Command.REGISTERS,
    "d": Command.DISPLAY,
    "s": Command.STEP,
    "": Command.STEP,
    "c": Command.RUN,
    "q": Command.QUIT,
}

HELP_TEXT = """Debugger commands:
  h, ?     show this help
  r        print registers
  d        print display
  s, enter execute one instruction
  c        continue running (interrupt to step again)
  q        quit"""


def parse_command(text: str) -> Command:
    """Map one line of user input to a command."""
    key = text.strip().lower()[:1]
    try:
        return COMMAND_KEYS[key]
    except KeyError:
        raise ValueError(f"Unknown command '{text.strip()}'. Type 'h' for help.") from None


def console_commands(read: Callable[[str], str] = input,
                     write: Callable[[str], None] = print) -> Callable[[], Command]:
    """Command source reading one line per command, re-prompting on bad input."""
    def next_command() -> Command:
        while True:
            try:
                return parse_command(read("> "))
            except ValueError as e:
                write(str(e))
    return next_command


def next_opcode(state: EmulatorState) -> Optional[int]:
    pc = int(state.pc)
    if pc + 1 >= MEMORY_SIZE:
        return None
    return (int(state.memory[pc]) << 8) | int(state.memory[pc + 1])


def format_registers(state: EmulatorState) -> str:
    """Register, timer and stack dump."""
    V = np.asarray(state.V)
    pointer = int(state.stack.pointer)
    stack = np.asarray(state.stack.data)[:pointer]

    lines = [
        f"PC: 0x{int(state.pc):03X}  I: 0x{int(state.I):03X}  SP: {pointer}",
        f"DT: {int(state.delay_timer):3d}  ST: {int(state.sound_timer):3d}",
    ]
    for row in range(0, 16, 4):
        lines.append("  ".join(f"V{i:X}: {int(V[i]):02X}" for i in range(row, row + 4)))
    lines.append("Stack: " + (" ".join(f"{int(a):03X}" for a in stack) or "<empty>"))
    lines.append("Keys: " + (" ".join(f"{k:X}" for k in pressed_keys(state)) or "<none>"))
    if is_waiting(state):
        lines.append(f"Waiting for key -> V{int(state.wait_register):X}")
    return "\n".join(lines)


def format_display(state: EmulatorState, on: str = "#", off: str = ".") -> str:
    """Framebuffer as text, one line per row."""
    pixels = np.asarray(state.display).T
    return "\n".join("".join(on if p else off for p in row) for row in pixels)


class DebugStepper:
    """Two-state gate: STEP_INTO blocks on a command, RUN passes straight through."""

    def __init__(self, commands: Callable[[], Command], write: Callable[[str], None] = print):
        self.commands = commands
        self.write = write
        self.mode = StepMode.STEP_INTO

    def interrupt(self):
        """Drop back to single-stepping before the next instruction."""
        self.mode = StepMode.STEP_INTO

    def gate(self, state: EmulatorState) -> bool:
        """Decide whether the next instruction may run. False means quit."""
        if self.mode == StepMode.RUN:
            return True

        opcode = next_opcode(state)
        listing = describe(opcode) if opcode is not None else "<outside memory>"
        self.write(f"0x{int(state.pc):03X}: {listing}")

        while True:
            command = self.commands()
            if command == Command.HELP:
                self.write(HELP_TEXT)
            elif command == Command.REGISTERS:
                self.write(format_registers(state))
            elif command == Command.DISPLAY:
                self.write(format_display(state))
            elif command == Command.STEP:
                return True
            elif command == Command.RUN:
                self.mode = StepMode.RUN
                return True
            elif command == Command.QUIT:
                return False
            else:
                raise ValueError(f"Unsupported debugger command: {command!r}")
