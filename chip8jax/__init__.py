"""CHIP-8 interpreter package."""

from chip8jax.state import EmulatorState, StackState, create_state, reset
from chip8jax.emulator import execute, fetch, step, run_instructions, load_program, load_rom
from chip8jax.decode import DecodedInstruction, InstructionKind, decode, classify, describe
from chip8jax.constants import *
from chip8jax.errors import Fault, Chip8Error, LoadError, HaltError, DecodeError, BoundsError, raise_for_fault
from chip8jax.keypad import KEY_MAP, key_event, press_key, release_key
from chip8jax.timers import SoundTimer, FrameClock, tick_timers
from chip8jax.audio import ToneGenerator
from chip8jax.debugger import DebugStepper, StepMode, Command, parse_command
from chip8jax.rendering import chip8_display_to_rgb, create_color_scheme, parse_color
from chip8jax.config import Chip8Config
from chip8jax.scheduler import Scheduler

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "reset",
    "fetch",
    "execute",
    "step",
    "run_instructions",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "InstructionKind",
    "decode",
    "classify",
    "describe",
    "PROGRAM_START",
    "FONT_START",
    "MEMORY_SIZE",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "Fault",
    "Chip8Error",
    "LoadError",
    "HaltError",
    "DecodeError",
    "BoundsError",
    "raise_for_fault",
    "KEY_MAP",
    "key_event",
    "press_key",
    "release_key",
    "SoundTimer",
    "FrameClock",
    "tick_timers",
    "ToneGenerator",
    "DebugStepper",
    "StepMode",
    "Command",
    "parse_command",
    "chip8_display_to_rgb",
    "create_color_scheme",
    "parse_color",
    "Chip8Config",
    "Scheduler",
]
