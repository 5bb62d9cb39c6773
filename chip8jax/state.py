"""CHIP-8 emulator state structures."""

from typing import Optional

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode, field

from chip8jax.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS,
)
from chip8jax.errors import Fault


def _scalar(dtype, value=0):
    return field(default_factory=lambda: jnp.asarray(value, dtype=dtype))


class StackState(PyTreeNode):
    """Call stack of return addresses. ``pointer`` is the number of active calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = _scalar(jnp.uint8)


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state.

    Registers, stack and timers live in dedicated fields; ``memory`` only holds
    the font table and program bytes. ``display`` is indexed ``[x, y]``.
    """
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = _scalar(jnp.uint16, PROGRAM_START)
    display: jnp.ndarray = field(
        default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    display_changed: jnp.ndarray = _scalar(jnp.bool_, False)
    stack: StackState = field(default_factory=StackState)
    delay_timer: jnp.ndarray = _scalar(jnp.uint8)
    sound_timer: jnp.ndarray = _scalar(jnp.uint8)
    keys: jnp.ndarray = _scalar(jnp.uint16)
    waiting: jnp.ndarray = _scalar(jnp.bool_, False)
    wait_register: jnp.ndarray = _scalar(jnp.uint8)
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = _scalar(jnp.uint16)
    halted: jnp.ndarray = _scalar(jnp.bool_, False)
    fault: jnp.ndarray = _scalar(jnp.uint8, Fault.NONE)
    fault_pc: jnp.ndarray = _scalar(jnp.uint16)
    fault_opcode: jnp.ndarray = _scalar(jnp.uint16)


def create_state(rng: Optional[jax.Array] = None) -> EmulatorState:
    """Create initial emulator state with font data loaded."""
    if rng is None:
        rng = jax.random.PRNGKey(0)
    state = EmulatorState(rng)
    font = jnp.array(FONT_DATA, dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(font))


def reset(state: EmulatorState) -> EmulatorState:
    """Return a freshly initialised state that keeps only the RNG key."""
    return create_state(state.rng)


def halt(state: EmulatorState, fault: Fault, address, opcode) -> EmulatorState:
    """Record a fatal fault. Registers, memory and stack are left untouched."""
    return state.replace(
        halted=jnp.asarray(True),
        fault=jnp.asarray(fault, dtype=jnp.uint8),
        fault_pc=jnp.asarray(address, dtype=jnp.uint16),
        fault_opcode=jnp.asarray(opcode, dtype=jnp.uint16),
    )
