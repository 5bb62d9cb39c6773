"""CHIP-8 miscellaneous instructions (Fxxx)."""

from typing import Optional

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import EmulatorState
from chip8jax.decode import DecodedInstruction
from chip8jax.constants import FONT_START, FONT_GLYPH_SIZE, MEMORY_SIZE, NUM_REGISTERS
from chip8jax.errors import Fault
from chip8jax.instructions.system import fail


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX1E - Add VX to I register (16-bit wrap, VF untouched)."""
    return state.replace(I=(state.I + state.V[instruction.x].astype(jnp.uint16)).astype(jnp.uint16))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX0A - Arm the wait latch; the key press itself is delivered by the keypad."""
    return state.replace(
        waiting=jnp.asarray(True),
        wait_register=jnp.asarray(instruction.x, dtype=jnp.uint8),
    )


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX29 - Set I to location of sprite for digit VX."""
    digit = (state.V[instruction.x] & 0xF).astype(jnp.uint16)
    return state.replace(I=(FONT_START + digit * FONT_GLYPH_SIZE).astype(jnp.uint16))


def guard_index_range(span: Optional[int]):
    """Halt unless memory[I .. I+extent] is addressable.

    ``span`` is a fixed extent or ``None`` to use the instruction's X.
    """
    def decorator(operation):
        def guarded(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
            extent = instruction.x if span is None else span
            last = state.I.astype(jnp.int32) + jnp.asarray(extent, dtype=jnp.int32)
            return jax.lax.cond(
                last >= MEMORY_SIZE,
                lambda s: fail(s, instruction, Fault.MEMORY_OUT_OF_BOUNDS),
                lambda s: operation(s, instruction),
                state
            )
        guarded.__doc__ = operation.__doc__
        return guarded
    return decorator


@guard_index_range(2)
def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + state.I.astype(jnp.int32)
    return state.replace(memory=state.memory.at[indices].set(digits))


@guard_index_range(None)
def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX55 - Store V0 through VX in memory starting at I, then I += X + 1."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    # Registers past X scatter to an out-of-range slot and are dropped.
    indices = jnp.where(register_mask, state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS), MEMORY_SIZE)
    new_memory = state.memory.at[indices].set(state.V, mode='drop')
    return state.replace(memory=new_memory, I=(state.I + instruction.x + 1).astype(jnp.uint16))


@guard_index_range(None)
def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """FX65 - Load V0 through VX from memory starting at I, then I += X + 1."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = jnp.where(register_mask, state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS),
                             state.I.astype(jnp.int32))
    memory_values = state.memory[base_indices]
    new_V = jnp.where(register_mask, memory_values, state.V)
    return state.replace(V=new_V, I=(state.I + instruction.x + 1).astype(jnp.uint16))
