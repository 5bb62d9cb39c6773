"""CHIP-8 memory and register operations."""

import jax
import jax.numpy as jnp
from chip8jax.state import EmulatorState
from chip8jax.decode import DecodedInstruction


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """6XNN - Set VX = NN."""
    value = jnp.asarray(instruction.kk, dtype=jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(value))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """7XNN - Add NN to VX. Wraps at 8 bits, VF untouched."""
    total = state.V[instruction.x].astype(jnp.int32) + jnp.asarray(instruction.kk, dtype=jnp.int32)
    return state.replace(V=state.V.at[instruction.x].set((total & 0xFF).astype(jnp.uint8)))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.bits(subkey, shape=(), dtype=jnp.uint8)
    mask = jnp.asarray(instruction.kk, dtype=jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(random_value & mask), rng=key)
