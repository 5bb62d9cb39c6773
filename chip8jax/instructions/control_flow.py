"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import EmulatorState
from chip8jax.decode import DecodedInstruction
from chip8jax.errors import Fault
from chip8jax.stack import push, is_full
from chip8jax.instructions.system import fail


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """2NNN - Call subroutine at NNN."""
    def _call(state):
        state = state.replace(stack=push(state.stack, state.pc))
        return execute_jump(state, instruction)

    return jax.lax.cond(
        is_full(state.stack),
        lambda s: fail(s, instruction, Fault.STACK_OVERFLOW),
        _call,
        state
    )


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.replace(pc=(s.pc + 2).astype(jnp.uint16)),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.kk
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.kk
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = jnp.asarray(instruction.nnn, dtype=jnp.uint16) + state.V[0].astype(jnp.uint16)
    return state.replace(pc=jump_address)


def key_is_pressed(state: EmulatorState, key) -> jnp.ndarray:
    """True if keypad value ``key`` is down. Values above 0xF are never pressed."""
    key = jnp.asarray(key, dtype=jnp.uint16)
    bit = (state.keys >> (key & 0xF)) & 1
    return (key < 16) & (bit == 1)


execute_skip_if_key = make_skip_instruction(
    lambda state, inst: key_is_pressed(state, state.V[inst.x])
)

execute_skip_if_not_key = make_skip_instruction(
    lambda state, inst: ~key_is_pressed(state, state.V[inst.x])
)
