"""CHIP-8 system instructions (0x0xxx) and the halting helpers."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8jax.state import EmulatorState, halt
from chip8jax.decode import DecodedInstruction
from chip8jax.errors import Fault
from chip8jax.stack import pop, is_empty


def fail(state: EmulatorState, instruction: DecodedInstruction, fault: Fault) -> EmulatorState:
    """Halt on the instruction just fetched (PC has already moved past it)."""
    return halt(state, fault, state.pc - 2, instruction.raw)


def no_op(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """No operation."""
    return state


def execute_unhandled(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """Any word outside the instruction set halts the machine."""
    return fail(state, instruction, Fault.UNHANDLED_OPCODE)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display), display_changed=jnp.asarray(True))


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> EmulatorState:
    """00EE - Return from subroutine."""
    def _return(state):
        stack, address = pop(state.stack)
        return state.replace(stack=stack, pc=address)

    return jax.lax.cond(
        is_empty(state.stack),
        lambda s: fail(s, instruction, Fault.STACK_UNDERFLOW),
        _return,
        state
    )
