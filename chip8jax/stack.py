"""CHIP-8 stack operations.

Bounds are checked by the callers (2NNN/00EE), which halt on overflow or
underflow before touching the stack.
"""

import jax.numpy as jnp
from chip8jax.constants import STACK_SIZE
from chip8jax.state import StackState


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= STACK_SIZE


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer == 0


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack."""
    new_data = stack.data.at[stack.pointer].set(jnp.asarray(address, dtype=jnp.uint16))
    return stack.replace(data=new_data, pointer=(stack.pointer + 1).astype(jnp.uint8))


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack."""
    new_pointer = (stack.pointer - 1).astype(jnp.uint8)
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(jnp.zeros((), dtype=jnp.uint16))
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
