"""Test configuration and fixtures for CHIP-8 interpreter tests."""

import pytest
import jax.numpy as jnp
from chip8jax import create_state, load_program


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V1=0x10, VF=1)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)


def assemble(*words):
    """Pack instruction words into a big-endian program image."""
    return b"".join(word.to_bytes(2, "big") for word in words)


def program_state(*words):
    """Fresh state with the given instructions loaded at 0x200."""
    return load_program(create_state(), assemble(*words))


class FakeClock:
    """Deterministic clock advanced in whole 60 Hz frames."""

    def __init__(self, advance_on_sleep=False):
        self.now = 0.0
        self.frames = 0
        self.sleeps = []
        self.advance_on_sleep = advance_on_sleep

    def __call__(self):
        return self.now

    def advance(self, frames=1):
        # Land mid-frame so float rounding never loses a frame.
        self.frames += frames
        self.now = (self.frames + 0.5) / 60

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        if self.advance_on_sleep:
            self.advance()
