"""CHIP-8 keypad and FX0A wait latch.

The keypad is a 16-bit mask of held keys. FX0A arms a latch naming a
destination register; the next key press writes the key into it and clears
the latch. Releases only ever update the mask.
"""

from typing import Union

import jax
import jax.numpy as jnp
from chip8jax.state import EmulatorState
from chip8jax.constants import NUM_KEYS

# Canonical hex keypad layout:
#   1 2 3 4      1 2 3 C
#   Q W E R  ->  4 5 6 D
#   A S D F      7 8 9 E
#   Z X C V      A 0 B F
KEY_MAP = {
    "1": 0x1, "2": 0x2, "3": 0x3, "4": 0xC,
    "q": 0x4, "w": 0x5, "e": 0x6, "r": 0xD,
    "a": 0x7, "s": 0x8, "d": 0x9, "f": 0xE,
    "z": 0xA, "x": 0x0, "c": 0xB, "v": 0xF,
}


def keypad_value(key: Union[int, str]) -> int:
    """Resolve a keypad value (0-F) or a physical key name to a keypad value."""
    if isinstance(key, str):
        try:
            return KEY_MAP[key.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown key '{key}'. Available: {list(KEY_MAP.keys())}"
            ) from None
    key = int(key)
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Keypad value must be in 0x0-0xF, got {key:#x}")
    return key


@jax.jit
def press_key(state: EmulatorState, key) -> EmulatorState:
    """Key-down event. Releases a pending FX0A wait into its register."""
    key = jnp.asarray(key, dtype=jnp.uint16)
    keys = (state.keys | (jnp.uint16(1) << key)).astype(jnp.uint16)

    def _deliver(state):
        return state.replace(
            V=state.V.at[state.wait_register].set(key.astype(jnp.uint8)),
            waiting=jnp.asarray(False),
        )

    state = state.replace(keys=keys)
    return jax.lax.cond(state.waiting, _deliver, lambda s: s, state)


@jax.jit
def release_key(state: EmulatorState, key) -> EmulatorState:
    """Key-up event."""
    key = jnp.asarray(key, dtype=jnp.uint16)
    return state.replace(keys=(state.keys & ~(jnp.uint16(1) << key)).astype(jnp.uint16))


def key_event(state: EmulatorState, key: Union[int, str], pressed: bool) -> EmulatorState:
    """Apply a key-down or key-up event from the input source."""
    value = keypad_value(key)
    if pressed:
        return press_key(state, value)
    return release_key(state, value)


def pressed_keys(state: EmulatorState) -> list[int]:
    """Keypad values currently held, ascending."""
    mask = int(state.keys)
    return [key for key in range(NUM_KEYS) if mask & (1 << key)]


def is_waiting(state: EmulatorState) -> bool:
    return bool(state.waiting)
