"""60 Hz timers and the sound timer shared with the audio thread."""

import math
import threading
import time
from typing import Callable

import jax
import jax.numpy as jnp
from chip8jax.state import EmulatorState
from chip8jax.constants import FPS


@jax.jit
def tick_timers(state: EmulatorState, frames) -> EmulatorState:
    """Decrement delay and sound timers by ``frames`` ticks, stopping at zero."""
    frames = jnp.asarray(frames, dtype=jnp.int32)

    def _decrement(timer):
        return jnp.maximum(timer.astype(jnp.int32) - frames, 0).astype(jnp.uint8)

    return state.replace(
        delay_timer=_decrement(state.delay_timer),
        sound_timer=_decrement(state.sound_timer),
    )


class FrameClock:
    """Counts whole 60 Hz frames of wall-clock time since ``start``."""

    def __init__(self, clock: Callable[[], float] = time.perf_counter, fps: int = FPS):
        self.clock = clock
        self.fps = fps
        self.start_time = None
        self.frames_finished = 0

    def start(self):
        self.start_time = self.clock()
        self.frames_finished = 0

    def elapsed_frames(self) -> int:
        """Frames completed since the previous call (0 if none)."""
        if self.start_time is None:
            self.start()
        elapsed_seconds = self.clock() - self.start_time
        frames = math.floor(elapsed_seconds * self.fps) - self.frames_finished
        if frames > 0:
            self.frames_finished += frames
            return frames
        return 0


class SoundTimer:
    """Sound timer value published by the scheduler and read by the audio thread.

    The lock only guards the load/store of a single int; readers snapshot the
    value and release the lock before synthesising anything.
    """

    def __init__(self, value: int = 0):
        self._lock = threading.Lock()
        self._value = int(value)

    def set(self, value: int):
        value = int(value)
        with self._lock:
            self._value = value

    def get(self) -> int:
        with self._lock:
            return self._value

    def publish(self, state: EmulatorState):
        self.set(int(state.sound_timer))
