"""Sawtooth tone generator pulled by the audio device callback."""

import numpy as np

from chip8jax.constants import TONE_FREQUENCY, DEFAULT_SAMPLE_RATE, SAMPLE_MAX
from chip8jax.timers import SoundTimer


class ToneGenerator:
    """Produces signed 16-bit samples while the sound timer is running.

    Called from the audio device's thread. The sound timer is read once per
    request so a whole buffer is either silent or tone.
    """

    def __init__(
        self,
        sound_timer: SoundTimer,
        sample_rate: int = DEFAULT_SAMPLE_RATE,
        volume: float = 0.1,
        frequency: float = TONE_FREQUENCY,
    ):
        if sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {sample_rate}")
        self.sound_timer = sound_timer
        self.sample_rate = sample_rate
        self.frequency = frequency
        self.step = 2.0 / (sample_rate / frequency)
        self.level = 0.0
        self.set_volume(volume)

    def set_volume(self, volume: float):
        """Set output volume in [0, 1]; out-of-range values are clamped."""
        self.volume = min(max(float(volume), 0.0), 1.0)
        self.amplitude = self.volume * SAMPLE_MAX

    def generate(self, count: int) -> np.ndarray:
        """Return ``count`` int16 samples."""
        if self.sound_timer.get() == 0:
            return np.zeros(count, dtype=np.int16)

        levels = np.empty(count, dtype=np.float64)
        level = self.level
        for i in range(count):
            # Sawtooth: ramp up to +1.0 then restart at exactly -1.0.
            level += self.step
            if level > 1.0:
                level = -1.0
            levels[i] = level
        self.level = level
        return (self.amplitude * levels).astype(np.int16)

    def __call__(self, count: int) -> np.ndarray:
        return self.generate(count)
