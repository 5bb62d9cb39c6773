"""Interpreter configuration consumed by the scheduler."""

import dataclasses
from typing import Optional, Tuple, Union

from chip8jax.constants import FPS, DEFAULT_SAMPLE_RATE
from chip8jax.rendering import create_color_scheme, parse_color

Color = Union[int, str, Tuple[int, int, int]]


@dataclasses.dataclass(frozen=True)
class Chip8Config:
    """Interpreter settings.

    Attributes:
        ips: Instructions per second (at least 60)
        pixel_scale: Size of one CHIP-8 pixel on screen (1-1000)
        volume: Tone volume from 0 to 1
        color_scheme: Named color scheme used when no explicit colors are given
        foreground: Optional foreground color override
        background: Optional background color override
        debug: Start with the step debugger gate enabled
        audio_device: Preferred audio device name ("" for the system default)
        sample_rate: Tone generator sample rate in Hz
        log_level: Console logger level
        seed: Seed for the CXNN random number generator
    """
    ips: int = 600
    pixel_scale: int = 16
    volume: float = 0.1
    color_scheme: str = "mono"
    foreground: Optional[Color] = None
    background: Optional[Color] = None
    debug: bool = False
    audio_device: str = ""
    sample_rate: int = DEFAULT_SAMPLE_RATE
    log_level: str = "INFO"
    seed: int = 0

    def __post_init__(self):
        if self.ips < FPS:
            raise ValueError(f"ips cannot be lower than {FPS}, got {self.ips}")
        if not 1 <= self.pixel_scale <= 1000:
            raise ValueError(f"pixel_scale must be between 1-1000, got {self.pixel_scale}")
        if not 0.0 <= self.volume <= 1.0:
            raise ValueError(f"volume must be between 0-1, got {self.volume}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        # Fail early on unknown schemes or malformed colors.
        self.colors()

    @property
    def instructions_per_frame(self) -> int:
        return max(1, self.ips // FPS // 2)

    def colors(self) -> Tuple[Tuple[int, int, int], Tuple[int, int, int]]:
        """Resolve (foreground, background), explicit colors overriding the scheme."""
        foreground, background = create_color_scheme(self.color_scheme)
        if self.foreground is not None:
            foreground = parse_color(self.foreground)
        if self.background is not None:
            background = parse_color(self.background)
        return foreground, background
