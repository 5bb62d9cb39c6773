"""Real-time driver: paces instruction batches against 60 Hz frames.

Each iteration runs the pending batch, stopping early on FX0A, then polls
input and counts the whole frames elapsed since start. Elapsed frames tick
the timers and present the display if it changed. The next batch is
``max(1, frames) * instructions_per_frame`` instructions; with
``instructions_per_frame = ips / 60 / 2`` that is two batches per frame.
"""

import time
from typing import Callable, Iterable, Optional, Tuple, Union

import jax
import jax.numpy as jnp
import numpy as np

from chip8jax.audio import ToneGenerator
from chip8jax.config import Chip8Config
from chip8jax.constants import FPS
from chip8jax.debugger import DebugStepper, console_commands
from chip8jax.emulator import run_instructions, step_jit, load_rom
from chip8jax.errors import fault_error
from chip8jax.keypad import key_event, is_waiting
from chip8jax.logging import ConsoleLogger
from chip8jax.state import EmulatorState, create_state
from chip8jax.timers import FrameClock, SoundTimer, tick_timers

Renderer = Callable[[np.ndarray, Tuple[int, int, int], Tuple[int, int, int]], None]
InputSource = Callable[[], Iterable[Tuple[Union[int, str], bool]]]


class Scheduler:
    """Top-level driver composing the executor, timers, keypad, display and audio.

    Args:
        state: Initial emulator state (usually with a program loaded)
        config: Interpreter settings
        renderer: Called with (display, foreground, background) when the display changed
        input_source: Returns pending (key, pressed) events; key is 0-F or a physical key name
        stepper: Optional debug gate; built from the console when ``config.debug`` is set
        sound_timer: Shared sound timer read by the audio thread
        clock: Monotonic clock in seconds
        sleep: Sleep function used while idle
        logger: Console logger
    """

    def __init__(
        self,
        state: EmulatorState,
        config: Optional[Chip8Config] = None,
        renderer: Optional[Renderer] = None,
        input_source: Optional[InputSource] = None,
        stepper: Optional[DebugStepper] = None,
        sound_timer: Optional[SoundTimer] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[ConsoleLogger] = None,
    ):
        self.config = config or Chip8Config()
        self.state = state
        self.renderer = renderer
        self.input_source = input_source
        self.logger = logger or ConsoleLogger(log_level=self.config.log_level)
        if stepper is None and self.config.debug:
            stepper = DebugStepper(console_commands())
        self.stepper = stepper
        self.sound_timer = sound_timer or SoundTimer()
        self.frame_clock = FrameClock(clock)
        self.sleep = sleep
        self.foreground, self.background = self.config.colors()

        self.running = False
        self.instructions_executed = 0
        self.budget = 0

    @classmethod
    def from_rom(cls, filename: str, config: Optional[Chip8Config] = None, **kwargs) -> "Scheduler":
        """Create a scheduler with ``filename`` loaded into a fresh machine."""
        config = config or Chip8Config()
        logger = kwargs.setdefault("logger", ConsoleLogger(log_level=config.log_level))
        state = load_rom(create_state(jax.random.PRNGKey(config.seed)), filename, log=logger)
        return cls(state, config=config, **kwargs)

    @property
    def instructions_per_frame(self) -> int:
        return self.config.instructions_per_frame

    def tone_generator(self, sample_rate: Optional[int] = None) -> ToneGenerator:
        """Tone generator bound to this scheduler's sound timer."""
        return ToneGenerator(
            self.sound_timer,
            sample_rate=sample_rate or self.config.sample_rate,
            volume=self.config.volume,
        )

    def start(self):
        self.frame_clock.start()
        self.budget = 0
        self.running = True
        self.sound_timer.publish(self.state)
        self.logger.info(
            f"Running program at {self.config.ips} IPS ({self.instructions_per_frame} per frame)")

    def stop(self):
        """Halt flag: execution stops before the next fetch."""
        self.running = False

    def interrupt(self):
        """Return the debug gate to single-stepping."""
        if self.stepper is not None:
            self.stepper.interrupt()

    def key_event(self, key: Union[int, str], pressed: bool):
        self.state = key_event(self.state, key, pressed)

    def poll_input(self):
        if self.input_source is None:
            return
        for key, pressed in self.input_source():
            self.key_event(key, pressed)

    def refresh_display(self):
        """Present the display if it changed since the last refresh."""
        if self.renderer is None or not bool(self.state.display_changed):
            return
        self.renderer(np.asarray(self.state.display), self.foreground, self.background)
        self.state = self.state.replace(display_changed=jnp.asarray(False))

    def execute(self, budget: int) -> int:
        """Run up to ``budget`` instructions; raises if the machine faulted."""
        if self.stepper is None:
            self.state, executed = run_instructions(self.state, budget)
            executed = int(executed)
        else:
            executed = self._execute_gated(budget)

        self.instructions_executed += executed
        self._check_halt()
        return executed

    def _execute_gated(self, budget: int) -> int:
        executed = 0
        while executed < budget and self.running:
            if is_waiting(self.state) or bool(self.state.halted):
                break
            if not self.stepper.gate(self.state):
                self.logger.info("Quit from debugger")
                self.state = self.state.replace(halted=jnp.asarray(True))
                break
            self.state = step_jit(self.state)
            executed += 1
        return executed

    def _check_halt(self):
        if not bool(self.state.halted):
            return
        self.running = False
        error = fault_error(self.state)
        if error is not None:
            self.logger.error(f"Halted: {error}")
            raise error

    def tick(self) -> int:
        """One scheduler iteration. Returns the number of frames that elapsed.

        Runs the batch sized by the previous iteration, then polls input and
        counts frames. Timers and the display only advance on whole frames;
        the next batch is ``max(1, frames)`` frames' worth of instructions.
        """
        if self.frame_clock.start_time is None:
            self.start()
        if not self.running:
            return 0

        if self.budget:
            self.execute(self.budget)
            self.sound_timer.publish(self.state)
            if not self.running:
                return 0

        self.poll_input()
        frames = self.frame_clock.elapsed_frames()
        if frames > 0:
            self.state = tick_timers(self.state, frames)
            self.sound_timer.publish(self.state)
            self.refresh_display()

        self.budget = max(1, frames) * self.instructions_per_frame
        if frames == 0 or is_waiting(self.state):
            self.sleep(1.0 / FPS)
        return frames

    def run(self) -> EmulatorState:
        """Run until stopped, quit from the debugger, or halted by a fault."""
        self.start()
        while self.running:
            self.tick()
        return self.state
