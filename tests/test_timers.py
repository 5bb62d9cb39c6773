"""Tests for timer ticking, the frame clock and the shared sound timer."""

import threading

import jax.numpy as jnp
from chip8jax import tick_timers, FrameClock, SoundTimer
from conftest import FakeClock


def with_timers(state, delay, sound):
    return state.replace(delay_timer=jnp.uint8(delay), sound_timer=jnp.uint8(sound))


class TestTickTimers:

    def test_single_frame(self, fresh_state):
        state = tick_timers(with_timers(fresh_state, 10, 3), 1)
        assert state.delay_timer == 9
        assert state.sound_timer == 2

    def test_many_frames_floor_at_zero(self, fresh_state):
        state = tick_timers(with_timers(fresh_state, 10, 3), 5)
        assert state.delay_timer == 5
        assert state.sound_timer == 0

    def test_large_frame_count(self, fresh_state):
        state = tick_timers(with_timers(fresh_state, 255, 255), 1000)
        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_zero_frames(self, fresh_state):
        state = tick_timers(with_timers(fresh_state, 7, 7), 0)
        assert state.delay_timer == 7


class TestFrameClock:

    def test_counts_whole_frames(self):
        clock = FakeClock()
        frames = FrameClock(clock)
        frames.start()

        assert frames.elapsed_frames() == 0
        clock.advance(1)
        assert frames.elapsed_frames() == 1
        assert frames.elapsed_frames() == 0
        clock.advance(4)
        assert frames.elapsed_frames() == 4
        assert frames.frames_finished == 5

    def test_partial_frame_is_not_counted(self):
        clock = FakeClock()
        frames = FrameClock(clock)
        frames.start()
        clock.now = 0.9 / 60
        assert frames.elapsed_frames() == 0

    def test_lazy_start(self):
        clock = FakeClock()
        clock.now = 10.0
        frames = FrameClock(clock)
        assert frames.elapsed_frames() == 0
        assert frames.start_time == 10.0


class TestSoundTimer:

    def test_publish(self, fresh_state):
        timer = SoundTimer()
        assert timer.get() == 0
        timer.publish(with_timers(fresh_state, 0, 42))
        assert timer.get() == 42

    def test_concurrent_access(self):
        timer = SoundTimer()

        def writer():
            for value in range(1000):
                timer.set(value % 256)

        threads = [threading.Thread(target=writer) for _ in range(4)]
        for thread in threads:
            thread.start()
        for _ in range(1000):
            assert 0 <= timer.get() < 256
        for thread in threads:
            thread.join()
