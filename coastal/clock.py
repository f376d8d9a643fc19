"""Simulation time accumulator for the animated ocean."""

from __future__ import annotations

from coastal.config import WaveConfig


class AnimationClock:
    """Monotonic elapsed-time accumulator advanced once per rendered frame.

    Time only moves while `config.animate_waves` is set. Pausing freezes the
    accumulator; resuming continues from the frozen value with no catch-up
    for the frames spent paused.
    """

    def __init__(self, elapsed: float = 0.0):
        if elapsed < 0:
            raise ValueError("elapsed must be non-negative")
        self._elapsed = float(elapsed)

    @property
    def elapsed(self) -> float:
        return self._elapsed

    def tick(self, delta_time: float, config: WaveConfig) -> float:
        """Advance by `delta_time * config.time_scale` and return the new time."""

        if not config.animate_waves:
            return self._elapsed

        step = delta_time * config.time_scale
        if step > 0:
            self._elapsed += step
        return self._elapsed
