"""Frame driver tying the animation clock to the ocean surface."""

from __future__ import annotations

from coastal.clock import AnimationClock
from coastal.config import WaveConfig
from coastal.ocean import OceanGrid, OceanSurface


class OceanAnimator:
    """Advances time and re-evaluates the surface exactly once per `step`."""

    def __init__(self, grid: OceanGrid, clock: AnimationClock | None = None):
        self.clock = clock or AnimationClock()
        self.surface = OceanSurface(grid)
        self.frames = 0

    def step(self, delta_time: float, config: WaveConfig) -> float:
        """Tick the clock, evaluate the surface, and return the simulation time."""

        time = self.clock.tick(delta_time, config)
        self.surface.evaluate(config, time)
        self.frames += 1
        return time

    def run(self, frame_count: int, delta_time: float, config: WaveConfig) -> float:
        if frame_count < 0:
            raise ValueError("frame_count must be non-negative")
        time = self.clock.elapsed
        for _ in range(frame_count):
            time = self.step(delta_time, config)
        return time
