"""Per-frame ocean surface height and color evaluation.

The surface is a closed-form sum of two travelling sinusoidal swells and a
wind-chop term, amplified near the canyon axis (x = 0) and toward the shore
edge of the grid. Nothing here simulates fluid dynamics.

Every helper takes an optional `out=` buffer so `OceanSurface.evaluate`
runs entirely in preallocated arrays once the surface exists.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from coastal.config import OceanGridConfig, WaveConfig
from coastal.geometry import plane_indices, plane_positions
from coastal.palette import hex_to_rgb


GRAVITY = 9.8
SPEED_DAMPING = 0.3
CANYON_HALF_WIDTH = 150.0
SECONDARY_LENGTH_RATIO = 0.6
SECONDARY_AMPLITUDE_SCALE = 0.7
CHOP_TIME_SCALE = 2.0
CHOP_WEIGHTS = (0.5, 0.3, 0.2)
CHOP_GAIN = 3.0
CHOP_WIND_REFERENCE = 20.0
FOAM_CREST_GAIN = 0.5
# Per-channel multiplier applied at full murkiness: less red and blue, a bit more green.
MURK_TINT = (-0.3, 0.1, -0.2)


def _buffer(out: np.ndarray | None, like) -> np.ndarray:
    if out is None:
        return np.empty(np.shape(like), dtype=np.float64)
    return out


@dataclass(frozen=True)
class OceanGrid:
    """Fixed base lattice of the ocean in the XZ plane (y up).

    `positions` and the derived per-vertex views are read-only.
    """

    size: float
    segments: int
    positions: np.ndarray
    indices: np.ndarray
    x: np.ndarray
    z: np.ndarray
    shore_distance: np.ndarray

    @classmethod
    def create(cls, config: OceanGridConfig | None = None) -> OceanGrid:
        cfg = config or OceanGridConfig()
        plane = plane_positions(cfg.size, cfg.size, cfg.segments, cfg.segments)

        positions = np.zeros_like(plane)
        positions[:, 0] = plane[:, 0]
        positions[:, 2] = -plane[:, 1]
        x = np.ascontiguousarray(positions[:, 0])
        z = np.ascontiguousarray(positions[:, 2])
        # 0 along the back edge, 1 along the shore-facing edge.
        shore_distance = (z + cfg.size / 2.0) / cfg.size
        indices = plane_indices(cfg.segments, cfg.segments)

        for array in (positions, indices, x, z, shore_distance):
            array.setflags(write=False)
        return cls(
            size=float(cfg.size),
            segments=int(cfg.segments),
            positions=positions,
            indices=indices,
            x=x,
            z=z,
            shore_distance=shore_distance,
        )

    @property
    def spacing(self) -> float:
        return self.size / self.segments

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])


@dataclass(frozen=True)
class WaveComponent:
    """One travelling swell: direction in radians, wavenumber 2*pi/length."""

    direction: float
    wavenumber: float
    speed: float
    height: float
    amplitude_scale: float = 1.0
    shoaling: bool = False

    @property
    def wavelength(self) -> float:
        return 2.0 * np.pi / self.wavenumber

    def phase(self, x, z, time: float, *, out: np.ndarray | None = None, work: np.ndarray | None = None) -> np.ndarray:
        """k * (sin(dir) * x + cos(dir) * z - speed * time)."""

        out = _buffer(out, x)
        work = _buffer(work, x)
        np.multiply(x, np.sin(self.direction), out=out)
        np.multiply(z, np.cos(self.direction), out=work)
        np.add(out, work, out=out)
        np.subtract(out, self.speed * time, out=out)
        np.multiply(out, self.wavenumber, out=out)
        return out

    def amplitude(self, canyon, depth=None, *, out: np.ndarray | None = None) -> np.ndarray:
        out = _buffer(out, canyon)
        np.multiply(canyon, self.height * self.amplitude_scale, out=out)
        if self.shoaling and depth is not None:
            np.multiply(out, depth, out=out)
        return out


def phase_speed(period: float, speed_multiplier: float) -> float:
    """Deep-water phase speed g*T/(2*pi), damped to a plausible on-screen pace."""

    return GRAVITY * period / (2.0 * np.pi) * speed_multiplier * SPEED_DAMPING


def wave_components(config: WaveConfig) -> tuple[WaveComponent, WaveComponent]:
    """Primary and secondary swells for `config`."""

    secondary_length = config.wave_length * SECONDARY_LENGTH_RATIO
    primary = WaveComponent(
        direction=float(np.deg2rad(config.wave_direction)),
        wavenumber=2.0 * np.pi / config.wave_length,
        speed=phase_speed(config.wave_period, config.wave_speed),
        height=config.wave_height,
        amplitude_scale=1.0,
        shoaling=True,
    )
    secondary = WaveComponent(
        direction=float(np.deg2rad(config.secondary_wave_direction)),
        wavenumber=2.0 * np.pi / secondary_length,
        speed=phase_speed(config.secondary_wave_period, config.wave_speed),
        height=config.secondary_wave_height,
        amplitude_scale=SECONDARY_AMPLITUDE_SCALE,
        shoaling=False,
    )
    return primary, secondary


def canyon_factor(x, amplification: float, focus_width: float, *, out: np.ndarray | None = None) -> np.ndarray:
    """Gaussian amplification: `amplification` on the x = 0 axis, 1 far away."""

    out = _buffer(out, x)
    np.abs(x, out=out)
    np.divide(out, CANYON_HALF_WIDTH, out=out)
    np.multiply(out, out, out=out)
    np.divide(out, -(focus_width * focus_width), out=out)
    np.exp(out, out=out)
    np.multiply(out, amplification - 1.0, out=out)
    np.add(out, 1.0, out=out)
    return out


def depth_factor(shore_distance, depth_effect: float, *, out: np.ndarray | None = None) -> np.ndarray:
    """Linear shoaling multiplier growing toward the shore edge."""

    out = _buffer(out, shore_distance)
    np.multiply(shore_distance, depth_effect, out=out)
    np.add(out, 1.0, out=out)
    return out


def wind_chop(
    x,
    z,
    time: float,
    intensity: float,
    wind_speed: float,
    *,
    out: np.ndarray | None = None,
    work: tuple[np.ndarray, np.ndarray] | None = None,
) -> np.ndarray:
    """Small turbulent height perturbation; exactly zero when intensity is 0."""

    out = _buffer(out, x)
    if intensity <= 0.0:
        out.fill(0.0)
        return out

    a, b = work if work is not None else (_buffer(None, x), _buffer(None, x))
    chop_time = time * CHOP_TIME_SCALE
    w1, w2, w3 = CHOP_WEIGHTS

    _sin_cos(x, 0.08, chop_time * 1.1, z, 0.06, chop_time * 0.9, out=a, work=b)
    np.multiply(a, w1, out=out)

    _sin_cos(x, 0.15, -chop_time * 0.7, z, 0.12, chop_time * 1.3, out=a, work=b)
    np.multiply(a, w2, out=a)
    np.add(out, a, out=out)

    np.add(x, z, out=a)
    np.multiply(a, 0.1, out=a)
    np.add(a, chop_time * 0.8, out=a)
    np.sin(a, out=a)
    np.multiply(a, w3, out=a)
    np.add(out, a, out=out)

    np.multiply(out, intensity * (1.0 + wind_speed / CHOP_WIND_REFERENCE) * CHOP_GAIN, out=out)
    return out


def _sin_cos(x, fx: float, px: float, z, fz: float, pz: float, *, out: np.ndarray, work: np.ndarray) -> None:
    # sin(x * fx + px) * cos(z * fz + pz)
    np.multiply(x, fx, out=out)
    np.add(out, px, out=out)
    np.sin(out, out=out)
    np.multiply(z, fz, out=work)
    np.add(work, pz, out=work)
    np.cos(work, out=work)
    np.multiply(out, work, out=out)


def foam_amount(
    steepness,
    total_height,
    threshold: float,
    intensity: float,
    wave_height: float,
    *,
    out: np.ndarray | None = None,
    work: np.ndarray | None = None,
    mask: np.ndarray | None = None,
) -> np.ndarray:
    """Whitewater fraction in [0, 1] from slope steepness and crest height."""

    out = _buffer(out, steepness)
    work = _buffer(work, steepness)
    if mask is None:
        mask = np.empty(np.shape(steepness), dtype=bool)

    np.subtract(steepness, threshold, out=out)
    np.multiply(out, 2.0, out=out)
    np.minimum(out, 1.0, out=out)
    np.multiply(out, intensity, out=out)

    np.divide(total_height, 2.0 * wave_height, out=work)
    np.maximum(work, 0.0, out=work)
    np.multiply(work, intensity * FOAM_CREST_GAIN, out=work)
    np.add(out, work, out=out)
    np.clip(out, 0.0, 1.0, out=out)

    np.less_equal(steepness, threshold * 2.0, out=mask)
    np.copyto(out, 0.0, where=mask)
    return out


def surface_color(
    base_rgb: tuple[float, float, float],
    water_clarity: float,
    foam,
    *,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Tint the base color toward murky green-gray, then blend toward white by foam."""

    if out is None:
        out = np.empty((np.shape(foam)[0], 3), dtype=np.float64)
    murk = 1.0 - water_clarity
    for channel, (base, tint) in enumerate(zip(base_rgb, MURK_TINT)):
        tinted = base * (1.0 + tint * murk)
        column = out[:, channel]
        np.multiply(foam, 1.0 - tinted, out=column)
        np.add(column, tinted, out=column)
    np.clip(out, 0.0, 1.0, out=out)
    return out


class SurfaceScratch:
    """Work arrays reused across frames by `evaluate_surface`."""

    def __init__(self, vertex_count: int):
        def buf() -> np.ndarray:
            return np.zeros(vertex_count, dtype=np.float64)

        self.canyon = buf()
        self.depth = buf()
        self.primary_amplitude = buf()
        self.primary_phase = buf()
        self.secondary_amplitude = buf()
        self.secondary_phase = buf()
        self.total = buf()
        self.steepness = buf()
        self.foam = buf()
        self.work_a = buf()
        self.work_b = buf()
        self.work_c = buf()
        self.mask = np.zeros(vertex_count, dtype=bool)


def evaluate_surface(
    config: WaveConfig,
    time: float,
    grid: OceanGrid,
    positions: np.ndarray,
    colors: np.ndarray,
    *,
    scratch: SurfaceScratch | None = None,
) -> None:
    """Write heights into `positions` and colors into `colors` for every vertex.

    Both buffers are (N, 3) and index-aligned with `grid.positions`. The
    result depends only on (config, time, grid). Lengths, periods and wave
    height must be positive; nothing is checked here.
    """

    n = grid.vertex_count
    if positions.shape != (n, 3) or colors.shape != (n, 3):
        raise ValueError("positions and colors must both have shape (vertex_count, 3)")

    s = scratch if scratch is not None else SurfaceScratch(n)
    primary, secondary = wave_components(config)
    x = grid.x
    z = grid.z

    canyon_factor(x, config.canyon_amplification, config.canyon_focus_width, out=s.canyon)
    depth_factor(grid.shore_distance, config.canyon_depth_effect, out=s.depth)

    primary.amplitude(s.canyon, s.depth, out=s.primary_amplitude)
    primary.phase(x, z, time, out=s.primary_phase, work=s.work_a)
    secondary.amplitude(s.canyon, out=s.secondary_amplitude)
    secondary.phase(x, z, time, out=s.secondary_phase, work=s.work_a)

    np.sin(s.primary_phase, out=s.total)
    np.multiply(s.total, s.primary_amplitude, out=s.total)
    np.sin(s.secondary_phase, out=s.work_a)
    np.multiply(s.work_a, s.secondary_amplitude, out=s.work_a)
    np.add(s.total, s.work_a, out=s.total)
    wind_chop(
        x,
        z,
        time,
        config.wind_chop_intensity,
        config.wind_speed,
        out=s.work_a,
        work=(s.work_b, s.work_c),
    )
    np.add(s.total, s.work_a, out=s.total)

    # Analytic slope of each swell: amplitude * k * cos(phase).
    np.cos(s.primary_phase, out=s.steepness)
    np.multiply(s.steepness, s.primary_amplitude, out=s.steepness)
    np.multiply(s.steepness, primary.wavenumber, out=s.steepness)
    np.abs(s.steepness, out=s.steepness)
    np.cos(s.secondary_phase, out=s.work_a)
    np.multiply(s.work_a, s.secondary_amplitude, out=s.work_a)
    np.multiply(s.work_a, secondary.wavenumber, out=s.work_a)
    np.abs(s.work_a, out=s.work_a)
    np.add(s.steepness, s.work_a, out=s.steepness)
    np.divide(s.steepness, grid.spacing, out=s.steepness)

    foam_amount(
        s.steepness,
        s.total,
        config.foam_threshold,
        config.foam_intensity,
        config.wave_height,
        out=s.foam,
        work=s.work_a,
        mask=s.mask,
    )

    positions[:, 0] = x
    positions[:, 1] = s.total
    positions[:, 2] = z
    surface_color(hex_to_rgb(config.wave_color), config.water_clarity, s.foam, out=colors)


class OceanSurface:
    """Owns the working position/color buffers for one ocean grid."""

    def __init__(self, grid: OceanGrid, *, dtype=np.float32):
        self.grid = grid
        self.positions = grid.positions.astype(dtype, copy=True)
        self.colors = np.zeros((grid.vertex_count, 3), dtype=dtype)
        self._scratch = SurfaceScratch(grid.vertex_count)

    def evaluate(self, config: WaveConfig, time: float) -> None:
        evaluate_surface(config, time, self.grid, self.positions, self.colors, scratch=self._scratch)

    def heights(self) -> np.ndarray:
        return self.positions[:, 1]

    def foam(self) -> np.ndarray:
        """Foam fraction per vertex from the last evaluate (read-only view)."""

        view = self._scratch.foam.view()
        view.setflags(write=False)
        return view
