from __future__ import annotations

from dataclasses import replace
import hashlib

import numpy as np
import pytest

from coastal.config import PRESETS, OceanGridConfig, WaveConfig
from coastal.ocean import (
    OceanGrid,
    OceanSurface,
    canyon_factor,
    depth_factor,
    evaluate_surface,
    foam_amount,
    phase_speed,
    surface_color,
    wave_components,
    wind_chop,
)
from coastal.palette import hex_to_rgb


def _hash(arr: np.ndarray) -> str:
    return hashlib.sha256(np.ascontiguousarray(arr).tobytes()).hexdigest()


def _grid(segments: int = 40) -> OceanGrid:
    return OceanGrid.create(OceanGridConfig(size=300.0, segments=segments))


def test_grid_layout_and_shore_distance() -> None:
    grid = _grid(10)

    assert grid.vertex_count == 121
    assert grid.indices.shape == (200, 3)
    assert grid.spacing == pytest.approx(30.0)
    assert float(grid.x.min()) == pytest.approx(-150.0)
    assert float(grid.z.max()) == pytest.approx(150.0)
    assert float(grid.shore_distance.min()) == pytest.approx(0.0)
    assert float(grid.shore_distance.max()) == pytest.approx(1.0)
    assert np.all(grid.positions[:, 1] == 0.0)


def test_base_grid_is_read_only_and_untouched_by_evaluation() -> None:
    grid = _grid(20)
    before = grid.positions.copy()
    surface = OceanSurface(grid)

    surface.evaluate(PRESETS["extreme"], 12.5)

    assert not grid.positions.flags.writeable
    assert not grid.x.flags.writeable
    assert np.array_equal(grid.positions, before)
    with pytest.raises(ValueError):
        grid.positions[0, 1] = 1.0


def test_evaluate_is_bit_identical_for_identical_inputs() -> None:
    grid = _grid(40)
    config = PRESETS["big"]
    a = OceanSurface(grid)
    b = OceanSurface(grid)

    a.evaluate(config, 3.25)
    b.evaluate(config, 3.25)

    assert _hash(a.positions) == _hash(b.positions)
    assert _hash(a.colors) == _hash(b.colors)


def test_evaluate_does_not_depend_on_previous_frames() -> None:
    grid = _grid(30)
    config = WaveConfig()
    reused = OceanSurface(grid)
    fresh = OceanSurface(grid)

    reused.evaluate(PRESETS["extreme"], 99.0)
    reused.evaluate(config, 4.0)
    fresh.evaluate(config, 4.0)

    assert np.array_equal(reused.positions, fresh.positions)
    assert np.array_equal(reused.colors, fresh.colors)
    assert np.array_equal(reused.foam(), fresh.foam())


def test_evaluation_preserves_horizontal_coordinates() -> None:
    grid = _grid(24)
    surface = OceanSurface(grid)

    surface.evaluate(PRESETS["extreme"], 7.0)

    assert np.array_equal(surface.positions[:, 0], grid.x.astype(np.float32))
    assert np.array_equal(surface.positions[:, 2], grid.z.astype(np.float32))
    assert np.isfinite(surface.positions).all()


def test_float64_buffers_match_surface_heights() -> None:
    grid = _grid(16)
    config = WaveConfig()
    surface = OceanSurface(grid)
    positions = np.zeros((grid.vertex_count, 3))
    colors = np.zeros((grid.vertex_count, 3))

    surface.evaluate(config, 2.0)
    evaluate_surface(config, 2.0, grid, positions, colors)

    assert np.array_equal(positions[:, 1].astype(np.float32), surface.heights())


def test_evaluate_rejects_mismatched_buffers() -> None:
    grid = _grid(8)
    with pytest.raises(ValueError):
        evaluate_surface(WaveConfig(), 0.0, grid, np.zeros((10, 3)), np.zeros((grid.vertex_count, 3)))


def test_primary_swell_has_zero_phase_at_origin_and_time_zero() -> None:
    grid = _grid(40)
    config = WaveConfig(
        wave_height=8.0,
        wave_length=200.0,
        wave_period=14.0,
        secondary_wave_height=0.0,
        wind_chop_intensity=0.0,
    )
    surface = OceanSurface(grid)

    surface.evaluate(config, 0.0)

    origin = np.flatnonzero((grid.x == 0.0) & (grid.z == 0.0))
    assert origin.shape == (1,)
    assert surface.positions[origin[0], 1] == 0.0

    primary, _ = wave_components(config)
    assert primary.phase(np.array([0.0]), np.array([0.0]), 0.0)[0] == 0.0


def test_secondary_swell_wavelength_and_scale() -> None:
    primary, secondary = wave_components(WaveConfig(wave_length=200.0))

    assert primary.wavelength == pytest.approx(200.0)
    assert secondary.wavelength == pytest.approx(120.0)
    assert secondary.amplitude_scale == pytest.approx(0.7)
    assert primary.shoaling
    assert not secondary.shoaling


def test_phase_speed_scales_with_period_and_multiplier() -> None:
    base = phase_speed(14.0, 1.0)

    assert base == pytest.approx(9.8 * 14.0 / (2.0 * np.pi) * 0.3)
    assert phase_speed(14.0, 2.0) == pytest.approx(2.0 * base)
    assert phase_speed(7.0, 1.0) == pytest.approx(base / 2.0)


def test_canyon_factor_profile() -> None:
    x = np.array([0.0, 75.0, 150.0, 600.0, 3000.0])

    f = canyon_factor(x, 2.5, 0.4)

    assert f[0] == 2.5
    assert f[0] > f[1] > f[2] > f[3]
    assert f[-1] == pytest.approx(1.0)
    assert np.array_equal(canyon_factor(-x, 2.5, 0.4), f)
    assert np.all(canyon_factor(x, 1.0, 0.4) == 1.0)


def test_depth_factor_grows_toward_shore() -> None:
    d = depth_factor(np.array([0.0, 0.5, 1.0]), 0.7)

    assert np.allclose(d, [1.0, 1.35, 1.7])


def test_wind_chop_is_exactly_zero_without_intensity() -> None:
    grid = _grid(20)

    for t in (0.0, 1.7, 123.4):
        chop = wind_chop(grid.x, grid.z, t, 0.0, 40.0)
        assert np.all(chop == 0.0)

    assert np.any(wind_chop(grid.x, grid.z, 1.7, 0.5, 40.0) != 0.0)


def test_wind_chop_grows_with_wind_speed() -> None:
    grid = _grid(20)

    calm = wind_chop(grid.x, grid.z, 2.0, 0.5, 0.0)
    windy = wind_chop(grid.x, grid.z, 2.0, 0.5, 20.0)

    assert np.allclose(windy, calm * 2.0)


def test_foam_is_bounded_and_thresholded() -> None:
    rng = np.random.default_rng(7)
    steepness = rng.uniform(0.0, 5.0, 5000)
    total = rng.uniform(-80.0, 80.0, 5000)

    for intensity in (0.0, 0.3, 1.0):
        for threshold in (0.0, 0.5, 1.0):
            foam = foam_amount(steepness, total, threshold, intensity, 0.5)
            assert float(foam.min()) >= 0.0
            assert float(foam.max()) <= 1.0
            assert np.all(foam[steepness <= threshold * 2.0] == 0.0)
            if intensity == 0.0:
                assert np.all(foam == 0.0)


def test_surface_color_clear_water_and_full_foam() -> None:
    base = hex_to_rgb("#2a6f97")

    clear = surface_color(base, 1.0, np.zeros(4))
    white = surface_color(base, 0.4, np.ones(4))

    assert np.allclose(clear, np.tile(base, (4, 1)))
    assert np.allclose(white, 1.0)


def test_surface_color_murk_shifts_toward_green() -> None:
    r, g, b = hex_to_rgb("#2a6f97")

    murky = surface_color((r, g, b), 0.0, np.zeros(1))

    assert np.allclose(murky[0], [r * 0.7, min(1.0, g * 1.1), b * 0.8])


def test_colors_stay_in_unit_range_for_all_presets() -> None:
    grid = _grid(30)
    surface = OceanSurface(grid)

    for name, preset in PRESETS.items():
        for t in (0.0, 5.5, 41.0):
            surface.evaluate(replace(preset, water_clarity=0.0, foam_threshold=0.0), t)
            assert float(surface.colors.min()) >= 0.0, name
            assert float(surface.colors.max()) <= 1.0, name
            assert float(surface.foam().min()) >= 0.0
            assert float(surface.foam().max()) <= 1.0


def test_foam_view_is_read_only() -> None:
    surface = OceanSurface(_grid(8))
    surface.evaluate(WaveConfig(), 1.0)

    with pytest.raises(ValueError):
        surface.foam()[0] = 1.0


def test_surface_changes_over_time() -> None:
    grid = _grid(20)
    surface = OceanSurface(grid)

    surface.evaluate(WaveConfig(), 0.0)
    first = surface.heights().copy()
    surface.evaluate(WaveConfig(), 1.0)

    assert not np.array_equal(first, surface.heights())
