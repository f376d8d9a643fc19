from __future__ import annotations

import numpy as np
import pytest

from coastal.config import OceanGridConfig
from coastal.derive import color_raster_u8, foam_coverage, height_preview_u8, height_raster, hillshade
from coastal.ocean import OceanGrid


def test_hillshade_flat_surface_is_uniform() -> None:
    flat = np.zeros((16, 16), dtype=np.float32)

    shade = hillshade(flat, spacing=7.5)

    assert shade.dtype == np.uint8
    assert np.all(shade == shade[0, 0])
    assert int(shade[0, 0]) == round((0.15 + 0.85 * np.sin(np.deg2rad(45.0))) * 255.0)


def test_hillshade_lights_slopes_facing_the_sun() -> None:
    # Height rises along +x, so the surface faces -x.
    ramp = np.tile(np.arange(12, dtype=np.float64) * 0.5, (12, 1))

    facing = hillshade(ramp, spacing=1.0, azimuth_deg=270.0)
    away = hillshade(ramp, spacing=1.0, azimuth_deg=90.0)

    assert int(facing[6, 6]) == 255
    assert int(away[6, 6]) == round(0.15 * 255.0)
    assert np.array_equal(hillshade(-ramp, spacing=1.0, azimuth_deg=90.0), facing)


def test_hillshade_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        hillshade(np.zeros(4), spacing=1.0)
    with pytest.raises(ValueError):
        hillshade(np.zeros((4, 4)), spacing=0.0)


def test_height_preview_is_centered_on_sea_level() -> None:
    preview = height_preview_u8(np.array([[-2.0, 0.0, 2.0]]))

    assert preview.tolist() == [[0, 128, 255]]
    assert height_preview_u8(np.zeros((2, 2))).tolist() == [[128, 128], [128, 128]]


def test_rasters_follow_grid_shape() -> None:
    grid = OceanGrid.create(OceanGridConfig(size=100.0, segments=4))
    heights = np.arange(25, dtype=np.float32)

    raster = height_raster(grid, heights)
    rgb = color_raster_u8(grid, np.full((25, 3), 0.5, dtype=np.float32))

    assert raster.shape == (5, 5)
    assert raster[0, 4] == 4.0
    assert rgb.shape == (5, 5, 3)
    assert np.all(rgb == 128)
    with pytest.raises(ValueError):
        height_raster(grid, np.zeros(24))


def test_foam_coverage() -> None:
    assert foam_coverage(np.array([0.0, 0.2, 0.0, 1.0])) == 0.5
    assert foam_coverage(np.array([])) == 0.0
