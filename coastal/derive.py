"""Raster previews derived from ocean surface buffers."""

from __future__ import annotations

import numpy as np

from coastal.ocean import OceanGrid


def height_raster(grid: OceanGrid, heights: np.ndarray) -> np.ndarray:
    """Reshape per-vertex heights into a (rows, cols) raster, back edge first."""

    side = grid.segments + 1
    if heights.shape != (side * side,):
        raise ValueError("heights must have one value per grid vertex")
    return heights.reshape(side, side)


# Vertical exaggeration and ambient floor of the preview shading.
HILLSHADE_EXAGGERATION = 2.0
HILLSHADE_AMBIENT = 0.15


def hillshade(
    height: np.ndarray,
    *,
    spacing: float,
    azimuth_deg: float = 315.0,
    altitude_deg: float = 45.0,
    exaggeration: float = HILLSHADE_EXAGGERATION,
    ambient: float = HILLSHADE_AMBIENT,
) -> np.ndarray:
    """Lambert-shade a signed height raster laid out like the ocean grid.

    Columns run along +x and rows from the back edge toward the shore (+z),
    with y up. The azimuth is measured from +z toward +x. Troughs are shaded
    exactly like crests; only the slope matters.
    """

    if height.ndim != 2:
        raise ValueError("height must be a 2D array")
    if spacing <= 0:
        raise ValueError("spacing must be positive")

    dh_dz, dh_dx = np.gradient(height.astype(np.float64) * exaggeration, spacing)

    azimuth = np.deg2rad(azimuth_deg)
    altitude = np.deg2rad(altitude_deg)
    sun_x = np.cos(altitude) * np.sin(azimuth)
    sun_y = np.sin(altitude)
    sun_z = np.cos(altitude) * np.cos(azimuth)

    # Unnormalized surface normal of y = h(x, z) is (-dh/dx, 1, -dh/dz).
    lambert = (sun_y - dh_dx * sun_x - dh_dz * sun_z) / np.sqrt(1.0 + dh_dx * dh_dx + dh_dz * dh_dz)
    shaded = ambient + (1.0 - ambient) * np.clip(lambert, 0.0, 1.0)
    return np.round(shaded * 255.0).astype(np.uint8)


def height_preview_u8(height: np.ndarray, *, limit: float | None = None) -> np.ndarray:
    """Map signed heights symmetrically into 8-bit grayscale, sea level at 128."""

    bound = float(np.max(np.abs(height))) if limit is None else float(limit)
    bound = max(bound, 1e-6)
    normalized = np.clip(height.astype(np.float32) / bound, -1.0, 1.0)
    return np.round((normalized * 0.5 + 0.5) * 255.0).astype(np.uint8)


def color_raster_u8(grid: OceanGrid, colors: np.ndarray) -> np.ndarray:
    """Per-vertex RGB in [0, 1] as a (rows, cols, 3) uint8 image."""

    side = grid.segments + 1
    if colors.shape != (side * side, 3):
        raise ValueError("colors must have shape (vertex_count, 3)")
    rgb = np.clip(colors.astype(np.float32), 0.0, 1.0).reshape(side, side, 3)
    return np.round(rgb * 255.0).astype(np.uint8)


def foam_coverage(foam: np.ndarray) -> float:
    """Fraction of vertices carrying any foam."""

    if foam.size == 0:
        return 0.0
    return float(np.mean(foam > 0.0))
