"""Deterministic sine-hash noise used for organic terrain displacement.

Every function is a pure numpy expression, so scalars and vertex arrays are
accepted alike. None of this is statistically strong: `seeded_random` shows
visible structure for seeds close to multiples of pi. It only has to look
plausible and be reproducible.
"""

from __future__ import annotations

import numpy as np


FBM_GAIN = 0.5
FBM_LACUNARITY = 2.1
FBM_OCTAVE_OFFSET = 100.0


def seeded_random(seed):
    """Return frac(sin(seed) * 10000), a deterministic value in [0, 1)."""

    value = np.sin(seed) * 10000.0
    return value - np.floor(value)


def noise3d(x, y, z):
    """Smooth pseudo-random field in approximately [-1.75, 1.75]."""

    return (
        np.sin(x * 0.5 + y * 0.3) * np.cos(z * 0.4 + x * 0.2)
        + np.sin(y * 0.7 - z * 0.5) * np.cos(x * 0.6) * 0.5
        + np.sin(x * 1.3 + z * 1.1) * np.cos(y * 0.9) * 0.25
    )


def fbm(x, y, octaves: int = 4):
    """Fractal Brownian motion over `noise3d`, normalized to about [-1, 1]."""

    value = 0.0
    amplitude = 1.0
    frequency = 1.0
    total_amplitude = 0.0

    for octave in range(octaves):
        value = value + amplitude * noise3d(x * frequency, y * frequency, octave * FBM_OCTAVE_OFFSET)
        total_amplitude += amplitude
        amplitude *= FBM_GAIN
        frequency *= FBM_LACUNARITY

    if total_amplitude == 0:
        return value
    return value / total_amplitude
