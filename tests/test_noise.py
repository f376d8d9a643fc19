from __future__ import annotations

import numpy as np

from coastal.noise import fbm, noise3d, seeded_random


def test_seeded_random_of_zero_is_zero() -> None:
    assert seeded_random(0) == 0.0
    assert seeded_random(0.0) == 0.0


def test_seeded_random_is_deterministic_and_in_unit_interval() -> None:
    seeds = np.arange(-500, 500, dtype=np.float64) * 0.73 + 0.11

    a = seeded_random(seeds)
    b = seeded_random(seeds)

    assert np.array_equal(a, b)
    assert float(a.min()) >= 0.0
    assert float(a.max()) < 1.0
    assert seeded_random(7.0) == seeded_random(7.0)


def test_noise3d_stays_in_documented_range() -> None:
    rng = np.random.default_rng(3)
    x, y, z = rng.uniform(-500.0, 500.0, size=(3, 20000))

    values = noise3d(x, y, z)

    assert np.isfinite(values).all()
    assert float(np.max(np.abs(values))) <= 1.75


def test_fbm_is_deterministic_and_normalized() -> None:
    xs, ys = np.meshgrid(np.linspace(-40.0, 40.0, 120), np.linspace(-25.0, 25.0, 90))

    a = fbm(xs, ys, 4)
    b = fbm(xs, ys, 4)

    assert np.array_equal(a, b)
    assert float(np.max(np.abs(a))) <= 1.75
    assert float(np.std(a)) > 0.05


def test_single_octave_fbm_is_plain_noise() -> None:
    xs = np.linspace(-10.0, 10.0, 64)
    ys = np.linspace(3.0, -7.0, 64)

    assert np.array_equal(fbm(xs, ys, 1), noise3d(xs, ys, 0.0))


def test_fbm_octaves_change_detail() -> None:
    xs = np.linspace(-10.0, 10.0, 256)
    ys = np.full_like(xs, 2.5)

    assert not np.array_equal(fbm(xs, ys, 2), fbm(xs, ys, 4))
