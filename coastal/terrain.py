"""One-shot deterministic shore geometry: cliffs, rocks, beach and placement."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Callable, TypeVar

import numpy as np

from coastal.config import ShoreConfig
from coastal.geometry import (
    Mesh,
    build_mesh,
    icosahedron_positions,
    plane_indices,
    plane_positions,
    rotate_x,
    soup_indices,
)
from coastal.noise import fbm, seeded_random
from coastal.palette import STRATA_MATERIALS


logger = logging.getLogger(__name__)

T = TypeVar("T")

Vec3 = tuple[float, float, float]

TWO_PI = 2.0 * np.pi

# Horizontal band kept clear for the promontory and fort footprint.
WATER_ROCK_EXCLUSION = (-130.0, -30.0)
OUTCROP_EXCLUSION = (-125.0, -35.0)


@dataclass(frozen=True)
class TerrainFeature:
    """A placed geometry: position, Euler rotation (radians), scale and material key."""

    geometry: Mesh
    position: Vec3
    rotation: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)
    material: str = "rock"


@dataclass(frozen=True)
class StrataBand:
    """Horizontal sedimentary layer visible in the cliff face."""

    y: float
    thickness: float
    material: str


@dataclass(frozen=True)
class Placement:
    """Transform of one procedurally placed instance."""

    index: int
    position: Vec3
    rotation: Vec3
    scale: Vec3
    size: float
    detail: int = 1


def cliff_mesh(
    width: float,
    height: float,
    seg_x: int,
    seg_y: int,
    seed: float,
    displace_amount: float = 15.0,
) -> Mesh:
    """Displace a vertical plane into a weathered sedimentary cliff face.

    Displacement is along the plane normal (local +z) and combines three fbm
    scales, base erosion, top overhang and vertical cracks.
    """

    positions = plane_positions(width, height, seg_x, seg_y)
    x = positions[:, 0]
    y = positions[:, 1]
    d = displace_amount

    large = fbm(x * 0.03 + seed, y * 0.04, 3) * d
    medium = fbm(x * 0.1 + seed, y * 0.12, 2) * (d * 0.4)
    small = fbm(x * 0.3 + seed, y * 0.35, 2) * (d * 0.15)

    # Wave action undercuts the lower band of the face.
    erosion_weight = np.maximum(0.0, 1.0 - (y + height / 2.0) / (height * 0.4))
    erosion = erosion_weight * fbm(x * 0.15 + seed, y * 0.1, 2) * (d * 0.5)

    # Weathering leaves jutting edges along the upper band.
    overhang_weight = np.maximum(0.0, (y - height * 0.3) / (height * 0.2))
    overhang = overhang_weight * fbm(x * 0.08 + seed, y * 0.05, 2) * (d * 0.3)

    cracks = np.sin(x * 0.4 + seed) * np.sin(y * 0.2) * (d * 0.15)

    positions[:, 2] = large + medium + small + erosion - overhang + cracks
    return build_mesh(positions, plane_indices(seg_x, seg_y))


def rock_mesh(
    base_size: float,
    detail: int,
    seed: float,
    flatten_bottom: float = 0.4,
    stretch_x: float = 1.3,
    stretch_z: float = 1.1,
) -> Mesh:
    """Irregular angular boulder from a displaced, subdivided icosahedron.

    The lower hemisphere is squashed by `flatten_bottom` so the rock reads
    as resting on the ground.
    """

    base = icosahedron_positions(base_size, detail)
    x = base[:, 0]
    y = base[:, 1]
    z = base[:, 2]

    y_scale = np.where(y < 0.0, flatten_bottom, 1.0)
    displacement = 1.0 + fbm(x * 0.08 + seed, y * 0.1 + z * 0.08 + seed, 3) * 0.3
    angular = 1.0 + np.sin(x * 2.0 + seed) * np.cos(z * 2.0 + seed) * 0.1

    positions = np.empty_like(base)
    positions[:, 0] = x * displacement * angular * stretch_x
    positions[:, 1] = y * y_scale * displacement * 0.85
    positions[:, 2] = z * displacement * angular * stretch_z
    return build_mesh(positions, soup_indices(positions.shape[0]))


def beach_mesh(width: float, depth: float, seg_x: int, seg_y: int) -> Mesh:
    """Sloped sand plane with ripples; wetness in [0, 1] stored in the colors.

    Wetness is 1 along the waterline edge and 0 at the dry back edge.
    """

    positions = plane_positions(width, depth, seg_x, seg_y)
    x = positions[:, 0]
    v = positions[:, 1]

    slope = (v / depth) * 8.0 - 4.0
    ripples = np.sin(x * 0.2) * np.cos(v * 0.3) * 0.3
    positions[:, 2] = slope + ripples

    wetness = np.clip(1.0 - (v + depth / 2.0) / depth, 0.0, 1.0)
    colors = np.repeat(wetness[:, None], 3, axis=1)

    return build_mesh(rotate_x(positions, -np.pi / 2.0), plane_indices(seg_x, seg_y), colors)


def cliff_top_mesh(width: float = 420.0, depth: float = 120.0, seg_x: int = 70, seg_y: int = 40) -> Mesh:
    """Rolling coastal terrain above the cliff edge."""

    positions = plane_positions(width, depth, seg_x, seg_y)
    x = positions[:, 0]
    v = positions[:, 1]
    positions[:, 2] = fbm(x * 0.015, v * 0.02, 4) * 8.0 + fbm(x * 0.05, v * 0.06, 2) * 3.0
    return build_mesh(rotate_x(positions, -np.pi / 2.0), plane_indices(seg_x, seg_y))


def water_rock_placements(density: float = 1.0, seed_offset: float = 0.0) -> list[Placement]:
    """Flat wave-worn boulders along the waterline, embedded in the shelf."""

    placements: list[Placement] = []
    for i in range(int(np.floor(30 * density))):
        seed = i * 7 + seed_offset
        x = -160.0 + seeded_random(seed) * 320.0
        if WATER_ROCK_EXCLUSION[0] < x < WATER_ROCK_EXCLUSION[1]:
            continue

        z = 128.0 + seeded_random(seed + 1) * 28.0
        size = 2.0 + seeded_random(seed + 2) * 6.0
        embed_depth = size * 0.15
        tilt = i * 11 + seed_offset
        placements.append(
            Placement(
                index=i,
                position=(float(x), float(-6.0 - embed_depth), float(z)),
                rotation=(
                    float(seeded_random(tilt) * 0.2),
                    float(seeded_random(tilt + 1) * TWO_PI),
                    float(seeded_random(tilt + 2) * 0.2),
                ),
                scale=(float(size * 1.5), float(size * 0.35), float(size * 1.2)),
                size=float(size),
                detail=2 if size > 4 else 1,
            )
        )
    return placements


def outcrop_placements(density: float = 1.0, seed_offset: float = 0.0) -> list[Placement]:
    """Elongated rock formations jutting out of the cliff face."""

    placements: list[Placement] = []
    for i in range(int(np.floor(35 * density))):
        seed = 500 + i * 5 + seed_offset
        x = -190.0 + seeded_random(seed) * 380.0
        if OUTCROP_EXCLUSION[0] < x < OUTCROP_EXCLUSION[1]:
            continue

        y = -5.0 + seeded_random(seed + 1) * 48.0
        z = 155.0 + seeded_random(seed + 2) * 5.0
        size = 3.0 + seeded_random(seed + 3) * 7.0
        tilt = 500 + i * 9 + seed_offset
        placements.append(
            Placement(
                index=i,
                position=(float(x), float(y), float(z)),
                rotation=(
                    float(seeded_random(tilt) * 0.25 - 0.125),
                    float(seeded_random(tilt + 1) * np.pi),
                    float(seeded_random(tilt + 2) * 0.25 - 0.125),
                ),
                scale=(float(size * 0.8), float(size * 0.5), float(size * 1.8)),
                size=float(size),
            )
        )
    return placements


def beach_rock_placements(density: float = 1.0, beach_width: float = 100.0, seed_offset: float = 0.0) -> list[Placement]:
    """Small pebbles half buried in the sand."""

    placements: list[Placement] = []
    for i in range(int(np.floor(15 * density))):
        seed = 900 + i + seed_offset
        x = 50.0 + seeded_random(seed) * beach_width
        z = 118.0 + seeded_random(seed + 1) * 20.0
        size = 0.5 + seeded_random(seed + 2) * 1.5
        tilt = 920 + i + seed_offset
        placements.append(
            Placement(
                index=i,
                position=(float(x), float(-4.0 - size * 0.3), float(z)),
                rotation=(
                    float(seeded_random(tilt) * 0.3),
                    float(seeded_random(tilt + 1) * np.pi),
                    float(seeded_random(tilt + 2) * 0.3),
                ),
                scale=(float(size * 1.2), float(size * 0.5), float(size)),
                size=float(size),
                detail=0,
            )
        )
    return placements


@dataclass(frozen=True)
class ConnectorSpec:
    position: Vec3
    size: float
    seed: float
    flatten: float
    stretch_x: float
    stretch_z: float


# Irregular masses joining the fort promontory to the main cliff.
FORT_CONNECTORS: tuple[ConnectorSpec, ...] = (
    ConnectorSpec((-80.0, 8.0, 158.0), 22.0, 420.0, 0.35, 1.3, 1.4),
    ConnectorSpec((-60.0, 12.0, 155.0), 18.0, 425.0, 0.4, 1.2, 1.3),
    ConnectorSpec((-100.0, 10.0, 155.0), 20.0, 430.0, 0.35, 1.3, 1.2),
    ConnectorSpec((-75.0, 0.0, 150.0), 18.0, 435.0, 0.3, 1.4, 1.3),
    ConnectorSpec((-90.0, 5.0, 148.0), 16.0, 440.0, 0.35, 1.2, 1.4),
    ConnectorSpec((-50.0, 15.0, 158.0), 15.0, 445.0, 0.45, 1.1, 1.2),
    ConnectorSpec((-110.0, 12.0, 158.0), 17.0, 450.0, 0.4, 1.2, 1.1),
    ConnectorSpec((-70.0, 18.0, 162.0), 14.0, 455.0, 0.5, 1.0, 1.3),
    ConnectorSpec((-95.0, 15.0, 162.0), 16.0, 460.0, 0.45, 1.1, 1.2),
    ConnectorSpec((-65.0, -3.0, 145.0), 14.0, 465.0, 0.3, 1.5, 1.2),
    ConnectorSpec((-95.0, -2.0, 145.0), 15.0, 470.0, 0.3, 1.4, 1.3),
    ConnectorSpec((-80.0, -5.0, 140.0), 12.0, 475.0, 0.25, 1.6, 1.1),
)

_CONNECTOR_MATERIALS = ("rock", "cliff_dark", "cliff")


def fort_connector_features(seed_offset: float = 0.0) -> list[TerrainFeature]:
    features: list[TerrainFeature] = []
    for i, spec in enumerate(FORT_CONNECTORS):
        seed = spec.seed + seed_offset
        geometry = rock_mesh(spec.size, 3, seed, spec.flatten, spec.stretch_x, spec.stretch_z)
        features.append(
            TerrainFeature(
                geometry=geometry,
                position=spec.position,
                rotation=(
                    float(seeded_random(seed) * 0.25),
                    float(seeded_random(seed + 1) * TWO_PI),
                    float(seeded_random(seed + 2) * 0.25),
                ),
                material=_CONNECTOR_MATERIALS[i % 3],
            )
        )
    return features


def strata_bands(seed_offset: float = 0.0) -> list[StrataBand]:
    return [
        StrataBand(
            y=float(-5.0 + i * 9.0 + seeded_random(800 + i + seed_offset) * 4.0),
            thickness=float(0.8 + seeded_random(810 + i + seed_offset) * 0.6),
            material=STRATA_MATERIALS[i % 3],
        )
        for i in range(6)
    ]


class GeometryCache:
    """Explicit memo with one entry per slot.

    A slot is rebuilt only when its key (the tuple of parameters that
    determine the geometry) differs from the key it was last built with.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[tuple[Any, ...], Any]] = {}
        self.hits = 0
        self.misses = 0

    def memo(self, slot: str, key: tuple[Any, ...], factory: Callable[[], T]) -> T:
        entry = self._entries.get(slot)
        if entry is not None and entry[0] == key:
            self.hits += 1
            return entry[1]
        self.misses += 1
        logger.debug("Building %s for key %s", slot, key)
        value = factory()
        self._entries[slot] = (key, value)
        return value

    def clear(self) -> None:
        self._entries.clear()


@dataclass(frozen=True)
class ShoreScene:
    """Static coastal backdrop, grouped by feature type."""

    features: dict[str, tuple[TerrainFeature, ...]]
    strata: tuple[StrataBand, ...]
    config: ShoreConfig = field(default_factory=ShoreConfig)

    def feature_count(self) -> int:
        return sum(len(items) for items in self.features.values())


def build_shore(config: ShoreConfig | None = None, cache: GeometryCache | None = None) -> ShoreScene:
    """Assemble every shore feature for `config`, reusing cached geometry."""

    cfg = config or ShoreConfig()
    memo = cache or GeometryCache()
    offset = cfg.seed_offset

    main_cliff = memo.memo(
        "main_cliff",
        (cfg.cliff_height, cfg.cliff_steepness, offset),
        lambda: cliff_mesh(420.0, cfg.cliff_height, 100, 28, 0.0 + offset, cfg.cliff_steepness),
    )
    left_cliff = memo.memo(
        "left_cliff",
        (cfg.cliff_steepness, offset),
        lambda: cliff_mesh(140.0, 60.0, 35, 20, 100.0 + offset, cfg.cliff_steepness * 0.8),
    )
    right_cliff = memo.memo(
        "right_cliff",
        (cfg.cliff_steepness, offset),
        lambda: cliff_mesh(140.0, 60.0, 35, 20, 200.0 + offset, cfg.cliff_steepness * 0.8),
    )
    cliff_top = memo.memo("cliff_top", (), cliff_top_mesh)
    fort_main = memo.memo("fort_main", (offset,), lambda: rock_mesh(35.0, 4, 400.0 + offset, 0.3, 1.4, 1.2))
    fort_upper = memo.memo("fort_upper", (offset,), lambda: rock_mesh(25.0, 3, 410.0 + offset, 0.5, 1.5, 1.0))
    connectors = memo.memo("fort_connectors", (offset,), lambda: fort_connector_features(offset))
    beach = memo.memo("beach", (cfg.beach_width,), lambda: beach_mesh(cfg.beach_width, 25.0, 40, 15))

    unit_rocks = {detail: memo.memo(f"unit_rock_{detail}", (), lambda d=detail: _unit_rock(d)) for detail in (0, 1, 2)}

    water_rocks = memo.memo(
        "water_rocks",
        (cfg.rock_density, offset),
        lambda: tuple(
            TerrainFeature(unit_rocks[p.detail], p.position, p.rotation, p.scale, "rock")
            for p in water_rock_placements(cfg.rock_density, offset)
        ),
    )
    outcrops = memo.memo(
        "outcrops",
        (cfg.rock_density, offset),
        lambda: tuple(
            TerrainFeature(unit_rocks[p.detail], p.position, p.rotation, p.scale, "rock_light" if p.index % 3 == 0 else "rock")
            for p in outcrop_placements(cfg.rock_density, offset)
        ),
    )
    beach_rocks = memo.memo(
        "beach_rocks",
        (cfg.rock_density, cfg.beach_width, offset),
        lambda: tuple(
            TerrainFeature(unit_rocks[p.detail], p.position, p.rotation, p.scale, "rock_dark")
            for p in beach_rock_placements(cfg.rock_density, cfg.beach_width, offset)
        ),
    )
    strata = memo.memo("strata", (offset,), lambda: tuple(strata_bands(offset)))

    features: dict[str, tuple[TerrainFeature, ...]] = {
        "main_cliff": (
            TerrainFeature(main_cliff, (0.0, 22.0, 158.0), material="cliff"),
            TerrainFeature(main_cliff, (0.0, 20.0, 168.0), scale=(1.02, 0.98, 1.0), material="cliff_dark"),
            TerrainFeature(main_cliff, (0.0, 18.0, 178.0), scale=(1.04, 0.96, 1.0), material="cliff_warm"),
        ),
        "left_cliff": (
            TerrainFeature(left_cliff, (-240.0, 24.0, 178.0), (0.0, 0.35, 0.0), material="cliff"),
            TerrainFeature(left_cliff, (-238.0, 22.0, 188.0), (0.0, 0.35, 0.0), (1.02, 0.95, 1.0), "cliff_dark"),
        ),
        "right_cliff": (
            TerrainFeature(right_cliff, (240.0, 24.0, 178.0), (0.0, -0.35, 0.0), material="cliff"),
            TerrainFeature(right_cliff, (238.0, 22.0, 188.0), (0.0, -0.35, 0.0), (1.02, 0.95, 1.0), "cliff_dark"),
        ),
        "cliff_top": (TerrainFeature(cliff_top, (0.0, 48.0, 210.0), material="cliff_light"),),
        "fort": (
            TerrainFeature(fort_main, (-80.0, 22.0, 155.0), material="rock"),
            TerrainFeature(fort_upper, (-80.0, 35.0, 158.0), material="cliff_dark"),
        ),
        "fort_connectors": tuple(connectors),
        "outcrops": outcrops,
        "water_rocks": water_rocks,
        "beach_rocks": beach_rocks,
        "beach": (TerrainFeature(beach, (100.0, -2.0, 138.0), (0.0, 0.08, 0.0), material="sand_dry"),),
    }
    return ShoreScene(features=features, strata=strata, config=cfg)


def _unit_rock(detail: int) -> Mesh:
    positions = icosahedron_positions(1.0, detail)
    return build_mesh(positions, soup_indices(positions.shape[0]))
