"""Theme color palettes for shore materials."""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from matplotlib.colors import to_rgb

from coastal.config import THEMES

if TYPE_CHECKING:
    from coastal.terrain import TerrainFeature


# Layered limestone and sandstone in warm earth tones.
SHORE_PALETTES: dict[str, dict[str, str]] = {
    "dark": {
        "cliff": "#3a3530",
        "cliff_light": "#4a4540",
        "cliff_dark": "#2a2520",
        "cliff_warm": "#403028",
        "strata_light": "#4a4238",
        "strata_dark": "#302820",
        "strata_ochre": "#453525",
        "sand_dry": "#5a5040",
        "sand_wet": "#3a3528",
        "sand_waterline": "#2a2820",
        "rock": "#2a2520",
        "rock_light": "#3a3530",
        "rock_dark": "#1a1510",
        "underwater_sand": "#282520",
        "underwater_rock": "#1a1815",
    },
    "light": {
        "cliff": "#b8a890",
        "cliff_light": "#c8b8a0",
        "cliff_dark": "#a09080",
        "cliff_warm": "#c0a080",
        "strata_light": "#d0c0a8",
        "strata_dark": "#988870",
        "strata_ochre": "#c8a070",
        "sand_dry": "#e8d8b8",
        "sand_wet": "#a89870",
        "sand_waterline": "#887858",
        "rock": "#807060",
        "rock_light": "#9a8a70",
        "rock_dark": "#605040",
        "underwater_sand": "#706050",
        "underwater_rock": "#504030",
    },
}

STRATA_MATERIALS = ("strata_light", "strata_dark", "strata_ochre")


@lru_cache(maxsize=64)
def hex_to_rgb(color: str) -> tuple[float, float, float]:
    """Parse any matplotlib color spec into an (r, g, b) tuple in [0, 1]."""

    return to_rgb(color)


def shore_palette(theme: str) -> dict[str, tuple[float, float, float]]:
    if theme not in THEMES:
        raise ValueError(f"theme must be one of {', '.join(THEMES)}")
    return {name: hex_to_rgb(value) for name, value in SHORE_PALETTES[theme].items()}


def feature_color(feature: TerrainFeature, theme: str) -> tuple[float, float, float]:
    """Resolve a feature's material key against the theme palette."""

    return shore_palette(theme)[feature.material]
