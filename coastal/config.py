"""Configuration models for the ocean surface and shore generation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any

from matplotlib.colors import is_color_like


THEMES = ("dark", "light")

DEFAULT_OCEAN_SIZE = 300.0
DEFAULT_OCEAN_SEGMENTS = 200


class ConfigError(ValueError):
    """Raised when a configuration value is outside its allowed range."""


@dataclass(frozen=True)
class WaveConfig:
    """Immutable snapshot of wave, wind and display parameters.

    Directions are in degrees (0 = waves travelling from the back of the grid
    toward the shore). Heights and lengths are in meters, periods in seconds.
    """

    wave_height: float = 8.0
    wave_period: float = 14.0
    wave_direction: float = 0.0
    wave_length: float = 200.0
    wave_speed: float = 1.0

    secondary_wave_height: float = 2.0
    secondary_wave_period: float = 8.0
    secondary_wave_direction: float = 30.0

    wind_speed: float = 15.0
    wind_direction: float = 45.0
    wind_chop_intensity: float = 0.3

    canyon_amplification: float = 2.0
    canyon_focus_width: float = 0.4
    canyon_depth_effect: float = 0.7

    foam_threshold: float = 0.6
    foam_intensity: float = 0.5
    water_clarity: float = 0.7

    wave_color: str = "#2a6f97"
    wireframe: bool = True
    animate_waves: bool = True
    time_scale: float = 1.0
    theme: str = "dark"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OceanGridConfig:
    """Extent and resolution of the square ocean base grid."""

    size: float = DEFAULT_OCEAN_SIZE
    segments: int = DEFAULT_OCEAN_SEGMENTS


@dataclass(frozen=True)
class ShoreConfig:
    """Shape parameters for the static coastal backdrop."""

    cliff_height: float = 55.0
    cliff_steepness: float = 18.0
    beach_width: float = 100.0
    rock_density: float = 1.0
    seed_offset: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ConfigLimit:
    min: float
    max: float
    step: float


CONFIG_LIMITS: dict[str, ConfigLimit] = {
    "wave_height": ConfigLimit(0.5, 30.0, 0.5),
    "wave_period": ConfigLimit(4.0, 25.0, 1.0),
    "wave_direction": ConfigLimit(0.0, 360.0, 5.0),
    "wave_length": ConfigLimit(50.0, 500.0, 10.0),
    "wave_speed": ConfigLimit(0.1, 3.0, 0.1),
    "secondary_wave_height": ConfigLimit(0.0, 10.0, 0.5),
    "secondary_wave_period": ConfigLimit(4.0, 15.0, 1.0),
    "secondary_wave_direction": ConfigLimit(0.0, 360.0, 5.0),
    "wind_speed": ConfigLimit(0.0, 60.0, 1.0),
    "wind_direction": ConfigLimit(0.0, 360.0, 5.0),
    "wind_chop_intensity": ConfigLimit(0.0, 1.0, 0.05),
    "canyon_amplification": ConfigLimit(1.0, 4.0, 0.1),
    "canyon_focus_width": ConfigLimit(0.1, 1.0, 0.05),
    "canyon_depth_effect": ConfigLimit(0.0, 1.0, 0.05),
    "foam_threshold": ConfigLimit(0.0, 1.0, 0.05),
    "foam_intensity": ConfigLimit(0.0, 1.0, 0.05),
    "water_clarity": ConfigLimit(0.0, 1.0, 0.05),
    "time_scale": ConfigLimit(0.1, 3.0, 0.1),
}


_DEFAULT = WaveConfig()

PRESETS: dict[str, WaveConfig] = {
    "calm": replace(
        _DEFAULT,
        wave_height=2.0,
        wave_period=10.0,
        wind_speed=5.0,
        wind_chop_intensity=0.1,
        canyon_amplification=1.2,
        foam_intensity=0.2,
    ),
    "moderate": _DEFAULT,
    "big": replace(
        _DEFAULT,
        wave_height=15.0,
        wave_period=16.0,
        wind_speed=25.0,
        wind_chop_intensity=0.5,
        canyon_amplification=2.5,
        foam_intensity=0.7,
    ),
    "extreme": replace(
        _DEFAULT,
        wave_height=25.0,
        wave_period=20.0,
        secondary_wave_height=5.0,
        wind_speed=40.0,
        wind_chop_intensity=0.8,
        canyon_amplification=3.0,
        foam_intensity=0.9,
        canyon_depth_effect=0.9,
    ),
}


def apply_preset(config: WaveConfig, name: str) -> WaveConfig:
    """Return preset `name`, keeping the display color and theme of `config`."""

    try:
        preset = PRESETS[name]
    except KeyError:
        options = ", ".join(sorted(PRESETS))
        raise ConfigError(f"Unknown preset {name!r}. Options: {options}.") from None
    return replace(preset, wave_color=config.wave_color, theme=config.theme)


def validate_wave_config(config: WaveConfig) -> WaveConfig:
    """Check every bounded field against CONFIG_LIMITS and return `config`."""

    problems: list[str] = []
    for name, limit in CONFIG_LIMITS.items():
        value = getattr(config, name)
        if not limit.min <= value <= limit.max:
            problems.append(f"{name}={value} outside [{limit.min}, {limit.max}]")
    if config.theme not in THEMES:
        problems.append(f"theme={config.theme!r} not one of {', '.join(THEMES)}")
    if not is_color_like(config.wave_color):
        problems.append(f"wave_color={config.wave_color!r} is not a color")
    if problems:
        raise ConfigError("Invalid wave configuration: " + "; ".join(problems))
    return config


def clamp_to_limits(config: WaveConfig) -> WaveConfig:
    """Return a copy of `config` with bounded fields clamped into their limits."""

    changes = {
        name: min(max(float(getattr(config, name)), limit.min), limit.max)
        for name, limit in CONFIG_LIMITS.items()
    }
    return replace(config, **changes)


def parse_overrides(items: list[str]) -> dict[str, Any]:
    """Convert `FIELD=VALUE` strings into typed WaveConfig keyword arguments."""

    types = {f.name: f.type for f in fields(WaveConfig)}
    overrides: dict[str, Any] = {}
    for item in items:
        name, sep, raw = item.partition("=")
        name = name.strip().replace("-", "_")
        if not sep or not name:
            raise ConfigError(f"Override must look like FIELD=VALUE, got {item!r}.")
        if name not in types:
            raise ConfigError(f"Unknown wave config field {name!r}.")
        overrides[name] = _coerce(name, types[name], raw.strip())
    return overrides


def _coerce(name: str, type_name: Any, raw: str) -> Any:
    type_name = getattr(type_name, "__name__", type_name)
    if type_name == "bool":
        lowered = raw.lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ConfigError(f"{name} expects a boolean, got {raw!r}.")
    if type_name == "float":
        try:
            return float(raw)
        except ValueError:
            raise ConfigError(f"{name} expects a number, got {raw!r}.") from None
    return raw


@dataclass(frozen=True)
class SceneConfig:
    """Everything a CLI run needs to rebuild the same ocean and shore."""

    wave: WaveConfig = field(default_factory=WaveConfig)
    grid: OceanGridConfig = field(default_factory=OceanGridConfig)
    shore: ShoreConfig = field(default_factory=ShoreConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
