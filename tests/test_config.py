from __future__ import annotations

from dataclasses import replace

import pytest

from coastal.config import (
    CONFIG_LIMITS,
    PRESETS,
    ConfigError,
    SceneConfig,
    WaveConfig,
    apply_preset,
    clamp_to_limits,
    parse_overrides,
    validate_wave_config,
)


def test_defaults_and_presets_are_valid() -> None:
    validate_wave_config(WaveConfig())
    for name, preset in PRESETS.items():
        assert validate_wave_config(preset) is preset, name


def test_apply_preset_keeps_display_settings() -> None:
    current = replace(WaveConfig(), wave_color="#ff0000", theme="light", wave_height=3.0)

    extreme = apply_preset(current, "extreme")

    assert extreme.wave_height == 25.0
    assert extreme.secondary_wave_height == 5.0
    assert extreme.canyon_depth_effect == 0.9
    assert extreme.wave_color == "#ff0000"
    assert extreme.theme == "light"


def test_apply_preset_unknown_name() -> None:
    with pytest.raises(ConfigError, match="Unknown preset"):
        apply_preset(WaveConfig(), "tsunami")


def test_validate_reports_every_problem() -> None:
    bad = WaveConfig(wave_length=0.0, foam_intensity=2.0, theme="sepia", wave_color="not-a-color")

    with pytest.raises(ConfigError) as exc:
        validate_wave_config(bad)

    message = str(exc.value)
    for fragment in ("wave_length", "foam_intensity", "theme", "wave_color"):
        assert fragment in message


def test_config_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        validate_wave_config(WaveConfig(wave_period=0.0))


def test_clamp_to_limits() -> None:
    clamped = clamp_to_limits(WaveConfig(wave_height=100.0, foam_intensity=-1.0, time_scale=0.0))

    assert clamped.wave_height == CONFIG_LIMITS["wave_height"].max
    assert clamped.foam_intensity == 0.0
    assert clamped.time_scale == CONFIG_LIMITS["time_scale"].min
    validate_wave_config(clamped)


def test_parse_overrides_coerces_types() -> None:
    overrides = parse_overrides(["wave_height=12", "animate-waves=off", "theme=light", " wave_color = #123456 "])

    assert overrides == {
        "wave_height": 12.0,
        "animate_waves": False,
        "theme": "light",
        "wave_color": "#123456",
    }
    assert isinstance(overrides["wave_height"], float)


@pytest.mark.parametrize(
    "item,fragment",
    [
        ("wave_height", "FIELD=VALUE"),
        ("=3", "FIELD=VALUE"),
        ("swell=3", "Unknown"),
        ("wave_height=big", "number"),
        ("wireframe=maybe", "boolean"),
    ],
)
def test_parse_overrides_rejects_bad_items(item: str, fragment: str) -> None:
    with pytest.raises(ConfigError, match=fragment):
        parse_overrides([item])


def test_scene_config_round_trips_to_dict() -> None:
    payload = SceneConfig().to_dict()

    assert payload["wave"]["wave_height"] == 8.0
    assert payload["grid"] == {"size": 300.0, "segments": 200}
    assert payload["shore"]["cliff_height"] == 55.0
