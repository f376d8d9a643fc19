"""CLI entry point for ocean surface and shore generation."""

from __future__ import annotations

import argparse
from dataclasses import replace
from datetime import datetime, timezone
import logging
from pathlib import Path
import platform
import time

import numpy as np

from coastal.config import (
    DEFAULT_OCEAN_SEGMENTS,
    DEFAULT_OCEAN_SIZE,
    PRESETS,
    ConfigError,
    OceanGridConfig,
    SceneConfig,
    ShoreConfig,
    WaveConfig,
    apply_preset,
    parse_overrides,
    validate_wave_config,
)
from coastal.derive import color_raster_u8, foam_coverage, height_preview_u8, height_raster, hillshade
from coastal.forecast import apply_forecast, load_forecast, nearest_forecast
from coastal.io import (
    scene_output_dir,
    staged_output,
    write_features_npz,
    write_json,
    write_png_rgb,
    write_png_u8,
    write_surface_npz,
)
from coastal.ocean import OceanGrid
from coastal.runtime import OceanAnimator
from coastal.terrain import build_shore


logger = logging.getLogger("coastal.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Deterministic procedural ocean surface and coastline generator")
    parser.add_argument("--preset", choices=sorted(PRESETS), default="moderate", help="Sea state preset")
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="FIELD=VALUE",
        help="Override a wave config field (e.g. --set wave_height=12); repeatable",
    )
    parser.add_argument("--use-forecast", action="store_true", help="Apply the forecast entry nearest to --forecast-time")
    parser.add_argument("--forecast-wave", type=Path, help="Saved Windguru wave forecast text")
    parser.add_argument("--forecast-wind", type=Path, help="Saved Windguru wind forecast text")
    parser.add_argument(
        "--forecast-time",
        type=datetime.fromisoformat,
        default=None,
        help="ISO time used to pick the forecast entry (default: now)",
    )
    parser.add_argument("--frames", type=int, default=60, help="Number of animation ticks to run")
    parser.add_argument("--dt", type=float, default=1.0 / 60.0, help="Seconds per animation tick")
    parser.add_argument("--size", type=float, default=DEFAULT_OCEAN_SIZE, help="Ocean grid extent in meters")
    parser.add_argument("--segments", type=int, default=DEFAULT_OCEAN_SEGMENTS, help="Ocean grid segments per side")
    parser.add_argument("--rock-density", type=float, default=1.0, help="Multiplier for procedural rock counts")
    parser.add_argument("--seed-offset", type=float, default=0.0, help="Shift applied to every terrain seed")
    parser.add_argument("--out", default="out", help="Output root directory")
    parser.add_argument("--overwrite", action="store_true", help="Overwrite files in existing output directory")
    parser.add_argument(
        "--json",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Write metadata JSON files",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    if args.segments < 1:
        parser.error("--segments must be >= 1")
    if args.size <= 0:
        parser.error("--size must be positive")
    if args.frames < 1:
        parser.error("--frames must be >= 1")
    if args.dt < 0:
        parser.error("--dt must be non-negative")
    if args.rock_density < 0:
        parser.error("--rock-density must be non-negative")

    if args.forecast_wind is not None and args.forecast_wave is None:
        parser.error("--forecast-wind requires --forecast-wave")

    wave_text = wind_text = None
    if args.use_forecast:
        try:
            wave_text = _read_text(args.forecast_wave)
            wind_text = _read_text(args.forecast_wind)
        except OSError as exc:
            parser.error(f"cannot read forecast file: {exc}")

    forecast_error = None
    forecast_label = None
    forecast_time = args.forecast_time or datetime.now()
    try:
        wave = apply_preset(WaveConfig(), args.preset)
        if args.use_forecast:
            forecast = load_forecast(wave_text, wind_text, today=forecast_time.date())
            forecast_error = forecast.error
            entry = nearest_forecast(forecast.entries, forecast_time)
            if entry is not None:
                wave = apply_forecast(wave, entry)
                forecast_label = entry.datetime
                logger.info("Applied forecast entry %s", entry.datetime)
        wave = replace(wave, **parse_overrides(args.overrides))
        validate_wave_config(wave)
    except ConfigError as exc:
        parser.error(str(exc))

    scene_config = SceneConfig(
        wave=wave,
        grid=OceanGridConfig(size=args.size, segments=args.segments),
        shore=ShoreConfig(rock_density=args.rock_density, seed_offset=args.seed_offset),
    )

    ocean_start = time.perf_counter()
    grid = OceanGrid.create(scene_config.grid)
    animator = OceanAnimator(grid)
    simulation_time = animator.run(args.frames, args.dt, wave)
    ocean_seconds = time.perf_counter() - ocean_start

    shore_start = time.perf_counter()
    shore = build_shore(scene_config.shore)
    shore_seconds = time.perf_counter() - shore_start

    surface = animator.surface
    heights = height_raster(grid, surface.heights())
    coverage = foam_coverage(surface.foam())

    out_dir = scene_output_dir(args.out, args.preset, args.segments, overwrite=args.overwrite)
    with staged_output(out_dir, out_root=Path(args.out), project_root=Path.cwd()) as stage_dir:
        write_png_u8(stage_dir / "ocean_height.png", height_preview_u8(heights))
        write_png_rgb(stage_dir / "ocean_color.png", color_raster_u8(grid, surface.colors))
        write_png_u8(stage_dir / "ocean_hillshade.png", hillshade(heights, spacing=grid.spacing))
        write_surface_npz(stage_dir / "ocean_surface.npz", surface.positions, surface.colors, grid.indices)
        for name, features in shore.features.items():
            write_features_npz(stage_dir / f"terrain_{name}.npz", features)

        if args.json:
            timestamp = datetime.now(timezone.utc).isoformat()
            deterministic_meta = {
                "preset": args.preset,
                "config": scene_config.to_dict(),
                "frames": args.frames,
                "dt": args.dt,
                "simulation_time": simulation_time,
                "forecast_entry": forecast_label,
                "ocean": {
                    "vertex_count": grid.vertex_count,
                    "min_height": float(np.min(heights)),
                    "max_height": float(np.max(heights)),
                    "foam_coverage": coverage,
                },
                "shore": {
                    "feature_counts": {name: len(items) for name, items in shore.features.items()},
                    "vertex_counts": {
                        name: sum(f.geometry.vertex_count for f in items) for name, items in shore.features.items()
                    },
                    "strata": [
                        {"y": band.y, "thickness": band.thickness, "material": band.material}
                        for band in shore.strata
                    ],
                },
            }
            meta = {
                **deterministic_meta,
                "generated_at_utc": timestamp,
                "ocean_seconds": ocean_seconds,
                "shore_seconds": shore_seconds,
                "forecast_error": forecast_error,
                "python_version": platform.python_version(),
                "numpy_version": np.__version__,
            }
            write_json(stage_dir / "deterministic_meta.json", deterministic_meta)
            write_json(stage_dir / "meta.json", meta)

    print(f"Generated scene: {out_dir}")
    print(
        "Ocean: "
        f"{grid.vertex_count} vertices, t={simulation_time:.3f}s after {args.frames} frames, "
        f"height [{float(np.min(heights)):.2f}, {float(np.max(heights)):.2f}] m, "
        f"foam coverage {coverage * 100.0:.2f}%"
    )
    print(f"Shore: {shore.feature_count()} features, {len(shore.strata)} strata bands")
    print(
        f"Timing: ocean {ocean_seconds:.3f} s "
        f"({ocean_seconds / args.frames * 1000.0:.2f} ms/frame), shore {shore_seconds:.3f} s"
    )
    if forecast_error:
        print(f"Forecast: {forecast_error}")
    file_count = sum(1 for child in out_dir.iterdir() if child.is_file())
    print(f"Output files: {file_count}")
    return 0


def _read_text(path: Path | None) -> str | None:
    if path is None:
        return None
    return path.read_text(encoding="utf-8")


if __name__ == "__main__":
    raise SystemExit(main())
