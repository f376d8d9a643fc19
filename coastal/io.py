"""Output serialization for generated surfaces and shore meshes."""

from __future__ import annotations

from contextlib import contextmanager
import json
from pathlib import Path
import shutil
import tempfile
from typing import Any, Iterator

import numpy as np
from PIL import Image

from coastal.terrain import TerrainFeature


def scene_output_dir(out_root: str | Path, preset: str, segments: int, *, overwrite: bool) -> Path:
    """`out_root/<preset>/grid<segments>`, created if missing.

    An existing directory that already holds files is only accepted with
    `overwrite`.
    """

    target = Path(out_root) / preset / f"grid{segments}"
    if not overwrite and target.is_dir() and next(target.iterdir(), None) is not None:
        raise FileExistsError(f"{target} already holds scene output; pass --overwrite to replace it.")
    target.mkdir(parents=True, exist_ok=True)
    return target


def clear_output_dir(target: Path, *, out_root: Path, project_root: Path) -> None:
    """Remove everything inside `target`.

    Refuses unless `target` lies under `out_root` and `out_root` under
    `project_root`.
    """

    root = out_root.resolve()
    resolved = target.resolve()
    if not resolved.is_relative_to(root) or not root.is_relative_to(project_root.resolve()):
        raise ValueError(f"Refusing to clear {resolved}: outside {root} or the working directory")

    resolved.mkdir(parents=True, exist_ok=True)
    for child in resolved.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


@contextmanager
def staged_output(target: Path, *, out_root: Path, project_root: Path) -> Iterator[Path]:
    """Yield a scratch directory beside `target`.

    Files written there replace the contents of `target` only when the block
    exits cleanly; a failed run leaves the previous output untouched.
    """

    stage = Path(tempfile.mkdtemp(prefix=".staging-", dir=str(target.parent)))
    try:
        yield stage
        clear_output_dir(target, out_root=out_root, project_root=project_root)
        for child in sorted(stage.iterdir()):
            child.replace(target / child.name)
    finally:
        shutil.rmtree(stage, ignore_errors=True)


def write_surface_npz(path: str | Path, positions: np.ndarray, colors: np.ndarray, indices: np.ndarray) -> None:
    np.savez(Path(path), positions=positions.astype(np.float32), colors=colors.astype(np.float32), indices=indices)


def write_features_npz(path: str | Path, features: tuple[TerrainFeature, ...] | list[TerrainFeature]) -> None:
    """Store distinct geometries once plus a (K, 9) position/rotation/scale table."""

    arrays: dict[str, np.ndarray] = {}
    mesh_slots: dict[int, int] = {}
    geometry_index: list[int] = []
    for feature in features:
        key = id(feature.geometry)
        if key not in mesh_slots:
            slot = len(mesh_slots)
            mesh_slots[key] = slot
            mesh = feature.geometry
            arrays[f"mesh{slot}_positions"] = np.asarray(mesh.positions)
            arrays[f"mesh{slot}_indices"] = np.asarray(mesh.indices)
            arrays[f"mesh{slot}_normals"] = np.asarray(mesh.normals)
            if mesh.colors is not None:
                arrays[f"mesh{slot}_colors"] = np.asarray(mesh.colors)
        geometry_index.append(mesh_slots[key])

    transforms = [(*f.position, *f.rotation, *f.scale) for f in features]
    arrays["geometry_index"] = np.asarray(geometry_index, dtype=np.int32)
    arrays["transforms"] = np.asarray(transforms, dtype=np.float32).reshape(-1, 9)
    arrays["materials"] = np.asarray([f.material for f in features], dtype=str)
    np.savez(Path(path), **arrays)


def write_png_u8(path: str | Path, raster_u8: np.ndarray) -> None:
    image = Image.fromarray(raster_u8.astype(np.uint8))
    image.save(Path(path))


def write_png_rgb(path: str | Path, raster_rgb: np.ndarray) -> None:
    image = Image.fromarray(raster_rgb.astype(np.uint8))
    image.save(Path(path))


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    text = json.dumps(payload, indent=2, sort_keys=True)
    Path(path).write_text(text + "\n", encoding="utf-8")
