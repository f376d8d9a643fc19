"""Base mesh primitives: segmented planes, subdivided icosahedra, normals."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


_GOLDEN = (1.0 + np.sqrt(5.0)) / 2.0

_ICOSAHEDRON_VERTICES = np.array(
    [
        [-1.0, _GOLDEN, 0.0],
        [1.0, _GOLDEN, 0.0],
        [-1.0, -_GOLDEN, 0.0],
        [1.0, -_GOLDEN, 0.0],
        [0.0, -1.0, _GOLDEN],
        [0.0, 1.0, _GOLDEN],
        [0.0, -1.0, -_GOLDEN],
        [0.0, 1.0, -_GOLDEN],
        [_GOLDEN, 0.0, -1.0],
        [_GOLDEN, 0.0, 1.0],
        [-_GOLDEN, 0.0, -1.0],
        [-_GOLDEN, 0.0, 1.0],
    ],
    dtype=np.float64,
)

_ICOSAHEDRON_FACES = np.array(
    [
        [0, 11, 5], [0, 5, 1], [0, 1, 7], [0, 7, 10], [0, 10, 11],
        [1, 5, 9], [5, 11, 4], [11, 10, 2], [10, 7, 6], [7, 1, 8],
        [3, 9, 4], [3, 4, 2], [3, 2, 6], [3, 6, 8], [3, 8, 9],
        [4, 9, 5], [2, 4, 11], [6, 2, 10], [8, 6, 7], [9, 8, 1],
    ],
    dtype=np.int32,
)


@dataclass(frozen=True)
class Mesh:
    """Static triangle mesh. Arrays are read-only once built."""

    positions: np.ndarray
    indices: np.ndarray
    normals: np.ndarray
    colors: np.ndarray | None = None

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.shape[0])


def plane_positions(width: float, height: float, seg_x: int, seg_y: int) -> np.ndarray:
    """Vertex lattice of a plane in XY, row-major from +height/2 down to -height/2."""

    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")
    if seg_x < 1 or seg_y < 1:
        raise ValueError("seg_x and seg_y must be >= 1")

    xs = np.arange(seg_x + 1, dtype=np.float64) * (width / seg_x) - width / 2.0
    ys = height / 2.0 - np.arange(seg_y + 1, dtype=np.float64) * (height / seg_y)
    positions = np.zeros(((seg_x + 1) * (seg_y + 1), 3), dtype=np.float64)
    positions[:, 0] = np.tile(xs, seg_y + 1)
    positions[:, 1] = np.repeat(ys, seg_x + 1)
    return positions


def plane_indices(seg_x: int, seg_y: int) -> np.ndarray:
    """Two triangles per lattice cell, matching `plane_positions` ordering."""

    row = seg_x + 1
    iy, ix = np.meshgrid(np.arange(seg_y), np.arange(seg_x), indexing="ij")
    a = (ix + row * iy).ravel()
    b = (ix + row * (iy + 1)).ravel()
    c = (ix + 1 + row * (iy + 1)).ravel()
    d = (ix + 1 + row * iy).ravel()
    first = np.stack((a, b, d), axis=-1)
    second = np.stack((b, c, d), axis=-1)
    return np.stack((first, second), axis=1).reshape(-1, 3).astype(np.int32)


def icosahedron_positions(radius: float, detail: int) -> np.ndarray:
    """Un-indexed triangle soup of a subdivided icosahedron on a sphere.

    Each face edge is split into `detail + 1` segments, giving
    20 * (detail + 1) ** 2 triangles.
    """

    if radius <= 0:
        raise ValueError("radius must be positive")
    if detail < 0:
        raise ValueError("detail must be >= 0")

    cols = detail + 1
    triangles: list[np.ndarray] = []
    for face in _ICOSAHEDRON_FACES:
        a, b, c = _ICOSAHEDRON_VERTICES[face]
        lattice: list[list[np.ndarray]] = []
        for i in range(cols + 1):
            aj = a + (c - a) * (i / cols)
            bj = b + (c - b) * (i / cols)
            rows = cols - i
            row_points = []
            for j in range(rows + 1):
                if j == 0 and i == cols:
                    row_points.append(aj)
                else:
                    row_points.append(aj + (bj - aj) * (j / rows))
            lattice.append(row_points)

        for i in range(cols):
            for j in range(2 * (cols - i) - 1):
                k = j // 2
                if j % 2 == 0:
                    triangles.append(np.stack((lattice[i][k + 1], lattice[i + 1][k], lattice[i][k])))
                else:
                    triangles.append(np.stack((lattice[i][k + 1], lattice[i + 1][k + 1], lattice[i + 1][k])))

    points = np.concatenate(triangles, axis=0)
    lengths = np.linalg.norm(points, axis=1, keepdims=True)
    return points / lengths * radius


def soup_indices(vertex_count: int) -> np.ndarray:
    return np.arange(vertex_count, dtype=np.int32).reshape(-1, 3)


def rotate_x(positions: np.ndarray, angle: float) -> np.ndarray:
    """Rotate (N, 3) positions about the X axis by `angle` radians."""

    cos_a = np.cos(angle)
    sin_a = np.sin(angle)
    rotated = positions.astype(np.float64, copy=True)
    y = positions[:, 1]
    z = positions[:, 2]
    rotated[:, 1] = y * cos_a - z * sin_a
    rotated[:, 2] = y * sin_a + z * cos_a
    return rotated


def vertex_normals(positions: np.ndarray, indices: np.ndarray) -> np.ndarray:
    """Area-weighted unit vertex normals."""

    pts = positions.astype(np.float64, copy=False)
    v0 = pts[indices[:, 0]]
    v1 = pts[indices[:, 1]]
    v2 = pts[indices[:, 2]]
    face_normals = np.cross(v1 - v0, v2 - v0)

    normals = np.zeros_like(pts)
    for corner in range(3):
        np.add.at(normals, indices[:, corner], face_normals)

    lengths = np.linalg.norm(normals, axis=1, keepdims=True)
    lengths = np.where(lengths > 0.0, lengths, 1.0)
    return normals / lengths


def build_mesh(positions: np.ndarray, indices: np.ndarray, colors: np.ndarray | None = None) -> Mesh:
    """Freeze displaced positions into a read-only float32 mesh with normals."""

    normals = vertex_normals(positions, indices)
    arrays = [
        positions.astype(np.float32),
        indices.astype(np.int32, copy=True),
        normals.astype(np.float32),
    ]
    if colors is not None:
        arrays.append(colors.astype(np.float32))
    for array in arrays:
        array.setflags(write=False)
    return Mesh(*arrays)
