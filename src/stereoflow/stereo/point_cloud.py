"""Colored 3D point cloud keyed by quantized position."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import numpy as np


class PointCloud:
    """Mapping from 3D coordinate to an 8-bit RGB color.

    Positions are quantized to ``resolution`` before being used as keys, so
    two points closer than the resolution share a slot. Writing to an
    occupied slot replaces the stored point and color (no averaging).
    """

    def __init__(self, resolution: float = 1e-6) -> None:
        """Initialize an empty cloud.

        Args:
            resolution: Spatial quantization step for keys (meters)
        """
        if resolution <= 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        self._resolution = float(resolution)
        self._data: dict[tuple[int, int, int], tuple[np.ndarray, np.ndarray]] = {}

    def _key(self, point: np.ndarray) -> tuple[int, int, int]:
        q = np.round(np.asarray(point, dtype=np.float64) / self._resolution)
        return int(q[0]), int(q[1]), int(q[2])

    def set(self, point: np.ndarray, color: np.ndarray) -> None:
        """Insert or overwrite a single point.

        Args:
            point: (3,) position
            color: (3,) RGB color (uint8)
        """
        p = np.asarray(point, dtype=np.float64).reshape(3)
        c = np.asarray(color, dtype=np.uint8).reshape(3)
        self._data[self._key(p)] = (p, c)

    def update(self, points: np.ndarray, colors: np.ndarray) -> None:
        """Insert many points in order; later points win on collision.

        Args:
            points: (N, 3) positions
            colors: (N, 3) RGB colors (uint8)
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        colors = np.asarray(colors, dtype=np.uint8).reshape(-1, 3)
        if len(points) != len(colors):
            raise ValueError(
                f"points and colors must have the same length: "
                f"{len(points)} != {len(colors)}"
            )

        keys = np.round(points / self._resolution).astype(np.int64)
        for key, point, color in zip(map(tuple, keys.tolist()), points, colors):
            self._data[key] = (point, color)

    def get(self, point: np.ndarray) -> np.ndarray | None:
        """Return the color stored at ``point``, or None if empty."""
        entry = self._data.get(self._key(point))
        return None if entry is None else entry[1]

    def __contains__(self, point: object) -> bool:
        return self._key(np.asarray(point)) in self._data

    def __len__(self) -> int:
        """Return number of stored points."""
        return len(self._data)

    def __iter__(self) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        """Iterate over ``(point, color)`` pairs."""
        return iter(self._data.values())

    @property
    def points(self) -> np.ndarray:
        """Return (N, 3) float64 array of positions."""
        if not self._data:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([p for p, _ in self._data.values()], dtype=np.float64)

    @property
    def colors(self) -> np.ndarray:
        """Return (N, 3) uint8 array of colors, aligned with ``points``."""
        if not self._data:
            return np.empty((0, 3), dtype=np.uint8)
        return np.array([c for _, c in self._data.values()], dtype=np.uint8)

    @property
    def resolution(self) -> float:
        """Return key quantization step."""
        return self._resolution

    def bounds(self) -> tuple[np.ndarray, np.ndarray]:
        """Return ``(min_xyz, max_xyz)`` of the stored points.

        Raises:
            ValueError: If the cloud is empty
        """
        if not self._data:
            raise ValueError("Cannot compute bounds of an empty point cloud")
        points = self.points
        return points.min(axis=0), points.max(axis=0)

    def save_ply(self, output_path: str | Path) -> None:
        """Write the cloud as an ASCII PLY file with per-vertex colors.

        Reference: PLY file format
        https://en.wikipedia.org/wiki/PLY_(file_format)
        """
        points = self.points
        colors = self.colors

        with open(output_path, "w") as f:
            f.write("ply\n")
            f.write("format ascii 1.0\n")
            f.write(f"element vertex {len(points)}\n")
            f.write("property float x\n")
            f.write("property float y\n")
            f.write("property float z\n")
            f.write("property uchar red\n")
            f.write("property uchar green\n")
            f.write("property uchar blue\n")
            f.write("end_header\n")

            for p, c in zip(points, colors):
                f.write(f"{p[0]:.6f} {p[1]:.6f} {p[2]:.6f} {c[0]} {c[1]} {c[2]}\n")
