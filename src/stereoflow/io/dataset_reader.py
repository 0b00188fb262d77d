"""Stereo dataset reader for color camera images."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import cv2
import numpy as np


class DatasetReader:
    """Reader for stereo image sequences in the EuRoC-style directory layout.

    Expected structure::

        <dataset>/cam0/data.csv
        <dataset>/cam0/data/<timestamp>.png
        <dataset>/cam1/data/<timestamp>.png
    """

    def __init__(self, dataset_path: str) -> None:
        """Initialize reader with path to dataset.

        Args:
            dataset_path: Directory containing cam0/ and cam1/

        Raises:
            FileNotFoundError: If dataset path or required directories don't exist
            ValueError: If data.csv is empty or invalid
        """
        self.dataset_path = Path(dataset_path)

        self.cam0_path = self.dataset_path / "cam0"
        self.cam1_path = self.dataset_path / "cam1"
        self.cam0_data_path = self.cam0_path / "data"
        self.cam1_data_path = self.cam1_path / "data"

        self._validate_paths()

        self._image_list = self._load_image_list()

        if not self._image_list:
            raise ValueError(f"No images found in {self.cam0_path / 'data.csv'}")

        self._current_idx = 0

    def _validate_paths(self) -> None:
        """Validate that all required paths exist."""
        if not self.dataset_path.exists():
            raise FileNotFoundError(f"Dataset path does not exist: {self.dataset_path}")

        for name, path in (
            ("cam0", self.cam0_path),
            ("cam1", self.cam1_path),
            ("cam0/data", self.cam0_data_path),
            ("cam1/data", self.cam1_data_path),
        ):
            if not path.exists():
                raise FileNotFoundError(f"{name} directory not found: {path}")

        csv_path = self.cam0_path / "data.csv"
        if not csv_path.exists():
            raise FileNotFoundError(
                f"cam0/data.csv not found: {csv_path}\n"
                f"This file is required to list image timestamps and filenames."
            )

    def _load_image_list(self) -> list[tuple[int, str]]:
        """Parse cam0/data.csv into (timestamp_ns, filename) pairs.

        CSV format:
            #timestamp [ns],filename
            1403636579763555584,1403636579763555584.png
        """
        csv_path = self.cam0_path / "data.csv"
        image_list = []

        with open(csv_path, "r") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                try:
                    timestamp_str, filename = line.split(",")
                    image_list.append((int(timestamp_str.strip()), filename.strip()))
                except ValueError as e:
                    raise ValueError(
                        f"Invalid line in {csv_path}: '{line}'\n"
                        f"Expected format: timestamp,filename"
                    ) from e

        return image_list

    @staticmethod
    def _load_rgb(path: Path, side: str) -> np.ndarray:
        if not path.exists():
            raise FileNotFoundError(f"{side} camera image not found: {path}")

        # IMREAD_UNCHANGED keeps 16-bit PNGs at full depth
        image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
        if image is None:
            raise ValueError(f"Failed to load {side.lower()} image: {path}")

        if image.ndim == 2:
            return cv2.cvtColor(image, cv2.COLOR_GRAY2RGB)
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2RGB)
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    def load_image(self, index: int, side: str = "left") -> tuple[np.ndarray, int]:
        """Load one side of the stereo pair at ``index``.

        Args:
            index: Position in the image list
            side: "left" (cam0) or "right" (cam1)

        Returns:
            Tuple of (rgb_image, timestamp_ns)
        """
        timestamp_ns, filename = self._image_list[index]
        if side == "left":
            return self._load_rgb(self.cam0_data_path / filename, "Left"), timestamp_ns
        if side == "right":
            return self._load_rgb(self.cam1_data_path / filename, "Right"), timestamp_ns
        raise ValueError(f"side must be 'left' or 'right', got {side!r}")

    def get_next_stereo_pair(self) -> tuple[np.ndarray, np.ndarray, int] | None:
        """Get next synchronized stereo image pair.

        Returns:
            Tuple of (left_rgb, right_rgb, timestamp_ns), or None when the
            dataset is exhausted.
        """
        if self._current_idx >= len(self._image_list):
            return None

        left, timestamp_ns = self.load_image(self._current_idx, "left")
        right, _ = self.load_image(self._current_idx, "right")

        self._current_idx += 1
        return left, right, timestamp_ns

    def reset(self) -> None:
        """Reset iterator to beginning of dataset."""
        self._current_idx = 0

    @property
    def timestamps_ns(self) -> list[int]:
        """Return capture timestamps of all pairs in nanoseconds."""
        return [timestamp_ns for timestamp_ns, _ in self._image_list]

    def __len__(self) -> int:
        """Return total number of stereo pairs in dataset."""
        return len(self._image_list)

    def __iter__(self) -> Iterator[tuple[np.ndarray, np.ndarray, int]]:
        self.reset()
        return self

    def __next__(self) -> tuple[np.ndarray, np.ndarray, int]:
        pair = self.get_next_stereo_pair()
        if pair is None:
            raise StopIteration
        return pair


class DatasetCamera:
    """Exposes one side of a dataset as a frame source.

    Every call to ``images`` advances to the next frame. Once the dataset is
    exhausted it starts over from the first frame when ``loop`` is set,
    otherwise it raises ``EOFError``. Each lap is shifted forward by the
    length of the sequence plus one frame period, so looped timestamps keep
    increasing.
    """

    def __init__(self, reader: DatasetReader, side: str = "left", loop: bool = False) -> None:
        if side not in ("left", "right"):
            raise ValueError(f"side must be 'left' or 'right', got {side!r}")
        self._reader = reader
        self._side = side
        self._loop = loop
        self._index = 0
        self._offset_ns = 0

    def _lap_length_ns(self) -> int:
        timestamps = self._reader.timestamps_ns
        span = timestamps[-1] - timestamps[0]
        if len(timestamps) < 2:
            return 1_000_000_000
        return span + span // (len(timestamps) - 1)

    def images(self) -> tuple[list[np.ndarray], float]:
        if self._index >= len(self._reader):
            if not self._loop:
                raise EOFError(f"{self._reader.dataset_path} has no more frames")
            self._index = 0
            self._offset_ns += self._lap_length_ns()

        image, timestamp_ns = self._reader.load_image(self._index, self._side)
        self._index += 1
        return [image], (timestamp_ns + self._offset_ns) / 1e9
