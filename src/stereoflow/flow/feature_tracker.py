"""Sparse feature tracking between consecutive frames."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import cv2
import numpy as np

from ..image import to_gray8

logger = logging.getLogger(__name__)


@dataclass
class Correspondences:
    """Feature positions in the previous and current frame.

    Attributes:
        prev_points: (N, 2) corner positions in the previous frame
        curr_points: (N, 2) tracked positions in the current frame
        status: (N,) True where the feature was tracked, False where lost
    """

    prev_points: np.ndarray
    curr_points: np.ndarray
    status: np.ndarray

    @classmethod
    def empty(cls) -> "Correspondences":
        return cls(
            prev_points=np.empty((0, 2), dtype=np.float32),
            curr_points=np.empty((0, 2), dtype=np.float32),
            status=np.empty(0, dtype=bool),
        )

    def __len__(self) -> int:
        """Return number of detected features, tracked or not."""
        return len(self.prev_points)

    @property
    def num_tracked(self) -> int:
        """Return number of successfully tracked features."""
        return int(np.count_nonzero(self.status))

    def tracked(self) -> "Correspondences":
        """Return only the tracked correspondences."""
        mask = self.status.astype(bool)
        return Correspondences(
            prev_points=self.prev_points[mask],
            curr_points=self.curr_points[mask],
            status=np.ones(int(mask.sum()), dtype=bool),
        )


class FeatureTracker:
    """Shi-Tomasi corners tracked with pyramidal Lucas-Kanade optical flow.

    Corners are picked in the previous frame by minimum-eigenvalue strength,
    keeping those at least ``quality_level`` times as strong as the best one
    and at least ``min_distance`` pixels apart. Each corner is then searched
    for in the current frame coarse-to-fine over an image pyramid.
    """

    def __init__(
        self,
        max_corners: int = 100,
        quality_level: float = 0.3,
        min_distance: float = 10,
        win_size: tuple[int, int] = (21, 21),
        max_level: int = 3,
    ) -> None:
        """Initialize tracker.

        Args:
            max_corners: Maximum number of corners to detect
            quality_level: Fraction of the strongest corner response a
                corner must reach to be kept
            min_distance: Minimum pixel distance between kept corners
            win_size: Lucas-Kanade search window at each pyramid level
            max_level: Number of pyramid levels above the base image
        """
        self._max_corners = max_corners
        self._quality_level = quality_level
        self._min_distance = min_distance
        self._win_size = win_size
        self._max_level = max_level

    def detect(self, image: np.ndarray) -> np.ndarray:
        """Detect corners to track.

        Args:
            image: Frame in any supported format

        Returns:
            (N, 2) float32 corner positions, N may be 0
        """
        gray = image if image.ndim == 2 and image.dtype == np.uint8 else to_gray8(image)
        corners = cv2.goodFeaturesToTrack(
            gray,
            maxCorners=self._max_corners,
            qualityLevel=self._quality_level,
            minDistance=self._min_distance,
        )
        if corners is None:
            return np.empty((0, 2), dtype=np.float32)
        return corners.reshape(-1, 2).astype(np.float32)

    def track(self, prev: np.ndarray, curr: np.ndarray) -> Correspondences:
        """Detect corners in ``prev`` and locate them in ``curr``.

        Args:
            prev: Previous frame
            curr: Current frame, same size as ``prev``

        Returns:
            Correspondences for every detected corner. Empty when no corner
            was found, which means no motion is observable.
        """
        prev_gray = to_gray8(prev)
        curr_gray = to_gray8(curr)

        prev_pts = self.detect(prev_gray)
        if len(prev_pts) == 0:
            logger.debug("[Flow] no corners detected")
            return Correspondences.empty()

        next_pts, status, _ = cv2.calcOpticalFlowPyrLK(
            prev_gray,
            curr_gray,
            prev_pts.reshape(-1, 1, 2),
            None,
            winSize=self._win_size,
            maxLevel=self._max_level,
        )

        if next_pts is None or status is None:
            return Correspondences(
                prev_points=prev_pts,
                curr_points=prev_pts.copy(),
                status=np.zeros(len(prev_pts), dtype=bool),
            )

        correspondences = Correspondences(
            prev_points=prev_pts,
            curr_points=next_pts.reshape(-1, 2).astype(np.float32),
            status=status.reshape(-1) == 1,
        )
        logger.debug(
            "[Flow] tracked %d/%d corners",
            correspondences.num_tracked,
            len(correspondences),
        )
        return correspondences

    @property
    def max_corners(self) -> int:
        """Return maximum number of corners to detect."""
        return self._max_corners

    @property
    def quality_level(self) -> float:
        return self._quality_level

    @property
    def min_distance(self) -> float:
        return self._min_distance
