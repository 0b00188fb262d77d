"""Back-projection of accepted disparities into a colored point cloud."""

from __future__ import annotations

import logging

import numpy as np

from ..errors import DimensionMismatchError
from ..image import image_size, rgb16_to_rgb8, to_rgb16
from .disparity_matcher import DisparityMatcher
from .point_cloud import PointCloud

logger = logging.getLogger(__name__)


def depth_from_disparity(
    disparity: np.ndarray | float, baseline: float, focal_length: float
) -> np.ndarray | float:
    """Return depth ``z = baseline * focal_length / disparity``.

    Args:
        disparity: Disparity in pixels (must be non-zero)
        baseline: Distance between camera centers (meters)
        focal_length: Focal length (pixels)

    Returns:
        Depth in the units of ``baseline``
    """
    return (baseline * focal_length) / disparity


class DepthProjector:
    """Converts a rectified stereo pair into a colored 3D point cloud.

    Uses the pinhole model with the principal point approximated by the image
    center (``cx = W / 2``, ``cy = H / 2``). Only disparities strictly inside
    the matcher's bounds produce points; every other pixel is dropped.

    Example:
        >>> projector = DepthProjector(baseline=0.12, focal_length=700.0)
        >>> cloud = projector.project(left_rgb, right_rgb)
        >>> print(f"Reconstructed {len(cloud)} points")
    """

    def __init__(
        self,
        baseline: float,
        focal_length: float,
        matcher: DisparityMatcher | None = None,
    ) -> None:
        """Initialize projector.

        Args:
            baseline: Distance between the two camera centers (meters)
            focal_length: Focal length in pixels
            matcher: Disparity matcher. Uses defaults if None.

        Raises:
            ValueError: If baseline or focal length is not positive
        """
        if baseline <= 0:
            raise ValueError(f"baseline must be positive, got {baseline}")
        if focal_length <= 0:
            raise ValueError(f"focal_length must be positive, got {focal_length}")

        self._baseline = float(baseline)
        self._focal_length = float(focal_length)
        self._matcher = matcher or DisparityMatcher()

    def project(self, left: np.ndarray, right: np.ndarray) -> PointCloud:
        """Reconstruct a point cloud from a rectified stereo pair.

        Args:
            left: Left (reference) image
            right: Right (target) image, same size as ``left``

        Returns:
            PointCloud with one entry per accepted pixel, colored with the
            left image's 8-bit color

        Raises:
            DimensionMismatchError: If the images differ in size
        """
        if left.shape[:2] != right.shape[:2]:
            raise DimensionMismatchError(left.shape[:2], right.shape[:2])

        left16 = to_rgb16(left)
        disparity_map = self._matcher.match(left16, right)

        width, height = image_size(left)
        cx = width / 2.0
        cy = height / 2.0

        xs, ys, ds = disparity_map.accepted()
        points = self.back_project(xs, ys, ds, cx, cy)
        colors = rgb16_to_rgb8(left16[ys, xs])

        cloud = PointCloud()
        cloud.update(points, colors)

        logger.debug(
            "[Stereo] %d/%d samples accepted, %d points",
            len(ds),
            len(disparity_map),
            len(cloud),
        )
        return cloud

    def back_project(
        self,
        xs: np.ndarray,
        ys: np.ndarray,
        disparities: np.ndarray,
        cx: float,
        cy: float,
    ) -> np.ndarray:
        """Lift pixels with known disparity to 3D camera coordinates.

        Args:
            xs: (N,) pixel columns
            ys: (N,) pixel rows
            disparities: (N,) non-zero disparities
            cx: Principal point x
            cy: Principal point y

        Returns:
            (N, 3) array of (X, Y, Z) points
        """
        z = depth_from_disparity(
            np.asarray(disparities, dtype=np.float64), self._baseline, self._focal_length
        )
        x3d = (np.asarray(xs, dtype=np.float64) - cx) * z / self._focal_length
        y3d = (np.asarray(ys, dtype=np.float64) - cy) * z / self._focal_length
        return np.column_stack([x3d, y3d, z])

    @property
    def baseline(self) -> float:
        """Return stereo baseline in meters."""
        return self._baseline

    @property
    def focal_length(self) -> float:
        """Return focal length in pixels."""
        return self._focal_length

    @property
    def matcher(self) -> DisparityMatcher:
        """Return the disparity matcher."""
        return self._matcher
