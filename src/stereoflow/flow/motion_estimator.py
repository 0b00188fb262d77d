"""Planar velocity estimation from tracked feature correspondences."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from ..errors import InvalidDurationError
from ..image import image_size
from .feature_tracker import Correspondences, FeatureTracker

logger = logging.getLogger(__name__)

DEFAULT_FOCAL_LENGTH = 30.0


def normalize_angle(angle: float) -> float:
    """Wrap an angle into ``(-pi, pi]`` by repeated shifts of ``2*pi``.

    Raises:
        ValueError: If the angle is infinite or NaN
    """
    if not math.isfinite(angle):
        raise ValueError(f"angle must be finite, got {angle}")
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle <= -math.pi:
        angle += 2 * math.pi
    return angle


def normalize_angles(angles: np.ndarray) -> np.ndarray:
    """Array version of :func:`normalize_angle`."""
    angles = np.array(angles, dtype=np.float64)
    if not np.isfinite(angles).all():
        raise ValueError("angles must be finite")
    while True:
        high = angles > np.pi
        low = angles <= -np.pi
        if not (high.any() or low.any()):
            return angles
        angles[high] -= 2 * np.pi
        angles[low] += 2 * np.pi


@dataclass
class MotionEstimate:
    """Velocity derived from one pair of frames.

    Attributes:
        linear_velocity: (3,) ``(vx, vy, 0)`` in focal-length-scaled units/s
        angular_velocity: (3,) ``(0, 0, wz)`` in rad/s
        num_tracked: Number of correspondences averaged. Zero means there
            was no data, as opposed to no motion.
    """

    linear_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    num_tracked: int = 0


class MotionEstimator:
    """Averages feature displacements into linear and angular velocity.

    Linear motion is the mean pixel displacement per second divided by a
    focal length in pixels, an approximate conversion to physical units.
    Angular motion is the mean change of each feature's bearing around a
    pivot (normally the frame center), per second. There is no outlier
    rejection.
    """

    def __init__(self, focal_length: float = DEFAULT_FOCAL_LENGTH) -> None:
        """Initialize estimator.

        Args:
            focal_length: Pixel scale for linear velocity. Non-positive
                values fall back to 30.
        """
        self._focal_length = (
            float(focal_length) if focal_length > 0 else DEFAULT_FOCAL_LENGTH
        )

    def estimate(
        self,
        correspondences: Correspondences,
        center: tuple[float, float],
        dt: float,
    ) -> MotionEstimate:
        """Estimate velocity from correspondences observed ``dt`` seconds apart.

        Args:
            correspondences: Tracked and lost features; lost ones are ignored
            center: ``(cx, cy)`` pivot for angular displacement
            dt: Elapsed time between the frames in seconds

        Returns:
            MotionEstimate, zero vectors if nothing was tracked

        Raises:
            InvalidDurationError: If ``dt <= 0``
        """
        if dt <= 0:
            raise InvalidDurationError(dt)

        tracked = correspondences.tracked()
        if len(tracked) == 0:
            return MotionEstimate()

        prev = tracked.prev_points.astype(np.float64)
        curr = tracked.curr_points.astype(np.float64)
        cx, cy = center

        displacement = curr - prev
        prev_angle = np.arctan2(prev[:, 1] - cy, prev[:, 0] - cx)
        curr_angle = np.arctan2(curr[:, 1] - cy, curr[:, 0] - cx)
        angular = normalize_angles(curr_angle - prev_angle)

        mean_dx, mean_dy = displacement.mean(axis=0)
        mean_dtheta = float(angular.mean())

        vx = mean_dx / dt / self._focal_length
        vy = mean_dy / dt / self._focal_length
        wz = mean_dtheta / dt

        return MotionEstimate(
            linear_velocity=np.array([vx, vy, 0.0]),
            angular_velocity=np.array([0.0, 0.0, wz]),
            num_tracked=len(tracked),
        )

    @property
    def focal_length(self) -> float:
        """Return pixel scale for linear velocity."""
        return self._focal_length


def compute_flow(
    prev: np.ndarray,
    curr: np.ndarray,
    dt: float,
    focal_length: float = DEFAULT_FOCAL_LENGTH,
    tracker: FeatureTracker | None = None,
) -> MotionEstimate:
    """Track features between two frames and estimate velocity.

    The angular pivot is the frame center ``(W / 2, H / 2)``.

    Args:
        prev: Previous frame
        curr: Current frame
        dt: Seconds between the frames
        focal_length: Pixel scale for linear velocity
        tracker: Feature tracker. Uses defaults if None.

    Returns:
        MotionEstimate

    Raises:
        InvalidDurationError: If ``dt <= 0``
    """
    if dt <= 0:
        raise InvalidDurationError(dt)

    tracker = tracker or FeatureTracker()
    correspondences = tracker.track(prev, curr)

    width, height = image_size(prev)
    estimate = MotionEstimator(focal_length).estimate(
        correspondences, (width / 2.0, height / 2.0), dt
    )
    logger.debug(
        "[Flow] %d tracked: linear=%s angular=%s",
        estimate.num_tracked,
        estimate.linear_velocity,
        estimate.angular_velocity,
    )
    return estimate
