"""Optical-flow motion estimation.

Components:
- FeatureTracker: Shi-Tomasi corners + pyramidal Lucas-Kanade tracking
- MotionEstimator: Mean displacement to linear/angular velocity
- FlowMovementSensor: Polling loop publishing the latest velocity
"""

from .feature_tracker import Correspondences, FeatureTracker
from .motion_estimator import (
    MotionEstimate,
    MotionEstimator,
    compute_flow,
    normalize_angle,
    normalize_angles,
)
from .movement_sensor import FlowMovementSensor, MotionSample

__all__ = [
    # Tracking
    "FeatureTracker",
    "Correspondences",
    # Motion Estimation
    "MotionEstimator",
    "MotionEstimate",
    "compute_flow",
    "normalize_angle",
    "normalize_angles",
    # Sensor
    "FlowMovementSensor",
    "MotionSample",
]
