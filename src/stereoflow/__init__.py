"""stereoflow - stereo point clouds and optical-flow velocity in Python."""

__version__ = "0.1.0"

# Re-export main classes for convenient imports
from .config import (
    FlowSensorConfig,
    StereoCameraConfig,
    load_flow_sensor_config,
    load_stereo_camera_config,
)
from .errors import (
    AcquisitionError,
    ConfigError,
    DimensionMismatchError,
    InvalidDurationError,
    StaleDataError,
    StereoFlowError,
)
from .flow import (
    Correspondences,
    FeatureTracker,
    FlowMovementSensor,
    MotionEstimate,
    MotionEstimator,
    MotionSample,
    compute_flow,
    normalize_angle,
)
from .io import DatasetCamera, DatasetReader, Frame, FrameSource, StaticFrameSource
from .stereo import (
    DepthProjector,
    DisparityMap,
    DisparityMatcher,
    PointCloud,
    StereoCamera,
    depth_from_disparity,
)

__all__ = [
    "__version__",
    # Configuration
    "StereoCameraConfig",
    "FlowSensorConfig",
    "load_stereo_camera_config",
    "load_flow_sensor_config",
    # Errors
    "StereoFlowError",
    "DimensionMismatchError",
    "InvalidDurationError",
    "StaleDataError",
    "AcquisitionError",
    "ConfigError",
    # Stereo
    "DisparityMatcher",
    "DisparityMap",
    "DepthProjector",
    "PointCloud",
    "StereoCamera",
    "depth_from_disparity",
    # Flow
    "FeatureTracker",
    "Correspondences",
    "MotionEstimator",
    "MotionEstimate",
    "compute_flow",
    "normalize_angle",
    "FlowMovementSensor",
    "MotionSample",
    # I/O
    "DatasetReader",
    "DatasetCamera",
    "Frame",
    "FrameSource",
    "StaticFrameSource",
]
