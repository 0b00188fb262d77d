"""Exception types raised by stereo reconstruction and motion estimation."""


class StereoFlowError(Exception):
    """Base class for all stereoflow errors."""


class DimensionMismatchError(StereoFlowError, ValueError):
    """Left and right images of a stereo pair have different sizes."""

    def __init__(self, left_shape: tuple[int, ...], right_shape: tuple[int, ...]) -> None:
        self.left_shape = tuple(left_shape)
        self.right_shape = tuple(right_shape)
        super().__init__(
            "images must have the same dimensions: "
            f"left is {self.left_shape[1]}x{self.left_shape[0]}, "
            f"right is {self.right_shape[1]}x{self.right_shape[0]}"
        )


class InvalidDurationError(StereoFlowError, ValueError):
    """Elapsed time between two frames is not strictly positive."""

    def __init__(self, dt: float) -> None:
        self.dt = dt
        super().__init__(f"time between frames must be positive, got {dt}")


class StaleDataError(StereoFlowError, RuntimeError):
    """The cached motion sample is older than the freshness window."""

    def __init__(self, last_update: float, age: float) -> None:
        self.last_update = last_update
        self.age = age
        super().__init__(f"no update since {last_update} ({age:.3f}s ago)")


class AcquisitionError(StereoFlowError, RuntimeError):
    """A frame source returned an unusable set of images."""


class ConfigError(StereoFlowError, ValueError):
    """Component configuration is missing or invalid."""
