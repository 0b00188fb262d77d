"""Movement sensor reporting velocity from optical flow of a single camera.

A background thread runs one cycle every ``interval`` seconds. Each cycle
grabs a frame, compares it with the previous one when that is recent enough,
and publishes the resulting velocity as an immutable snapshot. Readers only
ever copy the current snapshot reference under the lock.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Callable

import numpy as np

from ..config import FlowSensorConfig
from ..errors import AcquisitionError, StaleDataError
from ..io.frame_source import Frame, FrameSource
from .feature_tracker import FeatureTracker
from .motion_estimator import compute_flow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MotionSample:
    """Latest published velocity.

    Attributes:
        linear_velocity: (3,) ``(vx, vy, 0)``
        angular_velocity: (3,) ``(0, 0, wz)``
        last_update: Clock time of the last result or failure (seconds)
        last_error: Exception raised by the last cycle, if any
        last_traceback: Traceback of ``last_error`` as raised by the cycle
    """

    linear_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    angular_velocity: np.ndarray = field(default_factory=lambda: np.zeros(3))
    last_update: float = 0.0
    last_error: BaseException | None = None
    last_traceback: TracebackType | None = None


class FlowMovementSensor:
    """Polls a camera and estimates planar velocity between frames.

    Example:
        >>> sensor = FlowMovementSensor(camera, FlowSensorConfig("cam", "cam2"))
        >>> sensor.start()
        >>> vx, vy, _ = sensor.linear_velocity()
        >>> sensor.close()
    """

    def __init__(
        self,
        camera: FrameSource,
        config: FlowSensorConfig,
        tracker: FeatureTracker | None = None,
        clock: Callable[[], float] = time.time,
        interval: float = 0.5,
        freshness_window: float = 1.0,
    ) -> None:
        """Initialize sensor. The polling thread is not started.

        Args:
            camera: Source of frames to track
            config: Sensor configuration
            tracker: Feature tracker. Uses defaults if None.
            clock: Time source for update timestamps (seconds)
            interval: Seconds between cycles of the background thread
            freshness_window: Maximum age (seconds) of both the previous
                frame used for flow and the sample returned to readers
        """
        config.validate()

        self._camera = camera
        self._config = config
        self._tracker = tracker or FeatureTracker()
        self._clock = clock
        self._interval = interval
        self._freshness_window = freshness_window

        self._lock = threading.Lock()
        self._sample = MotionSample()

        # Only touched by the thread running tick()
        self._previous: Frame | None = None

        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def _publish(self, sample: MotionSample) -> None:
        with self._lock:
            self._sample = sample

    def snapshot(self) -> MotionSample:
        """Return the current sample without any freshness check."""
        with self._lock:
            return self._sample

    def _cycle(self) -> None:
        logger.debug("[Flow] starting cycle")

        images, captured_at = self._camera.images()
        if len(images) == 0:
            raise AcquisitionError("no images")
        frame = Frame(image=images[0], captured_at=captured_at)

        previous = self._previous
        self._previous = frame

        if previous is None or captured_at - previous.captured_at > self._freshness_window:
            logger.info("[Flow] no previous frame or too old, skipping")
            return

        estimate = compute_flow(
            previous.image,
            frame.image,
            captured_at - previous.captured_at,
            self._config.get_focal_length(),
            self._tracker,
        )
        logger.info(
            "[Flow] linear=%s angular=%s (%d tracked)",
            estimate.linear_velocity,
            estimate.angular_velocity,
            estimate.num_tracked,
        )

        self._publish(
            MotionSample(
                linear_velocity=estimate.linear_velocity,
                angular_velocity=estimate.angular_velocity,
                last_update=self._clock(),
            )
        )

    def tick(self) -> BaseException | None:
        """Run one cycle and record its outcome.

        Returns:
            The exception raised by the cycle, or None
        """
        try:
            self._cycle()
        except Exception as e:
            logger.warning("[Flow] cycle failed: %s", e)
            current = self.snapshot()
            self._publish(
                MotionSample(
                    linear_velocity=current.linear_velocity,
                    angular_velocity=current.angular_velocity,
                    last_update=self._clock(),
                    last_error=e,
                    last_traceback=e.__traceback__,
                )
            )
            return e

        current = self.snapshot()
        if current.last_error is not None:
            self._publish(
                MotionSample(
                    linear_velocity=current.linear_velocity,
                    angular_velocity=current.angular_velocity,
                    last_update=current.last_update,
                )
            )
        return None

    def _run(self) -> None:
        logger.info("[Flow] polling started")
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(self._interval)
        logger.info("[Flow] polling stopped")

    def start(self) -> None:
        """Start the background polling thread.

        Does nothing while a previous thread is still alive, including one
        that outlived the timeout of :meth:`close`.
        """
        if self._thread is not None and self._thread.is_alive():
            if self._stop_event.is_set():
                logger.warning("[Flow] previous polling thread has not exited yet")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="flow-movement-sensor", daemon=True
        )
        self._thread.start()

    def close(self, timeout: float | None = 5.0) -> None:
        """Stop the polling thread and wait for the current cycle to end.

        If the cycle does not finish within ``timeout`` the thread is kept
        and :attr:`is_running` stays True until it exits.
        """
        self._stop_event.set()
        if self._thread is None:
            return
        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning("[Flow] polling thread did not stop within %s s", timeout)
            return
        self._thread = None

    def _checked(self) -> MotionSample:
        sample = self.snapshot()
        if sample.last_error is not None:
            # Reset to the cycle's traceback so repeated reads don't extend it
            raise sample.last_error.with_traceback(sample.last_traceback)
        age = self._clock() - sample.last_update
        if age > self._freshness_window:
            raise StaleDataError(sample.last_update, age)
        return sample

    def linear_velocity(self) -> np.ndarray:
        """Return ``(vx, vy, 0)``.

        Raises:
            Exception: The last cycle's error, passed through unchanged
            StaleDataError: If the sample is older than the freshness window
        """
        return self._checked().linear_velocity.copy()

    def angular_velocity(self) -> np.ndarray:
        """Return ``(0, 0, wz)``.

        Raises:
            Exception: The last cycle's error, passed through unchanged
            StaleDataError: If the sample is older than the freshness window
        """
        return self._checked().angular_velocity.copy()

    def readings(self) -> dict[str, Any]:
        """Return the latest sample and its bookkeeping without raising."""
        sample = self.snapshot()
        return {
            "linear_velocity": sample.linear_velocity.copy(),
            "angular_velocity": sample.angular_velocity.copy(),
            "last_update": sample.last_update,
            "last_error": sample.last_error,
        }

    def properties(self) -> dict[str, bool]:
        return {
            "linear_velocity_supported": True,
            "angular_velocity_supported": True,
        }

    @property
    def is_running(self) -> bool:
        """Check if the polling thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def config(self) -> FlowSensorConfig:
        return self._config
