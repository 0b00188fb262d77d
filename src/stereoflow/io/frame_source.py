"""Frame source interface consumed by the camera and sensor components."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Protocol

import numpy as np


@dataclass(frozen=True)
class Frame:
    """A single captured image.

    Attributes:
        image: RGB or grayscale image array
        captured_at: Capture time in seconds
    """

    image: np.ndarray
    captured_at: float


class FrameSource(Protocol):
    """Anything that can hand out the images of one capture."""

    def images(self) -> tuple[list[np.ndarray], float]:
        """Return the images of the latest capture and its time in seconds.

        Implementations raise on acquisition failure; callers pass the
        exception through unchanged.
        """
        ...


class StaticFrameSource:
    """Frame source that always returns the same image.

    Capture times come from ``clock``, so two consecutive calls produce
    frames with increasing timestamps.
    """

    def __init__(
        self, image: np.ndarray, clock: Callable[[], float] = time.time
    ) -> None:
        self._image = image
        self._clock = clock

    def images(self) -> tuple[list[np.ndarray], float]:
        return [self._image], self._clock()
