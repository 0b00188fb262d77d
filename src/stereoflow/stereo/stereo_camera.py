"""Stereo camera component producing point clouds from two frame sources."""

from __future__ import annotations

import logging

import numpy as np

from ..config import StereoCameraConfig
from ..errors import AcquisitionError
from ..io.frame_source import FrameSource
from .depth_projector import DepthProjector
from .disparity_matcher import DisparityMatcher
from .point_cloud import PointCloud

logger = logging.getLogger(__name__)


class StereoCamera:
    """Camera that reconstructs a point cloud from a left/right source pair.

    Plain image requests are served by the left camera.
    """

    def __init__(
        self,
        config: StereoCameraConfig,
        left: FrameSource,
        right: FrameSource,
        max_workers: int | None = None,
    ) -> None:
        """Initialize stereo camera.

        Args:
            config: Validated stereo camera configuration
            left: Source of left (reference) images
            right: Source of right images
            max_workers: Thread pool size for the disparity search

        Raises:
            ConfigError: If the configuration is invalid
        """
        config.validate()

        self._config = config
        self._left = left
        self._right = right
        self._closed = False

        matcher = DisparityMatcher(
            min_disparity=config.get_min_disparity(),
            max_disparity=config.get_max_disparity(),
            disparity_step=config.get_disparity_step(),
            pixel_step=config.get_pixel_step(),
            max_workers=max_workers,
        )
        self._projector = DepthProjector(
            baseline=config.distance_meters,
            focal_length=config.focal_length_pixels,
            matcher=matcher,
        )

    @staticmethod
    def _single_image(source: FrameSource, side: str) -> np.ndarray:
        images, _ = source.images()
        if len(images) != 1:
            raise AcquisitionError(f"expected 1 {side} image, got {len(images)}")
        return images[0]

    def next_point_cloud(self) -> PointCloud:
        """Acquire one stereo pair and reconstruct it.

        Returns:
            PointCloud of the accepted disparities

        Raises:
            AcquisitionError: If a source returns other than one image
            DimensionMismatchError: If the two images differ in size
        """
        left = self._single_image(self._left, "left")
        right = self._single_image(self._right, "right")

        cloud = self._projector.project(left, right)
        logger.info("[Stereo] point cloud with %d points", len(cloud))
        return cloud

    def images(self) -> tuple[list[np.ndarray], float]:
        """Return the left camera's images."""
        return self._left.images()

    def properties(self) -> dict[str, bool]:
        return {"supports_pcd": True}

    def close(self) -> None:
        self._closed = True

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def config(self) -> StereoCameraConfig:
        """Return the camera configuration."""
        return self._config

    @property
    def projector(self) -> DepthProjector:
        """Return the depth projector used for reconstruction."""
        return self._projector
