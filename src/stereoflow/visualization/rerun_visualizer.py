"""Rerun-based visualization for stereo reconstruction and optical flow."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import rerun as rr
import rerun.blueprint as rrb

if TYPE_CHECKING:
    from ..flow.feature_tracker import Correspondences
    from ..flow.movement_sensor import MotionSample
    from ..stereo.point_cloud import PointCloud


class RerunVisualizer:
    """Rerun-based visualization for stereo point clouds and flow velocity.

    Entity hierarchy:
        camera/
            left/
                image       - Left image
                flow        - Tracked feature displacements (arrows)
            right/
                image       - Right image
        world/
            points          - Reconstructed point cloud (image colors)
        motion/
            linear/x, linear/y  - Linear velocity components
            angular/z           - Angular velocity around the optical axis
    """

    def __init__(self, app_name: str = "stereoflow", spawn: bool = True) -> None:
        """Initialize Rerun visualization.

        Args:
            app_name: Name for the Rerun application window
            spawn: If True, automatically spawn the Rerun viewer
        """
        rr.init(app_name, spawn=spawn)
        self._setup_coordinate_system()
        self._setup_layout()

    def _setup_coordinate_system(self) -> None:
        """Camera convention: X right, Y down, Z forward."""
        rr.log("world", rr.ViewCoordinates.RDF, static=True)

    def _setup_layout(self) -> None:
        blueprint = rrb.Blueprint(
            rrb.Vertical(
                contents=[
                    rrb.Horizontal(
                        contents=[
                            rrb.Spatial2DView(name="Left Camera", origin="camera/left"),
                            rrb.Spatial2DView(
                                name="Right Camera", origin="camera/right/image"
                            ),
                        ]
                    ),
                    rrb.Horizontal(
                        contents=[
                            rrb.Spatial3DView(name="Point Cloud", origin="world"),
                            rrb.TimeSeriesView(name="Velocity", origin="motion"),
                        ]
                    ),
                ]
            )
        )
        rr.send_blueprint(blueprint)

    @staticmethod
    def set_time(timestamp_sec: float) -> None:
        """Set the timeline position for subsequent log calls."""
        rr.set_time("timestamp", duration=timestamp_sec)

    def log_stereo_pair(self, left: np.ndarray, right: np.ndarray) -> None:
        """Log the raw stereo images."""
        rr.log("camera/left/image", rr.Image(left))
        rr.log("camera/right/image", rr.Image(right))

    def log_point_cloud(
        self, cloud: PointCloud, entity_path: str = "world/points"
    ) -> None:
        """Log a reconstructed cloud with its per-point image colors."""
        if len(cloud) == 0:
            return

        points = cloud.points
        valid_mask = np.isfinite(points).all(axis=1)
        if not valid_mask.any():
            return

        rr.log(
            entity_path,
            rr.Points3D(points[valid_mask], colors=cloud.colors[valid_mask], radii=0.01),
        )

    def log_flow(
        self, correspondences: Correspondences, entity_path: str = "camera/left/flow"
    ) -> None:
        """Log tracked features as arrows from previous to current position."""
        tracked = correspondences.tracked()
        if len(tracked) == 0:
            return

        rr.log(
            entity_path,
            rr.Arrows2D(
                origins=tracked.prev_points,
                vectors=tracked.curr_points - tracked.prev_points,
                colors=[[0, 255, 0]],  # Green
            ),
        )

    def log_motion(self, sample: MotionSample) -> None:
        """Log a velocity sample as time series scalars."""
        rr.log("motion/linear/x", rr.Scalars(float(sample.linear_velocity[0])))
        rr.log("motion/linear/y", rr.Scalars(float(sample.linear_velocity[1])))
        rr.log("motion/angular/z", rr.Scalars(float(sample.angular_velocity[2])))
