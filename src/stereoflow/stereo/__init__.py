"""Dense stereo reconstruction.

Components:
- DisparityMatcher: Single-pixel SAD disparity search along scanlines
- DepthProjector: Disparity to colored 3D points (pinhole model)
- PointCloud: Position-keyed colored point container
- StereoCamera: Point-cloud camera over a left/right frame source pair
"""

from .depth_projector import DepthProjector, depth_from_disparity
from .disparity_matcher import DisparityMap, DisparityMatcher
from .point_cloud import PointCloud
from .stereo_camera import StereoCamera

__all__ = [
    "DepthProjector",
    "DisparityMap",
    "DisparityMatcher",
    "PointCloud",
    "StereoCamera",
    "depth_from_disparity",
]
