"""Tests for FeatureTracker on synthetic frames."""

import cv2
import numpy as np
import pytest

from stereoflow.flow import Correspondences, FeatureTracker, compute_flow


def make_scene(height: int = 120, width: int = 160) -> np.ndarray:
    """Dark RGB frame with four bright rectangles placed symmetrically about the center."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    cx, cy = width // 2, height // 2
    for sx in (-1, 1):
        for sy in (-1, 1):
            x0 = cx + sx * 40 - 10
            y0 = cy + sy * 30 - 8
            frame[y0 : y0 + 16, x0 : x0 + 20] = 220
    return cv2.GaussianBlur(frame, (5, 5), 1.0)


@pytest.fixture
def scene() -> np.ndarray:
    return make_scene()


class TestCorrespondences:
    """Tests for the correspondence container."""

    def test_empty(self):
        """Test the empty container."""
        corr = Correspondences.empty()

        assert len(corr) == 0
        assert corr.num_tracked == 0
        assert len(corr.tracked()) == 0

    def test_tracked_filters_lost(self):
        """Test that tracked() keeps only successful features."""
        corr = Correspondences(
            prev_points=np.array([[0, 0], [1, 1], [2, 2]], dtype=np.float32),
            curr_points=np.array([[0, 1], [1, 2], [2, 3]], dtype=np.float32),
            status=np.array([True, False, True]),
        )

        tracked = corr.tracked()

        assert len(corr) == 3
        assert corr.num_tracked == 2
        np.testing.assert_array_equal(tracked.prev_points, [[0, 0], [2, 2]])
        assert tracked.status.all()


class TestFeatureTracker:
    """Test suite for corner detection and pyramidal LK tracking."""

    def test_defaults(self):
        """Test default detection parameters."""
        tracker = FeatureTracker()

        assert tracker.max_corners == 100
        assert tracker.quality_level == 0.3
        assert tracker.min_distance == 10

    def test_blank_frame_has_no_corners(self):
        """Test that a featureless frame yields no corners and no correspondences."""
        blank = np.full((60, 80, 3), 128, dtype=np.uint8)
        tracker = FeatureTracker()

        assert tracker.detect(blank).shape == (0, 2)
        assert len(tracker.track(blank, blank)) == 0

    def test_detects_rectangle_corners(self, scene: np.ndarray):
        """Test that corners are found on the rectangles."""
        corners = FeatureTracker().detect(scene)

        assert 4 <= len(corners) <= 100
        assert corners.dtype == np.float32

    def test_max_corners_cap(self):
        """Test that no more than max_corners are returned."""
        checker = np.kron(
            (np.indices((12, 12)).sum(axis=0) % 2).astype(np.uint8) * 255,
            np.ones((10, 10), dtype=np.uint8),
        )

        corners = FeatureTracker(max_corners=5).detect(checker)

        assert 0 < len(corners) <= 5

    def test_min_distance_between_corners(self, scene: np.ndarray):
        """Test that kept corners are at least min_distance apart."""
        corners = FeatureTracker(min_distance=10).detect(scene)

        diffs = corners[:, None, :] - corners[None, :, :]
        distances = np.sqrt((diffs**2).sum(axis=2))
        off_diagonal = distances[~np.eye(len(corners), dtype=bool)]
        assert np.all(off_diagonal >= 10 - 1e-3)

    def test_tracks_horizontal_shift(self, scene: np.ndarray):
        """Test that a 2 px shift is recovered for tracked corners."""
        shifted = np.roll(scene, 2, axis=1)

        corr = FeatureTracker().track(scene, shifted).tracked()

        assert len(corr) >= 4
        displacement = corr.curr_points - corr.prev_points
        np.testing.assert_allclose(displacement.mean(axis=0), [2.0, 0.0], atol=0.2)

    def test_sixteen_bit_frames(self, scene: np.ndarray):
        """Test that uint16 frames are reduced to 8 bits for tracking."""
        scene16 = scene.astype(np.uint16) * 257
        shifted16 = np.roll(scene16, 2, axis=1)

        corr = FeatureTracker().track(scene16, shifted16)

        assert corr.num_tracked >= 4


class TestComputeFlowOnFrames:
    """End-to-end flow on synthetic frames."""

    def test_horizontal_shift_velocity(self, scene: np.ndarray):
        """Test that a (2, 0) shift over 1 s with f = 1 gives about (2, 0, 0)."""
        shifted = np.roll(scene, 2, axis=1)

        result = compute_flow(scene, shifted, dt=1.0, focal_length=1.0)

        assert result.num_tracked >= 4
        np.testing.assert_allclose(result.linear_velocity, [2.0, 0.0, 0.0], atol=0.2)
        assert abs(result.angular_velocity[2]) < 0.02
        assert result.angular_velocity[0] == 0.0
        assert result.angular_velocity[1] == 0.0
