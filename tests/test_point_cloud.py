"""Tests for PointCloud."""

from pathlib import Path

import numpy as np
import pytest

from stereoflow.stereo import PointCloud


class TestPointCloud:
    """Test suite for the position-keyed colored point container."""

    def test_empty(self):
        """Test an empty cloud."""
        cloud = PointCloud()

        assert len(cloud) == 0
        assert cloud.points.shape == (0, 3)
        assert cloud.colors.shape == (0, 3)
        assert cloud.get([0.0, 0.0, 1.0]) is None

    def test_set_and_get(self):
        """Test single point insertion and lookup."""
        cloud = PointCloud()

        cloud.set([0.5, -0.25, 2.0], [10, 20, 30])

        assert len(cloud) == 1
        assert [0.5, -0.25, 2.0] in cloud
        np.testing.assert_array_equal(cloud.get([0.5, -0.25, 2.0]), [10, 20, 30])

    def test_last_write_wins(self):
        """Test that a second write to the same position replaces the color."""
        cloud = PointCloud()

        cloud.set([1.0, 1.0, 1.0], [1, 1, 1])
        cloud.set([1.0, 1.0, 1.0], [2, 2, 2])

        assert len(cloud) == 1
        np.testing.assert_array_equal(cloud.get([1.0, 1.0, 1.0]), [2, 2, 2])

    def test_quantization_merges_close_points(self):
        """Test that points closer than the resolution share a key."""
        cloud = PointCloud(resolution=0.01)

        cloud.update(
            np.array([[0.0, 0.0, 1.0], [0.001, 0.0, 1.0], [0.5, 0.0, 1.0]]),
            np.array([[1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=np.uint8),
        )

        assert len(cloud) == 2
        np.testing.assert_array_equal(cloud.get([0.0, 0.0, 1.0]), [0, 1, 0])

    def test_update_length_mismatch(self):
        """Test that points and colors must align."""
        cloud = PointCloud()

        with pytest.raises(ValueError, match="same length"):
            cloud.update(np.zeros((3, 3)), np.zeros((2, 3), dtype=np.uint8))

    def test_invalid_resolution(self):
        """Test that the resolution must be positive."""
        with pytest.raises(ValueError, match="resolution"):
            PointCloud(resolution=0.0)

    def test_iteration(self):
        """Test iteration over (point, color) pairs."""
        cloud = PointCloud()
        cloud.set([1.0, 2.0, 3.0], [4, 5, 6])

        pairs = list(cloud)

        assert len(pairs) == 1
        np.testing.assert_allclose(pairs[0][0], [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(pairs[0][1], [4, 5, 6])

    def test_bounds(self):
        """Test bounding box of stored points."""
        cloud = PointCloud()
        cloud.update(
            np.array([[-1.0, 0.0, 2.0], [1.0, -3.0, 4.0]]),
            np.zeros((2, 3), dtype=np.uint8),
        )

        low, high = cloud.bounds()

        np.testing.assert_allclose(low, [-1.0, -3.0, 2.0])
        np.testing.assert_allclose(high, [1.0, 0.0, 4.0])

    def test_bounds_empty(self):
        """Test that bounds of an empty cloud is an error."""
        with pytest.raises(ValueError, match="empty"):
            PointCloud().bounds()

    def test_save_ply(self, tmp_path: Path):
        """Test ASCII PLY export."""
        cloud = PointCloud()
        cloud.set([0.1, 0.2, 0.3], [255, 128, 0])
        output = tmp_path / "cloud.ply"

        cloud.save_ply(output)

        lines = output.read_text().splitlines()
        assert lines[0] == "ply"
        assert "element vertex 1" in lines
        assert lines[lines.index("end_header") + 1] == "0.100000 0.200000 0.300000 255 128 0"
