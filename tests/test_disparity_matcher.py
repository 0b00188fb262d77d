"""Tests for DisparityMatcher and DisparityMap."""

import numpy as np
import pytest

from stereoflow.stereo import DisparityMap, DisparityMatcher


class TestDisparityMatcher:
    """Test suite for the scanline disparity search."""

    def test_defaults(self):
        """Test default bounds and strides."""
        matcher = DisparityMatcher()

        assert matcher.min_disparity == 1.0
        assert matcher.max_disparity == 64.0
        assert matcher.disparity_step == 1
        assert matcher.pixel_step == 1

    def test_non_positive_values_fall_back_to_defaults(self):
        """Test that zero or negative settings re-derive the defaults."""
        matcher = DisparityMatcher(
            min_disparity=0, max_disparity=-3, disparity_step=0, pixel_step=-1
        )

        assert matcher.min_disparity == 1.0
        assert matcher.max_disparity == 64.0
        assert matcher.disparity_step == 1
        assert matcher.pixel_step == 1

    def test_identical_images_give_zero_disparity(self, textured_image: np.ndarray):
        """Test that a pair of identical images matches at disparity 0 everywhere."""
        matcher = DisparityMatcher()

        result = matcher.match(textured_image, textured_image)

        assert result.disparities.shape == (64, 64)
        assert np.all(result.disparities == 0)
        assert np.all(result.costs == 0)
        assert result.num_accepted == 0

    def test_shifted_patch_recovers_disparity(self, shifted_pair):
        """Test that a patch shifted by 5 px is matched at disparity 5."""
        left, right = shifted_pair
        matcher = DisparityMatcher(max_disparity=16)

        result = matcher.match(left, right)

        assert np.all(result.disparities[20:40, 25:40] == 5)
        assert np.all(result.costs[20:40, 25:40] == 0)
        # Untouched rows still match in place
        assert np.all(result.disparities[:20] == 0)

    def test_ties_keep_smallest_disparity(self):
        """Test that equal costs resolve to the first (smallest) disparity."""
        left = np.full((8, 32, 3), 100, dtype=np.uint8)
        right = np.full((8, 32, 3), 40, dtype=np.uint8)

        result = DisparityMatcher().match(left, right)

        assert np.all(result.disparities == 0)

    def test_search_never_crosses_left_edge(self):
        """Test that pixels near the left edge only consider columns >= 0."""
        rng = np.random.default_rng(7)
        left = rng.integers(0, 256, size=(4, 40, 3), dtype=np.uint8)
        right = np.roll(left, -10, axis=1)

        result = DisparityMatcher(max_disparity=32).match(left, right)

        for x in range(40):
            assert np.all(result.disparities[:, x] <= x)
        assert np.all(result.disparities[:, 10:30] == 10)

    def test_pixel_step_subsamples(self, textured_image: np.ndarray):
        """Test that pixel_step strides both axes."""
        result = DisparityMatcher(pixel_step=4).match(textured_image, textured_image)

        assert result.disparities.shape == (16, 16)
        np.testing.assert_array_equal(result.xs, np.arange(0, 64, 4))
        np.testing.assert_array_equal(result.ys, np.arange(0, 64, 4))

    def test_disparity_step_skips_candidates(self, shifted_pair):
        """Test that odd disparities are unreachable with step 2."""
        left, right = shifted_pair

        result = DisparityMatcher(disparity_step=2, max_disparity=16).match(left, right)

        assert np.all(result.disparities % 2 == 0)

    def test_parallel_and_sequential_agree(self, shifted_pair):
        """Test that band-parallel evaluation matches a single worker."""
        left, right = shifted_pair

        sequential = DisparityMatcher(max_workers=1).match(left, right)
        parallel = DisparityMatcher(max_workers=4).match(left, right)

        np.testing.assert_array_equal(sequential.disparities, parallel.disparities)
        np.testing.assert_array_equal(sequential.costs, parallel.costs)

    def test_sixteen_bit_input(self, shifted_pair):
        """Test that uint16 images are matched in their native range."""
        left, right = shifted_pair
        left16 = left.astype(np.uint16) * 257
        right16 = right.astype(np.uint16) * 257

        result8 = DisparityMatcher(max_disparity=16).match(left, right)
        result16 = DisparityMatcher(max_disparity=16).match(left16, right16)

        np.testing.assert_array_equal(result8.disparities, result16.disparities)

    def test_grayscale_input(self, shifted_pair):
        """Test that single-channel images are accepted."""
        left, right = shifted_pair

        result = DisparityMatcher(max_disparity=16).match(left[:, :, 0], right[:, :, 0])

        assert result.disparities.shape == (64, 64)


class TestDisparityMap:
    """Test suite for disparity acceptance bounds."""

    @pytest.fixture
    def disparity_map(self) -> DisparityMap:
        disparities = np.array([[0, 1, 2, 63, 64]])
        return DisparityMap(
            xs=np.arange(5),
            ys=np.array([3]),
            disparities=disparities,
            costs=np.zeros_like(disparities, dtype=np.float64),
            min_disparity=1.0,
            max_disparity=64.0,
        )

    def test_bounds_are_exclusive(self, disparity_map: DisparityMap):
        """Test that disparities equal to either bound are rejected."""
        np.testing.assert_array_equal(
            disparity_map.accepted_mask, [[False, False, True, True, False]]
        )
        assert disparity_map.num_accepted == 2

    def test_accepted_coordinates(self, disparity_map: DisparityMap):
        """Test that accepted() returns pixel coordinates with disparities."""
        xs, ys, ds = disparity_map.accepted()

        np.testing.assert_array_equal(xs, [2, 3])
        np.testing.assert_array_equal(ys, [3, 3])
        np.testing.assert_array_equal(ds, [2, 63])

    def test_len(self, disparity_map: DisparityMap):
        """Test that len counts sampled pixels."""
        assert len(disparity_map) == 5
