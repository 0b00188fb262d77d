"""Dense single-pixel disparity search along rectified scanlines."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from ..image import to_rgb16

logger = logging.getLogger(__name__)

DEFAULT_MIN_DISPARITY = 1.0
DEFAULT_MAX_DISPARITY = 64.0

# Rows per band handed to one worker
_BAND_ROWS = 16


@dataclass
class DisparityMap:
    """Best disparity for every sampled pixel of the reference image.

    Attributes:
        xs: (C,) sampled column coordinates
        ys: (R,) sampled row coordinates
        disparities: (R, C) best disparity per sample (pixels)
        costs: (R, C) SAD cost of the best candidate
        min_disparity: Lower acceptance bound (exclusive)
        max_disparity: Upper acceptance bound (exclusive)
    """

    xs: np.ndarray
    ys: np.ndarray
    disparities: np.ndarray
    costs: np.ndarray
    min_disparity: float
    max_disparity: float

    @property
    def accepted_mask(self) -> np.ndarray:
        """Return (R, C) mask of disparities strictly inside the bounds."""
        return (self.disparities > self.min_disparity) & (
            self.disparities < self.max_disparity
        )

    def accepted(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(x, y, d)`` arrays for accepted samples, row-major order."""
        mask = self.accepted_mask
        rows, cols = np.nonzero(mask)
        return self.xs[cols], self.ys[rows], self.disparities[rows, cols]

    @property
    def num_accepted(self) -> int:
        """Return number of samples that passed the disparity bounds."""
        return int(np.count_nonzero(self.accepted_mask))

    def __len__(self) -> int:
        """Return number of sampled pixels."""
        return int(self.disparities.size)


class DisparityMatcher:
    """Finds the best matching target column for sampled reference pixels.

    For each sampled pixel ``(x, y)`` the target image is searched along the
    same row from ``x' = x`` leftwards to ``max(x - max_disparity, 0)`` in
    steps of ``disparity_step``. The matching cost is the sum of absolute
    R, G, B differences of the two single pixels in the 16-bit range. The
    first strict minimum wins, so ties resolve to the smallest disparity.

    The search has no dependency between pixels. Rows are split into bands
    evaluated on a thread pool and merged back in row order.
    """

    def __init__(
        self,
        min_disparity: float = DEFAULT_MIN_DISPARITY,
        max_disparity: float = DEFAULT_MAX_DISPARITY,
        disparity_step: int = 1,
        pixel_step: int = 1,
        max_workers: int | None = None,
    ) -> None:
        """Initialize matcher.

        Non-positive values fall back to the defaults (1, 64, 1, 1).

        Args:
            min_disparity: Exclusive lower bound for accepted disparities
            max_disparity: Exclusive upper bound, also the search radius
            disparity_step: Stride between candidate columns
            pixel_step: Stride between sampled pixels in both axes
            max_workers: Thread pool size. None lets the executor decide,
                1 runs the bands sequentially.
        """
        self._min_disparity = (
            float(min_disparity) if min_disparity > 0 else DEFAULT_MIN_DISPARITY
        )
        self._max_disparity = (
            float(max_disparity) if max_disparity > 0 else DEFAULT_MAX_DISPARITY
        )
        self._disparity_step = int(disparity_step) if disparity_step > 0 else 1
        self._pixel_step = int(pixel_step) if pixel_step > 0 else 1
        self._max_workers = max_workers

    def match(self, reference: np.ndarray, target: np.ndarray) -> DisparityMap:
        """Compute the best disparity for every sampled reference pixel.

        Both images must have the same size; checking this is the caller's
        job.

        Args:
            reference: Reference (left) image
            target: Target (right) image

        Returns:
            DisparityMap with per-sample disparities and costs
        """
        ref = to_rgb16(reference).astype(np.int32)
        tgt = to_rgb16(target).astype(np.int32)

        height, width = ref.shape[:2]
        ys = np.arange(0, height, self._pixel_step)
        xs = np.arange(0, width, self._pixel_step)

        bands = [ys[i : i + _BAND_ROWS] for i in range(0, len(ys), _BAND_ROWS)]

        if self._max_workers == 1 or len(bands) <= 1:
            results = [self._match_band(ref, tgt, band, xs) for band in bands]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                results = list(
                    executor.map(lambda band: self._match_band(ref, tgt, band, xs), bands)
                )

        if results:
            disparities = np.concatenate([r[0] for r in results], axis=0)
            costs = np.concatenate([r[1] for r in results], axis=0)
        else:
            disparities = np.zeros((0, len(xs)), dtype=np.int64)
            costs = np.zeros((0, len(xs)), dtype=np.float64)

        logger.debug(
            "[Stereo] matched %d samples over %d bands", disparities.size, len(bands)
        )

        return DisparityMap(
            xs=xs,
            ys=ys,
            disparities=disparities,
            costs=costs,
            min_disparity=self._min_disparity,
            max_disparity=self._max_disparity,
        )

    def _match_band(
        self,
        ref: np.ndarray,
        tgt: np.ndarray,
        rows: np.ndarray,
        xs: np.ndarray,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Search all candidates for one band of sampled rows."""
        ref_band = ref[rows][:, xs]  # (R, C, 3)
        tgt_rows = tgt[rows]  # (R, W, 3)

        best_cost = np.full((len(rows), len(xs)), np.inf, dtype=np.float64)
        best_disp = np.zeros((len(rows), len(xs)), dtype=np.int64)

        for d in range(0, int(self._max_disparity) + 1, self._disparity_step):
            # xs is sorted, so columns that can shift by d form a suffix
            first = int(np.searchsorted(xs, d))
            if first >= len(xs):
                break

            cost = np.abs(ref_band[:, first:] - tgt_rows[:, xs[first:] - d]).sum(axis=2)

            cost_view = best_cost[:, first:]
            disp_view = best_disp[:, first:]
            better = cost < cost_view
            cost_view[better] = cost[better]
            disp_view[better] = d

        return best_disp, best_cost

    @property
    def min_disparity(self) -> float:
        """Return exclusive lower acceptance bound."""
        return self._min_disparity

    @property
    def max_disparity(self) -> float:
        """Return exclusive upper acceptance bound and search radius."""
        return self._max_disparity

    @property
    def disparity_step(self) -> int:
        """Return stride between candidate columns."""
        return self._disparity_step

    @property
    def pixel_step(self) -> int:
        """Return stride between sampled pixels."""
        return self._pixel_step
