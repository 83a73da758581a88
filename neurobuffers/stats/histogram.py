"""Histogram binning and bar geometry for scalar distributions.

:class:`Histogram` bins an array of values over a fixed range and builds
2-D bar geometry (one quad per bin, tallest bar of height 1) together with
vertical marker lines for a pair of thresholds.  The geometry lives in the
unit square and is meant to be placed on screen by the rendering layer.
"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


class Histogram:
    """Fixed-bin histogram of a scalar array.

    Attributes
    ----------
    bins : numpy.ndarray
        float32 count per bin.
    n_bins : int
        Number of bins.
    max_count : float
        Largest bin count.
    range : tuple of float
        ``(min, max)`` range used for binning.
    vertices : numpy.ndarray
        (n_bins * 4, 2) float32 quad corners, filled by
        :meth:`generate_geometry`.
    indices : numpy.ndarray
        (n_bins * 6,) uint32 triangle indices into :attr:`vertices`.
    """

    def __init__(self):
        self.bins = np.zeros(0, dtype=np.float32)
        self.n_bins = 0
        self.max_count = 0.0
        self.range = (0.0, 0.0)
        self.vertices = np.zeros((0, 2), dtype=np.float32)
        self.indices = np.zeros(0, dtype=np.uint32)

    def compute(self, values, n_bins, vmin, vmax, count=None):
        """Bin ``values`` and regenerate the bar geometry.

        Each value in ``[vmin, vmax]`` is normalised to ``[0, 1]``,
        multiplied by ``n_bins`` and floored to a bin index; a value equal
        to ``vmax`` falls into the last bin.  Values outside the range (and
        NaNs) are dropped silently.

        Parameters
        ----------
        values : array-like
            Scalar values.
        n_bins : int
            Number of bins, at least 1.
        vmin, vmax : float
            Binning range, ``vmin < vmax``.
        count : int or None, optional
            Only the first ``count`` values are used; all when ``None``.

        Returns
        -------
        Histogram
            ``self``, for chaining.

        Raises
        ------
        ValueError
            If ``n_bins < 1`` or ``vmax <= vmin``.
        """
        n_bins = int(n_bins)
        if n_bins < 1:
            raise ValueError(f"n_bins must be at least 1, got {n_bins}.")
        if not vmax > vmin:
            raise ValueError(
                f"Histogram range must satisfy min < max, got ({vmin}, {vmax})."
            )
        vals = np.asarray(values, dtype=np.float64).ravel()
        if count is not None:
            vals = vals[:count]

        inside = (vals >= vmin) & (vals <= vmax)
        normalized = (vals[inside] - vmin) / (vmax - vmin)
        idx = np.floor(normalized * n_bins).astype(np.int64)
        np.minimum(idx, n_bins - 1, out=idx)

        self.bins = np.bincount(idx, minlength=n_bins).astype(np.float32)
        self.n_bins = n_bins
        self.max_count = float(self.bins.max()) if idx.size else 0.0
        self.range = (float(vmin), float(vmax))
        logger.debug(
            "Histogram: %d of %d values binned into %d bins over [%g, %g]",
            idx.size, vals.size, n_bins, vmin, vmax,
        )
        self.generate_geometry()
        return self

    def generate_geometry(self):
        """Build one quad (4 vertices, 2 triangles) per bin.

        Bar ``i`` spans ``[i / n_bins, (i + 1) / n_bins]`` horizontally and
        ``[0, bins[i] / max_count]`` vertically (height 0 for an empty
        histogram).  Corners are ordered top-right, top-left, bottom-right,
        bottom-left and triangulated as ``(0, 1, 2)`` and ``(2, 1, 3)``.

        Returns
        -------
        vertices : numpy.ndarray
            (n_bins * 4, 2) float32.
        indices : numpy.ndarray
            (n_bins * 6,) uint32.
        """
        n = self.n_bins
        bar = 1.0 / n if n else 0.0
        left = np.arange(n, dtype=np.float64) * bar
        right = np.arange(1, n + 1, dtype=np.float64) * bar
        if self.max_count > 0:
            height = self.bins / self.max_count
        else:
            height = np.zeros(n, dtype=np.float64)
        zero = np.zeros(n, dtype=np.float64)

        quads = np.stack(
            [
                np.stack([right, height], axis=1),
                np.stack([left, height], axis=1),
                np.stack([right, zero], axis=1),
                np.stack([left, zero], axis=1),
            ],
            axis=1,
        )
        self.vertices = quads.reshape(n * 4, 2).astype(np.float32)

        base = (np.arange(n, dtype=np.uint32) * 4).reshape(-1, 1)
        pattern = np.array([0, 1, 2, 2, 1, 3], dtype=np.uint32)
        self.indices = (base + pattern).ravel()
        return self.vertices, self.indices

    def threshold_markers(self, lo, hi):
        """Return vertical marker lines for two thresholds.

        Parameters
        ----------
        lo, hi : float
            Threshold values in data units.

        Returns
        -------
        numpy.ndarray
            (4, 2) float32 line endpoints: ``(x_lo, 1), (x_lo, 0), (x_hi, 1),
            (x_hi, 0)`` where ``x`` is the threshold's position relative to
            :attr:`range`.
        """
        rmin, rmax = self.range
        if not rmax > rmin:
            raise ValueError("threshold_markers() requires a computed histogram.")
        x_lo = (lo - rmin) / (rmax - rmin)
        x_hi = (hi - rmin) / (rmax - rmin)
        return np.array(
            [[x_lo, 1.0], [x_lo, 0.0], [x_hi, 1.0], [x_hi, 0.0]], dtype=np.float32
        )


def compute_histogram(values, n_bins, vmin, vmax, count=None):
    """Bin ``values`` into a new :class:`Histogram`.

    Convenience wrapper around :meth:`Histogram.compute`; see there for the
    parameters.
    """
    return Histogram().compute(values, n_bins, vmin, vmax, count=count)
