"""Signed descriptive statistics for per-vertex scalar maps."""

import math

import numpy as np

# Width of the display range around each signed mean, in standard deviations
DISPLAY_STD_FACTOR = 2.5


def _sample_std(sq_sum, n):
    return math.sqrt(sq_sum / (n - 1)) if n > 1 else 0.0


def curvature_statistics(values):
    """Compute the signed statistics of a curvature map.

    Values are partitioned into a non-negative (``>= 0``) and a negative
    subset.  A first pass collects counts, sums and the global extrema; a
    second pass accumulates squared deviations from each subset's own mean
    and from the overall mean.

    Parameters
    ----------
    values : array-like
        1-D array of per-vertex values.

    Returns
    -------
    dict
        Keys ``min``, ``max``, ``pos_mean``, ``neg_mean``, ``mean``,
        ``pos_std``, ``neg_std``, ``std``, ``display_min`` and
        ``display_max``, all Python floats.  Means of empty subsets are 0;
        standard deviations use the sample (n - 1) denominator and are 0
        for fewer than two members.

    Notes
    -----
    ``display_min`` / ``display_max`` are ``neg_mean - 2.5 * neg_std`` and
    ``pos_mean + 2.5 * pos_std``, a narrower range than the extrema that
    suits colour mapping of typical curvature data.
    """
    vals = np.asarray(values, dtype=np.float64).ravel()
    n = vals.size
    if n == 0:
        return {
            "min": 0.0, "max": 0.0,
            "pos_mean": 0.0, "neg_mean": 0.0, "mean": 0.0,
            "pos_std": 0.0, "neg_std": 0.0, "std": 0.0,
            "display_min": 0.0, "display_max": 0.0,
        }

    pos = vals >= 0.0
    pos_vals = vals[pos]
    neg_vals = vals[~pos]
    n_pos = pos_vals.size
    n_neg = neg_vals.size

    pos_mean = float(np.sum(pos_vals)) / n_pos if n_pos else 0.0
    neg_mean = float(np.sum(neg_vals)) / n_neg if n_neg else 0.0
    mean = float(np.sum(vals)) / n

    pos_std = _sample_std(float(np.sum((pos_vals - pos_mean) ** 2)), n_pos)
    neg_std = _sample_std(float(np.sum((neg_vals - neg_mean) ** 2)), n_neg)
    std = _sample_std(float(np.sum((vals - mean) ** 2)), n)

    return {
        "min": float(np.min(vals)),
        "max": float(np.max(vals)),
        "pos_mean": pos_mean,
        "neg_mean": neg_mean,
        "mean": mean,
        "pos_std": pos_std,
        "neg_std": neg_std,
        "std": std,
        "display_min": neg_mean - DISPLAY_STD_FACTOR * neg_std,
        "display_max": pos_mean + DISPLAY_STD_FACTOR * pos_std,
    }
