"""Descriptive statistics and histograms of scalar maps."""
from .descriptive import curvature_statistics
from .histogram import Histogram, compute_histogram

__all__ = [
    'Histogram',
    'compute_histogram',
    'curvature_statistics',
]
