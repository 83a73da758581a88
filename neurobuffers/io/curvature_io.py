"""Decoder for FreeSurfer "new format" curvature files (``lh.curv``, ``lh.sulc``, ...).

Layout (all numbers big-endian):

* 3-byte magic ``0xFFFFFF`` (16777215);
* ``uint32`` vertex count;
* ``uint32`` face count (not used);
* ``uint32`` values per vertex (not used);
* ``vertex count`` ``float32`` values.

A curvature map only makes sense together with the surface it was computed
on, so decoding takes the already decoded :class:`~neurobuffers.types.SurfaceMesh`
as a second input and unrolls the values along its faces.
"""

import logging

import numpy as np

from ..geometry.prepare import unroll_faces
from ..stats.descriptive import curvature_statistics
from ..stats.histogram import compute_histogram
from ..types import CurvatureMap, SurfaceMesh
from .binary import ByteCursor
from .inputs import resolve_buffer

logger = logging.getLogger(__name__)

CURVATURE_MAGIC = 16777215


def decode_curvature(data, surface):
    """Decode a curvature map and align it to ``surface``.

    Parameters
    ----------
    data : bytes-like
        The complete curvature file contents.
    surface : SurfaceMesh
        The decoded surface the values belong to.

    Returns
    -------
    CurvatureMap
        Per-vertex values, their signed statistics and a face-unrolled
        buffer of ``3 * surface.n_faces`` values.

    Raises
    ------
    ValueError
        If the magic number is not ``16777215``, the buffer is truncated,
        or the vertex count differs from the surface's.
    TypeError
        If ``surface`` is not a :class:`SurfaceMesh`.
    """
    if not isinstance(surface, SurfaceMesh):
        raise TypeError(
            f"surface must be a decoded SurfaceMesh, got {type(surface).__name__!r}."
        )
    cursor = ByteCursor(data)
    cursor.require(3, "curvature magic")
    magic = cursor.read_uint24_be()
    if magic != CURVATURE_MAGIC:
        raise ValueError(
            f"Invalid curvature magic number {magic} (expected {CURVATURE_MAGIC}); "
            f"only the FreeSurfer new curvature format is supported."
        )

    cursor.require(12, "curvature header")
    n_vertices = cursor.read_uint32_be()
    n_faces_field = cursor.read_uint32_be()
    values_per_vertex = cursor.read_uint32_be()
    logger.debug(
        "Curvature: %d vertices (face field %d, %d values per vertex)",
        n_vertices, n_faces_field, values_per_vertex,
    )
    if n_vertices != surface.n_vertices:
        raise ValueError(
            f"Curvature has {n_vertices} values but surface has "
            f"{surface.n_vertices} vertices.\n"
            "This usually means the curvature file does not match the surface "
            "(e.g. RH curvature used with LH surface)."
        )

    cursor.require(4 * n_vertices, "curvature values")
    values = cursor.read_float32_be_array(n_vertices)
    stats = curvature_statistics(values)
    buffer = unroll_faces(values, surface.faces)

    logger.info(
        "Decoded curvature for %d vertices, range [%g, %g]",
        n_vertices, stats["min"], stats["max"],
    )
    return CurvatureMap(
        values=values,
        buffer=buffer,
        n_faces_field=n_faces_field,
        values_per_vertex=values_per_vertex,
        **stats,
    )


def read_curvature(source, surface):
    """Read and decode a curvature file for ``surface``.

    Parameters
    ----------
    source : str, os.PathLike, bytes-like or file-like
        Path to the curvature file, its contents, or an open binary file.
    surface : SurfaceMesh
        The decoded surface.

    Returns
    -------
    CurvatureMap
    """
    return decode_curvature(resolve_buffer(source), surface)


def curvature_histogram(curvature, n_bins=64, use_display_range=True):
    """Histogram a curvature map over its display or full range.

    Parameters
    ----------
    curvature : CurvatureMap
        Decoded curvature.
    n_bins : int, optional, default 64
        Number of bins.
    use_display_range : bool, optional, default True
        Bin over ``(display_min, display_max)`` when True, otherwise over
        ``(min, max)``.

    Returns
    -------
    Histogram
    """
    if use_display_range:
        lo, hi = curvature.display_min, curvature.display_max
    else:
        lo, hi = curvature.min, curvature.max
    return compute_histogram(np.asarray(curvature.values), n_bins, lo, hi)
