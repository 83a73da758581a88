"""Shared geometry preprocessing for the surface and track decoders.

The routines here operate on numpy arrays only: bounding boxes and the
center/scale pair derived from them, face-normal accumulation into
averaged vertex normals, and unrolling of indexed per-vertex data into flat
per-face-corner buffers (one independent entry for every triangle corner,
so consumers never need an index buffer).
"""

import logging
import warnings

import numpy as np

logger = logging.getLogger(__name__)

_ORPHAN_POLICIES = ("zero", "propagate", "raise")


def bounding_box(points):
    """Return the axis-aligned bounding box of a point array.

    Parameters
    ----------
    points : numpy.ndarray
        Coordinates of shape (n_points, 3).

    Returns
    -------
    bbmin, bbmax : numpy.ndarray
        Per-axis minimum and maximum, each of shape (3,).

    Raises
    ------
    ValueError
        If ``points`` is empty.
    """
    points = np.asarray(points)
    if points.shape[0] == 0:
        raise ValueError("Cannot compute the bounding box of an empty point set.")
    return np.min(points, axis=0), np.max(points, axis=0)


def center_and_scale(bbmin, bbmax):
    """Derive the center and per-axis scale factor from a bounding box.

    ``center`` is the box midpoint and ``scale`` the component-wise
    reciprocal of the box extent.  A zero-extent axis is not clamped and
    gives an infinite scale.

    Parameters
    ----------
    bbmin, bbmax : array-like
        Per-axis box extrema, shape (3,).

    Returns
    -------
    center, scale : numpy.ndarray
        float32 arrays of shape (3,).
    """
    bbmin = np.asarray(bbmin, dtype=np.float64)
    bbmax = np.asarray(bbmax, dtype=np.float64)
    extent = bbmax - bbmin
    center = extent / 2.0 + bbmin
    with np.errstate(divide="ignore"):
        scale = 1.0 / extent
    return center.astype(np.float32), scale.astype(np.float32)


def unroll_faces(values, faces):
    """Duplicate per-vertex data for every triangle corner.

    Parameters
    ----------
    values : numpy.ndarray
        Per-vertex data of shape (n_vertices,) or (n_vertices, k).
    faces : numpy.ndarray
        Triangle indices of shape (n_faces, 3).

    Returns
    -------
    numpy.ndarray
        Flat float32 buffer of length ``n_faces * 3 * k`` ordered by face,
        then corner, then component.
    """
    values = np.asarray(values)
    faces = np.asarray(faces, dtype=np.int64)
    return np.ascontiguousarray(values[faces.ravel()], dtype=np.float32).ravel()


def face_normals(v, t):
    """Compute unit face normals ``cross(v1 - v0, v2 - v1)``.

    Degenerate faces (zero-length cross product) get a zero normal.

    Parameters
    ----------
    v : numpy.ndarray
        Vertex coordinates (n_vertices, 3).
    t : numpy.ndarray
        Triangle indices (n_faces, 3).

    Returns
    -------
    numpy.ndarray
        Face normals (n_faces, 3), float64.
    """
    v = np.asarray(v, dtype=np.float64)
    t = np.asarray(t, dtype=np.int64)
    v0 = v[t[:, 0], :]
    v1 = v[t[:, 1], :]
    v2 = v[t[:, 2], :]
    cr = np.cross(v1 - v0, v2 - v1)
    ln = np.sqrt(np.sum(cr * cr, axis=1))
    ln[ln == 0] = 1
    return cr / ln.reshape(-1, 1)


def vertex_normals(v, t, orphans="zero"):
    """Average the unit normals of the faces adjacent to each vertex.

    Every face adds its unit normal to each of its three vertices and
    increments their contribution counts; each vertex normal is the sum
    divided by the count.  The result is an average of unit vectors and is
    therefore not re-normalised.

    Parameters
    ----------
    v : numpy.ndarray
        Vertex coordinates (n_vertices, 3).
    t : numpy.ndarray
        Triangle indices (n_faces, 3).
    orphans : {'zero', 'propagate', 'raise'}, optional, default 'zero'
        What to do with vertices referenced by no face:

        * ``'zero'``: give them a zero normal and emit a warning;
        * ``'propagate'``: keep the non-finite result of dividing by a
          zero count;
        * ``'raise'``: raise ``ValueError``.

    Returns
    -------
    numpy.ndarray
        Per-vertex normals (n_vertices, 3), float32.

    Raises
    ------
    ValueError
        If ``orphans`` is not a known policy, or is ``'raise'`` and the mesh
        has unreferenced vertices.
    """
    if orphans not in _ORPHAN_POLICIES:
        raise ValueError(
            f"orphans must be one of {_ORPHAN_POLICIES}, got {orphans!r}."
        )
    v = np.asarray(v)
    n_vertices = v.shape[0]
    t = np.asarray(t, dtype=np.int64).reshape(-1, 3)
    fn = face_normals(v, t)
    idx = t.ravel()
    counts = np.bincount(idx, minlength=n_vertices)
    n = np.empty((n_vertices, 3), dtype=np.float64)
    contribs = np.repeat(fn, 3, axis=0)
    for j in range(3):
        n[:, j] = np.bincount(idx, weights=contribs[:, j], minlength=n_vertices)

    orphan = counts == 0
    n_orphans = int(np.count_nonzero(orphan))
    if n_orphans and orphans == "raise":
        raise ValueError(
            f"{n_orphans} vertices are not referenced by any face; "
            f"first unreferenced vertex is {int(np.flatnonzero(orphan)[0])}."
        )
    with np.errstate(divide="ignore", invalid="ignore"):
        n = n / counts.reshape(-1, 1)
    if n_orphans:
        logger.debug("%d vertices without adjacent faces", n_orphans)
        if orphans == "zero":
            warnings.warn(
                f"{n_orphans} vertices are not referenced by any face; "
                "their normals are set to zero.",
                stacklevel=3,
            )
            n[orphan, :] = 0.0
    return n.astype(np.float32)
