"""Decoder for FreeSurfer binary triangle surfaces (``lh.white``, ``rh.pial``, ...).

Layout (all numbers big-endian):

* 3 magic bytes (``0xFFFFFE`` for triangle files);
* a free-form ASCII creation stamp terminated by two newline bytes;
* ``uint32`` vertex count, ``uint32`` face count;
* ``vertex count`` x 3 ``float32`` positions;
* ``face count`` x 3 ``uint32`` vertex indices.

Besides parsing, the decoder derives averaged vertex normals, unrolls
positions and normals per face corner, and computes the bounding-box
center and scale (see :mod:`neurobuffers.geometry.prepare`).
"""

import logging

import numpy as np

from ..geometry.prepare import bounding_box, center_and_scale, unroll_faces, vertex_normals
from ..types import SurfaceMesh
from .binary import ByteCursor
from .inputs import resolve_buffer

logger = logging.getLogger(__name__)

# Upper bound on the bytes scanned for the first header newline
MAX_HEADER_SCAN = 200


def _skip_header(cursor):
    """Advance past the creation stamp and return it as text.

    Scans forward byte by byte to the first newline, bounded by
    :data:`MAX_HEADER_SCAN` bytes, then consumes one more byte (the second
    newline).
    """
    start = cursor.offset
    iters = 0
    while True:
        cursor.require(1, "surface header")
        cur = cursor.read_uint8()
        iters += 1
        if iters >= MAX_HEADER_SCAN or cur == 0x0A:
            break
    stamp = cursor.data[start:cursor.offset].rstrip(b"\n").decode("latin-1")
    cursor.require(1, "surface header")
    cursor.read_uint8()
    return stamp


def decode_surface(data, orphans="zero"):
    """Decode a FreeSurfer triangle surface from an in-memory buffer.

    Parameters
    ----------
    data : bytes-like
        The complete file contents.
    orphans : {'zero', 'propagate', 'raise'}, optional, default 'zero'
        Handling of vertices not referenced by any face, passed to
        :func:`~neurobuffers.geometry.prepare.vertex_normals`.

    Returns
    -------
    SurfaceMesh
        Vertices, faces, averaged normals, face-unrolled position and
        normal buffers (``9 * n_faces`` floats each), center and scale.

    Raises
    ------
    ValueError
        If the buffer is shorter than the declared counts require, or a face
        references a vertex index ``>= n_vertices``.
    """
    cursor = ByteCursor(data)
    cursor.require(3, "surface magic")
    magic = cursor.data[:3]
    cursor.skip(3)
    stamp = _skip_header(cursor)

    cursor.require(8, "vertex and face counts")
    n_vertices = cursor.read_uint32_be()
    n_faces = cursor.read_uint32_be()
    logger.debug("Surface: %d vertices, %d faces", n_vertices, n_faces)

    cursor.require(12 * n_vertices, "vertex positions")
    vertices = cursor.read_float32_be_array(3 * n_vertices).reshape(n_vertices, 3)
    cursor.require(12 * n_faces, "face indices")
    faces = cursor.read_uint32_be_array(3 * n_faces).reshape(n_faces, 3)

    if n_faces > 0 and int(faces.max()) >= n_vertices:
        raise ValueError(
            f"Surface face indices out of range [0, {n_vertices}): "
            f"max={int(faces.max())}."
        )

    normals = vertex_normals(vertices, faces, orphans=orphans)
    position_buffer = unroll_faces(vertices, faces)
    normal_buffer = unroll_faces(normals, faces)

    if n_vertices > 0:
        center, scale = center_and_scale(*bounding_box(vertices))
    else:
        center = np.zeros(3, dtype=np.float32)
        scale = np.ones(3, dtype=np.float32)

    logger.info("Decoded surface with %d vertices and %d faces", n_vertices, n_faces)
    return SurfaceMesh(
        vertices=vertices,
        faces=faces.astype(np.uint32),
        normals=normals,
        position_buffer=position_buffer,
        normal_buffer=normal_buffer,
        center=center,
        scale=scale,
        magic=bytes(magic),
        header=stamp,
    )


def read_surface(source, orphans="zero"):
    """Read and decode a FreeSurfer surface.

    Parameters
    ----------
    source : str, os.PathLike, bytes-like or file-like
        Path to the surface file, its contents, or an open binary file.
    orphans : str, optional
        See :func:`decode_surface`.

    Returns
    -------
    SurfaceMesh
    """
    return decode_surface(resolve_buffer(source), orphans=orphans)
