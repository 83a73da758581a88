"""Tests for neurobuffers/io/surface_io.py.

Surfaces are either packed by hand or written with nibabel's FreeSurfer
writer, so no external data is required.
"""

import io
import os
import tempfile

import numpy as np
import pytest
from nibabel.freesurfer.io import read_geometry, write_geometry

from neurobuffers.io.surface_io import MAX_HEADER_SCAN, decode_surface, read_surface

_STAMP = "created by tester on Mon Oct 19 12:00:00 2026"

_QUAD_V = np.array(
    [[0.0, 0.0, 0.0], [2.0, 0.0, 0.0], [0.0, 4.0, 0.0], [2.0, 4.0, 1.0]],
    dtype=np.float32,
)
_QUAD_F = np.array([[0, 1, 2], [1, 3, 2]], dtype=np.int32)

_TETRA_V = np.array(
    [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]],
    dtype=np.float32,
)
_TETRA_F = np.array([[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]], dtype=np.int32)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _surface_bytes(vertices, faces, stamp=_STAMP):
    """Pack a FreeSurfer triangle surface in memory."""
    return b"".join([
        b"\xff\xff\xfe",
        (stamp + "\n\n").encode("latin-1"),
        np.array([len(vertices), len(faces)], dtype=">i4").tobytes(),
        np.asarray(vertices, dtype=">f4").tobytes(),
        np.asarray(faces, dtype=">i4").tobytes(),
    ])


def _write_tmp_surface(vertices, faces):
    fd, path = tempfile.mkstemp(suffix=".white")
    os.close(fd)
    write_geometry(path, vertices, faces, create_stamp=_STAMP)
    return path


# ---------------------------------------------------------------------------
# decode_surface
# ---------------------------------------------------------------------------

class TestDecodeSurface:
    def test_two_triangle_mesh(self):
        surf = decode_surface(_surface_bytes(_QUAD_V, _QUAD_F))
        assert surf.n_vertices == 4
        assert surf.n_faces == 2
        np.testing.assert_array_equal(surf.vertices, _QUAD_V)
        np.testing.assert_array_equal(surf.faces, _QUAD_F)
        assert surf.faces.dtype == np.uint32
        assert surf.position_buffer.shape == (18,)
        assert surf.normal_buffer.shape == (18,)
        assert surf.position_buffer.dtype == np.float32

    def test_position_buffer_follows_faces(self):
        surf = decode_surface(_surface_bytes(_QUAD_V, _QUAD_F))
        np.testing.assert_array_equal(
            surf.position_buffer.reshape(-1, 3), _QUAD_V[_QUAD_F.ravel()]
        )
        np.testing.assert_array_equal(
            surf.normal_buffer.reshape(-1, 3), surf.normals[_QUAD_F.ravel()]
        )

    def test_normals_of_flat_faces_are_unit(self):
        v = _QUAD_V.copy()
        v[3, 2] = 0.0
        surf = decode_surface(_surface_bytes(v, _QUAD_F))
        norms = np.linalg.norm(surf.normal_buffer.reshape(-1, 3), axis=1)
        np.testing.assert_allclose(norms, 1.0, rtol=1e-6)
        np.testing.assert_allclose(surf.normals, [[0, 0, 1]] * 4, atol=1e-6)

    def test_center_and_scale(self):
        surf = decode_surface(_surface_bytes(_QUAD_V, _QUAD_F))
        np.testing.assert_allclose(surf.center, [1.0, 2.0, 0.5])
        np.testing.assert_allclose(surf.scale, [0.5, 0.25, 1.0])

    def test_header_and_magic(self):
        surf = decode_surface(_surface_bytes(_QUAD_V, _QUAD_F))
        assert surf.magic == b"\xff\xff\xfe"
        assert surf.header == _STAMP

    def test_face_index_out_of_range(self):
        faces = np.array([[0, 1, 4]], dtype=np.int32)
        with pytest.raises(ValueError, match="out of range"):
            decode_surface(_surface_bytes(_QUAD_V, faces))

    @pytest.mark.parametrize("cut", [1, 12, 40])
    def test_truncated_buffer(self, cut):
        data = _surface_bytes(_QUAD_V, _QUAD_F)
        with pytest.raises(ValueError, match="Truncated buffer"):
            decode_surface(data[:-cut])

    def test_orphan_vertex_policies(self):
        v = np.vstack([_QUAD_V, [[9.0, 9.0, 9.0]]]).astype(np.float32)
        data = _surface_bytes(v, _QUAD_F)
        with pytest.warns(UserWarning, match="not referenced"):
            surf = decode_surface(data)
        np.testing.assert_array_equal(surf.normals[4], [0, 0, 0])
        surf = decode_surface(data, orphans="propagate")
        assert np.all(np.isnan(surf.normals[4]))
        with pytest.raises(ValueError, match="not referenced"):
            decode_surface(data, orphans="raise")


# ---------------------------------------------------------------------------
# Header scan
# ---------------------------------------------------------------------------

_ONE_FACE_V = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], dtype=np.float32)
_ONE_FACE_F = np.array([[0, 1, 2]], dtype=np.int32)


def _raw_surface(header_bytes):
    """Pack a surface whose bytes between magic and counts are given verbatim."""
    return b"".join([
        b"\xff\xff\xfe",
        header_bytes,
        np.array([3, 1], dtype=">i4").tobytes(),
        _ONE_FACE_V.astype(">f4").tobytes(),
        _ONE_FACE_F.astype(">i4").tobytes(),
    ])


class TestHeaderScan:
    def test_scan_limit_constant(self):
        assert MAX_HEADER_SCAN == 200

    def test_newline_on_last_scanned_byte(self):
        surf = decode_surface(_raw_surface(b"s" * 199 + b"\n\n"))
        assert surf.header == "s" * 199
        assert surf.n_vertices == 3
        assert surf.n_faces == 1

    def test_scan_stops_without_newline(self):
        # 200 scanned bytes plus exactly one skipped byte, then the counts
        surf = decode_surface(_raw_surface(b"s" * 201))
        assert surf.header == "s" * 200
        assert surf.n_vertices == 3
        assert surf.n_faces == 1
        np.testing.assert_array_equal(surf.vertices, _ONE_FACE_V)
        np.testing.assert_array_equal(surf.faces, _ONE_FACE_F)

    def test_scan_limit_misaligns_longer_stamp(self):
        # a 202-byte stamp leaves one stamp byte in front of the counts
        with pytest.raises(ValueError, match="Truncated buffer: vertex positions"):
            decode_surface(_raw_surface(b"s" * 202))

    def test_short_buffer_without_newline(self):
        with pytest.raises(ValueError, match="Truncated buffer: surface header"):
            decode_surface(b"\xff\xff\xfe" + b"created by nobody")


# ---------------------------------------------------------------------------
# read_surface and nibabel cross-check
# ---------------------------------------------------------------------------

class TestReadSurface:
    def test_matches_nibabel(self):
        path = _write_tmp_surface(_TETRA_V, _TETRA_F)
        try:
            surf = read_surface(path)
            nib_v, nib_f = read_geometry(path)
        finally:
            os.unlink(path)
        np.testing.assert_allclose(surf.vertices, nib_v)
        np.testing.assert_array_equal(surf.faces, nib_f)
        assert surf.header == _STAMP
        assert surf.position_buffer.shape == (36,)

    def test_bytes_and_file_object(self):
        data = _surface_bytes(_TETRA_V, _TETRA_F)
        from_bytes = read_surface(data)
        from_file = read_surface(io.BytesIO(data))
        np.testing.assert_array_equal(from_bytes.position_buffer, from_file.position_buffer)
        np.testing.assert_array_equal(from_bytes.normal_buffer, from_file.normal_buffer)

    def test_missing_file(self):
        with pytest.raises(OSError):
            read_surface("/nonexistent/lh.white")
