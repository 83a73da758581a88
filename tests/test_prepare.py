"""Tests for neurobuffers/geometry/prepare.py and neurobuffers/stats/descriptive.py."""

import numpy as np
import pytest

from neurobuffers.geometry.prepare import (
    bounding_box,
    center_and_scale,
    face_normals,
    unroll_faces,
    vertex_normals,
)
from neurobuffers.stats.descriptive import curvature_statistics

# Two triangles in the z=0 plane sharing the edge (1, 2)
_QUAD_V = np.array(
    [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]],
    dtype=np.float32,
)
_QUAD_F = np.array([[0, 1, 2], [1, 3, 2]], dtype=np.uint32)


# ---------------------------------------------------------------------------
# Bounding box, center and scale
# ---------------------------------------------------------------------------

class TestBoundingBox:
    def test_bounding_box(self):
        bbmin, bbmax = bounding_box([[1.0, -2.0, 3.0], [-1.0, 4.0, 0.0]])
        np.testing.assert_array_equal(bbmin, [-1.0, -2.0, 0.0])
        np.testing.assert_array_equal(bbmax, [1.0, 4.0, 3.0])

    def test_empty_raises(self):
        with pytest.raises(ValueError, match="empty"):
            bounding_box(np.zeros((0, 3)))

    def test_center_and_scale(self):
        center, scale = center_and_scale([-1.0, 0.0, 2.0], [3.0, 10.0, 4.0])
        np.testing.assert_allclose(center, [1.0, 5.0, 3.0])
        np.testing.assert_allclose(scale, [0.25, 0.1, 0.5])
        assert center.dtype == np.float32
        assert scale.dtype == np.float32

    def test_flat_axis_gives_infinite_scale(self):
        _, scale = center_and_scale(*bounding_box(_QUAD_V))
        np.testing.assert_array_equal(scale[:2], [1.0, 1.0])
        assert np.isinf(scale[2])


# ---------------------------------------------------------------------------
# Normals
# ---------------------------------------------------------------------------

class TestNormals:
    def test_face_normals_follow_winding(self):
        fn = face_normals(_QUAD_V, _QUAD_F)
        np.testing.assert_allclose(fn, [[0, 0, 1], [0, 0, 1]])
        fn_flipped = face_normals(_QUAD_V, _QUAD_F[:, ::-1])
        np.testing.assert_allclose(fn_flipped, [[0, 0, -1], [0, 0, -1]])

    def test_degenerate_face_has_zero_normal(self):
        v = np.array([[0, 0, 0], [1, 0, 0], [2, 0, 0]], dtype=np.float32)
        np.testing.assert_array_equal(face_normals(v, [[0, 1, 2]]), [[0, 0, 0]])

    def test_vertex_normals_are_face_averages(self):
        # a tent: two faces with different normals share vertices 1 and 2
        v = np.array(
            [[0, 0, 0], [1, 0, 0], [0, 1, 0], [1, 1, 1]], dtype=np.float32
        )
        t = np.array([[0, 1, 2], [1, 3, 2]])
        fn = face_normals(v, t)
        vn = vertex_normals(v, t)
        assert vn.dtype == np.float32
        np.testing.assert_allclose(vn[0], fn[0], atol=1e-6)
        np.testing.assert_allclose(vn[3], fn[1], atol=1e-6)
        np.testing.assert_allclose(vn[1], (fn[0] + fn[1]) / 2, atol=1e-6)
        np.testing.assert_allclose(vn[2], (fn[0] + fn[1]) / 2, atol=1e-6)

    def test_orphan_zero_warns(self):
        v = np.vstack([_QUAD_V, [[5.0, 5.0, 5.0]]])
        with pytest.warns(UserWarning, match="1 vertices are not referenced"):
            vn = vertex_normals(v, _QUAD_F)
        np.testing.assert_array_equal(vn[4], [0, 0, 0])
        np.testing.assert_allclose(vn[:4], [[0, 0, 1]] * 4)

    def test_orphan_propagate(self):
        v = np.vstack([_QUAD_V, [[5.0, 5.0, 5.0]]])
        vn = vertex_normals(v, _QUAD_F, orphans="propagate")
        assert np.all(np.isnan(vn[4]))

    def test_orphan_raise(self):
        v = np.vstack([_QUAD_V, [[5.0, 5.0, 5.0]]])
        with pytest.raises(ValueError, match="first unreferenced vertex is 4"):
            vertex_normals(v, _QUAD_F, orphans="raise")

    def test_unknown_orphan_policy(self):
        with pytest.raises(ValueError, match="orphans must be one of"):
            vertex_normals(_QUAD_V, _QUAD_F, orphans="ignore")


# ---------------------------------------------------------------------------
# Unrolling
# ---------------------------------------------------------------------------

class TestUnroll:
    def test_unroll_vectors(self):
        buf = unroll_faces(_QUAD_V, _QUAD_F)
        assert buf.shape == (18,)
        assert buf.dtype == np.float32
        np.testing.assert_array_equal(buf[9:12], _QUAD_V[1])
        np.testing.assert_array_equal(buf[12:15], _QUAD_V[3])

    def test_unroll_scalars(self):
        buf = unroll_faces(np.array([10.0, 11.0, 12.0, 13.0]), _QUAD_F)
        np.testing.assert_array_equal(buf, [10, 11, 12, 11, 13, 12])


# ---------------------------------------------------------------------------
# Curvature statistics
# ---------------------------------------------------------------------------

class TestCurvatureStatistics:
    def test_signed_statistics(self):
        values = np.array([1.0, 3.0, -2.0, -4.0, 0.0])
        stats = curvature_statistics(values)
        assert stats["min"] == -4.0
        assert stats["max"] == 3.0
        # zero counts as non-negative
        assert stats["pos_mean"] == pytest.approx(4.0 / 3.0)
        assert stats["neg_mean"] == pytest.approx(-3.0)
        assert stats["mean"] == pytest.approx(-0.4)
        assert stats["pos_std"] == pytest.approx(np.std([1.0, 3.0, 0.0], ddof=1))
        assert stats["neg_std"] == pytest.approx(np.std([-2.0, -4.0], ddof=1))
        assert stats["std"] == pytest.approx(np.std(values, ddof=1))
        assert stats["display_min"] == pytest.approx(stats["neg_mean"] - 2.5 * stats["neg_std"])
        assert stats["display_max"] == pytest.approx(stats["pos_mean"] + 2.5 * stats["pos_std"])
        assert stats["neg_mean"] <= 0.0 <= stats["pos_mean"]

    def test_single_sign_subsets(self):
        stats = curvature_statistics([0.5, 1.5])
        assert stats["neg_mean"] == 0.0
        assert stats["neg_std"] == 0.0
        assert stats["display_min"] == 0.0

    def test_single_value_has_zero_std(self):
        stats = curvature_statistics([2.0])
        assert stats["pos_std"] == 0.0
        assert stats["std"] == 0.0

    def test_empty(self):
        stats = curvature_statistics([])
        assert all(value == 0.0 for value in stats.values())
