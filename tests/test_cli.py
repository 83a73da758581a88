"""Tests for the nbinfo and sys_info command-line helpers."""

import io
import json
import os
import struct
import tempfile

import numpy as np
import pytest

from neurobuffers import __version__, sys_info
from neurobuffers.cli.nbinfo import run
from neurobuffers.commands.sys_info import run as run_sys_info

_QUAD_V = np.array(
    [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]],
    dtype=np.float32,
)
_QUAD_F = np.array([[0, 1, 2], [1, 3, 2]], dtype=np.int32)


def _write_tmp(content, suffix, binary=False):
    fd, path = tempfile.mkstemp(suffix=suffix)
    mode = "wb" if binary else "w"
    with os.fdopen(fd, mode) as fh:
        fh.write(content)
    return path


@pytest.fixture
def surface_path():
    data = b"".join([
        b"\xff\xff\xfe",
        b"created by tester\n\n",
        np.array([4, 2], dtype=">i4").tobytes(),
        _QUAD_V.astype(">f4").tobytes(),
        _QUAD_F.astype(">i4").tobytes(),
    ])
    path = _write_tmp(data, ".white", binary=True)
    yield path
    os.unlink(path)


@pytest.fixture
def curv_path():
    data = (
        b"\xff\xff\xff"
        + np.array([4, 2, 1], dtype=">i4").tobytes()
        + np.array([0.5, -0.5, 1.0, -1.0], dtype=">f4").tobytes()
    )
    path = _write_tmp(data, ".curv", binary=True)
    yield path
    os.unlink(path)


@pytest.fixture
def flat_curv_path():
    data = (
        b"\xff\xff\xff"
        + np.array([4, 2, 1], dtype=">i4").tobytes()
        + np.zeros(4, dtype=">f4").tobytes()
    )
    path = _write_tmp(data, ".curv", binary=True)
    yield path
    os.unlink(path)


@pytest.fixture
def trk_path():
    hdr = bytearray(1000)
    hdr[0:6] = b"TRACK\x00"
    struct.pack_into("<3f", hdr, 12, 1.0, 1.0, 1.0)
    struct.pack_into("<iii", hdr, 988, 2, 2, 1000)
    records = b""
    # a 10 mm and a 1 mm track
    for points in ([[0, 0, 0], [10, 0, 0]], [[0, 0, 0], [1, 0, 0]]):
        records += struct.pack("<i", len(points))
        records += np.asarray(points, dtype="<f4").tobytes()
    path = _write_tmp(bytes(hdr) + records, ".trk", binary=True)
    yield path
    os.unlink(path)


class TestNbinfo:
    def test_constant_curvature_skips_histogram(self, surface_path, flat_curv_path, capsys):
        run(["--surface", surface_path, "--curv", flat_curv_path, "--bins", "4"])
        out = capsys.readouterr().out
        assert "Curvature:     4 values" in out
        assert "skipped (constant values)" in out
        assert "#" not in out

    def test_tracks(self, trk_path, capsys):
        run(["--trk", trk_path, "--min-length", "5"])
        out = capsys.readouterr().out
        assert "Tracks:        2" in out
        assert "Line vertices: 4" in out
        assert "Tracks >= 5 mm: 1" in out

    def test_tracks_default_min_length(self, trk_path, capsys):
        run(["--trk", trk_path])
        assert "Tracks >= 15 mm: 0" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run(["--version"])
        assert excinfo.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_surface(self, surface_path, capsys):
        run(["--surface", surface_path])
        out = capsys.readouterr().out
        assert "4 vertices, 2 faces" in out
        assert "created by tester" in out

    def test_curvature_histogram(self, surface_path, curv_path, capsys):
        run(["--surface", surface_path, "--curv", curv_path, "--bins", "4"])
        out = capsys.readouterr().out
        assert "Curvature:     4 values" in out
        assert "Histogram:" in out
        assert out.count("#") > 0

    def test_connectome(self, capsys):
        nodes = _write_tmp(json.dumps({
            "1": {"pial_x": 0, "pial_y": 0, "pial_z": 0},
            "2": {"pial_x": 1, "pial_y": 0, "pial_z": 0},
        }), ".json")
        edge = {"fiber_length_mean": 5.0, "fiber_length_std": 1.0, "number_of_fibers": 3}
        edges = _write_tmp(json.dumps({"1": {"2": edge}, "2": {"1": edge}}), ".json")
        try:
            run(["--nodes", nodes, "--edges", edges])
        finally:
            os.unlink(nodes)
            os.unlink(edges)
        out = capsys.readouterr().out
        assert "Nodes:         2" in out
        assert "Edges:         1" in out

    def test_curv_requires_surface(self, curv_path):
        with pytest.raises(SystemExit) as excinfo:
            run(["--curv", curv_path])
        assert excinfo.value.code == 2

    def test_nothing_to_do(self):
        with pytest.raises(SystemExit) as excinfo:
            run([])
        assert excinfo.value.code == 2

    def test_decode_error_exits_nonzero(self, curv_path):
        # a curvature file is not a TrackVis file
        with pytest.raises(SystemExit) as excinfo:
            run(["--trk", curv_path])
        assert excinfo.value.code == 1

    def test_missing_file_exits_nonzero(self):
        with pytest.raises(SystemExit) as excinfo:
            run(["--surface", "/nonexistent/lh.white"])
        assert excinfo.value.code == 1


class TestSysInfo:
    def test_sys_info(self):
        out = io.StringIO()
        sys_info(fid=out)
        value = out.getvalue()
        assert "Platform:" in value
        assert "Dependencies info" in value
        assert "numpy:" in value

    def test_sys_info_developer(self):
        out = io.StringIO()
        sys_info(fid=out, developer=True)
        assert "Physical cores:" in out.getvalue()

    def test_version_string(self):
        assert isinstance(__version__, str)
        assert __version__

    def test_console_script(self, capsys):
        run_sys_info(["--developer"])
        out = capsys.readouterr().out
        assert "Dependencies info" in out
        assert "Physical cores:" in out
