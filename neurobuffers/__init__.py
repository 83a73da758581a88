"""NeuroBuffers: decode neuroimaging file formats into render-ready buffers.

NeuroBuffers turns raw binary or JSON payloads of common neuroimaging
formats into flat numpy arrays that a renderer can upload as-is.  It
includes:

- **Surfaces**: FreeSurfer triangle files (``lh.white``, ``rh.pial``, ...)
  with averaged vertex normals and face-unrolled position/normal buffers
- **Curvature**: FreeSurfer curvature maps aligned to a decoded surface,
  with signed statistics and a display range
- **Tracks**: TrackVis ``.trk`` fibers expanded into line segments with
  direction colours and per-track lengths
- **Connectomes**: CMTK node/edge JSON tables joined into edge geometry
- **Histograms**: fixed-bin histograms with bar and threshold geometry
- **CLI tools**: ``nbinfo`` to summarise a file, ``neurobuffers-sys_info``

Typical use::

    from neurobuffers import read_surface, read_curvature

    surf = read_surface('path/to/lh.white')
    curv = read_curvature('path/to/lh.curv', surf)
    print(surf.position_buffer.shape, curv.display_range)

Every ``read_*`` function also accepts raw ``bytes`` or an open binary
file; the ``decode_*`` functions in :mod:`neurobuffers.io` take the
in-memory payload directly.
"""

from ._config import sys_info  # noqa: F401
from ._version import __version__  # noqa: F401
from .io import (
    build_connectome,
    build_track_buffers,
    curvature_histogram,
    decode_connectome_edges,
    decode_connectome_nodes,
    decode_curvature,
    decode_surface,
    decode_tracks,
    decode_trk_header,
    read_connectome,
    read_curvature,
    read_surface,
    read_tracks,
    track_length_mask,
)
from .stats import Histogram, compute_histogram, curvature_statistics
from .types import (
    ConnectomeEdge,
    ConnectomeEdges,
    ConnectomeGraph,
    ConnectomeNodes,
    CurvatureMap,
    SurfaceMesh,
    Track,
    TrackSet,
    TrkHeader,
)

# Export list
__all__ = [
    "__version__",
    "sys_info",
    "read_surface",
    "decode_surface",
    "read_curvature",
    "decode_curvature",
    "curvature_histogram",
    "read_tracks",
    "decode_tracks",
    "decode_trk_header",
    "build_track_buffers",
    "track_length_mask",
    "read_connectome",
    "decode_connectome_nodes",
    "decode_connectome_edges",
    "build_connectome",
    "Histogram",
    "compute_histogram",
    "curvature_statistics",
    "SurfaceMesh",
    "CurvatureMap",
    "TrkHeader",
    "Track",
    "TrackSet",
    "ConnectomeNodes",
    "ConnectomeEdge",
    "ConnectomeEdges",
    "ConnectomeGraph",
]
