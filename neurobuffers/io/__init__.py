"""I/O subpackage: byte readers, input resolvers and format decoders.

Architecture
------------
The subpackage has three layers:

**Layer 1: primitive readers** (:mod:`~neurobuffers.io.binary`):

Fixed-width integer and float32 readers over a ``bytes`` buffer at an
explicit offset, in little- and big-endian variants, their vectorised
``*_array`` counterparts, and :class:`~neurobuffers.io.binary.ByteCursor`
for sequential decoding with length checks.

**Layer 2: resolvers** (:mod:`~neurobuffers.io.inputs`):

``resolve_buffer`` and ``resolve_json`` turn a file path, raw bytes, an
open file or (for JSON) an already parsed mapping into the in-memory
payload the decoders expect.  All file handling happens here.

**Layer 3: format decoders** (one file per format):

* :mod:`~neurobuffers.io.surface_io`: FreeSurfer triangle surfaces;
* :mod:`~neurobuffers.io.curvature_io`: FreeSurfer curvature maps, joined
  with a decoded surface;
* :mod:`~neurobuffers.io.track_io`: TrackVis ``.trk`` fiber tracks;
* :mod:`~neurobuffers.io.connectome_io`: CMTK connectome node and edge
  tables.

Each format has a ``decode_*`` function taking an in-memory payload and a
``read_*`` function that goes through the layer-2 resolvers first.
"""
from .binary import ByteCursor
from .connectome_io import (
    build_connectome,
    decode_connectome_edges,
    decode_connectome_nodes,
    read_connectome,
)
from .curvature_io import curvature_histogram, decode_curvature, read_curvature
from .inputs import resolve_buffer, resolve_json
from .surface_io import decode_surface, read_surface
from .track_io import (
    build_track_buffers,
    decode_trk_header,
    decode_tracks,
    read_tracks,
    track_length_mask,
)

__all__ = [
    # Layer 3: decoders
    'decode_surface',
    'read_surface',
    'decode_curvature',
    'read_curvature',
    'curvature_histogram',
    'decode_trk_header',
    'decode_tracks',
    'read_tracks',
    'build_track_buffers',
    'track_length_mask',
    'decode_connectome_nodes',
    'decode_connectome_edges',
    'build_connectome',
    'read_connectome',
    # Layer 2: resolvers
    'resolve_buffer',
    'resolve_json',
    # Layer 1: primitive readers
    'ByteCursor',
]
