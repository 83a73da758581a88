"""Decoder for TrackVis ``.trk`` fiber track files.

A ``.trk`` file is a fixed 1000-byte little-endian header followed by
``n_count`` variable-length records.  Each record is a ``uint32`` point
count ``P``, then ``P`` points of three ``float32`` coordinates plus
``n_scalars`` per-point ``float32`` scalars, then ``n_properties``
per-track ``float32`` properties.

Coordinates are stored in voxel units and converted to millimetres by
dividing by the header's voxel size.  After decoding, every track is
expanded into independent line segments (two vertices per segment) for
line rendering, see :func:`build_track_buffers`.
"""

import logging

import numpy as np

from ..geometry.prepare import bounding_box, center_and_scale
from ..types import Track, TrackSet, TrkHeader
from .binary import (
    ByteCursor,
    read_fixed_string,
    read_float32_le_array,
    read_uint8,
    read_uint16_le,
    read_uint16_le_array,
    read_uint32_le,
)
from .inputs import resolve_buffer

logger = logging.getLogger(__name__)

TRK_HEADER_SIZE = 1000

# Default minimum track length (mm) for display filtering
DEFAULT_MIN_TRACK_LENGTH = 15.0


def _floats(data, offset, n):
    return tuple(float(x) for x in read_float32_le_array(data, offset, n))


def decode_trk_header(data, offset=0):
    """Decode the fixed 1000-byte TrackVis header.

    Parameters
    ----------
    data : bytes-like
        Buffer holding at least ``offset + 1000`` bytes.
    offset : int, optional, default 0
        Offset of the header in ``data``.

    Returns
    -------
    TrkHeader

    Raises
    ------
    ValueError
        If fewer than 1000 bytes are available.
    """
    if len(data) - offset < TRK_HEADER_SIZE:
        raise ValueError(
            f"Truncated buffer: TrackVis header needs {TRK_HEADER_SIZE} bytes, "
            f"got {len(data) - offset}."
        )
    o = offset
    header = TrkHeader(
        id_string=read_fixed_string(data, o, 6),
        dim=tuple(int(x) for x in read_uint16_le_array(data, o + 6, 3)),
        voxel_size=_floats(data, o + 12, 3),
        origin=_floats(data, o + 24, 3),
        n_scalars=read_uint16_le(data, o + 36),
        scalar_name=read_fixed_string(data, o + 38, 200),
        n_properties=read_uint16_le(data, o + 238),
        property_name=read_fixed_string(data, o + 240, 200),
        vox_to_ras=_floats(data, o + 440, 16),
        reserved=read_fixed_string(data, o + 504, 444),
        voxel_order=read_fixed_string(data, o + 948, 4),
        pad2=read_fixed_string(data, o + 952, 4),
        image_orientation_patient=_floats(data, o + 956, 6),
        pad1=read_fixed_string(data, o + 980, 2),
        invert_x=read_uint8(data, o + 982),
        invert_y=read_uint8(data, o + 983),
        invert_z=read_uint8(data, o + 984),
        swap_xy=read_uint8(data, o + 985),
        swap_yz=read_uint8(data, o + 986),
        swap_zx=read_uint8(data, o + 987),
        n_count=read_uint32_le(data, o + 988),
        version=read_uint32_le(data, o + 992),
        hdr_size=read_uint32_le(data, o + 996),
    )
    if not header.id_string.startswith("TRACK"):
        logger.warning("Unexpected TrackVis id string %r", header.id_string)
    if header.hdr_size != TRK_HEADER_SIZE:
        logger.warning(
            "TrackVis hdr_size is %d, expected %d", header.hdr_size, TRK_HEADER_SIZE
        )
    return header


def _read_track(cursor, header, voxel_size):
    """Read one record at the cursor position and return a :class:`Track`."""
    cursor.require(4, "track point count")
    n_points = cursor.read_uint32_le()
    stride = 3 + header.n_scalars
    cursor.require(4 * stride * n_points, f"{n_points} track points")
    block = cursor.read_float32_le_array(stride * n_points).reshape(n_points, stride)

    points = (block[:, :3] / voxel_size).astype(np.float32)
    scalars = block[:, 3:].copy() if header.n_scalars > 0 else None

    properties = None
    if header.n_properties > 0:
        cursor.require(4 * header.n_properties, "track properties")
        properties = cursor.read_float32_le_array(header.n_properties)

    if n_points > 1:
        steps = np.diff(points.astype(np.float64), axis=0)
        length = float(np.sum(np.sqrt(np.sum(steps * steps, axis=1))))
    else:
        length = 0.0
    return Track(points=points, scalars=scalars, properties=properties, length=length)


def _read_tracks(cursor, header):
    voxel_size = np.asarray(header.voxel_size, dtype=np.float32)
    tracks = []
    if header.n_count > 0:
        for _ in range(header.n_count):
            tracks.append(_read_track(cursor, header, voxel_size))
    else:
        # n_count == 0 means the writer did not record the count
        while cursor.remaining > 0:
            tracks.append(_read_track(cursor, header, voxel_size))
    return tracks


def build_track_buffers(tracks):
    """Expand tracks into independent line segments.

    Every pair of consecutive points becomes two vertex records.  A vertex
    holds the point position plus the owning track's length as a fourth
    component, and the track's direction colour: the absolute difference
    between its last and first points, normalised (zero when the track
    ends where it starts).  The bounding box covers the first point of
    every segment, so a track's final point is not included.

    Parameters
    ----------
    tracks : list of Track

    Returns
    -------
    n_vertices : int
        Two per segment.
    position_buffer : numpy.ndarray
        (n_vertices * 4,) float32.
    color_buffer : numpy.ndarray
        (n_vertices * 3,) float32.
    center, scale : numpy.ndarray
        (3,) float32; zeros and ones when there are no segments.
    """
    positions = []
    colors = []
    starts = []
    for track in tracks:
        if track.n_segments == 0:
            continue
        pts = track.points
        direction = np.abs(pts[-1].astype(np.float64) - pts[0])
        norm = np.sqrt(np.sum(direction * direction))
        if norm > 0:
            direction = direction / norm

        # (start, end) per segment, interleaved
        seg = np.stack([pts[:-1], pts[1:]], axis=1).reshape(-1, 3)
        length_col = np.full((seg.shape[0], 1), track.length, dtype=np.float32)
        positions.append(np.hstack([seg, length_col]))
        colors.append(np.tile(direction, (seg.shape[0], 1)))
        starts.append(pts[:-1])

    if not positions:
        logger.warning("Track set has no line segments; using unit scale.")
        return (
            0,
            np.zeros(0, dtype=np.float32),
            np.zeros(0, dtype=np.float32),
            np.zeros(3, dtype=np.float32),
            np.ones(3, dtype=np.float32),
        )

    position_buffer = np.concatenate(positions).astype(np.float32).ravel()
    color_buffer = np.concatenate(colors).astype(np.float32).ravel()
    starts = np.concatenate(starts)
    center, scale = center_and_scale(*bounding_box(starts))
    return position_buffer.size // 4, position_buffer, color_buffer, center, scale


def decode_tracks(data):
    """Decode a TrackVis file from an in-memory buffer.

    Parameters
    ----------
    data : bytes-like
        The complete file contents.

    Returns
    -------
    TrackSet
        Header, decoded tracks (points in millimetres) and the line-segment
        buffers from :func:`build_track_buffers`.

    Raises
    ------
    ValueError
        If the buffer ends before the header or a record is complete.
    """
    data = bytes(data)
    header = decode_trk_header(data)
    cursor = ByteCursor(data, offset=header.hdr_size)
    tracks = _read_tracks(cursor, header)
    if cursor.remaining:
        logger.debug("%d trailing bytes after last track", cursor.remaining)

    n_vertices, position_buffer, color_buffer, center, scale = build_track_buffers(tracks)
    logger.info(
        "Decoded %d tracks (%d line vertices)", len(tracks), n_vertices
    )
    return TrackSet(
        header=header,
        tracks=tracks,
        n_vertices=n_vertices,
        position_buffer=position_buffer,
        color_buffer=color_buffer,
        center=center,
        scale=scale,
    )


def read_tracks(source):
    """Read and decode a TrackVis ``.trk`` file.

    Parameters
    ----------
    source : str, os.PathLike, bytes-like or file-like
        Path to the file, its contents, or an open binary file.

    Returns
    -------
    TrackSet
    """
    return decode_tracks(resolve_buffer(source))


def track_length_mask(track_set, min_length=DEFAULT_MIN_TRACK_LENGTH):
    """Select rendered vertices belonging to tracks of a minimum length.

    Parameters
    ----------
    track_set : TrackSet
        Decoded tracks.
    min_length : float, optional, default 15.0
        Minimum track length in millimetres.

    Returns
    -------
    numpy.ndarray
        (n_vertices,) bool, True where the owning track is at least
        ``min_length`` long.
    """
    lengths = track_set.position_buffer.reshape(-1, 4)[:, 3]
    return lengths >= min_length
