"""Result types returned by the NeuroBuffers decoders.

Every decoder returns one of the dataclasses below.  They are plain
containers of numpy arrays and scalars, created once per decode call and
not modified afterwards.

Classes
-------
SurfaceMesh
    Decoded triangle mesh with averaged vertex normals and face-unrolled
    position/normal buffers.
CurvatureMap
    Per-vertex scalar map aligned to a :class:`SurfaceMesh`, with signed
    descriptive statistics.
TrkHeader, Track, TrackSet
    TrackVis header, a single decoded fiber and the whole decoded file.
ConnectomeNodes, ConnectomeEdge, ConnectomeEdges, ConnectomeGraph
    Connectome node table, edges and the joined line geometry.
"""

from dataclasses import dataclass, field

import numpy as np


def _empty(*shape):
    return lambda: np.zeros(shape, dtype=np.float32)


@dataclass
class SurfaceMesh:
    """A decoded triangle surface.

    Attributes
    ----------
    vertices : numpy.ndarray
        (N, 3) float32 vertex positions.
    faces : numpy.ndarray
        (M, 3) uint32 vertex indices per triangle.
    normals : numpy.ndarray
        (N, 3) float32 averaged vertex normals.
    position_buffer : numpy.ndarray
        (M * 9,) float32 vertex positions unrolled per face corner.
    normal_buffer : numpy.ndarray
        (M * 9,) float32 vertex normals unrolled per face corner.
    center : numpy.ndarray
        (3,) float32 midpoint of the axis-aligned bounding box.
    scale : numpy.ndarray
        (3,) float32 reciprocal bounding box extent per axis.
    magic : bytes
        The three leading magic bytes.
    header : str
        ASCII text between the magic bytes and the vertex count (typically
        the ``created by ...`` stamp), without the terminating newlines.
    """
    vertices: np.ndarray = field(default_factory=_empty(0, 3))
    faces: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.uint32))
    normals: np.ndarray = field(default_factory=_empty(0, 3))
    position_buffer: np.ndarray = field(default_factory=_empty(0))
    normal_buffer: np.ndarray = field(default_factory=_empty(0))
    center: np.ndarray = field(default_factory=_empty(3))
    scale: np.ndarray = field(default_factory=_empty(3))
    magic: bytes = b""
    header: str = ""

    @property
    def n_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def n_faces(self) -> int:
        return int(self.faces.shape[0])


@dataclass
class CurvatureMap:
    """A per-vertex scalar map and its descriptive statistics.

    Attributes
    ----------
    values : numpy.ndarray
        (N,) float32 per-vertex values.
    buffer : numpy.ndarray
        (M * 3,) float32 values unrolled per face corner of the paired
        surface, aligned with :attr:`SurfaceMesh.position_buffer`.
    min, max : float
        Global extrema.
    pos_mean, neg_mean, mean : float
        Means of the non-negative subset, the negative subset and all
        values (0 for an empty subset).
    pos_std, neg_std, std : float
        Sample standard deviations (0 for fewer than two members).
    display_min, display_max : float
        ``neg_mean - 2.5 * neg_std`` and ``pos_mean + 2.5 * pos_std``.
    n_faces_field, values_per_vertex : int
        Header fields that are read but not used for decoding.
    """
    values: np.ndarray = field(default_factory=_empty(0))
    buffer: np.ndarray = field(default_factory=_empty(0))
    min: float = 0.0
    max: float = 0.0
    pos_mean: float = 0.0
    neg_mean: float = 0.0
    mean: float = 0.0
    pos_std: float = 0.0
    neg_std: float = 0.0
    std: float = 0.0
    display_min: float = 0.0
    display_max: float = 0.0
    n_faces_field: int = 0
    values_per_vertex: int = 0

    @property
    def n_vertices(self) -> int:
        return int(self.values.shape[0])

    @property
    def display_range(self) -> tuple:
        return self.display_min, self.display_max


@dataclass
class TrkHeader:
    """The fixed 1000-byte TrackVis header.

    Field names follow the TrackVis documentation.  Fixed-width strings
    are kept as read, including NUL padding.
    """
    id_string: str = "TRACK\x00"
    dim: tuple = (0, 0, 0)
    voxel_size: tuple = (1.0, 1.0, 1.0)
    origin: tuple = (0.0, 0.0, 0.0)
    n_scalars: int = 0
    scalar_name: str = ""
    n_properties: int = 0
    property_name: str = ""
    vox_to_ras: tuple = ()
    reserved: str = ""
    voxel_order: str = ""
    pad2: str = ""
    image_orientation_patient: tuple = ()
    pad1: str = ""
    invert_x: int = 0
    invert_y: int = 0
    invert_z: int = 0
    swap_xy: int = 0
    swap_yz: int = 0
    swap_zx: int = 0
    n_count: int = 0
    version: int = 0
    hdr_size: int = 1000


@dataclass
class Track:
    """One decoded fiber.

    Attributes
    ----------
    points : numpy.ndarray
        (P, 3) float32 positions in millimetre space.
    scalars : numpy.ndarray or None
        (P, n_scalars) float32 per-point scalars.
    properties : numpy.ndarray or None
        (n_properties,) float32 per-track properties.
    length : float
        Arclength, the sum of distances between consecutive points.
    """
    points: np.ndarray
    scalars: np.ndarray | None = None
    properties: np.ndarray | None = None
    length: float = 0.0

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])

    @property
    def n_segments(self) -> int:
        return max(self.n_points - 1, 0)


@dataclass
class TrackSet:
    """A decoded TrackVis file with its line-segment buffers.

    Attributes
    ----------
    header : TrkHeader
    tracks : list of Track
    n_vertices : int
        Rendered vertex count, two per line segment.
    position_buffer : numpy.ndarray
        (n_vertices * 4,) float32; xyz of each segment endpoint followed by
        the owning track's length.
    color_buffer : numpy.ndarray
        (n_vertices * 3,) float32 per-vertex direction colour.
    center, scale : numpy.ndarray
        (3,) float32 bounding box center and reciprocal extent.
    """
    header: TrkHeader = field(default_factory=TrkHeader)
    tracks: list = field(default_factory=list)
    n_vertices: int = 0
    position_buffer: np.ndarray = field(default_factory=_empty(0))
    color_buffer: np.ndarray = field(default_factory=_empty(0))
    center: np.ndarray = field(default_factory=_empty(3))
    scale: np.ndarray = field(default_factory=_empty(3))

    @property
    def n_tracks(self) -> int:
        return len(self.tracks)

    @property
    def lengths(self) -> np.ndarray:
        return np.array([t.length for t in self.tracks], dtype=np.float32)


@dataclass
class ConnectomeNodes:
    """Connectome node table re-indexed to 0-based order.

    Attributes
    ----------
    positions : numpy.ndarray
        (N, 3) float32 pial positions.
    ids : list of str
        Source keys of the node table, in the order of their positions.
    """
    positions: np.ndarray = field(default_factory=_empty(0, 3))
    ids: list = field(default_factory=list)

    @property
    def n_nodes(self) -> int:
        return int(self.positions.shape[0])


@dataclass
class ConnectomeEdge:
    """An undirected connection between two 0-based node indices."""
    node_index0: int
    node_index1: int
    fiber_length_mean: float = 0.0
    fiber_length_std: float = 0.0
    number_of_fibers: float = 0


@dataclass
class ConnectomeEdges:
    """Deduplicated connectome edge list and its global ranges.

    The extrema start from fixed seeds
    (``max_* = 0``, ``min_* = 1e7``), so an empty edge list keeps them.
    """
    edges: list = field(default_factory=list)
    min_fibers: float = 10000000
    max_fibers: float = 0
    min_length_mean: float = 10000000.0
    max_length_mean: float = 0.0

    @property
    def n_edges(self) -> int:
        return len(self.edges)


@dataclass
class ConnectomeGraph:
    """Nodes and edges joined into line geometry.

    Attributes
    ----------
    nodes : ConnectomeNodes
    edges : ConnectomeEdges
    position_buffer : numpy.ndarray
        (n_edges * 2 * 3,) float32 edge endpoint positions.
    fiber_weights : numpy.ndarray
        (n_edges,) float32 ``number_of_fibers`` relative to the fiber count
        range.
    length_weights : numpy.ndarray
        (n_edges,) float32 ``fiber_length_mean`` relative to the mean length
        range.
    """
    nodes: ConnectomeNodes
    edges: ConnectomeEdges
    position_buffer: np.ndarray = field(default_factory=_empty(0))
    fiber_weights: np.ndarray = field(default_factory=_empty(0))
    length_weights: np.ndarray = field(default_factory=_empty(0))
