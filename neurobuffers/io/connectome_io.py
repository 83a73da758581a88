"""Connectome Mapping Toolkit node and edge tables.

Two JSON documents describe a connectome:

* **nodes**: an object keyed by 1-based node id, each value holding at
  least ``pial_x``, ``pial_y`` and ``pial_z``;
* **edges**: an object keyed by 1-based node id whose values are objects
  keyed by the other node's id, each holding ``fiber_length_mean``,
  ``fiber_length_std`` and ``number_of_fibers``.  Every connection is
  stored twice, as ``(i, j)`` and ``(j, i)``.

The nodes and edges are decoded independently; :func:`build_connectome`
joins them into line geometry once both are available.
"""

import logging

import numpy as np

from ..types import ConnectomeEdge, ConnectomeEdges, ConnectomeGraph, ConnectomeNodes
from .inputs import resolve_json

logger = logging.getLogger(__name__)


def _lookup(table, node_id):
    """Return ``table[node_id]`` for string (JSON) or integer keys, or None."""
    value = table.get(str(node_id))
    if value is None:
        value = table.get(node_id)
    return value


def decode_connectome_nodes(nodes):
    """Decode the node table into a 0-based position array.

    Parameters
    ----------
    nodes : dict, str, os.PathLike, bytes or file-like
        The node table, parsed or as JSON (see
        :func:`~neurobuffers.io.inputs.resolve_json`).

    Returns
    -------
    ConnectomeNodes
        ``positions[i]`` holds the pial position of node id ``i + 1``.

    Raises
    ------
    ValueError
        If an id in ``1..N`` is missing or lacks a pial coordinate.
    """
    table = resolve_json(nodes)
    n_nodes = len(table)
    positions = np.empty((n_nodes, 3), dtype=np.float32)
    ids = []
    for i in range(n_nodes):
        node = _lookup(table, i + 1)
        if node is None:
            raise ValueError(
                f"Node table has {n_nodes} entries but no node with id {i + 1}; "
                f"ids must be consecutive starting at 1."
            )
        try:
            positions[i] = [node["pial_x"], node["pial_y"], node["pial_z"]]
        except KeyError as exc:
            raise ValueError(
                f"Node {i + 1} is missing the pial coordinate {exc.args[0]!r}."
            ) from exc
        ids.append(str(i + 1))
    logger.debug("Connectome: %d nodes", n_nodes)
    return ConnectomeNodes(positions=positions, ids=ids)


def decode_connectome_edges(edges):
    """Extract each undirected edge once from the symmetric edge table.

    For ``i`` in ``1..N`` and ``j`` in ``i..N`` (``N`` = number of top-level
    keys), an edge ``(i - 1, j - 1)`` is emitted whenever ``edges[i][j]``
    exists.  Starting ``j`` at ``i`` skips the mirrored ``(j, i)`` copies and
    keeps self connections (``i == j``) when the table contains them.

    Parameters
    ----------
    edges : dict, str, os.PathLike, bytes or file-like
        The edge table, parsed or as JSON.

    Returns
    -------
    ConnectomeEdges
        The edge list with running min/max of ``number_of_fibers`` and
        ``fiber_length_mean``.

    Raises
    ------
    ValueError
        If an edge entry lacks one of its three fields.
    """
    table = resolve_json(edges)
    n_nodes = len(table)
    result = ConnectomeEdges()
    for i in range(1, n_nodes + 1):
        row = _lookup(table, i)
        if row is None:
            continue
        for j in range(i, n_nodes + 1):
            entry = _lookup(row, j)
            if entry is None:
                continue
            try:
                edge = ConnectomeEdge(
                    node_index0=i - 1,
                    node_index1=j - 1,
                    fiber_length_mean=entry["fiber_length_mean"],
                    fiber_length_std=entry["fiber_length_std"],
                    number_of_fibers=entry["number_of_fibers"],
                )
            except KeyError as exc:
                raise ValueError(
                    f"Edge ({i}, {j}) is missing the field {exc.args[0]!r}."
                ) from exc
            if i == j:
                logger.debug("Connectome: self connection at node %d", i)
            result.edges.append(edge)
            result.max_fibers = max(result.max_fibers, edge.number_of_fibers)
            result.min_fibers = min(result.min_fibers, edge.number_of_fibers)
            result.max_length_mean = max(result.max_length_mean, edge.fiber_length_mean)
            result.min_length_mean = min(result.min_length_mean, edge.fiber_length_mean)
    logger.debug("Connectome: %d edges from %d rows", result.n_edges, n_nodes)
    return result


def _relative_weights(values, vmin, vmax):
    span = vmax - vmin
    if span == 0:
        return np.ones(len(values), dtype=np.float32)
    return (np.asarray(values, dtype=np.float64) / span).astype(np.float32)


def build_connectome(nodes, edges):
    """Join decoded nodes and edges into edge line geometry.

    Parameters
    ----------
    nodes : ConnectomeNodes or node-table input
        Decoded nodes, or anything :func:`decode_connectome_nodes` accepts.
    edges : ConnectomeEdges or edge-table input
        Decoded edges, or anything :func:`decode_connectome_edges` accepts.

    Returns
    -------
    ConnectomeGraph
        Two endpoints per edge in ``position_buffer`` and per-edge
        ``fiber_weights`` (``number_of_fibers / (max - min)``) and
        ``length_weights`` (``fiber_length_mean / (max - min)``); a zero
        range gives weight 1.

    Raises
    ------
    ValueError
        If an edge refers to a node outside the node table.
    """
    if not isinstance(nodes, ConnectomeNodes):
        nodes = decode_connectome_nodes(nodes)
    if not isinstance(edges, ConnectomeEdges):
        edges = decode_connectome_edges(edges)

    pairs = np.array(
        [[e.node_index0, e.node_index1] for e in edges.edges], dtype=np.int64
    ).reshape(-1, 2)
    if pairs.size and int(pairs.max()) >= nodes.n_nodes:
        raise ValueError(
            f"Edge table refers to node {int(pairs.max()) + 1} but only "
            f"{nodes.n_nodes} nodes are defined."
        )
    position_buffer = nodes.positions[pairs.ravel()].astype(np.float32).ravel()
    fiber_weights = _relative_weights(
        [e.number_of_fibers for e in edges.edges], edges.min_fibers, edges.max_fibers
    )
    length_weights = _relative_weights(
        [e.fiber_length_mean for e in edges.edges],
        edges.min_length_mean,
        edges.max_length_mean,
    )
    logger.info(
        "Built connectome with %d nodes and %d edges", nodes.n_nodes, edges.n_edges
    )
    return ConnectomeGraph(
        nodes=nodes,
        edges=edges,
        position_buffer=position_buffer,
        fiber_weights=fiber_weights,
        length_weights=length_weights,
    )


def read_connectome(nodes_source, edges_source):
    """Read both connectome tables and join them.

    Parameters
    ----------
    nodes_source, edges_source : str, os.PathLike, dict, bytes or file-like
        The node and edge tables.

    Returns
    -------
    ConnectomeGraph
    """
    return build_connectome(
        decode_connectome_nodes(nodes_source), decode_connectome_edges(edges_source)
    )
