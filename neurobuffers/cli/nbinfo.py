#!/usr/bin/env python3
"""CLI entry point that decodes one neuroimaging file and prints a summary.

Usage::

    # FreeSurfer surface
    nbinfo --surface <subject_dir>/surf/lh.white

    # Curvature statistics and a text histogram over the display range
    nbinfo --surface <subject_dir>/surf/lh.white \\
        --curv <subject_dir>/surf/lh.curv --bins 20

    # TrackVis fibers, counting tracks of at least 20 mm
    nbinfo --trk tracks.trk --min-length 20

    # CMTK connectome
    nbinfo --nodes nodes.json --edges edges.json

See ``nbinfo --help`` for the full list of options.
"""

import argparse
import logging
import sys

from .. import read_connectome, read_curvature, read_surface, read_tracks
from .._version import __version__
from ..io.curvature_io import curvature_histogram
from ..io.track_io import DEFAULT_MIN_TRACK_LENGTH

# Module logger
logger = logging.getLogger(__name__)

_BAR_WIDTH = 40


def _fmt_vec(vec):
    return "(" + ", ".join(f"{float(x):.4g}" for x in vec) + ")"


def _print_histogram(hist, out):
    lo, hi = hist.range
    width = (hi - lo) / hist.n_bins
    for i, count in enumerate(hist.bins):
        bar = "#" * int(round(_BAR_WIDTH * count / hist.max_count)) if hist.max_count else ""
        left = lo + i * width
        print(f"  [{left:+9.4f}, {left + width:+9.4f})  {int(count):8d}  {bar}", file=out)


def summarize_surface(surf, out=None):
    """Print vertex/face counts and the bounding center/scale of a surface."""
    print(f"Surface:       {surf.n_vertices} vertices, {surf.n_faces} faces", file=out)
    if surf.header:
        print(f"Header:        {surf.header}", file=out)
    print(f"Center:        {_fmt_vec(surf.center)}", file=out)
    print(f"Scale:         {_fmt_vec(surf.scale)}", file=out)


def summarize_curvature(curv, n_bins=0, out=None):
    """Print curvature statistics and, for ``n_bins > 0``, a text histogram."""
    print(f"Curvature:     {curv.n_vertices} values", file=out)
    print(f"Range:         [{curv.min:.4g}, {curv.max:.4g}]", file=out)
    print(f"Mean:          {curv.mean:.4g} (std {curv.std:.4g})", file=out)
    print(f"Positive mean: {curv.pos_mean:.4g} (std {curv.pos_std:.4g})", file=out)
    print(f"Negative mean: {curv.neg_mean:.4g} (std {curv.neg_std:.4g})", file=out)
    print(f"Display range: [{curv.display_min:.4g}, {curv.display_max:.4g}]", file=out)
    if n_bins > 0:
        if not curv.max > curv.min:
            print("Histogram:     skipped (constant values)", file=out)
            return
        if curv.display_max > curv.display_min:
            hist = curvature_histogram(curv, n_bins=n_bins)
        else:
            hist = curvature_histogram(curv, n_bins=n_bins, use_display_range=False)
        print("Histogram:", file=out)
        _print_histogram(hist, out)


def summarize_tracks(track_set, min_length=DEFAULT_MIN_TRACK_LENGTH, out=None):
    """Print track, segment and length information of a TrackVis file."""
    lengths = track_set.lengths
    n_long = int((lengths >= min_length).sum()) if lengths.size else 0
    print(f"Tracks:        {track_set.n_tracks}", file=out)
    print(f"Line vertices: {track_set.n_vertices}", file=out)
    print(f"Voxel size:    {_fmt_vec(track_set.header.voxel_size)}", file=out)
    if lengths.size:
        print(
            f"Length:        [{lengths.min():.4g}, {lengths.max():.4g}] mm, "
            f"mean {lengths.mean():.4g} mm",
            file=out,
        )
    print(f"Tracks >= {min_length:g} mm: {n_long}", file=out)
    print(f"Center:        {_fmt_vec(track_set.center)}", file=out)
    print(f"Scale:         {_fmt_vec(track_set.scale)}", file=out)


def summarize_connectome(graph, out=None):
    """Print node/edge counts and the fiber and length ranges of a connectome."""
    edges = graph.edges
    print(f"Nodes:         {graph.nodes.n_nodes}", file=out)
    print(f"Edges:         {edges.n_edges}", file=out)
    if edges.n_edges:
        print(f"Fibers:        [{edges.min_fibers:g}, {edges.max_fibers:g}]", file=out)
        print(
            f"Length mean:   [{edges.min_length_mean:.4g}, {edges.max_length_mean:.4g}]",
            file=out,
        )


def run(argv=None):
    """Command-line entry point for ``nbinfo``.

    Parses the arguments, decodes the requested input and prints a
    summary to stdout.

    Parameters
    ----------
    argv : list of str or None, optional
        Arguments to parse; ``sys.argv[1:]`` when None.

    Raises
    ------
    SystemExit
        With status 2 for invalid argument combinations (via argparse) and
        status 1 when decoding fails.
    """
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    parser = argparse.ArgumentParser(
        prog="nbinfo",
        description=(
            "Decode a FreeSurfer surface/curvature, a TrackVis .trk file or a "
            "CMTK connectome and print a summary."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # --- Inputs ---
    parser.add_argument("--surface", type=str, default=None,
                        help="Path to a FreeSurfer triangle surface (e.g. lh.white).")
    parser.add_argument("--curv", type=str, default=None,
                        help="Path to a FreeSurfer curvature file; requires --surface.")
    parser.add_argument("--trk", type=str, default=None,
                        help="Path to a TrackVis .trk file.")
    parser.add_argument("--nodes", type=str, default=None,
                        help="Path to a CMTK connectome node table (JSON).")
    parser.add_argument("--edges", type=str, default=None,
                        help="Path to a CMTK connectome edge table (JSON).")

    # --- Options ---
    parser.add_argument("--bins", type=int, default=0,
                        help="Print a curvature histogram with this many bins (default: off).")
    parser.add_argument("--min-length", type=float, default=DEFAULT_MIN_TRACK_LENGTH,
                        dest="min_length",
                        help=f"Minimum track length in mm (default: {DEFAULT_MIN_TRACK_LENGTH:g}).")
    parser.add_argument("--orphans", type=str, default="zero",
                        choices=["zero", "propagate", "raise"],
                        help="Normals of vertices without faces (default: zero).")

    args = parser.parse_args(argv)

    if args.curv and not args.surface:
        parser.error("--curv requires --surface.")
    if bool(args.nodes) != bool(args.edges):
        parser.error("--nodes and --edges must be given together.")
    if not (args.surface or args.trk or args.nodes):
        parser.error("Nothing to do: pass --surface, --trk or --nodes/--edges.")

    try:
        if args.surface:
            surf = read_surface(args.surface, orphans=args.orphans)
            summarize_surface(surf)
            if args.curv:
                curv = read_curvature(args.curv, surf)
                summarize_curvature(curv, n_bins=args.bins)
        if args.trk:
            summarize_tracks(read_tracks(args.trk), min_length=args.min_length)
        if args.nodes:
            summarize_connectome(read_connectome(args.nodes, args.edges))
    except (OSError, ValueError, TypeError) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    run()
