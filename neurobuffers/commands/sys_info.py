"""``neurobuffers-sys_info``: print platform and dependency versions."""

import argparse

from .. import sys_info


def run(argv=None):
    """Entry point of the ``neurobuffers-sys_info`` console script.

    Parameters
    ----------
    argv : list of str or None, optional
        Arguments to parse; ``sys.argv[1:]`` when None.
    """
    parser = argparse.ArgumentParser(
        prog="neurobuffers-sys_info",
        description="Print platform, CPU/RAM and dependency versions for bug reports.",
    )
    parser.add_argument(
        "--developer",
        help="also list the test and style extras",
        action="store_true",
    )
    args = parser.parse_args(argv)

    sys_info(developer=args.developer)
