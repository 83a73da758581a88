"""Version number, read from the installed distribution metadata."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("neurobuffers")
except PackageNotFoundError:
    # source checkout without an installed distribution
    __version__ = "0.1.0-dev"
