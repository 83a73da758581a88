"""Configuration and system-info helpers (top-level module)."""

import platform
import re
import sys
from functools import partial
from importlib.metadata import requires, version
from pathlib import Path
from typing import IO, Callable, Optional

import psutil

_EXTRAS = ("test", "style")


def _pyproject_requirements(extra: Optional[str] = None) -> list[str]:
    """Read requirements from the ``pyproject.toml`` next to an uninstalled checkout."""
    try:
        import tomllib
    except ImportError:
        return []
    pyproject_path = Path(__file__).resolve().parents[1] / "pyproject.toml"
    if not pyproject_path.exists():
        return []
    with pyproject_path.open("rb") as fh:
        project = tomllib.load(fh).get("project", {})
    if extra is None:
        return list(project.get("dependencies", []) or [])
    return list((project.get("optional-dependencies", {}) or {}).get(extra, []) or [])


def _requirements(package: str, extra: Optional[str] = None) -> list[str]:
    """Return the requirement strings of ``package``, optionally of one extra."""
    try:
        raw_requires = requires(package) or []
    except Exception:
        raw_requires = []
    if not raw_requires:
        return _pyproject_requirements(extra)
    if extra is None:
        return [elt for elt in raw_requires if "extra" not in elt]
    return [
        elt for elt in raw_requires
        if f"extra == '{extra}'" in elt or f'extra == "{extra}"' in elt
    ]


def sys_info(fid: Optional[IO] = None, developer: bool = False):
    """Print the system information for debugging.

    Parameters
    ----------
    fid : file-like, default=None
        The file to write to, passed to :func:`print`.
        Can be None to use :data:`sys.stdout`.
    developer : bool, default=False
        If True, display information about optional dependencies.
    """
    ljust = 26
    out = partial(print, end="", file=fid)
    package = __package__.split(".")[0]

    out("Platform:".ljust(ljust) + platform.platform() + "\n")
    out("Python:".ljust(ljust) + sys.version.replace("\n", " ") + "\n")
    out("Executable:".ljust(ljust) + sys.executable + "\n")
    out("CPU:".ljust(ljust) + platform.processor() + "\n")
    out("Physical cores:".ljust(ljust) + str(psutil.cpu_count(False)) + "\n")
    out("Logical cores:".ljust(ljust) + str(psutil.cpu_count(True)) + "\n")
    out("RAM:".ljust(ljust))
    out(f"{psutil.virtual_memory().total / float(2 ** 30):0.1f} GB\n")
    out("SWAP:".ljust(ljust))
    out(f"{psutil.swap_memory().total / float(2 ** 30):0.1f} GB\n")

    out("\nDependencies info\n")
    # no distribution metadata in a source checkout
    try:
        pkg_version = version(package)
    except Exception:
        pkg_version = "Not installed."
    out(f"{package}:".ljust(ljust) + pkg_version + "\n")

    dependencies = [elt.split(";")[0].rstrip() for elt in _requirements(package)]
    _list_dependencies_info(out, ljust, dependencies)

    if developer:
        for key in _EXTRAS:
            dependencies = [
                elt.split(";")[0].rstrip() for elt in _requirements(package, key)
            ]
            if len(dependencies) == 0:
                continue
            out(f"\nOptional '{key}' info\n")
            _list_dependencies_info(out, ljust, dependencies)


def _list_dependencies_info(out: Callable, ljust: int, dependencies: list[str]):
    """List dependencies names and versions.

    Parameters
    ----------
    out : Callable
        output function
    ljust : int
         length of returned string
    dependencies : List[str]
        list of dependencies

    """
    for dep in dependencies:
        # handle dependencies with version specifiers
        specifiers_pattern = r"(~=|==|!=|<=|>=|<|>|===)"
        specifiers = re.findall(specifiers_pattern, dep)
        if len(specifiers) != 0:
            dep, _ = dep.split(specifiers[0], 1)
            dep = dep.rstrip()
        # handle dependencies provided with a [key], e.g. pydocstyle[toml]
        if "[" in dep:
            dep = dep.split("[")[0]
        try:
            version_ = version(dep)
        except Exception:
            version_ = "Not found."
        out(f"{dep}:".ljust(ljust) + version_ + "\n")
