"""Input resolver functions for the NeuroBuffers decoders.

The decoders themselves only ever see fully buffered payloads: ``bytes``
for the binary formats and parsed JSON mappings for the connectome tables.
The resolvers in this module turn the inputs users actually have (a file
path, raw bytes, an open file, a JSON string) into those payloads, so that
all file handling stays in one place.
"""

import json
import os

import numpy as np


def resolve_buffer(source):
    """Resolve a binary input to an in-memory ``bytes`` buffer.

    Parameters
    ----------
    source : str, os.PathLike, bytes, bytearray, memoryview, numpy.ndarray or file-like
        * ``str`` / path-like: path to a file, read completely.
        * ``bytes`` / ``bytearray`` / ``memoryview``: used as is.
        * ``numpy.ndarray`` of dtype uint8: its raw bytes.
        * object with a ``read()`` method: read to the end.

    Returns
    -------
    bytes

    Raises
    ------
    TypeError
        If ``source`` is none of the accepted types, or a file-like object
        returns text.
    OSError
        If the file cannot be opened.
    """
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as fh:
            return fh.read()
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if isinstance(source, np.ndarray):
        if source.dtype != np.uint8:
            raise TypeError(
                f"Array buffers must have dtype uint8, got {source.dtype}."
            )
        return source.tobytes()
    if hasattr(source, "read"):
        payload = source.read()
        if not isinstance(payload, (bytes, bytearray)):
            raise TypeError(
                "File-like sources must be opened in binary mode ('rb')."
            )
        return bytes(payload)
    raise TypeError(
        f"source must be a file path, a bytes-like object or a binary file, "
        f"got {type(source).__name__!r}."
    )


def resolve_json(source):
    """Resolve a JSON table input to a parsed mapping.

    Parameters
    ----------
    source : dict, str, os.PathLike, bytes or file-like
        * ``dict``: already parsed; returned unchanged.
        * ``str``: JSON text when it starts with ``{`` or ``[`` (after leading
          whitespace), otherwise a file path.
        * path-like: path to a JSON file.
        * ``bytes``: UTF-8 encoded JSON text.
        * object with a ``read()`` method: JSON document.

    Returns
    -------
    dict

    Raises
    ------
    TypeError
        If the input type is not accepted or the document is not a JSON
        object.
    ValueError
        If the text is not valid JSON.
    """
    if isinstance(source, dict):
        table = source
    elif isinstance(source, str) and source.lstrip().startswith(("{", "[")):
        table = json.loads(source)
    elif isinstance(source, (str, os.PathLike)):
        with open(source, encoding="utf-8") as fh:
            table = json.load(fh)
    elif isinstance(source, (bytes, bytearray)):
        table = json.loads(bytes(source).decode("utf-8"))
    elif hasattr(source, "read"):
        table = json.load(source)
    else:
        raise TypeError(
            f"source must be a dict, JSON text, a file path or a file object, "
            f"got {type(source).__name__!r}."
        )
    if not isinstance(table, dict):
        raise TypeError(
            f"Connectome tables must be JSON objects, got {type(table).__name__!r}."
        )
    return table
