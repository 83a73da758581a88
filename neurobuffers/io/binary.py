"""Primitive readers for the binary neuroimaging formats.

Every reader takes a ``bytes``-like buffer and a byte offset and returns a
single value (or, for the ``*_array`` variants, a numpy array).  The readers
do not check the buffer length themselves; the decoders validate the
declared sizes of a file before reading, or use :class:`ByteCursor` whose
:meth:`ByteCursor.require` does that check.

Two byte orders are in use:

* **little-endian**: TrackVis ``.trk`` files;
* **big-endian** ("swapped"): FreeSurfer surfaces and curvature files.

Single precision floats are reconstructed by hand from their sign,
exponent and mantissa bits rather than through :mod:`struct`.  The
reconstruction is *normalized only*: a raw exponent of zero with a zero
mantissa gives exactly ``0.0``; subnormals, infinities and NaNs are not
special-cased and come out as whatever the normalized formula gives,
rounded to single precision.  A raw exponent of 255 therefore reads as
``+-inf`` from both the scalar and the array readers.
"""

import math

import numpy as np

_TWO_POW_M23 = 2.0 ** -23


# ---------------------------------------------------------------------------
# Scalar readers
# ---------------------------------------------------------------------------

def read_fixed_string(data, offset, length):
    """Return ``length`` raw bytes at ``offset`` as a fixed-width string.

    Bytes are mapped one-to-one onto characters (latin-1); trailing NUL
    padding is kept.
    """
    return bytes(data[offset:offset + length]).decode("latin-1")


def read_uint8(data, offset):
    """Read an unsigned byte."""
    return data[offset] & 0xFF


def read_int8(data, offset):
    """Read a signed byte (values above 127 map to ``value - 256``)."""
    b = read_uint8(data, offset)
    return b - 256 if b > 127 else b


def read_uint16_le(data, offset):
    """Read a little-endian unsigned 16-bit integer."""
    b0 = read_uint8(data, offset)
    b1 = read_uint8(data, offset + 1)
    return (b1 << 8) + b0


def read_uint32_le(data, offset):
    """Read a little-endian unsigned 32-bit integer."""
    b0 = read_uint8(data, offset)
    b1 = read_uint8(data, offset + 1)
    b2 = read_uint8(data, offset + 2)
    b3 = read_uint8(data, offset + 3)
    return ((b3 << 24) + (b2 << 16) + (b1 << 8) + b0) & 0xFFFFFFFF


def read_uint24_be(data, offset):
    """Read a big-endian unsigned 24-bit integer (FreeSurfer magic numbers)."""
    b0 = read_uint8(data, offset)
    b1 = read_uint8(data, offset + 1)
    b2 = read_uint8(data, offset + 2)
    return ((b0 << 16) + (b1 << 8) + b2) & 0x00FFFFFF


def read_uint32_be(data, offset):
    """Read a big-endian unsigned 32-bit integer."""
    b0 = read_uint8(data, offset)
    b1 = read_uint8(data, offset + 1)
    b2 = read_uint8(data, offset + 2)
    b3 = read_uint8(data, offset + 3)
    return ((b0 << 24) + (b1 << 16) + (b2 << 8) + b3) & 0xFFFFFFFF


def _compose_float32(b0, b1, b2, b3):
    # b0 holds the sign bit, b3 the least significant mantissa bits
    sign = 1 - 2 * (b0 >> 7)
    exponent = (((b0 << 1) & 0xFF) | (b1 >> 7)) - 127
    mantissa = ((b1 & 0x7F) << 16) | (b2 << 8) | b3
    if mantissa == 0 and exponent == -127:
        return 0.0
    value = sign * math.ldexp(1.0 + mantissa * _TWO_POW_M23, exponent)
    # rounded to single precision like the array readers
    with np.errstate(over="ignore"):
        return float(np.float32(value))


def read_float32_le(data, offset):
    """Reconstruct a little-endian IEEE-754 single precision float.

    Parameters
    ----------
    data : bytes-like
        Source buffer.
    offset : int
        Byte offset of the first (least significant) byte.

    Returns
    -------
    float
        ``sign * (1 + mantissa * 2**-23) * 2**exponent``, or exactly ``0.0``
        for the all-zero exponent and mantissa pattern.
    """
    return _compose_float32(
        read_uint8(data, offset + 3),
        read_uint8(data, offset + 2),
        read_uint8(data, offset + 1),
        read_uint8(data, offset),
    )


def read_float32_be(data, offset):
    """Reconstruct a big-endian IEEE-754 single precision float.

    See :func:`read_float32_le`; only the byte order differs.
    """
    return _compose_float32(
        read_uint8(data, offset),
        read_uint8(data, offset + 1),
        read_uint8(data, offset + 2),
        read_uint8(data, offset + 3),
    )


# ---------------------------------------------------------------------------
# Array readers
# ---------------------------------------------------------------------------

def _byte_matrix(data, offset, n, width):
    """Return an ``(n, width)`` uint32 view of ``n`` packed records."""
    if n == 0:
        return np.zeros((0, width), dtype=np.uint32)
    raw = np.frombuffer(data, dtype=np.uint8, count=n * width, offset=offset)
    return raw.reshape(n, width).astype(np.uint32)


def _compose_float32_array(b0, b1, b2, b3):
    sign = 1.0 - 2.0 * (b0 >> 7)
    exponent = (((b0 << 1) & 0xFF) | (b1 >> 7)).astype(np.int32) - 127
    mantissa = ((b1 & 0x7F) << 16) | (b2 << 8) | b3
    values = sign * np.ldexp(1.0 + mantissa * _TWO_POW_M23, exponent)
    values[(mantissa == 0) & (exponent == -127)] = 0.0
    with np.errstate(over="ignore"):
        return values.astype(np.float32)


def read_float32_le_array(data, offset, n):
    """Read ``n`` consecutive little-endian float32 values.

    Uses the same bit-level reconstruction as :func:`read_float32_le`,
    vectorised over the records.

    Returns
    -------
    numpy.ndarray, shape (n,), dtype float32
    """
    b = _byte_matrix(data, offset, n, 4)
    return _compose_float32_array(b[:, 3], b[:, 2], b[:, 1], b[:, 0])


def read_float32_be_array(data, offset, n):
    """Read ``n`` consecutive big-endian float32 values.

    Returns
    -------
    numpy.ndarray, shape (n,), dtype float32
    """
    b = _byte_matrix(data, offset, n, 4)
    return _compose_float32_array(b[:, 0], b[:, 1], b[:, 2], b[:, 3])


def read_uint16_le_array(data, offset, n):
    """Read ``n`` consecutive little-endian uint16 values as an int64 array."""
    b = _byte_matrix(data, offset, n, 2)
    return ((b[:, 1] << 8) + b[:, 0]).astype(np.int64)


def read_uint32_be_array(data, offset, n):
    """Read ``n`` consecutive big-endian uint32 values as an int64 array."""
    b = _byte_matrix(data, offset, n, 4)
    return ((b[:, 0] << 24) | (b[:, 1] << 16) | (b[:, 2] << 8) | b[:, 3]).astype(np.int64)


# ---------------------------------------------------------------------------
# Sequential cursor
# ---------------------------------------------------------------------------

class ByteCursor:
    """Sequential reader over an in-memory buffer.

    Each ``read_*`` method reads at the current offset and advances it by
    the size of the value read.

    Parameters
    ----------
    data : bytes-like
        The complete payload.
    offset : int, optional, default 0
        Starting byte offset.

    Attributes
    ----------
    data : bytes
        The wrapped buffer.
    offset : int
        Offset of the next unread byte.
    """

    def __init__(self, data, offset=0):
        self.data = bytes(data)
        self.offset = offset

    def __len__(self):
        return len(self.data)

    @property
    def remaining(self):
        """Number of unread bytes."""
        return max(len(self.data) - self.offset, 0)

    def require(self, n_bytes, what="data"):
        """Raise ``ValueError`` unless ``n_bytes`` unread bytes remain."""
        if n_bytes > self.remaining:
            raise ValueError(
                f"Truncated buffer: {what} needs {n_bytes} bytes at offset "
                f"{self.offset} but only {self.remaining} remain."
            )

    def skip(self, n_bytes):
        self.offset += n_bytes

    def _advance(self, value, size):
        self.offset += size
        return value

    def read_fixed_string(self, length):
        return self._advance(read_fixed_string(self.data, self.offset, length), length)

    def read_uint8(self):
        return self._advance(read_uint8(self.data, self.offset), 1)

    def read_int8(self):
        return self._advance(read_int8(self.data, self.offset), 1)

    def read_uint16_le(self):
        return self._advance(read_uint16_le(self.data, self.offset), 2)

    def read_uint32_le(self):
        return self._advance(read_uint32_le(self.data, self.offset), 4)

    def read_uint24_be(self):
        return self._advance(read_uint24_be(self.data, self.offset), 3)

    def read_uint32_be(self):
        return self._advance(read_uint32_be(self.data, self.offset), 4)

    def read_float32_le(self):
        return self._advance(read_float32_le(self.data, self.offset), 4)

    def read_float32_be(self):
        return self._advance(read_float32_be(self.data, self.offset), 4)

    def read_float32_le_array(self, n):
        return self._advance(read_float32_le_array(self.data, self.offset, n), 4 * n)

    def read_float32_be_array(self, n):
        return self._advance(read_float32_be_array(self.data, self.offset, n), 4 * n)

    def read_uint16_le_array(self, n):
        return self._advance(read_uint16_le_array(self.data, self.offset, n), 2 * n)

    def read_uint32_be_array(self, n):
        return self._advance(read_uint32_be_array(self.data, self.offset, n), 4 * n)
