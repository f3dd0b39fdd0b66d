"""CBOR number items: integer heads and half/single/double floats.

Only the scalar encodings that touch numbers are handled here. Floats are
written in the smallest width that holds them exactly, and read back
through the decomposer so every stored width widens to a double without
loss.
"""

from __future__ import annotations

import logging

from .bitcast import bits_to_bytes, bits_to_double, bytes_to_bits, double_to_bits
from .decomposer import decompose
from .formats import DOUBLE, HALF, SINGLE, FloatFormat, format_for
from .recomposer import encode_bits, try_recompose
from .value import DecomposedFloat

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MT_UNSIGNED: int = 0
MT_NEGATIVE: int = 1
MT_SIMPLE: int = 7

AI_UINT8: int = 24
AI_HALF: int = 25
AI_SINGLE: int = 26
AI_DOUBLE: int = 27
AI_BREAK: int = 31

AI_LENGTHS: dict[int, int] = {24: 1, 25: 2, 26: 4, 27: 8}

FLOAT_INFO: dict[str, int] = {
    "half": AI_HALF,
    "single": AI_SINGLE,
    "double": AI_DOUBLE,
}

INFO_FORMAT: dict[int, FloatFormat] = {
    AI_HALF: HALF,
    AI_SINGLE: SINGLE,
    AI_DOUBLE: DOUBLE,
}

UINT64_LIMIT: int = 1 << 64

# Majors that may carry info 31: indefinite-length strings and containers,
# and the break stop code.
INDEFINITE_MAJORS: tuple[int, ...] = (2, 3, 4, 5, MT_SIMPLE)


class CBORDecodeError(ValueError):
    """Malformed or truncated CBOR input."""

    def __init__(self, msg: str, offset: int):
        super().__init__(f"{msg} at offset {offset}")
        self.msg = msg
        self.offset = offset


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _initial_byte(major: int, info: int) -> bytes:
    return bytes([(major << 5) | info])


def encode_head(major: int, value: int) -> bytes:
    """Encode a major type and argument using the fewest bytes."""
    if major < 0 or major > 7:
        raise ValueError("major type must be 0..7, got " + str(major))
    if value < 0 or value >= UINT64_LIMIT:
        raise ValueError("argument does not fit in 64 bits: " + str(value))
    if value < AI_UINT8:
        return _initial_byte(major, value)
    for info, length in AI_LENGTHS.items():
        if value < (1 << (8 * length)):
            head = _initial_byte(major, info)
            return head + value.to_bytes(length, byteorder="big")
    raise AssertionError("unreachable")


def encode_int(n: int) -> bytes:
    if n >= 0:
        return encode_head(MT_UNSIGNED, n)
    return encode_head(MT_NEGATIVE, -1 - n)


def encode_float_bits(fmt: FloatFormat, bits: int) -> bytes:
    """Emit a float item from raw bits; NaN payloads pass through untouched."""
    if bits < 0 or bits >> fmt.width:
        raise ValueError(f"{bits:#x} is not a {fmt.width}-bit pattern")
    head = _initial_byte(MT_SIMPLE, FLOAT_INFO[fmt.name])
    return head + bits_to_bytes(fmt, bits)


def encode_float(x: float, width: FloatFormat | str | int | None = None) -> bytes:
    """Encode x as a CBOR float item.

    Without width, the smallest exact format is chosen (half, single,
    double). With width, x must be exactly representable in it, otherwise
    DomainError or RangeError is raised.
    """
    v: DecomposedFloat = decompose(DOUBLE, double_to_bits(x))
    if width is None:
        fmt, bits = try_recompose(v)
        logger.debug("encoding %r as %s", x, fmt.name)
    else:
        fmt = format_for(width)
        bits = encode_bits(fmt, v)
    return encode_float_bits(fmt, bits)


def encode_break() -> bytes:
    return _initial_byte(MT_SIMPLE, AI_BREAK)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode_head(data: bytes, offset: int = 0) -> tuple[int, int, int, int]:
    """Read one head. Returns (major, info, argument, next_offset).

    For info 31 (indefinite length / break) the argument is 0; it is
    malformed for majors 0, 1 and 6.
    """
    if offset >= len(data):
        raise CBORDecodeError("no more input", offset)
    initial: int = data[offset]
    major: int = initial >> 5
    info: int = initial & 0x1F
    if info < AI_UINT8:
        return (major, info, info, offset + 1)
    if info == AI_BREAK:
        if major not in INDEFINITE_MAJORS:
            raise CBORDecodeError("indefinite length for major " + str(major), offset)
        return (major, info, 0, offset + 1)
    if info not in AI_LENGTHS:
        msg = "reserved additional information " + str(info)
        raise CBORDecodeError(msg, offset)
    length: int = AI_LENGTHS[info]
    end: int = offset + 1 + length
    if end > len(data):
        raise CBORDecodeError("no more input", offset)
    return (major, info, bytes_to_bits(data[offset + 1 : end]), end)


def decode_int(data: bytes, offset: int = 0) -> tuple[int, int]:
    major, info, value, end = decode_head(data, offset)
    if info == AI_BREAK or major not in (MT_UNSIGNED, MT_NEGATIVE):
        raise CBORDecodeError("not an integer item", offset)
    if major == MT_NEGATIVE:
        return (-1 - value, end)
    return (value, end)


def decode_float_bits(data: bytes, offset: int = 0) -> tuple[DecomposedFloat, int]:
    """Read a float item without going through a Python float."""
    major, info, value, end = decode_head(data, offset)
    if major != MT_SIMPLE or info not in INFO_FORMAT:
        raise CBORDecodeError("not a float item", offset)
    return (decompose(INFO_FORMAT[info], value), end)


def decode_float(data: bytes, offset: int = 0) -> tuple[float, int]:
    """Read a float item of any width as a Python float."""
    v, end = decode_float_bits(data, offset)
    # Every half and single value widens to a double exactly.
    return (bits_to_double(encode_bits(DOUBLE, v)), end)
