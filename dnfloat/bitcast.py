"""Bit casts between Python floats and raw IEEE 754 bit patterns.

Everything goes through big-endian struct packing; there is no shared
storage between the float and integer views. A signalling NaN routed
through a Python float may come back quieted on some platforms, so the
converter itself works on integers only.
"""

from __future__ import annotations

import struct

from .formats import FloatFormat

_FLOAT_CODES: dict[int, str] = {16: ">e", 32: ">f", 64: ">d"}
_INT_CODES: dict[int, str] = {16: ">H", 32: ">I", 64: ">Q"}


def float_to_bits(fmt: FloatFormat, x: float) -> int:
    """Raw bits of x packed as fmt. Raises OverflowError if x does not fit."""
    packed = struct.pack(_FLOAT_CODES[fmt.width], x)
    return struct.unpack(_INT_CODES[fmt.width], packed)[0]


def bits_to_float(fmt: FloatFormat, bits: int) -> float:
    packed = struct.pack(_INT_CODES[fmt.width], bits)
    return struct.unpack(_FLOAT_CODES[fmt.width], packed)[0]


def bits_to_bytes(fmt: FloatFormat, bits: int) -> bytes:
    return bits.to_bytes(fmt.nbytes, byteorder="big")


def bytes_to_bits(byts: bytes) -> int:
    return int.from_bytes(byts, byteorder="big")


def half_to_bits(x: float) -> int:
    return struct.unpack(">H", struct.pack(">e", x))[0]


def bits_to_half(h: int) -> float:
    return struct.unpack(">e", struct.pack(">H", h))[0]


def single_to_bits(x: float) -> int:
    return struct.unpack(">I", struct.pack(">f", x))[0]


def bits_to_single(i: int) -> float:
    return struct.unpack(">f", struct.pack(">I", i))[0]


def double_to_bits(x: float) -> int:
    return struct.unpack(">Q", struct.pack(">d", x))[0]


def bits_to_double(i: int) -> float:
    return struct.unpack(">d", struct.pack(">Q", i))[0]
