"""Decomposer: raw half/single/double bit patterns to DecomposedFloat.

Decomposition never fails for a bit pattern of the stated width. Subnormal
inputs come out normalized, with an exponent below the format's normal
range; the intermediate form has no subnormal concept.
"""

from __future__ import annotations

from .bitcast import double_to_bits
from .formats import (
    DOUBLE,
    FRACTION_BITS,
    FRACTION_MASK,
    HALF,
    HIDDEN_BIT,
    SINGLE,
    FloatFormat,
)
from .value import DecomposedFloat


def normalize(fraction: int, exponent: int) -> tuple[int, int]:
    """Shift fraction left until bit 63 is set. Returns (fraction, exponent)."""
    i = 0
    while i < FRACTION_BITS and (fraction & HIDDEN_BIT) == 0:
        fraction = (fraction << 1) & FRACTION_MASK
        exponent -= 1
        i += 1
    return (fraction, exponent)


def decompose(fmt: FloatFormat, bits: int) -> DecomposedFloat:
    """Split a raw bit pattern of format fmt into sign, exponent and fraction."""
    if bits < 0 or bits >> fmt.width:
        raise ValueError(f"{bits:#x} is not a {fmt.width}-bit pattern")
    sign: bool = (bits >> fmt.sign_shift) & 1 == 1
    biased: int = (bits >> fmt.mantissa_bits) & fmt.exponent_mask
    mantissa: int = bits & fmt.mantissa_mask
    fraction: int = mantissa << fmt.fraction_shift

    # All-ones exponent: zero mantissa is infinity, anything else a NaN
    # whose payload stays in the top of the buffer.
    if biased == fmt.exponent_mask:
        if mantissa == 0:
            return DecomposedFloat(sign, 0, 0, is_infinite=True)
        return DecomposedFloat(sign, 0, fraction, is_nan=True)

    if biased == 0:
        if mantissa == 0:
            return DecomposedFloat(sign, 0, 0)
        fraction, exponent = normalize(fraction, fmt.min_normal_exponent)
        return DecomposedFloat(sign, exponent, fraction)

    return DecomposedFloat(sign, biased - fmt.bias, fraction | HIDDEN_BIT)


def from_half(bits: int) -> DecomposedFloat:
    return decompose(HALF, bits)


def from_single(bits: int) -> DecomposedFloat:
    return decompose(SINGLE, bits)


def from_double(bits: int) -> DecomposedFloat:
    return decompose(DOUBLE, bits)


def from_float(x: float) -> DecomposedFloat:
    """Decompose a Python float through its double bit pattern."""
    return decompose(DOUBLE, double_to_bits(x))
