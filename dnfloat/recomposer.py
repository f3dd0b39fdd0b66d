"""Recomposer: DecomposedFloat back to half/single/double bit patterns.

A recomposition either yields the bit pattern that represents the value
exactly, or fails. It never rounds, truncates, clamps to infinity or
flushes to zero. The checks run in a fixed order:

    infinity -> NaN -> range -> zero -> subnormal -> precision -> pack

Failures raise DomainError or RangeError from the to_* functions; the
recompose() entry point reports them as a Status instead.
"""

from __future__ import annotations

from collections.abc import Sequence

from .bitcast import bits_to_double
from .decomposer import decompose
from .formats import DOUBLE, FRACTION_BITS, HALF, SINGLE, FloatFormat, format_for
from .value import (
    ConversionError,
    DecomposedFloat,
    DomainError,
    InvariantError,
    RangeError,
    Status,
)


def denormalize(
    fraction: int, exponent: int, min_normal_exponent: int
) -> tuple[int, int]:
    """Shift fraction right until exponent reaches min_normal_exponent.

    Shifted-out bits are jammed into bit 0 (sticky), so the precision check
    still sees them. Returns (fraction, exponent). Raises InvariantError if
    every significant bit would be shifted out, which a range-checked value
    can never cause.
    """
    shift: int = min_normal_exponent - exponent
    if shift <= 0:
        return (fraction, exponent)
    if shift >= FRACTION_BITS or fraction >> shift == 0:
        raise InvariantError("denormalization shifted out every fraction bit")
    while exponent < min_normal_exponent:
        fraction = (fraction >> 1) | (fraction & 1)
        exponent += 1
    return (fraction, exponent)


def encode_bits(fmt: FloatFormat, v: DecomposedFloat) -> int:
    """Pack v into fmt exactly. Raises DomainError or RangeError."""
    sign_bits: int = fmt.sign_bit if v.sign else 0

    if v.is_infinite:
        return sign_bits | fmt.infinity_bits

    if v.is_nan:
        if v.fraction & fmt.inexact_mask:
            raise DomainError("NaN payload does not fit", fmt.name)
        payload: int = v.fraction >> fmt.fraction_shift
        return sign_bits | fmt.infinity_bits | payload

    # Zero has exponent 0, so it always passes the range check.
    if v.exponent < fmt.min_subnormal_exponent or v.exponent > fmt.max_exponent:
        raise RangeError(f"exponent {v.exponent} out of range", fmt.name)

    if v.exponent == 0 and v.fraction == 0:
        return sign_bits

    fraction: int = v.fraction
    exponent: int = v.exponent
    biased: int
    if exponent < fmt.min_normal_exponent:
        fraction, exponent = denormalize(fraction, exponent, fmt.min_normal_exponent)
        biased = 0
    else:
        biased = (exponent + fmt.bias) & fmt.exponent_mask

    if fraction & fmt.inexact_mask:
        msg = "fraction needs more than " + str(fmt.mantissa_bits) + " bits"
        raise DomainError(msg, fmt.name)

    mantissa: int = (fraction >> fmt.fraction_shift) & fmt.mantissa_mask
    return sign_bits | (biased << fmt.mantissa_bits) | mantissa


def to_half(v: DecomposedFloat) -> int:
    return encode_bits(HALF, v)


def to_single(v: DecomposedFloat) -> int:
    return encode_bits(SINGLE, v)


def to_double(v: DecomposedFloat) -> int:
    return encode_bits(DOUBLE, v)


def recompose(fmt: FloatFormat, v: DecomposedFloat) -> tuple[int, Status]:
    """Pack v into fmt, reporting failure as a Status.

    The bits of a failed recomposition are unspecified (0 is returned).
    InvariantError is not a reportable failure and propagates.
    """
    try:
        return (encode_bits(fmt, v), Status.SUCCESS)
    except ConversionError as e:
        return (0, e.status)


def try_recompose(
    v: DecomposedFloat,
    formats: Sequence[FloatFormat] = (HALF, SINGLE, DOUBLE),
) -> tuple[FloatFormat, int]:
    """Pack v into the first format that holds it exactly.

    Returns (format, bits). Re-raises the last failure when none fits.
    """
    if not formats:
        raise ValueError("no candidate formats")
    last: ConversionError | None = None
    for fmt in formats:
        try:
            return (fmt, encode_bits(fmt, v))
        except ConversionError as e:
            last = e
    assert last is not None
    raise last


def to_float(v: DecomposedFloat) -> float:
    """Recompose v as a double and return it as a Python float."""
    return bits_to_double(encode_bits(DOUBLE, v))


def convert(
    bits: int,
    source: FloatFormat | str | int,
    target: FloatFormat | str | int,
) -> int:
    """Reinterpret a bit pattern from one format into another, exactly."""
    return encode_bits(format_for(target), decompose(format_for(source), bits))
