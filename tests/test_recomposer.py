"""Recomposer tests: exact packing, range and precision failures, policy."""

import math

import pytest

import dnfloat.decomposer as decomposer_module
import dnfloat.recomposer as recomposer_module
from dnfloat.bitcast import (
    bits_to_double,
    bits_to_half,
    bits_to_single,
    double_to_bits,
)
from dnfloat.decomposer import (
    decompose,
    from_double,
    from_float,
    from_half,
    from_single,
)
from dnfloat.formats import DOUBLE, HALF, HIDDEN_BIT, SINGLE, FloatFormat
from dnfloat.recomposer import (
    convert,
    denormalize,
    encode_bits,
    recompose,
    to_double,
    to_float,
    to_half,
    to_single,
    try_recompose,
)
from dnfloat.value import (
    DecomposedFloat,
    DomainError,
    InvariantError,
    RangeError,
    Status,
    infinity,
    zero,
)


# ---------------------------------------------------------------------------
# Exhaustive half
# ---------------------------------------------------------------------------


def test_half_round_trip():
    for h in range(0x10000):
        assert recompose(HALF, from_half(h)) == (h, Status.SUCCESS), hex(h)


def test_half_widening_is_lossless():
    for h in range(0x10000):
        v = from_half(h)
        s, s_status = recompose(SINGLE, v)
        d, d_status = recompose(DOUBLE, v)
        assert s_status == Status.SUCCESS
        assert d_status == Status.SUCCESS
        exponent = (h >> 10) & 0x1F
        mantissa = h & 0x3FF
        if exponent == 0x1F and mantissa != 0:
            # NaN payload moves to the top of the wider mantissa
            sign = h >> 15
            assert s == (sign << 31) | 0x7F800000 | (mantissa << 13)
            assert d == (sign << 63) | 0x7FF0000000000000 | (mantissa << 42)
            continue
        expected = bits_to_half(h)
        assert bits_to_single(s) == expected
        assert bits_to_double(d) == expected
        assert math.copysign(1.0, bits_to_double(d)) == math.copysign(1.0, expected)


# ---------------------------------------------------------------------------
# Precision and range
# ---------------------------------------------------------------------------


def test_precision_loss_is_domain_error():
    v = from_float(1.0 + 2.0**-11)
    assert recompose(HALF, v) == (0, Status.DOMAIN_ERROR)
    with pytest.raises(DomainError):
        to_half(v)
    assert to_single(v) == 0x3F800000 | (1 << 12)


def test_ten_mantissa_bits_fit_half():
    assert recompose(HALF, from_float(1.0 + 2.0**-10)) == (0x3C01, Status.SUCCESS)


def test_exponent_too_large_is_range_error():
    v = from_float(2.0**16)
    assert v.exponent == 16
    assert recompose(HALF, v) == (0, Status.RANGE_ERROR)
    with pytest.raises(RangeError):
        to_half(v)
    assert recompose(SINGLE, v) == (0x47800000, Status.SUCCESS)


def test_largest_half_fits():
    assert recompose(HALF, from_float(65504.0)) == (0x7BFF, Status.SUCCESS)
    # same exponent, one more mantissa bit than half can hold
    assert recompose(HALF, from_float(65520.0))[1] == Status.DOMAIN_ERROR


@pytest.mark.parametrize(
    "x,fmt,bits",
    [
        (2.0**-24, HALF, 0x0001),
        (3 * 2.0**-24, HALF, 0x0003),
        (2.0**-14, HALF, 0x0400),
        (2.0**-15, HALF, 0x0200),
        (2.0**-149, SINGLE, 0x00000001),
        (2.0**-126, SINGLE, 0x00800000),
        (5e-324, DOUBLE, 0x0000000000000001),
    ],
)
def test_subnormal_output(x, fmt, bits):
    assert recompose(fmt, from_float(x)) == (bits, Status.SUCCESS)


@pytest.mark.parametrize(
    "x,fmt", [(2.0**-25, HALF), (2.0**-150, SINGLE), (-(2.0**-25), HALF)]
)
def test_below_subnormal_range_is_range_error(x, fmt):
    assert recompose(fmt, from_float(x)) == (0, Status.RANGE_ERROR)


def test_subnormal_precision_loss_is_domain_error():
    # 1.5 * 2**-24 needs a bit below the smallest half subnormal
    assert recompose(HALF, from_float(3 * 2.0**-25)) == (0, Status.DOMAIN_ERROR)
    # 1.5 * 2**-15 fits: it denormalizes to mantissa 0b1100000000
    assert recompose(HALF, from_float(3 * 2.0**-16)) == (0x0300, Status.SUCCESS)


@pytest.mark.parametrize(
    "fmt,v",
    [
        (HALF, DecomposedFloat(False, -24, HIDDEN_BIT | 1)),
        # 2**-149 with the lowest double mantissa bit set
        (SINGLE, from_double(0x36A0000000000001)),
        (SINGLE, DecomposedFloat(True, -140, HIDDEN_BIT | (1 << 5))),
        (DOUBLE, DecomposedFloat(False, -1074, HIDDEN_BIT | 1)),
        (DOUBLE, DecomposedFloat(False, -1060, HIDDEN_BIT | 0x7FF)),
    ],
)
def test_subnormal_low_bits_are_domain_error(fmt, v):
    assert recompose(fmt, v) == (0, Status.DOMAIN_ERROR)
    with pytest.raises(DomainError):
        encode_bits(fmt, v)


def test_subnormal_low_bits_block_smallest_format():
    v = from_double(0x36A0000000000001)
    assert try_recompose(v) == (DOUBLE, 0x36A0000000000001)


def test_double_only_exponent_is_range_error_for_single():
    v = from_float(1e300)
    assert recompose(SINGLE, v) == (0, Status.RANGE_ERROR)
    assert recompose(DOUBLE, v) == (double_to_bits(1e300), Status.SUCCESS)


# ---------------------------------------------------------------------------
# Zero, infinity, NaN
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("fmt", [HALF, SINGLE, DOUBLE])
def test_signed_zero_keeps_sign(fmt):
    assert recompose(fmt, from_float(0.0)) == (0, Status.SUCCESS)
    assert recompose(fmt, from_float(-0.0)) == (fmt.sign_bit, Status.SUCCESS)
    assert encode_bits(fmt, zero(True)) == fmt.sign_bit


@pytest.mark.parametrize(
    "fmt,pos,neg",
    [
        (HALF, 0x7C00, 0xFC00),
        (SINGLE, 0x7F800000, 0xFF800000),
        (DOUBLE, 0x7FF0000000000000, 0xFFF0000000000000),
    ],
)
def test_infinity_always_fits(fmt, pos, neg):
    assert recompose(fmt, from_float(math.inf)) == (pos, Status.SUCCESS)
    assert recompose(fmt, from_float(-math.inf)) == (neg, Status.SUCCESS)
    assert encode_bits(fmt, infinity(True)) == neg


def test_nan_payload_preserved():
    v = from_single(0x7F800001)
    assert recompose(SINGLE, v) == (0x7F800001, Status.SUCCESS)
    assert recompose(HALF, v) == (0, Status.DOMAIN_ERROR)
    assert recompose(DOUBLE, v) == (0x7FF0000020000000, Status.SUCCESS)


def test_quiet_nan_narrows():
    v = from_float(math.nan)
    assert recompose(HALF, v) == (0x7E00, Status.SUCCESS)
    assert recompose(SINGLE, v) == (0x7FC00000, Status.SUCCESS)


def test_negative_nan_keeps_sign():
    assert to_half(from_single(0xFFC00000)) == 0xFE00


def test_nan_payload_in_low_double_bits():
    v = from_double(0x7FF0000000000001)
    assert recompose(SINGLE, v)[1] == Status.DOMAIN_ERROR
    assert to_double(v) == 0x7FF0000000000001


# ---------------------------------------------------------------------------
# Denormalize invariant
# ---------------------------------------------------------------------------


def test_denormalize_shifts_to_min_normal():
    assert denormalize(HIDDEN_BIT, -24, -14) == (HIDDEN_BIT >> 10, -14)
    assert denormalize(HIDDEN_BIT, -14, -14) == (HIDDEN_BIT, -14)


def test_denormalize_jams_shifted_out_bits():
    assert denormalize(HIDDEN_BIT | 1, -24, -14) == ((HIDDEN_BIT >> 10) | 1, -14)
    assert denormalize(HIDDEN_BIT | 0x3FF, -24, -14) == ((HIDDEN_BIT >> 10) | 1, -14)
    exact = HIDDEN_BIT | (1 << 10)
    assert denormalize(exact, -24, -14) == (exact >> 10, -14)


def test_denormalize_to_zero_is_invariant_error():
    with pytest.raises(InvariantError):
        denormalize(HIDDEN_BIT, -200, -14)
    with pytest.raises(InvariantError):
        denormalize(HIDDEN_BIT, -78, -14)


# More mantissa bits than the 64-bit fraction buffer can denormalize into.
OVERSIZED = FloatFormat("oversized", 82, 11, 70, 1023)


def test_invariant_error_is_not_a_status():
    v = DecomposedFloat(False, -1090, HIDDEN_BIT)
    assert OVERSIZED.min_subnormal_exponent <= v.exponent
    assert v.exponent < OVERSIZED.min_normal_exponent
    with pytest.raises(InvariantError):
        encode_bits(OVERSIZED, v)
    with pytest.raises(InvariantError):
        recompose(OVERSIZED, v)
    assert not issubclass(InvariantError, (DomainError, RangeError))


def test_modules_are_not_shadowed_by_functions():
    assert recomposer_module.recompose is recompose
    assert recomposer_module.denormalize is denormalize
    assert decomposer_module.decompose is decompose


# ---------------------------------------------------------------------------
# Smallest-format policy and helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "x,fmt,bits",
    [
        (1.0, HALF, 0x3C00),
        (-0.0, HALF, 0x8000),
        (100000.0, SINGLE, 0x47C35000),
        (3.4028234663852886e38, SINGLE, 0x7F7FFFFF),
        (1.1, DOUBLE, 0x3FF199999999999A),
        (math.inf, HALF, 0x7C00),
    ],
)
def test_try_recompose_picks_smallest(x, fmt, bits):
    assert try_recompose(from_float(x)) == (fmt, bits)


def test_try_recompose_reraises_last_failure():
    with pytest.raises(RangeError):
        try_recompose(from_float(1e300), (HALF, SINGLE))
    with pytest.raises(DomainError):
        try_recompose(from_float(1.1), (HALF,))
    with pytest.raises(ValueError):
        try_recompose(from_float(1.0), ())


def test_smallest_subnormal_half_widens():
    v = from_half(0x0001)
    assert recompose(HALF, v) == (0x0001, Status.SUCCESS)
    assert recompose(SINGLE, v) == (0x33800000, Status.SUCCESS)
    assert recompose(DOUBLE, v) == (0x3E70000000000000, Status.SUCCESS)
    assert to_float(v) == 2.0**-24


def test_convert():
    assert convert(0x3FF0000000000000, "double", "half") == 0x3C00
    assert convert(0x3C00, HALF, 32) == 0x3F800000
    with pytest.raises(DomainError):
        convert(0x3FF0020000000000, "double", "half")


def test_recompose_does_not_mutate_value():
    v = from_float(2.0**-20)
    before = DecomposedFloat(v.sign, v.exponent, v.fraction)
    recompose(HALF, v)
    assert v == before


def test_decompose_recompose_all_formats_agree():
    for fmt in (HALF, SINGLE, DOUBLE):
        for x in (0.5, -2.0, 1024.0, 0.375):
            v = from_float(x)
            assert decompose(fmt, encode_bits(fmt, v)) == v
