"""IEEE 754 binary interchange formats handled by the converter.

Every constant used by the decomposer and recomposer is derived from the
three field widths and the bias, so no shift amount is hard-coded.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Fraction buffer
# ---------------------------------------------------------------------------

FRACTION_BITS: int = 64
FRACTION_MASK: int = (1 << FRACTION_BITS) - 1
HIDDEN_BIT: int = 1 << (FRACTION_BITS - 1)


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FloatFormat:
    """Field layout of one binary floating-point format.

    Invariants:
    - width == 1 + exponent_bits + mantissa_bits
    - bias == 2**(exponent_bits - 1) - 1
    """

    name: str
    width: int
    exponent_bits: int
    mantissa_bits: int
    bias: int

    @property
    def nbytes(self) -> int:
        return self.width // 8

    @property
    def sign_shift(self) -> int:
        return self.width - 1

    @property
    def sign_bit(self) -> int:
        return 1 << self.sign_shift

    @property
    def exponent_mask(self) -> int:
        """All-ones exponent field, unshifted."""
        return (1 << self.exponent_bits) - 1

    @property
    def mantissa_mask(self) -> int:
        return (1 << self.mantissa_bits) - 1

    @property
    def max_exponent(self) -> int:
        return self.exponent_mask - 1 - self.bias

    @property
    def min_normal_exponent(self) -> int:
        return 1 - self.bias

    @property
    def min_subnormal_exponent(self) -> int:
        return self.min_normal_exponent - self.mantissa_bits

    @property
    def fraction_shift(self) -> int:
        """Distance from the mantissa field to the top of the fraction buffer."""
        return FRACTION_BITS - 1 - self.mantissa_bits

    @property
    def inexact_mask(self) -> int:
        """Buffer bits below what the mantissa field can hold."""
        return (1 << self.fraction_shift) - 1

    @property
    def infinity_bits(self) -> int:
        return self.exponent_mask << self.mantissa_bits

    def __str__(self) -> str:
        return self.name


HALF = FloatFormat("half", 16, 5, 10, 15)
SINGLE = FloatFormat("single", 32, 8, 23, 127)
DOUBLE = FloatFormat("double", 64, 11, 52, 1023)

FORMATS: dict[str, FloatFormat] = {
    "half": HALF,
    "single": SINGLE,
    "double": DOUBLE,
}

_ALIASES: dict[str, FloatFormat] = {
    "f16": HALF,
    "f32": SINGLE,
    "f64": DOUBLE,
    "float16": HALF,
    "float32": SINGLE,
    "float64": DOUBLE,
}


def format_for(key: FloatFormat | str | int) -> FloatFormat:
    """Resolve a format by object, name, bit width, or byte width."""
    if isinstance(key, FloatFormat):
        return key
    if isinstance(key, str):
        lowered = key.lower()
        if lowered in FORMATS:
            return FORMATS[lowered]
        if lowered in _ALIASES:
            return _ALIASES[lowered]
        if lowered.isdigit():
            return format_for(int(lowered))
        raise ValueError("unknown float format '" + key + "'")
    if isinstance(key, bool) or not isinstance(key, int):
        raise ValueError("unknown float format " + repr(key))
    for fmt in (HALF, SINGLE, DOUBLE):
        if key == fmt.width or key == fmt.nbytes:
            return fmt
    raise ValueError("unknown float format " + repr(key))
