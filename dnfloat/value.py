"""The intermediate value shared by every conversion, plus its diagnostics."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

from .formats import FRACTION_MASK, HIDDEN_BIT


# ============================================================
# Diagnostics
# ============================================================


class Status(enum.Enum):
    """Outcome of a recomposition."""

    SUCCESS = "success"
    DOMAIN_ERROR = "domain error"
    RANGE_ERROR = "range error"


class ConversionError(Exception):
    """Base error for a recomposition the target format cannot hold exactly."""

    status: Status

    def __init__(self, msg: str, target: str | None = None):
        if target is None:
            super().__init__(msg)
        else:
            super().__init__(f"{msg} ({target})")
        self.msg = msg
        self.target = target


class DomainError(ConversionError):
    """Significant fraction bits or NaN payload bits would be dropped."""

    status = Status.DOMAIN_ERROR


class RangeError(ConversionError):
    """Exponent lies outside the target format, subnormals included."""

    status = Status.RANGE_ERROR


class InvariantError(Exception):
    """Internal logic fault: an intermediate value was built inconsistently.

    Not a ConversionError, so it is never reported as a Status.
    """


# ============================================================
# Intermediate value
# ============================================================


@dataclass(frozen=True)
class DecomposedFloat:
    """Sign, unbiased exponent and 64-bit fraction buffer of a float.

    Invariants:
    - is_infinite and is_nan are never both true
    - 0 <= fraction < 2**64
    - infinities and NaNs have exponent 0; infinities have fraction 0
    - NaNs keep their payload in the top bits of fraction (never 0)
    - zero is exponent 0, fraction 0; sign tells +0 from -0
    - any other finite value has bit 63 of fraction set
    """

    sign: bool
    exponent: int
    fraction: int
    is_infinite: bool = False
    is_nan: bool = False

    def __post_init__(self) -> None:
        if self.is_infinite and self.is_nan:
            raise ValueError("value cannot be both infinite and NaN")
        if self.fraction < 0 or self.fraction > FRACTION_MASK:
            raise ValueError("fraction does not fit in 64 bits")
        if self.is_infinite or self.is_nan:
            if self.exponent != 0:
                raise ValueError("non-finite value must have exponent 0")
            if self.is_infinite and self.fraction != 0:
                raise ValueError("infinity must have fraction 0")
            if self.is_nan and self.fraction == 0:
                raise ValueError("NaN must carry a non-zero fraction")
        elif self.fraction == 0:
            if self.exponent != 0:
                raise ValueError("zero must have exponent 0")
        elif not self.fraction & HIDDEN_BIT:
            raise ValueError("finite non-zero value must be normalized")

    @property
    def is_finite(self) -> bool:
        return not (self.is_infinite or self.is_nan)

    @property
    def is_zero(self) -> bool:
        return self.is_finite and self.fraction == 0

    @property
    def kind(self) -> str:
        if self.is_nan:
            return "nan"
        if self.is_infinite:
            return "infinity"
        if self.fraction == 0:
            return "zero"
        return "normal"

    def with_sign(self, sign: bool) -> DecomposedFloat:
        return replace(self, sign=sign)


def zero(sign: bool = False) -> DecomposedFloat:
    return DecomposedFloat(sign, 0, 0)


def infinity(sign: bool = False) -> DecomposedFloat:
    return DecomposedFloat(sign, 0, 0, is_infinite=True)
