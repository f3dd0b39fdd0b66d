"""dnfloat: exact conversion between IEEE 754 half, single and double."""

from __future__ import annotations

from .decomposer import (
    decompose,
    from_double,
    from_float,
    from_half,
    from_single,
    normalize,
)
from .formats import DOUBLE, FORMATS, HALF, SINGLE, FloatFormat, format_for
from .recomposer import (
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
from .value import (
    ConversionError,
    DecomposedFloat,
    DomainError,
    InvariantError,
    RangeError,
    Status,
)

__version__ = "0.1.0"

__all__ = [
    "ConversionError",
    "DOUBLE",
    "DecomposedFloat",
    "DomainError",
    "FORMATS",
    "FloatFormat",
    "HALF",
    "InvariantError",
    "RangeError",
    "SINGLE",
    "Status",
    "convert",
    "decompose",
    "denormalize",
    "encode_bits",
    "format_for",
    "from_double",
    "from_float",
    "from_half",
    "from_single",
    "normalize",
    "recompose",
    "to_double",
    "to_float",
    "to_half",
    "to_single",
    "try_recompose",
]
