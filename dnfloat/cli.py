"""dnfloat CLI: inspect, convert and CBOR-encode float bit patterns."""

from __future__ import annotations

import logging
import math
import sys

from .cbor import CBORDecodeError, decode_float, encode_float
from .decomposer import decompose
from .formats import FloatFormat, format_for
from .recomposer import encode_bits
from .value import ConversionError, DecomposedFloat

USAGE: str = """\
dnfloat [OPTIONS] COMMAND ARG

Commands:
  inspect BITS        Show sign, exponent and fraction of a bit pattern
  convert BITS        Convert a bit pattern between formats, exactly
  encode VALUE        Encode a number as the smallest exact CBOR float
  decode HEX          Decode a CBOR float item

Options:
  --format FORMAT     Format of BITS for inspect (default: double)
  --from FORMAT       Source format for convert (default: double)
  --to FORMAT         Target format for convert (default: half)
  --width WIDTH       Force encode to half, single or double
  --verbose           Log debug messages to stderr
  --help              Show this help message
"""

COMMANDS: list[str] = ["inspect", "convert", "encode", "decode"]

OPTIONS_WITH_VALUE: list[str] = ["--format", "--from", "--to", "--width"]

INFINITY_LITERALS: list[str] = ["inf", "infinity"]


def _error(msg: str) -> None:
    print("dnfloat: " + msg, file=sys.stderr)


def _hex_bits(fmt: FloatFormat, bits: int) -> str:
    return f"{bits:#0{2 + 2 * fmt.nbytes}x}"


def parse_bits(text: str, fmt: FloatFormat) -> int:
    """Parse an integer literal (0x.., 0b.., decimal) as a bit pattern of fmt."""
    bits = int(text.replace("_", ""), 0)
    if bits < 0 or bits >> fmt.width:
        raise ValueError(text + " is not a " + str(fmt.width) + "-bit pattern")
    return bits


def _parse_literal(text: str) -> float:
    if text.lstrip("+-").lower().startswith("0x"):
        try:
            return float.fromhex(text)
        except OverflowError:
            return -math.inf if text.startswith("-") else math.inf
    return float(text)


def parse_number(text: str) -> float:
    """Parse a decimal or C99 hex float literal.

    A finite literal too large for a double is rejected, not read as infinity.
    """
    x = _parse_literal(text)
    if math.isinf(x) and text.lstrip("+-").lower() not in INFINITY_LITERALS:
        raise ValueError(text + " does not fit in a double")
    return x


def _is_number(text: str) -> bool:
    try:
        _parse_literal(text)
    except ValueError:
        return False
    return True


def describe(fmt: FloatFormat, bits: int, v: DecomposedFloat) -> str:
    lines = [
        "format    " + fmt.name,
        "bits      " + _hex_bits(fmt, bits),
        "sign      " + ("-" if v.sign else "+"),
        "exponent  " + str(v.exponent),
        f"fraction  {v.fraction:#018x}",
        "kind      " + v.kind,
    ]
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    options: dict[str, str] = {}
    positional: list[str] = []
    verbose = False
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--verbose" or arg == "-v":
            verbose = True
            i += 1
        elif arg in OPTIONS_WITH_VALUE:
            if i + 1 >= len(args):
                _error(arg + " requires an argument")
                return 2
            options[arg] = args[i + 1]
            i += 2
        elif arg.startswith("-") and not _is_number(arg):
            _error("unknown flag '" + arg + "'")
            return 2
        else:
            positional.append(arg)
            i += 1

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if len(positional) == 0:
        _error("missing command")
        return 2
    command = positional[0]
    if command not in COMMANDS:
        _error("unknown command '" + command + "'")
        return 2
    if len(positional) != 2:
        _error(command + " takes exactly one argument")
        return 2
    operand = positional[1]

    try:
        if command == "inspect":
            fmt = format_for(options.get("--format", "double"))
            bits = parse_bits(operand, fmt)
            print(describe(fmt, bits, decompose(fmt, bits)))
        elif command == "convert":
            source = format_for(options.get("--from", "double"))
            target = format_for(options.get("--to", "half"))
            bits = parse_bits(operand, source)
            print(_hex_bits(target, encode_bits(target, decompose(source, bits))))
        elif command == "encode":
            width = options.get("--width")
            print(encode_float(parse_number(operand), width).hex())
        else:
            data = bytes.fromhex(operand)
            value, end = decode_float(data)
            if end != len(data):
                _error("trailing data after float item")
                return 1
            print(repr(value))
    except ConversionError as e:
        _error(e.status.value + ": " + str(e))
        return 1
    except CBORDecodeError as e:
        _error("decode error: " + str(e))
        return 1
    except ValueError as e:
        _error(str(e))
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
