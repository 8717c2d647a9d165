"""
Canonical sign string construction

Parameters are sorted by key and joined as ``key=value`` pairs with ``&``.
The ``sign`` field, ``None`` values and values that render to blank text are
left out, so the same parameter content always yields the same string no
matter how the mapping was built. The platform rebuilds this string on its
side, so the value rendering must stay stable.
"""

import math
from decimal import Decimal
from typing import Any, List

from ..exceptions import ValidationError
from .types import ParameterSet, SIGN_FIELD

# Exponent bounds outside of which floats switch to scientific notation
_FLOAT_MIN_PLAIN_EXPONENT = -4
_FLOAT_MAX_PLAIN_EXPONENT = 6


def _format_float(value: float) -> str:
    """
    Render a float with its shortest round-trip digits.

    Plain notation is used for decimal exponents in [-4, 6) and ``d.ddde±XX``
    otherwise; integral values carry no fractional part (100.0 -> "100").
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    number = Decimal(repr(value)).normalize()
    sign, digits, exponent = number.as_tuple()
    decimal_exponent = len(digits) + exponent - 1

    if _FLOAT_MIN_PLAIN_EXPONENT <= decimal_exponent < _FLOAT_MAX_PLAIN_EXPONENT:
        return format(number, "f")

    mantissa = str(digits[0])
    if len(digits) > 1:
        mantissa += "." + "".join(str(d) for d in digits[1:])
    exponent_sign = "+" if decimal_exponent >= 0 else "-"
    prefix = "-" if sign else ""
    return f"{prefix}{mantissa}e{exponent_sign}{abs(decimal_exponent):02d}"


def format_value(value: Any) -> str:
    """
    Render a parameter value as canonical text.

    Args:
        value: Scalar parameter value

    Returns:
        str: ``true``/``false`` for booleans, plain digits for integers,
            shortest digits for floats, UTF-8 text for bytes and ``str()``
            for anything else
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            raise ValidationError("Bytes parameter values must be valid UTF-8", "INVALID_PARAMETER_VALUE") from None
    return str(value)


def build_sign_string(params: ParameterSet) -> str:
    """
    Build the canonical sign string for a parameter set.

    Args:
        params: Mapping of parameter names to scalar values

    Returns:
        str: ``key1=value1&key2=value2`` in ascending key order, or an empty
            string when no parameter survives filtering

    Raises:
        ValidationError: If params is not a mapping or has non-string keys
    """
    if params is None:
        return ""

    if not hasattr(params, "items"):
        raise ValidationError("Parameters must be a mapping", "INVALID_PARAMETERS")

    for key in params.keys():
        if not isinstance(key, str):
            raise ValidationError(
                f"Parameter names must be strings, got {type(key).__name__}",
                "INVALID_PARAMETER_NAME"
            )

    pairs: List[str] = []
    for key in sorted(params.keys()):
        if key == SIGN_FIELD:
            continue

        value = params[key]
        if value is None:
            continue

        text = format_value(value)
        if not text.strip():
            continue

        pairs.append(f"{key}={text}")

    return "&".join(pairs)
