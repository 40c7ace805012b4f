"""Grammar checks, bounds clamping and grouped rendering for masked numeric input."""

from __future__ import annotations

import math
import re
import sys
from decimal import ROUND_DOWN, Decimal, localcontext

# Upper bound used when an all-digit string does not fit a 32-bit field.
INT_MAX = 2**31 - 1
INT_MIN = -2**31
FLOAT_MAX = sys.float_info.max

MAX_FRACTION_DIGITS = 2

DIGITS_ONLY_REGEX = re.compile(r"[0-9]*")

# 1-12 digits or whitespace, an optional "." or ",", then up to two digits.
FORMATTED_NUMBER_REGEX = re.compile(r"[0-9\s]{1,12}[.,]?[0-9]{0,2}")

# Anything that is not a digit or a decimal marker.
EXCLUSIVE_REGEX = re.compile(r"[^0-9.,]+")


def matches_number_grammar(text: str) -> bool:
    """Return ``True`` when *text* is a (possibly partial) grouped decimal."""

    return FORMATTED_NUMBER_REGEX.fullmatch(text) is not None


def clean_numeric_text(text: str) -> str:
    """Drop grouping, suffix and any other non-numeric characters.

    Commas are normalised to dots so the result can be handed to
    :func:`int_within_bounds` or :func:`float_within_bounds`.
    """

    return EXCLUSIVE_REGEX.sub("", text).replace(",", ".")


def int_within_bounds(text: str, min_value: int, max_value: int) -> int:
    """Parse *text* as an integer and clamp it to ``[min_value, max_value]``.

    Parameters
    ----------
    text:
        Candidate string. Anything other than plain ASCII digits parses as 0.
    min_value, max_value:
        Inclusive bounds. The maximum is applied first, so an inverted range
        always yields ``min_value``.

    Returns
    -------
    int
        The clamped value. Digit strings that cannot be represented (empty or
        larger than :data:`INT_MAX`) count as :data:`INT_MAX` before clamping.
    """

    if DIGITS_ONLY_REGEX.fullmatch(text):
        value = min(int(text), INT_MAX) if text else INT_MAX
    else:
        value = 0
    return max(min(value, max_value), min_value)


def float_within_bounds(text: str, min_value: float, max_value: float) -> float:
    """Parse *text* as a float and clamp it to ``[min_value, max_value]``.

    Strings outside the numeric grammar parse as ``0.0``. Strings inside the
    grammar that still fail to parse, or parse to infinity, count as
    :data:`FLOAT_MAX` before clamping.
    """

    if matches_number_grammar(text):
        try:
            value = float(text)
        except ValueError:
            value = FLOAT_MAX
        if math.isinf(value):
            value = FLOAT_MAX
    else:
        value = 0.0
    return max(min(value, max_value), min_value)


def floor_to_int(value: float) -> int:
    """Floor *value* into the 32-bit range; NaN becomes 0 and infinities saturate."""

    if math.isnan(value):
        return 0
    if value >= INT_MAX:
        return INT_MAX
    if value <= INT_MIN:
        return INT_MIN
    return math.floor(value)


def group_digits(digits: str, separator: str) -> str:
    """Insert *separator* between every group of three digits, from the right."""

    sign = ""
    if digits.startswith("-"):
        sign, digits = "-", digits[1:]
    head = len(digits) % 3 or 3
    groups = [digits[:head]]
    groups.extend(digits[i:i + 3] for i in range(head, len(digits), 3))
    return sign + separator.join(groups)


def format_grouped(
    value: float | int,
    *,
    grouping_separator: str = " ",
    decimal_separator: str = ".",
    grouping_enabled: bool = True,
    max_fraction_digits: int = MAX_FRACTION_DIGITS,
) -> str:
    """Render *value* with optional grouping and at most two fraction digits.

    Fraction digits beyond *max_fraction_digits* are truncated, never rounded
    up, and trailing zeros are dropped (``12.50`` renders as ``12.5``).
    Infinities render as the largest finite float and NaN as ``0``.
    """

    if isinstance(value, float) and not math.isfinite(value):
        value = 0.0 if math.isnan(value) else math.copysign(FLOAT_MAX, value)
    if isinstance(value, float):
        # repr() gives the shortest round-tripping digits, so 0.29 stays 0.29.
        number = Decimal(repr(value))
    else:
        number = Decimal(value)
    with localcontext() as ctx:
        ctx.prec = 400
        number = number.quantize(Decimal(1).scaleb(-max_fraction_digits), rounding=ROUND_DOWN)
        rendered = f"{number:f}"
    integer_part, _, fraction = rendered.partition(".")
    fraction = fraction.rstrip("0")
    if grouping_enabled:
        integer_part = group_digits(integer_part, grouping_separator)
    if fraction:
        return f"{integer_part}{decimal_separator}{fraction}"
    return integer_part
