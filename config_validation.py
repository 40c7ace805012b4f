"""Validation helpers for number format watcher configuration."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List

from format_utils import INT_MAX

DEFAULT_SETTINGS: Dict[str, Any] = {
    "suffix_text": "",
    "decimal": False,
    "min_amount": 0.0,
    "max_amount": float(INT_MAX),
    "grouping_enabled": True,
    "allow_empty": False,
    "grouping_separator": " ",
    "decimal_separator": ".",
}

DECIMAL_SEPARATORS = (".", ",")


@dataclass(frozen=True)
class ValidationIssue:
    """Represents a configuration validation problem."""

    field: str
    title: str
    message: str


def _coerce_float(value: Any) -> float | None:
    """Best-effort conversion to a finite ``float`` returning ``None`` on failure."""

    if isinstance(value, bool):
        # ``bool`` is a subclass of ``int`` in Python, but we treat it as invalid
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _check_separator(settings: Dict[str, Any], field: str, label: str) -> tuple[str | None, List[ValidationIssue]]:
    value = settings.get(field)
    if not isinstance(value, str) or len(value) != 1:
        return None, [
            ValidationIssue(
                field=field,
                title=f"{label} Invalid",
                message=f"The {label.lower()} must be exactly one character.",
            )
        ]
    return value, []


def validate_watcher_configuration(settings: Dict[str, Any]) -> List[ValidationIssue]:
    """Validate a watcher configuration payload.

    Parameters
    ----------
    settings:
        Mapping of configuration keys to values, typically
        :data:`DEFAULT_SETTINGS` updated with user choices.

    Returns
    -------
    list[ValidationIssue]
        A collection of validation issues. An empty list denotes success.
    """

    issues: List[ValidationIssue] = []

    min_amount = _coerce_float(settings.get("min_amount"))
    max_amount = _coerce_float(settings.get("max_amount"))
    if min_amount is None:
        issues.append(
            ValidationIssue(
                field="min_amount",
                title="Minimum Invalid",
                message="The minimum amount must be a finite number.",
            )
        )
    elif min_amount < 0:
        issues.append(
            ValidationIssue(
                field="min_amount",
                title="Negative Minimum",
                message="Negative amounts cannot be typed; use a minimum of 0 or more.",
            )
        )
    if max_amount is None:
        issues.append(
            ValidationIssue(
                field="max_amount",
                title="Maximum Invalid",
                message="The maximum amount must be a finite number.",
            )
        )
    if min_amount is not None and max_amount is not None and min_amount > max_amount:
        issues.append(
            ValidationIssue(
                field="max_amount",
                title="Range Inverted",
                message=(
                    "The minimum amount is greater than the maximum amount. Every edit "
                    "would clamp to the minimum."
                ),
            )
        )

    grouping, grouping_issues = _check_separator(settings, "grouping_separator", "Grouping Separator")
    decimal, decimal_issues = _check_separator(settings, "decimal_separator", "Decimal Separator")
    issues.extend(grouping_issues)
    issues.extend(decimal_issues)

    if decimal is not None and decimal not in DECIMAL_SEPARATORS:
        issues.append(
            ValidationIssue(
                field="decimal_separator",
                title="Unsupported Decimal Separator",
                message="Use '.' or ',' as the decimal separator.",
            )
        )
    if grouping is not None and not grouping.isspace():
        issues.append(
            ValidationIssue(
                field="grouping_separator",
                title="Unsupported Grouping Separator",
                message=(
                    "Use a whitespace character for grouping. Other characters would be "
                    "read back as a decimal marker or rejected while typing."
                ),
            )
        )
    if grouping is not None and grouping == decimal:
        issues.append(
            ValidationIssue(
                field="grouping_separator",
                title="Separators Identical",
                message="The grouping and decimal separators must differ.",
            )
        )

    suffix_text = settings.get("suffix_text", "")
    if not isinstance(suffix_text, str):
        issues.append(
            ValidationIssue(
                field="suffix_text",
                title="Suffix Invalid",
                message="The suffix must be text, for example a currency symbol.",
            )
        )
    elif any(char.isdigit() or char in ".," for char in suffix_text):
        issues.append(
            ValidationIssue(
                field="suffix_text",
                title="Suffix Contains Number Characters",
                message="Digits, dots and commas in the suffix would be parsed as part of the amount.",
            )
        )

    return issues
