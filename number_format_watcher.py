"""
Number Format Watcher for NumField.

Masks a free-text field as a grouped amount such as ``"12 500.5 $"``. Every
edit the host reports is validated against the numeric grammar, clamped to
the configured range and reformatted. The rewritten text and a cursor offset
go back to the host through ``on_display`` and the parsed value goes to the
application through ``on_value_changed``.

The watcher never raises for bad input: malformed edits are rejected, empty
fields reset to the default text and out-of-range numbers are clamped.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Mapping, Optional

from format_utils import (
    INT_MAX,
    clean_numeric_text,
    float_within_bounds,
    floor_to_int,
    format_grouped,
    int_within_bounds,
    matches_number_grammar,
)
from logger import LogCategory, LoggableMixin

ValueListener = Callable[[float], None]
DisplaySink = Callable[[str, int], None]


class WatcherState(Enum):
    """Re-entrancy state of a watcher."""

    IDLE = "idle"
    REWRITING = "rewriting"


class EditOutcome(Enum):
    """What the watcher did with one edit notification."""

    IGNORED = "ignored"
    UNCHANGED = "unchanged"
    RESET_TO_DEFAULT = "reset_to_default"
    REFORMATTED = "reformatted"


@dataclass(frozen=True)
class FormatterOptions:
    """Construction-time options that never change for a watcher."""

    suffix_text: str = ""
    grouping_enabled: bool = True
    allow_empty: bool = False
    grouping_separator: str = " "
    decimal_separator: str = "."

    @property
    def suffix(self) -> str:
        """Suffix as displayed, preceded by a single space."""
        return f" {self.suffix_text}" if self.suffix_text else ""


@dataclass
class FormatterBounds:
    """Range and mode settings that may be changed between edits."""

    min_amount: float = 0.0
    max_amount: float = float(INT_MAX)
    decimal: bool = False


@dataclass(frozen=True)
class EditResult:
    """Result of :meth:`NumberFormatWatcher.on_edit`.

    ``display_text`` and ``cursor`` are set for every outcome except
    ``IGNORED``; ``value`` is set only when the edit was accepted.
    """

    outcome: EditOutcome
    display_text: Optional[str] = None
    cursor: Optional[int] = None
    value: Optional[float] = None

    @property
    def accepted(self) -> bool:
        return self.outcome in (EditOutcome.RESET_TO_DEFAULT, EditOutcome.REFORMATTED)


class NumberFormatWatcher(LoggableMixin):
    """Edit handler that keeps a text field in grouped-number form."""

    def __init__(
        self,
        options: Optional[FormatterOptions] = None,
        bounds: Optional[FormatterBounds] = None,
        *,
        on_value_changed: Optional[ValueListener] = None,
        on_display: Optional[DisplaySink] = None,
    ):
        LoggableMixin.__init__(self)
        self.options = options or FormatterOptions()
        self.bounds = bounds if bounds is not None else FormatterBounds()
        self.on_value_changed = on_value_changed
        self.on_display = on_display
        self._current_text = ""
        self._state = WatcherState.IDLE
        self._lock = threading.RLock()
        self.log_debug(
            "Number format watcher initialized",
            category=LogCategory.FORMAT,
            suffix=self.options.suffix_text,
            decimal=self.bounds.decimal,
            min_amount=self.bounds.min_amount,
            max_amount=self.bounds.max_amount,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Mapping[str, Any],
        *,
        on_value_changed: Optional[ValueListener] = None,
        on_display: Optional[DisplaySink] = None,
    ) -> "NumberFormatWatcher":
        """Build a watcher from a flat settings mapping.

        Recognised keys mirror the dataclass fields: ``suffix_text``,
        ``grouping_enabled``, ``allow_empty``, ``grouping_separator``,
        ``decimal_separator``, ``min_amount``, ``max_amount`` and ``decimal``.
        Missing keys fall back to the dataclass defaults.
        """

        defaults = FormatterOptions()
        default_bounds = FormatterBounds()
        options = FormatterOptions(
            suffix_text=str(settings.get("suffix_text", defaults.suffix_text)),
            grouping_enabled=bool(settings.get("grouping_enabled", defaults.grouping_enabled)),
            allow_empty=bool(settings.get("allow_empty", defaults.allow_empty)),
            grouping_separator=str(settings.get("grouping_separator", defaults.grouping_separator)),
            decimal_separator=str(settings.get("decimal_separator", defaults.decimal_separator)),
        )
        bounds = FormatterBounds(
            min_amount=float(settings.get("min_amount", default_bounds.min_amount)),
            max_amount=float(settings.get("max_amount", default_bounds.max_amount)),
            decimal=bool(settings.get("decimal", default_bounds.decimal)),
        )
        return cls(options, bounds, on_value_changed=on_value_changed, on_display=on_display)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------
    @property
    def current_text(self) -> str:
        """Last text the watcher produced or accepted."""
        return self._current_text

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def suffix(self) -> str:
        return self.options.suffix

    @property
    def default_text(self) -> str:
        """Text shown after the field is cleared."""
        if self.options.allow_empty:
            return ""
        return f"{floor_to_int(self.bounds.min_amount)}{self.options.suffix}"

    @property
    def min_amount(self) -> float:
        return self.bounds.min_amount

    @property
    def max_amount(self) -> float:
        return self.bounds.max_amount

    @property
    def is_decimal(self) -> bool:
        return self.bounds.decimal

    # ------------------------------------------------------------------
    # Runtime configuration
    # ------------------------------------------------------------------
    def set_min_amount(self, amount: float):
        """Set the lower limit; applies from the next edit."""
        with self._lock:
            old_value = self.bounds.min_amount
            self.bounds.min_amount = float(amount)
            self.log_config_change("min_amount", old_value, self.bounds.min_amount)
            self._warn_if_inverted()

    def set_max_amount(self, amount: float):
        """Set the upper limit; applies from the next edit."""
        with self._lock:
            old_value = self.bounds.max_amount
            self.bounds.max_amount = float(amount)
            self.log_config_change("max_amount", old_value, self.bounds.max_amount)
            self._warn_if_inverted()

    def set_is_decimal(self, is_decimal: bool):
        """Enable or disable up to two decimal places."""
        with self._lock:
            old_value = self.bounds.decimal
            self.bounds.decimal = bool(is_decimal)
            self.log_config_change("decimal", old_value, self.bounds.decimal)

    def _warn_if_inverted(self):
        if self.bounds.min_amount > self.bounds.max_amount:
            self.log_warning(
                "Minimum amount exceeds maximum; every edit will clamp to the minimum",
                category=LogCategory.CONFIG,
                min_amount=self.bounds.min_amount,
                max_amount=self.bounds.max_amount,
            )

    # ------------------------------------------------------------------
    # Edit handling
    # ------------------------------------------------------------------
    def on_edit(self, new_text: str, selection_end: Optional[int] = None) -> EditResult:
        """Process the field's full text after a user or programmatic edit.

        Parameters
        ----------
        new_text:
            Entire current content of the field.
        selection_end:
            Host cursor position after the edit, if known. It is kept after
            the rewrite when it still lies inside the new text.

        Returns
        -------
        EditResult
            The outcome together with the text and cursor pushed to the host.
        """

        with self._lock:
            if self._state is WatcherState.REWRITING or new_text == self._current_text:
                return EditResult(EditOutcome.IGNORED)

            suffix = self.options.suffix
            if not new_text or new_text == suffix:
                return self._reset_to_default(new_text, selection_end)

            candidate = new_text
            if suffix and new_text.endswith(suffix):
                candidate = new_text[:-len(suffix)]

            if not matches_number_grammar(candidate):
                return self._reject(new_text, selection_end)

            return self._reformat(new_text, selection_end)

    def cursor_position(self, text: str, selection_end: Optional[int]) -> int:
        """Cursor offset to use after *text* replaces the field content."""
        if selection_end is not None and 0 <= selection_end < len(text):
            return selection_end
        return max(0, len(text) - len(self.options.suffix))

    def format_amount(self, value: float) -> str:
        """Render *value* the way the watcher displays it, suffix included."""
        if self.bounds.decimal:
            number = self._render(float(value))
        else:
            number = self._render(floor_to_int(value))
        return number + self.options.suffix

    def _reset_to_default(self, new_text: str, selection_end: Optional[int]) -> EditResult:
        text = self.default_text
        value = float(self.bounds.min_amount)
        cursor = self.cursor_position(text, selection_end)
        with self._rewriting():
            self._current_text = text
            self._push_display(text, cursor)
            self._emit_value(value)
        self.log_edit(EditOutcome.RESET_TO_DEFAULT.value, new_text, display=text, value=value)
        return EditResult(EditOutcome.RESET_TO_DEFAULT, text, cursor, value)

    def _reject(self, new_text: str, selection_end: Optional[int]) -> EditResult:
        text = self._current_text
        cursor = self.cursor_position(text, selection_end)
        with self._rewriting():
            self._push_display(text, cursor)
        self.log_debug("Rejected edit outside the numeric grammar",
                       category=LogCategory.VALIDATION, text=new_text, kept=text)
        return EditResult(EditOutcome.UNCHANGED, text, cursor)

    def _reformat(self, new_text: str, selection_end: Optional[int]) -> EditResult:
        cleaned = clean_numeric_text(new_text)
        with self._rewriting():
            if self.bounds.decimal:
                value = float_within_bounds(cleaned, self.bounds.min_amount, self.bounds.max_amount)
                text = self._decimal_text(cleaned, value)
            else:
                whole = cleaned.partition(".")[0]
                value = float(int_within_bounds(
                    whole,
                    floor_to_int(self.bounds.min_amount),
                    floor_to_int(self.bounds.max_amount),
                ))
                text = self._render(int(value)) + self.options.suffix
            self._current_text = text
            cursor = self.cursor_position(text, selection_end)
            self._push_display(text, cursor)
            self._emit_value(value)
        self.log_edit(EditOutcome.REFORMATTED.value, new_text, display=text, value=value)
        return EditResult(EditOutcome.REFORMATTED, text, cursor, value)

    def _decimal_text(self, cleaned: str, value: float) -> str:
        number = self._render(value)
        marker = self.options.decimal_separator
        # Keep a just-typed marker or ".0" the renderer would otherwise drop,
        # but only while the rendered number has no fraction of its own.
        if marker not in number:
            if cleaned.endswith(".") and value < self.bounds.max_amount:
                number += marker
            elif cleaned.endswith(".0"):
                number += f"{marker}0"
        return number + self.options.suffix

    def _render(self, value: float | int) -> str:
        return format_grouped(
            value,
            grouping_separator=self.options.grouping_separator,
            decimal_separator=self.options.decimal_separator,
            grouping_enabled=self.options.grouping_enabled,
        )

    @contextmanager
    def _rewriting(self) -> Iterator[None]:
        self._state = WatcherState.REWRITING
        try:
            yield
        finally:
            self._state = WatcherState.IDLE

    def _push_display(self, text: str, cursor: int):
        if self.on_display is not None:
            self.on_display(text, cursor)

    def _emit_value(self, value: float):
        if self.on_value_changed is not None:
            self.on_value_changed(value)
