"""Tests for the number format watcher state machine."""

from __future__ import annotations

import math
import threading
import time

import pytest

from format_utils import INT_MAX, matches_number_grammar
from number_format_watcher import (
    EditOutcome,
    FormatterBounds,
    FormatterOptions,
    NumberFormatWatcher,
    WatcherState,
)


class Host:
    """Records what a watcher pushes to the field and to the application."""

    def __init__(self):
        self.values = []
        self.displays = []

    def display(self, text: str, cursor: int):
        self.displays.append((text, cursor))


def make_watcher(**settings):
    host = Host()
    watcher = NumberFormatWatcher.from_settings(
        settings, on_value_changed=host.values.append, on_display=host.display
    )
    return watcher, host


@pytest.fixture()
def amount_watcher():
    """Decimal field from 12 to 15 000 with a dollar suffix."""
    return make_watcher(suffix_text="$", decimal=True, min_amount=12, max_amount=15000)


def test_typing_reformats_with_suffix(amount_watcher):
    watcher, host = amount_watcher

    result = watcher.on_edit("20")

    assert result.outcome is EditOutcome.REFORMATTED
    assert result.display_text == "20 $"
    assert result.value == 20.0
    assert result.cursor == 2
    assert watcher.current_text == "20 $"
    assert host.values == [20.0]
    assert host.displays == [("20 $", 2)]


def test_clearing_resets_to_minimum(amount_watcher):
    watcher, host = amount_watcher
    watcher.on_edit("20")

    result = watcher.on_edit("")

    assert result.outcome is EditOutcome.RESET_TO_DEFAULT
    assert result.display_text == "12 $"
    assert result.value == 12.0
    assert host.values == [20.0, 12.0]
    assert watcher.current_text == "12 $"


def test_suffix_only_text_resets_to_minimum(amount_watcher):
    watcher, host = amount_watcher
    watcher.on_edit("500")

    result = watcher.on_edit(" $")

    assert result.outcome is EditOutcome.RESET_TO_DEFAULT
    assert watcher.current_text == "12 $"
    assert host.values[-1] == 12.0


def test_value_above_maximum_is_clamped(amount_watcher):
    watcher, host = amount_watcher

    result = watcher.on_edit("20000")

    assert result.display_text == "15 000 $"
    assert host.values == [15000.0]


def test_value_below_minimum_is_clamped(amount_watcher):
    watcher, host = amount_watcher

    result = watcher.on_edit("3")

    assert result.display_text == "12 $"
    assert result.value == 12.0


def test_integer_mode_discards_fraction():
    watcher, host = make_watcher(min_amount=0, max_amount=100)

    result = watcher.on_edit("12.9")

    assert result.outcome is EditOutcome.REFORMATTED
    assert result.display_text == "12"
    assert host.values == [12.0]


def test_malformed_paste_is_rejected():
    watcher, host = make_watcher(max_amount=1000)
    watcher.on_edit("100")

    result = watcher.on_edit("12a34")

    assert result.outcome is EditOutcome.UNCHANGED
    assert result.display_text == "100"
    assert result.value is None
    assert watcher.current_text == "100"
    assert host.values == [100.0]
    assert host.displays[-1][0] == "100"


@pytest.mark.parametrize("text", ["1.2.3 $", "1.234 $", "abc", "12$", "1 2 3 4 5 6 7 8 9", "-5 $"])
def test_forbidden_input_leaves_state_untouched(amount_watcher, text):
    watcher, host = amount_watcher
    watcher.on_edit("15.2")

    result = watcher.on_edit(text)

    assert result.outcome is EditOutcome.UNCHANGED
    assert watcher.current_text == "15.2 $"
    assert host.values == [15.2]


def test_trailing_decimal_marker_is_kept_below_maximum():
    watcher, host = make_watcher(decimal=True, max_amount=100)

    result = watcher.on_edit("50.")

    assert result.display_text == "50."
    assert host.values == [50.0]


def test_trailing_decimal_marker_is_dropped_at_maximum():
    watcher, _ = make_watcher(decimal=True, max_amount=50)

    assert watcher.on_edit("50.").display_text == "50"


def test_trailing_zero_fraction_is_kept():
    watcher, host = make_watcher(decimal=True)

    assert watcher.on_edit("20.0").display_text == "20.0"
    assert host.values == [20.0]
    assert watcher.on_edit("20.05").display_text == "20.05"


def test_marker_is_not_appended_to_clamped_fraction():
    watcher, _ = make_watcher(decimal=True, min_amount=12.5, max_amount=100)

    assert watcher.on_edit("3.").display_text == "12.5"


def test_comma_is_read_as_decimal_marker():
    watcher, host = make_watcher(decimal=True)

    assert watcher.on_edit("12,5").display_text == "12.5"
    assert host.values == [12.5]


def test_typing_into_grouped_text_regroups(amount_watcher):
    watcher, host = amount_watcher
    watcher.on_edit("1234")
    assert watcher.current_text == "1 234 $"

    result = watcher.on_edit("1 2345 $")

    assert result.display_text == "12 345 $"
    assert host.values[-1] == 12345.0


def test_own_output_fed_back_is_ignored(amount_watcher):
    watcher, host = amount_watcher
    watcher.on_edit("20000")
    displays_before = list(host.displays)

    result = watcher.on_edit(watcher.current_text)

    assert result.outcome is EditOutcome.IGNORED
    assert result.display_text is None
    assert host.values == [15000.0]
    assert host.displays == displays_before


def test_first_empty_edit_on_empty_field_is_ignored():
    watcher, host = make_watcher(allow_empty=True)

    assert watcher.on_edit("").outcome is EditOutcome.IGNORED
    assert host.values == []


def test_allow_empty_clears_field_and_reports_minimum():
    watcher, host = make_watcher(allow_empty=True, min_amount=5)
    watcher.on_edit("42")

    result = watcher.on_edit("")

    assert result.outcome is EditOutcome.RESET_TO_DEFAULT
    assert result.display_text == ""
    assert result.cursor == 0
    assert host.values == [42.0, 5.0]


def test_default_text_uses_whole_part_of_minimum():
    watcher, host = make_watcher(suffix_text="pts", min_amount=12.75)
    watcher.on_edit("20")

    result = watcher.on_edit("")

    assert result.display_text == "12 pts"
    assert host.values[-1] == 12.75


def test_rewrite_notifications_are_ignored():
    seen = []

    def echo(text, cursor):
        seen.append((watcher.state, watcher.on_edit(text, cursor)))

    watcher = NumberFormatWatcher(on_display=echo)
    watcher.on_edit("1234")

    assert len(seen) == 1
    state, nested = seen[0]
    assert state is WatcherState.REWRITING
    assert nested.outcome is EditOutcome.IGNORED
    assert watcher.state is WatcherState.IDLE
    assert watcher.current_text == "1 234"


def test_state_returns_to_idle_when_host_raises():
    def broken_display(text, cursor):
        raise RuntimeError("widget gone")

    watcher = NumberFormatWatcher(on_display=broken_display)

    with pytest.raises(RuntimeError):
        watcher.on_edit("5")

    assert watcher.state is WatcherState.IDLE


def test_cursor_is_kept_when_inside_new_text():
    watcher, _ = make_watcher(suffix_text="$")

    assert watcher.on_edit("1234", selection_end=1).cursor == 1


def test_cursor_moves_before_suffix_when_out_of_range():
    watcher, _ = make_watcher(suffix_text="$")

    result = watcher.on_edit("1234", selection_end=10)

    assert result.display_text == "1 234 $"
    assert result.cursor == 5


def test_cursor_position_never_negative():
    watcher, _ = make_watcher(suffix_text="EUR")

    assert watcher.cursor_position("", None) == 0


def test_setters_apply_on_next_edit():
    watcher, host = make_watcher(max_amount=1000)
    watcher.on_edit("70")

    watcher.set_max_amount(50)
    assert watcher.on_edit("80").display_text == "50"

    watcher.set_is_decimal(True)
    watcher.set_min_amount(1.5)
    assert watcher.on_edit("7.5").display_text == "7.5"
    assert watcher.on_edit("").display_text == "1"
    assert host.values == [70.0, 50.0, 7.5, 1.5]


def test_inverted_range_clamps_to_minimum():
    watcher, host = make_watcher(max_amount=1000)
    watcher.set_min_amount(100)
    watcher.set_max_amount(50)

    assert watcher.on_edit("70").display_text == "100"
    assert host.values == [100.0]


def test_integer_overflow_clamps_to_maximum():
    watcher, host = make_watcher()

    result = watcher.on_edit("999999999999")

    assert result.display_text == "2 147 483 647"
    assert host.values == [float(INT_MAX)]


def test_infinite_maximum_saturates_in_integer_mode():
    watcher, host = make_watcher(max_amount=math.inf)

    assert watcher.on_edit("42").display_text == "42"
    assert watcher.on_edit("999999999999").display_text == "2 147 483 647"
    assert host.values == [42.0, float(INT_MAX)]


def test_setting_infinite_maximum_keeps_edits_working():
    watcher, host = make_watcher(max_amount=100)
    watcher.set_max_amount(float("inf"))

    result = watcher.on_edit("7")

    assert result.outcome is EditOutcome.REFORMATTED
    assert result.display_text == "7"
    assert host.values == [7.0]


def test_nan_minimum_defaults_to_zero():
    watcher, _ = make_watcher(suffix_text="$", min_amount=math.nan)
    watcher.on_edit("5")

    result = watcher.on_edit("")

    assert result.outcome is EditOutcome.RESET_TO_DEFAULT
    assert result.display_text == "0 $"


def test_infinite_minimum_in_decimal_mode_renders_largest_float():
    watcher, host = make_watcher(decimal=True, grouping_enabled=False, min_amount=math.inf)

    result = watcher.on_edit("5")

    assert result.display_text.startswith("17976931348623157")
    assert host.values == [math.inf]


def test_format_amount_saturates_non_finite_values():
    watcher, _ = make_watcher()

    assert watcher.format_amount(math.inf) == "2 147 483 647"
    assert watcher.format_amount(math.nan) == "0"


def test_grouping_can_be_disabled():
    watcher, _ = make_watcher(grouping_enabled=False)

    assert watcher.on_edit("1234567").display_text == "1234567"


def test_custom_decimal_separator():
    watcher, host = make_watcher(decimal=True, decimal_separator=",", suffix_text="EUR")

    assert watcher.on_edit("12,").display_text == "12, EUR"
    assert watcher.on_edit("12,5 EUR").display_text == "12,5 EUR"
    assert host.values == [12.0, 12.5]


def test_format_amount_matches_display():
    decimal_watcher, _ = make_watcher(decimal=True, suffix_text="$")
    integer_watcher, _ = make_watcher()

    assert decimal_watcher.format_amount(1234.5) == "1 234.5 $"
    assert integer_watcher.format_amount(12.9) == "12"


@pytest.mark.parametrize("decimal", [True, False])
def test_accepted_values_stay_in_range_and_display_matches_grammar(decimal):
    watcher, host = make_watcher(suffix_text="$", decimal=decimal, min_amount=12.5, max_amount=15000)
    low, high = (12.5, 15000) if decimal else (12, 15000)
    edits = ["0", "5", "12", "99.", "99.9", "150000", "1 500.25", "7,", "3 $", "abc", "15000.", " $", ""]

    for text in edits:
        result = watcher.on_edit(text)
        if result.outcome is EditOutcome.REFORMATTED:
            assert low <= result.value <= high
        number = watcher.current_text[:-len(watcher.suffix)]
        assert matches_number_grammar(number)


def test_concurrent_edits_are_serialized():
    counter_lock = threading.Lock()
    inside = [0]
    peak = [0]
    displays = []

    def slow_display(text, cursor):
        with counter_lock:
            inside[0] += 1
            peak[0] = max(peak[0], inside[0])
        time.sleep(0.01)
        displays.append(text)
        with counter_lock:
            inside[0] -= 1

    watcher = NumberFormatWatcher(FormatterOptions(), FormatterBounds(max_amount=100), on_display=slow_display)
    barrier = threading.Barrier(8)

    def type_digit(digit):
        barrier.wait()
        watcher.on_edit(str(digit))

    threads = [threading.Thread(target=type_digit, args=(d,)) for d in range(1, 9)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert peak[0] == 1
    assert len(displays) == 8
    assert watcher.state is WatcherState.IDLE
    assert watcher.current_text == displays[-1]


def test_explicit_records_are_shared():
    bounds = FormatterBounds(min_amount=0, max_amount=10)
    watcher = NumberFormatWatcher(FormatterOptions(suffix_text="kg"), bounds)

    bounds.max_amount = 20

    assert watcher.on_edit("15").display_text == "15 kg"
    assert watcher.default_text == "0 kg"
