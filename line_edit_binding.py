"""
QLineEdit integration for NumField.
Attaches a number format watcher to a line edit so every keystroke,
paste or programmatic change is masked as a grouped amount.
"""
from PySide6.QtWidgets import QLineEdit
from PySide6.QtCore import QObject, Signal
from functools import partial
from typing import Optional, Dict
from logger import LoggableMixin
from number_format_watcher import (
    EditOutcome, EditResult, FormatterBounds, FormatterOptions, NumberFormatWatcher
)
class NumberFormatBinding(QObject, LoggableMixin):
    """Connects a QLineEdit to a NumberFormatWatcher."""
    # Signals
    value_changed = Signal(float)
    edit_rejected = Signal(str)
    def __init__(self, line_edit: QLineEdit, options: Optional[FormatterOptions] = None,
                 bounds: Optional[FormatterBounds] = None, parent: Optional[QObject] = None):
        QObject.__init__(self, parent if parent is not None else line_edit)
        LoggableMixin.__init__(self)
        self.line_edit = line_edit
        self.watcher = NumberFormatWatcher(
            options, bounds,
            on_value_changed=self.value_changed.emit,
            on_display=self._apply_display,
        )
        self.last_result: Optional[EditResult] = None
        self._value: Optional[float] = None
        self.attached = False
        self.attach()
    def attach(self):
        """Start listening to text changes of the line edit."""
        if self.attached:
            return
        self.line_edit.textChanged.connect(self._on_text_changed)
        self.attached = True
        self.log_debug(f"Attached number format to {type(self.line_edit).__name__}")
    def detach(self):
        """Stop masking the line edit; its current text is left as is."""
        if not self.attached:
            return
        self.line_edit.textChanged.disconnect(self._on_text_changed)
        self.attached = False
        self.log_debug(f"Detached number format from {type(self.line_edit).__name__}")
    def _on_text_changed(self, text: str):
        result = self.watcher.on_edit(text, self.line_edit.cursorPosition())
        if result.outcome is EditOutcome.IGNORED:
            return
        self.last_result = result
        if result.accepted:
            self._value = result.value
        if result.outcome is EditOutcome.UNCHANGED:
            self.edit_rejected.emit(text)
    def _apply_display(self, text: str, cursor: int):
        # setText() re-emits textChanged; the watcher ignores it while rewriting.
        if self.line_edit.text() != text:
            self.line_edit.setText(text)
        self.line_edit.setCursorPosition(cursor)
    def set_value(self, amount: float):
        """Show *amount* in the field, clamped and formatted like typed input."""
        self.line_edit.setText(self.watcher.format_amount(amount))
        self.log_user_action("number_format_set_value", {"amount": amount})
    def value(self) -> Optional[float]:
        """Last value accepted by the watcher, if any."""
        return self._value
    def set_min_amount(self, amount: float):
        self.watcher.set_min_amount(amount)
    def set_max_amount(self, amount: float):
        self.watcher.set_max_amount(amount)
    def set_is_decimal(self, is_decimal: bool):
        self.watcher.set_is_decimal(is_decimal)
_bindings: Dict[int, NumberFormatBinding] = {}
def install_number_format(line_edit: QLineEdit, options: Optional[FormatterOptions] = None,
                          bounds: Optional[FormatterBounds] = None) -> NumberFormatBinding:
    """Install number formatting on a line edit, reusing an existing binding."""
    key = id(line_edit)
    binding = _bindings.get(key)
    if binding is not None and binding.line_edit is line_edit:
        binding.attach()
        return binding
    binding = NumberFormatBinding(line_edit, options, bounds)
    _bindings[key] = binding
    # Widgets deleted without remove_number_format() must not stay in the map
    line_edit.destroyed.connect(partial(_forget_binding, key))
    return binding
def _forget_binding(key: int, *_):
    _bindings.pop(key, None)
def remove_number_format(line_edit: QLineEdit):
    """Remove number formatting from a line edit."""
    binding = _bindings.pop(id(line_edit), None)
    if binding is not None:
        binding.detach()
