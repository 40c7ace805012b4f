"""
Logging System for NumField.
Provides leveled, structured logging for the input-masking engine,
with rotating log files and edit-specific helpers.
"""
import logging
import logging.handlers
import time
import json
import traceback
from pathlib import Path
from typing import Optional, Dict, Any, Union
from enum import Enum, auto
from contextlib import contextmanager
from datetime import datetime
import uuid
class LogLevel(Enum):
    """Log levels, including a TRACE level below DEBUG for per-keystroke output."""
    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50
logging.addLevelName(LogLevel.TRACE.value, "TRACE")
class LogCategory(Enum):
    """Categories for masking-engine logging."""
    SYSTEM = auto()
    INPUT = auto()
    FORMAT = auto()
    VALIDATION = auto()
    CONFIG = auto()
    USER_ACTION = auto()
class StructuredFormatter(logging.Formatter):
    """Formatter producing a plain line with an optional JSON payload."""
    def __init__(self, include_json=True):
        super().__init__()
        self.include_json = include_json
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        basic_line = f"[{timestamp}] {record.levelname:8} {record.name}: {record.getMessage()}"
        structured_data = {}
        for key, value in record.__dict__.items():
            if key.startswith('field_') or key in ['category', 'session_id']:
                structured_data[key] = value
        if record.exc_info:
            structured_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }
        structured_data['location'] = {
            'filename': record.filename,
            'line': record.lineno,
            'function': record.funcName
        }
        if structured_data and self.include_json:
            json_data = json.dumps(structured_data, default=str, ensure_ascii=False)
            return f"{basic_line} | {json_data}"
        return basic_line
class NumFieldLogger:
    """Project logger with console output, rotating files and edit helpers."""
    def __init__(self, name: str = "numfield", log_dir: Optional[Path] = None,
                 console_level: int = logging.INFO):
        self.name = name
        self.session_id = str(uuid.uuid4())[:8]
        if log_dir is None:
            log_dir = Path.home() / ".numfield" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.console_level = console_level
        self._setup_loggers()
        self.debug("NumField logging system initialized",
                   category=LogCategory.SYSTEM,
                   session_id=self.session_id,
                   log_dir=str(self.log_dir))
    def _setup_loggers(self):
        """Setup main logger and handlers."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(LogLevel.TRACE.value)
        self.logger.propagate = False
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()
        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.console_level)
        console_handler.setFormatter(StructuredFormatter(include_json=False))
        self.logger.addHandler(console_handler)
        # Everything down to TRACE goes to the main file
        file_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.name}.log", maxBytes=5*1024*1024, backupCount=3,
            encoding="utf-8"
        )
        file_handler.setLevel(LogLevel.TRACE.value)
        file_handler.setFormatter(StructuredFormatter(include_json=True))
        self.logger.addHandler(file_handler)
        error_handler = logging.handlers.RotatingFileHandler(
            self.log_dir / f"{self.name}_errors.log", maxBytes=1024*1024, backupCount=3,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(StructuredFormatter(include_json=True))
        self.logger.addHandler(error_handler)
    def _log(self, level: int, message: str, category: Optional[Union[LogCategory, str]] = None,
             exception: Optional[Exception] = None, **kwargs):
        """Internal logging method attaching session, category and custom fields."""
        if isinstance(category, LogCategory):
            category_name = category.name
        elif category:
            category_name = str(category).upper()
        else:
            category_name = 'GENERAL'
        extra = {
            'session_id': self.session_id,
            'category': category_name
        }
        for key, value in kwargs.items():
            if not key.startswith('_'):
                extra[f'field_{key}'] = value
        if exception:
            self.logger.log(level, message, exc_info=(type(exception), exception, exception.__traceback__), extra=extra)
        else:
            self.logger.log(level, message, extra=extra)
    def trace(self, message: str, category: Optional[Union[LogCategory, str]] = None, **kwargs):
        """Log trace message (per-edit detail)."""
        self._log(LogLevel.TRACE.value, message, category, **kwargs)
    def debug(self, message: str, category: Optional[Union[LogCategory, str]] = None, **kwargs):
        self._log(LogLevel.DEBUG.value, message, category, **kwargs)
    def info(self, message: str, category: Optional[Union[LogCategory, str]] = None, **kwargs):
        self._log(LogLevel.INFO.value, message, category, **kwargs)
    def warning(self, message: str, category: Optional[Union[LogCategory, str]] = None, **kwargs):
        self._log(LogLevel.WARNING.value, message, category, **kwargs)
    def error(self, message: str, exception: Optional[Exception] = None,
              category: Optional[Union[LogCategory, str]] = None, **kwargs):
        self._log(LogLevel.ERROR.value, message, category, exception, **kwargs)
    def log_edit(self, outcome: str, text: str, display: Optional[str] = None,
                 value: Optional[float] = None, **kwargs):
        """Log the outcome of one edit notification."""
        edit_data = {'outcome': outcome, 'text': text}
        if display is not None:
            edit_data['display'] = display
        if value is not None:
            edit_data['value'] = value
        edit_data.update(kwargs)
        self._log(LogLevel.TRACE.value, f"EDIT: {outcome} {text!r}",
                  LogCategory.INPUT, **edit_data)
    def log_config_change(self, setting: str, old_value: Any, new_value: Any, **kwargs):
        """Log a runtime configuration change."""
        self._log(LogLevel.DEBUG.value, f"CONFIG: {setting} {old_value!r} -> {new_value!r}",
                  LogCategory.CONFIG, setting=setting, old_value=old_value,
                  new_value=new_value, **kwargs)
    def log_user_action(self, action: str, details: Optional[Dict[str, Any]] = None):
        """Log user actions for debugging."""
        log_data = {
            'action': action,
            'timestamp': time.time()
        }
        if details:
            log_data.update(details)
        self._log(LogLevel.INFO.value, f"USER ACTION: {action}",
                  LogCategory.USER_ACTION, **log_data)
    @contextmanager
    def timer(self, operation: str, log_result: bool = True):
        """Context manager for timing operations."""
        start_time = time.time()
        operation_id = str(uuid.uuid4())[:8]
        self.debug(f"Starting operation: {operation}",
                   category=LogCategory.SYSTEM, operation_id=operation_id)
        try:
            yield operation_id
        finally:
            duration = time.time() - start_time
            if log_result:
                self.debug(f"Completed operation: {operation} in {duration:.3f}s",
                           category=LogCategory.SYSTEM, operation_id=operation_id,
                           duration=duration)
    def flush(self):
        for handler in self.logger.handlers:
            handler.flush()
# Global logger instance
_global_logger: Optional[NumFieldLogger] = None
def get_logger() -> NumFieldLogger:
    """Get the global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = NumFieldLogger()
    return _global_logger
def setup_logger(name: str = "numfield", log_dir: Optional[Path] = None,
                 console_level: int = logging.INFO) -> NumFieldLogger:
    """Set up and return the global logger."""
    global _global_logger
    _global_logger = NumFieldLogger(name, log_dir, console_level)
    return _global_logger
class LoggableMixin:
    """Mixin class to add logging capabilities to other classes."""
    def __init__(self):
        self._logger = get_logger()
        self._module_name = self.__class__.__name__
    def log_debug(self, message: str, **kwargs):
        self._logger.debug(f"[{self._module_name}] {message}", **kwargs)
    def log_info(self, message: str, **kwargs):
        self._logger.info(f"[{self._module_name}] {message}", **kwargs)
    def log_warning(self, message: str, **kwargs):
        self._logger.warning(f"[{self._module_name}] {message}", **kwargs)
    def log_error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        self._logger.error(f"[{self._module_name}] {message}", exception=exception, **kwargs)
    def log_edit(self, outcome: str, text: str, **kwargs):
        self._logger.log_edit(outcome, text, module=self._module_name, **kwargs)
    def log_config_change(self, setting: str, old_value: Any, new_value: Any):
        self._logger.log_config_change(setting, old_value, new_value, module=self._module_name)
    def log_user_action(self, action: str, details: Optional[Dict[str, Any]] = None):
        action_details = {'module': self._module_name}
        if details:
            action_details.update(details)
        self._logger.log_user_action(action, action_details)
