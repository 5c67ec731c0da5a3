import json
import logging
import os
import threading
from pathlib import Path

ROOT_LOGGER_NAME = "marketplace"

# Output key -> LogRecord attribute
RECORD_FIELDS = {
    "timestamp": "asctime",
    "level": "levelname",
    "logger": "name",
    "module": "module",
    "function": "funcName",
    "line": "lineno",
    "message": "message",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, keys taken from `fields` (output key -> record attribute)."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"

    def __init__(self, fields=None):
        super().__init__()
        self.fields = dict(fields or {"message": "message"})

    def usesTime(self) -> bool:
        return "asctime" in self.fields.values()

    def format(self, record) -> str:
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record)

        entry = {key: getattr(record, attr, None) for key, attr in self.fields.items()}

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exc_info"] = record.exc_text
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


class SingletonLogger:
    """
    Configures the `marketplace` logger tree once per process.

    Modules ask for a named child ("marketplace.orders.engine"); handlers sit on the
    tree's root so every child writes to the same console and files.
    """
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._root = None
        return cls._instance

    def get_logger(self, name: str = ROOT_LOGGER_NAME) -> logging.Logger:
        """
        Args:
            name (str): Dotted logger name. Names outside the tree are nested under it.

        Returns:
            logging.Logger: Logger sharing the application's handlers
        """
        if self._root is None:
            with self._lock:
                if self._root is None:
                    self._root = self._configure_root()
        if name == ROOT_LOGGER_NAME:
            return self._root
        if not name.startswith(ROOT_LOGGER_NAME + "."):
            name = f"{ROOT_LOGGER_NAME}.{name}"
        return logging.getLogger(name)

    @staticmethod
    def _configure_root() -> logging.Logger:
        root = logging.getLogger(ROOT_LOGGER_NAME)
        root.setLevel(getattr(logging, os.environ.get("LOG_LEVEL", "DEBUG").upper(), logging.DEBUG))
        root.propagate = False
        root.handlers.clear()

        formatter = JsonFormatter(RECORD_FIELDS)
        log_dir = Path(os.environ.get("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)

        handlers = [
            (logging.FileHandler(log_dir / "marketplace.log", encoding="utf-8"), logging.INFO),
            (logging.FileHandler(log_dir / "errors.log", encoding="utf-8"), logging.ERROR),
            (logging.StreamHandler(), logging.DEBUG),
        ]
        for handler, level in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            root.addHandler(handler)

        return root


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger from the singleton-configured `marketplace` tree."""
    return SingletonLogger().get_logger(name)
