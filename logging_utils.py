"""Tagged console logging for Beatlane.

Each record carries a subsystem tag (Analyzer, Composer, Loader, Session, Tool)
and optional key=value fields. The fields stay on the record as a dict, and only
the console formatter flattens them into text.

    log_event("info", "Analyzer", "Detected beats", beats=20)
    get_logger("Session").info("Session started", fields={"notes": 20})
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Union

LOGGER_NAME = "beatlane"
DEFAULT_TAG = "Beatlane"


def _format_field(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


class FieldFormatter(logging.Formatter):
    """Renders "[LEVEL][tag] message | key=value ..." from the record's tag and fields."""

    def __init__(self) -> None:
        super().__init__("[%(levelname)s][%(tag)s] %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "tag"):
            record.tag = DEFAULT_TAG
        text = super().format(record)
        fields: Mapping[str, Any] = getattr(record, "fields", None) or {}
        if fields:
            text = f"{text} | " + " ".join(f"{key}={_format_field(value)}" for key, value in fields.items())
        return text


class TaggedLogger(logging.LoggerAdapter):
    """Adapter bound to one tag. Log calls accept tag= to override it and fields= for structured data."""

    def process(self, msg: Any, kwargs: Any):
        extra = dict(kwargs.get("extra") or {})
        extra["tag"] = kwargs.pop("tag", self.extra.get("tag", DEFAULT_TAG))
        extra["fields"] = dict(kwargs.pop("fields", None) or {})
        kwargs["extra"] = extra
        return msg, kwargs


_logger = logging.getLogger(LOGGER_NAME)
if not _logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(FieldFormatter())
    _logger.addHandler(_handler)
    _logger.setLevel(logging.INFO)

_tagged_loggers: Dict[str, TaggedLogger] = {}


def get_logger(tag: str = DEFAULT_TAG) -> TaggedLogger:
    tagged = _tagged_loggers.get(tag)
    if tagged is None:
        tagged = TaggedLogger(_logger, {"tag": tag})
        _tagged_loggers[tag] = tagged
    return tagged


def _level_value(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, (level or "INFO").strip().upper(), logging.INFO)


def log_event(level: Union[str, int], tag: str, message: str, **fields: Any) -> None:
    get_logger(tag).log(_level_value(level), message, fields=fields)


def set_log_level(level: Union[str, int]) -> None:
    """Accepts DEBUG, INFO, WARNING or ERROR (any case). Config validation rejects anything else first."""
    _logger.setLevel(_level_value(level))


def get_log_level() -> str:
    return logging.getLevelName(_logger.level)
