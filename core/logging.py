# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Core - Structured logging with context
# PURPOSE: Owner, logo and request fields on every log line
# CREATED: 14 OCT 2026
# ============================================================================
"""
Structured Logging

Every service logs through get_logger(__name__). Fields set with
log_context() (owner_id, logo_id, request_seq, operation) ride along on
each record emitted inside the block, and nested blocks inherit the
outer fields.

The context lives in a ContextVar, so two page fetches running on the
same event loop never see each other's request_seq.

Output is human-readable by default; LOG_FORMAT=json switches to one JSON
object per line.

Usage:
    from core.logging import get_logger, log_context, log_checkpoint

    logger = get_logger(__name__)

    with log_context(owner_id="user@example.com", request_seq=4):
        logger.info("Fetching page 2")
        log_checkpoint("page_committed", {"page": 2}, logger=logger)
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class LogContext:
    """Fields attached to records logged inside a log_context block."""
    owner_id: Optional[str] = None
    logo_id: Optional[str] = None
    request_seq: Optional[int] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Set fields only, with extra flattened in."""
        result = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        result.update(self.extra)
        return result


_context_stack: ContextVar[Tuple[LogContext, ...]] = ContextVar(
    "log_context_stack", default=()
)

_EMPTY = LogContext()


def get_current_context() -> LogContext:
    """Innermost active context, or an empty one."""
    stack = _context_stack.get()
    return stack[-1] if stack else _EMPTY


@contextmanager
def log_context(**kwargs):
    """
    Push context fields for the duration of the block.

    Unset fields fall through to the enclosing block.

    Example:
        with log_context(owner_id="u1", operation="bulk_delete"):
            logger.info("Deleting selection")
    """
    parent = get_current_context()
    extra = {**parent.extra, **kwargs.pop("extra", {})}
    current = LogContext(
        owner_id=kwargs.get("owner_id", parent.owner_id),
        logo_id=kwargs.get("logo_id", parent.logo_id),
        request_seq=kwargs.get("request_seq", parent.request_seq),
        operation=kwargs.get("operation", parent.operation),
        extra=extra,
    )

    token = _context_stack.set(_context_stack.get() + (current,))
    try:
        yield current
    finally:
        _context_stack.reset(token)


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _record_data(record: logging.LogRecord) -> Optional[Dict[str, Any]]:
    data = getattr(record, "extra", None)
    return data or None


# ============================================================================
# FORMATTERS
# ============================================================================

class StructuredFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": _utc_iso(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = get_current_context().to_dict()
        if context:
            entry["context"] = context

        data = _record_data(record)
        if data:
            entry["data"] = data

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry["source"] = f"{record.filename}:{record.lineno}"
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Single-line development format with the key context fields inline."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")

        context = get_current_context()
        tags = []
        if context.owner_id:
            tags.append(f"owner={context.owner_id}")
        if context.logo_id:
            tags.append(f"logo={context.logo_id}")
        if context.request_seq is not None:
            tags.append(f"seq={context.request_seq}")
        tag_str = f" [{', '.join(tags)}]" if tags else ""

        line = f"{stamp} {record.levelname:<8} {record.name}{tag_str}: {record.getMessage()}"

        data = _record_data(record)
        if data:
            line += f" {data}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


# ============================================================================
# LOGGERS
# ============================================================================

class ContextLogger(logging.LoggerAdapter):
    """Adapter that copies the active log context onto each record."""

    def process(self, msg, kwargs):
        data = dict(kwargs.get("extra") or {})
        data.update(get_current_context().to_dict())
        kwargs["extra"] = {"extra": data}
        return msg, kwargs


def get_logger(name: str) -> ContextLogger:
    """Context-aware logger for a module."""
    return ContextLogger(logging.getLogger(name), {})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Install one stdout handler on the root logger.

    Args:
        level: Log level name or number
        json_output: JSON lines instead of the human format
            (LOG_FORMAT=json has the same effect)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)


# ============================================================================
# CHECKPOINTS
# ============================================================================

def log_checkpoint(
    name: str,
    data: Optional[Dict[str, Any]] = None,
    logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
) -> None:
    """
    Log a named milestone (page_committed, stale_page_discarded, ...).

    The record's data carries the checkpoint name, a timestamp, the
    context ids and the optional payload.
    """
    if logger is None:
        logger = logging.getLogger("checkpoint")
    elif isinstance(logger, logging.LoggerAdapter):
        # payload already carries the context ids
        logger = logger.logger

    payload: Dict[str, Any] = {"checkpoint": name, "timestamp": _utc_iso()}

    context = get_current_context()
    if context.owner_id:
        payload["owner_id"] = context.owner_id
    if context.logo_id:
        payload["logo_id"] = context.logo_id
    if context.request_seq is not None:
        payload["request_seq"] = context.request_seq
    if data:
        payload["data"] = data

    logger.info(f"CHECKPOINT: {name}", extra={"extra": payload})


__all__ = [
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
    "log_checkpoint",
]
