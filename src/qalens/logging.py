"""JSONL event log for qalens.

One JSON object per line in ``<log_dir>/qalens-mcp.log``:

    {"ts": "...Z", "level": "INFO", "cat": "gateway.tool", "inst": "default",
     "trace_id": "3f9a...", "msg": "tool_end", "data": {"tool": "...", ...}}

Every tool call and resource read runs under a trace id, so all lines of a
single request can be grepped together. The MCP transport owns stdout;
when the log file cannot be written, lines go to stderr instead.

    from qalens import logging as qlog

    qlog.configure(log_dir=config.log_dir)
    qlog.set_trace_id(trace.trace_id)
    qlog.warn("guard.deny", "Path outside permitted roots", locator=locator)

Level threshold: ``QALENS_LOG_LEVEL`` (DEBUG, INFO, WARN, ERROR).
Module diagnostics that are not request events use ``logging.getLogger``.
"""

from __future__ import annotations

import json
import os
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

LOG_FILE_NAME = "qalens-mcp.log"
LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")

_log_dir = Path.cwd() / ".qalens" / "logs"
_instance = os.environ.get("QALENS_INSTANCE_ID", "default")
_threshold = os.environ.get("QALENS_LOG_LEVEL", "INFO").upper()
_dir_ready = False

# Field names that look like credentials are masked
_REDACT_KEY_PARTS = ("key", "token", "secret", "password")
_VALUE_LIMIT = 1000

_request = threading.local()


def configure(
    log_dir: Path | str | None = None,
    level: str | None = None,
    instance_id: str | None = None,
) -> None:
    """Set the log directory, threshold and instance tag for this process."""
    global _log_dir, _threshold, _instance, _dir_ready
    if log_dir is not None:
        _log_dir = Path(log_dir)
        _dir_ready = False
    if level is not None:
        _threshold = level.upper()
    if instance_id is not None:
        _instance = instance_id


def set_trace_id(trace_id: str) -> None:
    _request.trace_id = trace_id


def get_trace_id() -> str:
    return getattr(_request, "trace_id", "no-trace")


def clear_trace_id() -> None:
    if hasattr(_request, "trace_id"):
        del _request.trace_id


def _enabled(level: str) -> bool:
    rank = {name: i for i, name in enumerate(LEVELS)}
    return rank.get(level, 1) >= rank.get(_threshold, 1)


def _scrub(data: dict[str, Any]) -> dict[str, Any]:
    """Mask credential-looking fields and clip long strings."""
    cleaned: dict[str, Any] = {}
    for name, value in data.items():
        if any(part in name.lower() for part in _REDACT_KEY_PARTS):
            cleaned[name] = "***REDACTED***"
        elif isinstance(value, str) and len(value) > _VALUE_LIMIT:
            cleaned[name] = f"{value[:_VALUE_LIMIT]}...[{len(value)} chars]"
        else:
            cleaned[name] = value
    return cleaned


def _utc_now() -> str:
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def _append(line: str) -> None:
    global _dir_ready
    try:
        if not _dir_ready:
            _log_dir.mkdir(parents=True, exist_ok=True)
            _dir_ready = True
        with open(_log_dir / LOG_FILE_NAME, "a", encoding="utf-8") as f:
            f.write(line)
    except OSError:
        try:
            sys.stderr.write(f"[qalens log] {line}")
        except OSError:
            pass


def log(level: str, category: str, msg: str, data: dict[str, Any] | None = None) -> None:
    """Append one event. Never raises."""
    if not _enabled(level):
        return
    entry: dict[str, Any] = {
        "ts": _utc_now(),
        "level": level,
        "cat": category,
        "inst": _instance,
        "trace_id": get_trace_id(),
        "msg": msg,
    }
    if data:
        entry["data"] = _scrub(data)
    _append(json.dumps(entry, default=str) + "\n")


def debug(category: str, msg: str, /, **data: Any) -> None:
    log("DEBUG", category, msg, data)


def info(category: str, msg: str, /, **data: Any) -> None:
    log("INFO", category, msg, data)


def warn(category: str, msg: str, /, **data: Any) -> None:
    """Denials, missing files and rejected arguments."""
    log("WARN", category, msg, data)


def error(category: str, msg: str, /, **data: Any) -> None:
    log("ERROR", category, msg, data)


def bootstrap(msg: str) -> None:
    """Startup message to stderr, usable before configure()."""
    try:
        sys.stderr.write(f"[qalens {_utc_now()}] {msg}\n")
    except OSError:
        pass
