"""
Trace Context - Request correlation identifiers.

Provides trace_id (per tool invocation or resource read) and session_id
(per gateway process) for correlating log lines across a single call.
"""
from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Optional


def generate_trace_id() -> str:
    """Generate a unique trace ID for a single invocation."""
    return uuid.uuid4().hex[:16]


def generate_session_id() -> str:
    """Generate a unique session ID (stable across calls in one process)."""
    return uuid.uuid4().hex[:16]


@dataclass(frozen=True)
class TraceContext:
    session_id: str
    trace_id: str


_session_lock = threading.Lock()
_session_id: Optional[str] = None


def get_session_id() -> str:
    """Get the process session ID, creating it on first use."""
    global _session_id
    with _session_lock:
        if _session_id is None:
            _session_id = generate_session_id()
        return _session_id


def get_trace_context(trace_id: Optional[str] = None) -> TraceContext:
    """
    Get a trace context for the current operation.

    If trace_id is not provided, generates a new one.
    """
    return TraceContext(
        session_id=get_session_id(),
        trace_id=trace_id or generate_trace_id(),
    )
