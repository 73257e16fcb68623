"""Tracing helpers for geocoding requests and batches."""
from __future__ import annotations

import contextlib
import time
from typing import Iterator, Optional

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars


def _logger():
    return structlog.get_logger("cargotrack.trace")


def safe_text(value: str) -> str:
    """Escape characters that cannot be written as UTF-8, such as lone surrogates."""
    return value.encode("utf-8", "backslashreplace").decode("utf-8")


def set_context(*, tracking_number: str) -> None:
    bind_contextvars(tracking_number=tracking_number)
    _logger().debug("trace_context", tracking_number=tracking_number)


def clear_context() -> None:
    clear_contextvars()


@contextlib.contextmanager
def span(*, name: str, query: Optional[str] = None) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        _logger().debug("trace_span", span=name, query=safe_text(query) if query else None, elapsed_ms=elapsed_ms)


def log_provider_error(*, query: str, reason: str) -> None:
    _logger().warning("geocode_provider_error", query=safe_text(query), reason=safe_text(reason))


def log_provider_result(*, query: str, status: int, candidates: int, elapsed_ms: int) -> None:
    _logger().info(
        "geocode_provider_result",
        query=query,
        status=status,
        candidates=candidates,
        elapsed_ms=elapsed_ms,
    )
