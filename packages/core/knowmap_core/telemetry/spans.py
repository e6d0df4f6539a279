"""Span helpers for the detection and document workflows."""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from knowmap_core.telemetry.setup import get_tracer

F = TypeVar("F", bound=Callable[..., Any])


@contextmanager
def trace_operation(name: str, **attributes: Any) -> Iterator[trace.Span]:
    """Open a span named ``name``; exceptions are recorded and re-raised.

    Usage:
        with trace_operation("knowledge.update", mode="delta") as span:
            span.set_attribute("modules", 3)
    """
    tracer = get_tracer(__name__)
    with tracer.start_as_current_span(name, attributes=attributes) as span:
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def traced_operation(name: str | None = None) -> Callable[[F], F]:
    """Decorator wrapping a synchronous function in ``trace_operation``.

    Args:
        name: Span name. Defaults to ``knowmap.<function name>``
    """

    def decorator(func: F) -> F:
        span_name = name or f"knowmap.{func.__name__}"

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with trace_operation(span_name):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
