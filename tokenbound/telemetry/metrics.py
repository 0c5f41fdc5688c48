# tokenbound/telemetry/metrics.py
from __future__ import annotations

import functools
import logging
from typing import Any, Callable, TypeVar

from opentelemetry import trace
from prometheus_client import Counter, Histogram

from tokenbound.errors import AccountError
from tokenbound.telemetry.logging import log_context

logger = logging.getLogger("tokenbound.account")

F = TypeVar("F", bound=Callable[..., Any])

# -------------------------------
# Инструменты
# -------------------------------

OPERATIONS = Counter(
    "tokenbound_operations_total",
    "Account entry-point invocations by outcome (ok or error code).",
    ["operation", "outcome"],
)
MULTICALL_SIZE = Histogram(
    "tokenbound_multicall_size",
    "Number of calls per executed batch.",
    buckets=(0, 1, 2, 4, 8, 16, 32, 64, 128),
)

_tracer = trace.get_tracer("tokenbound")
_enabled = True


def configure(*, enabled: bool) -> None:
    """Process-wide switch; per-account settings can only narrow it."""
    global _enabled
    _enabled = enabled


def record_operation(operation: str, outcome: str, *, enabled: bool = True) -> None:
    if _enabled and enabled:
        OPERATIONS.labels(operation=operation, outcome=outcome).inc()


def observe_multicall(size: int, *, enabled: bool = True) -> None:
    if _enabled and enabled:
        MULTICALL_SIZE.observe(size)


# -------------------------------
# Декоратор точек входа
# -------------------------------

def instrumented(operation: str, *, level: int = logging.INFO) -> Callable[[F], F]:
    """
    Wrap an account entry point: bind log context, open a span, count the
    outcome and log rejections. The wrapped object must expose ``address``,
    ``host`` and ``metrics_enabled``.
    """
    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(self, *args: Any, **kwargs: Any) -> Any:
            caller = self.host.caller_address()
            with log_context(operation=operation, account=self.address, caller=caller), \
                    _tracer.start_as_current_span(f"account.{operation}") as span:
                span.set_attribute("tokenbound.account", hex(self.address))
                span.set_attribute("tokenbound.caller", hex(caller))
                try:
                    result = fn(self, *args, **kwargs)
                except AccountError as e:
                    span.set_attribute("tokenbound.error", e.code)
                    record_operation(operation, e.code, enabled=self.metrics_enabled)
                    logger.warning("%s rejected: %s", operation, e.message, extra={"code": e.code, "details": e.details})
                    raise
                record_operation(operation, "ok", enabled=self.metrics_enabled)
                logger.log(level, "%s ok", operation)
                return result
        return wrapper  # type: ignore[return-value]
    return decorator
