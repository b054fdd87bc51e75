"""Telemetry context and reporter interfaces.

A shared no-op context is used unless telemetry is switched on, either with
``KGFLOW_TELEMETRY=1`` or ``telemetry_enabled`` in configuration, and at
least one reporter is supplied.
"""

from collections import defaultdict, deque
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
import logging
import os
import time
from types import TracebackType
from typing import Any, Protocol, Self, TypeAlias, runtime_checkable

log = logging.getLogger(__name__)

_scope_stack_var: ContextVar[tuple[str, ...]] = ContextVar("scope_stack", default=())

# Evaluated once at import time
_TELEMETRY_ENABLED = os.getenv("KGFLOW_TELEMETRY") == "1"


@runtime_checkable
class TelemetryReporter(Protocol):
    """Duck-typed protocol for telemetry reporters."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """Stateless context that records nothing."""

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _EnabledTelemetryContext:
    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    def __call__(
        self, name: str, **metadata: Any
    ) -> AbstractContextManager["_EnabledTelemetryContext"]:
        return self._create_scope(name, **metadata)

    @contextmanager
    def _create_scope(
        self, name: str, **metadata: Any
    ) -> Iterator["_EnabledTelemetryContext"]:
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")

        scope_stack = _scope_stack_var.get()
        scope_path = ".".join((*scope_stack, name))
        start_time = time.perf_counter()
        token = _scope_stack_var.set((*scope_stack, name))
        try:
            yield self
        finally:
            duration = time.perf_counter() - start_time
            _scope_stack_var.reset(token)
            parent = _scope_stack_var.get()
            enhanced = {
                "depth": len(parent),
                "parent_scope": ".".join(parent) if parent else None,
                **metadata,
            }
            for reporter in self.reporters:
                try:
                    reporter.record_timing(scope_path, duration, **enhanced)
                except Exception as e:
                    log.error(
                        "Telemetry reporter '%s' failed: %s",
                        type(reporter).__name__,
                        e,
                        exc_info=True,
                    )

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        """Record a metric within the current scope."""
        scope_stack = _scope_stack_var.get()
        scope_path = ".".join((*scope_stack, name))
        for reporter in self.reporters:
            try:
                reporter.record_metric(scope_path, value, **metadata)
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        self.metric(name, increment, metric_type="counter", **metadata)


_NO_OP_SINGLETON = _NoOpTelemetryContext()

TelemetryContextProtocol: TypeAlias = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(  # noqa: N802
    *reporters: TelemetryReporter, enabled: bool | None = None
) -> TelemetryContextProtocol:
    """Return a telemetry context.

    ``enabled`` overrides the ``KGFLOW_TELEMETRY`` flag. Without reporters
    the shared no-op instance is returned regardless.
    """
    is_enabled = _TELEMETRY_ENABLED if enabled is None else enabled
    if is_enabled and reporters:
        return _EnabledTelemetryContext(*reporters)
    return _NO_OP_SINGLETON


class InMemoryReporter:
    """Collects timings and metrics in memory, bounded per scope."""

    def __init__(self, max_entries_per_scope: int = 1000):
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = defaultdict(
            lambda: deque(maxlen=max_entries_per_scope)
        )
        self.metrics: dict[str, deque[tuple[Any, dict[str, Any]]]] = defaultdict(
            lambda: deque(maxlen=max_entries_per_scope)
        )

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self.timings[scope].append((duration, metadata))

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self.metrics[scope].append((value, metadata))

    def total(self, scope: str) -> float:
        """Sum of numeric values recorded for a metric scope."""
        return sum(
            v for v, _ in self.metrics.get(scope, ()) if isinstance(v, int | float)
        )

    def get_report(self) -> str:
        lines = ["=== Telemetry Report ==="]
        for scope, values in sorted(self.timings.items()):
            durations = [d for d, _ in values]
            lines.append(
                f"{scope:<40} | Calls: {len(durations):<4} | "
                f"Avg: {sum(durations) / len(durations):.4f}s"
            )
        for scope in sorted(self.metrics):
            lines.append(f"{scope:<40} | Total: {self.total(scope):,.0f}")
        return "\n".join(lines)
