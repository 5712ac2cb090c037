"""Runtime trace infrastructure - separate from the values flowing through a pipeline.

A Trace captures execution evidence (step begin/end/error) for profiling and
debugging. It never participates in a step's result. Tree relationships are
reconstructed only on demand via as_tree().
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# (id of the owning Trace, event id) of the innermost open span in this task.
_current_parent: ContextVar[tuple[int, int] | None] = ContextVar(
    "stepwise_trace_parent", default=None
)


@dataclass(frozen=True)
class Evidence:
    """A single execution event captured at runtime.

    This is runtime infrastructure, not pipeline data.
    """

    action: str
    id: int = 0
    parent_id: int | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    info: dict[str, Any] = field(default_factory=dict)
    duration_ms: float | None = None


class Trace:
    """Runtime trace context for capturing execution events.

    Nesting is tracked per asyncio task through a context variable, so
    concurrent runs of one pipeline recording into the same Trace keep
    their own parent chains.

    Performance guarantees:
    - Trace disabled -> single attribute check per record
    - Evidence append is O(1)
    - No recursive tree construction during execution
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._events: list[Evidence] = []
        self._next_id: int = 0

    def push(self, event_id: int | None) -> Token[tuple[int, int] | None] | None:
        """Make ``event_id`` the default parent for events recorded in this task.

        Returns:
            A token for ``pop``, or None when there is nothing to push
        """
        if event_id is None:
            return None
        return _current_parent.set((id(self), event_id))

    def pop(self, token: Token[tuple[int, int] | None] | None) -> None:
        """Restore the parent that was current before the matching ``push``."""
        if token is not None:
            _current_parent.reset(token)

    def current_parent(self) -> int | None:
        """Innermost open event of this trace in the running task, if any."""
        current = _current_parent.get()
        if current is None or current[0] != id(self):
            return None
        return current[1]

    def record(
        self,
        action: str,
        info: dict[str, Any] | None = None,
        parent_id: int | None = None,
        duration_ms: float | None = None,
    ) -> int | None:
        """Record an evidence event.

        Args:
            action: What happened (e.g., "step_begin", "step_error")
            info: Additional context
            parent_id: Explicit parent event ID; defaults to the current parent
            duration_ms: Execution duration

        Returns:
            Event ID for linking child events, or None if tracing disabled
        """
        if not self.enabled:
            return None

        effective_parent = parent_id if parent_id is not None else self.current_parent()

        event_id = self._next_id
        self._next_id += 1

        self._events.append(
            Evidence(
                action=action,
                id=event_id,
                parent_id=effective_parent,
                timestamp=datetime.now(UTC),
                info=info or {},
                duration_ms=duration_ms,
            )
        )

        return event_id

    def get_events(self) -> list[Evidence]:
        """Get all recorded events (for visualization)."""
        return list(self._events)

    def find_all(self, **kwargs: Any) -> list[Evidence]:
        """Find events whose attributes or info entries match every criterion.

        Example: ``trace.find_all(action="step_end", step="parse")``
        """
        return [
            e
            for e in self._events
            if all(getattr(e, k, None) == v or e.info.get(k) == v for k, v in kwargs.items())
        ]

    def as_tree(self) -> dict[int | None, list[int]]:
        """Reconstruct parent-child relationships for visualization.

        Returns:
            Dict mapping parent_id to list of child_ids
        """
        tree: dict[int | None, list[int]] = {}
        for ev in self._events:
            tree.setdefault(ev.parent_id, []).append(ev.id)
        return tree

    def __len__(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        """Clear all events (for reuse)."""
        self._events.clear()
        self._next_id = 0
