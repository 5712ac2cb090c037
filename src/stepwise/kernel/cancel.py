"""Cooperative cancellation: a caller-owned source and the read-only signal it hands out."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, ClassVar

from stepwise.kernel.errors import OperationCancelled

logger = logging.getLogger(__name__)


class CancelSource:
    """Owner of a cancellation flag.

    Only the code that starts a pipeline creates a source. Everything inside
    the pipeline sees the read-only ``signal`` and passes it along unchanged.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Any = None
        self._signal = CancelSignal(self)

    @property
    def signal(self) -> CancelSignal:
        """The single signal instance tied to this source."""
        return self._signal

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> Any:
        return self._reason

    def cancel(self, reason: Any = None) -> None:
        """Request cancellation. Later calls keep the first reason."""
        if self._cancelled:
            return
        self._cancelled = True
        self._reason = reason
        logger.debug("Cancellation requested: %r", reason)

    def cancel_after(self, seconds: float) -> asyncio.TimerHandle:
        """Schedule ``cancel`` on the running event loop.

        Args:
            seconds: Delay before the source is cancelled (must be >= 0)

        Returns:
            The timer handle, which the caller may cancel to disarm the timeout
        """
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        loop = asyncio.get_running_loop()
        return loop.call_later(seconds, self.cancel, f"timed out after {seconds}s")

    def __repr__(self) -> str:
        return f"CancelSource(cancelled={self._cancelled})"


class CancelSignal:
    """Read-only view of a ``CancelSource``.

    Components may check ``cancelled`` or call ``raise_if_cancelled()``.
    They must forward the very same instance to every nested call.
    """

    __slots__ = ("_source",)

    NONE: ClassVar[CancelSignal]

    def __init__(self, source: CancelSource | None = None) -> None:
        self._source = source

    @property
    def cancelled(self) -> bool:
        return self._source is not None and self._source.cancelled

    @property
    def reason(self) -> Any:
        if self._source is None:
            return None
        return self._source.reason

    def raise_if_cancelled(self) -> None:
        """Raise ``OperationCancelled`` if the source has been cancelled."""
        if self.cancelled:
            raise OperationCancelled(self.reason)

    def __repr__(self) -> str:
        if self._source is None:
            return "CancelSignal.NONE"
        return f"CancelSignal(cancelled={self.cancelled})"


# Never cancelled: it has no source that could flip it.
CancelSignal.NONE = CancelSignal()
