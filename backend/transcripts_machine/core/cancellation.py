import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from transcripts_machine.core.errors import ExtractionCancelled, StepTimeoutError

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancelToken:
    """
    Cooperative cancellation signal passed through every suspension point.

    A token is single use: once cancelled it stays cancelled. Awaiting work via
    ``guard`` races the work against the token and a per-step timeout, so a
    superseded extraction stops at its next await instead of running to the end.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()
        _logger.info("Cancellation requested: %s", reason)

    def raise_if_cancelled(self, step: str = "") -> None:
        if self.cancelled:
            raise ExtractionCancelled(
                f"Extraction cancelled before '{step}' ({self.reason})"
                if step
                else f"Extraction cancelled ({self.reason})"
            )

    async def guard(self, awaitable: Awaitable[T], *, timeout: float, step: str) -> T:
        """
        Await ``awaitable`` unless the token fires or ``timeout`` elapses first.

        Raises:
            ExtractionCancelled: the token was cancelled while waiting
            StepTimeoutError: the awaitable did not finish in time
        """
        if self.cancelled and asyncio.iscoroutine(awaitable):
            awaitable.close()
        self.raise_if_cancelled(step)

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {work, waiter},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            waiter.cancel()
            if not work.done():
                work.cancel()

        if work in done:
            return work.result()
        if self.cancelled:
            raise ExtractionCancelled(
                f"Extraction cancelled during '{step}' ({self.reason})"
            )
        raise StepTimeoutError(step, timeout)
