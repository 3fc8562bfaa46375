"""Bridge between a transport and the dispatcher.

The bridge owns the concurrency concerns of a live editor connection:

- ``ReadinessSignal``: one-shot event set when the editor can accept calls.
  Waiting is bounded by a timeout and abandoned when the caller disconnects.
- ``DocumentGuard``: one ``asyncio.Lock`` per document so tool calls on the
  same document never interleave.
- Editor event wiring: inbound host commands (save, undo, redo, close) and
  outbound notifications (unsaved changes).
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from sitebridge.config import EnvVar, get_environment
from sitebridge.dispatch import Dispatcher, ToolRequest, ToolResponse
from sitebridge.errors import NotReadyError

logger = logging.getLogger(__name__)


class ReadinessSignal:
    """One-shot readiness flag for the tree owner.

    Example:
        >>> ready = ReadinessSignal()
        >>> ready.set()
        >>> await ready.wait(timeout=1.0)
    """

    def __init__(self, ready: bool = False):
        self._event = asyncio.Event()
        if ready:
            self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    def set(self) -> None:
        self._event.set()

    def clear(self) -> None:
        self._event.clear()

    async def wait(
        self, timeout: float, disconnected: asyncio.Event | None = None
    ) -> None:
        """Wait until ready.

        Args:
            timeout: Seconds to wait before giving up.
            disconnected: Set by the transport when the caller goes away.

        Raises:
            NotReadyError: Not ready within ``timeout``.
            asyncio.CancelledError: The caller disconnected while waiting.
        """
        if self._event.is_set():
            return
        ready_task = asyncio.ensure_future(self._event.wait())
        waiters = {ready_task}
        gone_task = None
        if disconnected is not None:
            gone_task = asyncio.ensure_future(disconnected.wait())
            waiters.add(gone_task)
        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in waiters:
                task.cancel()
            await asyncio.gather(*waiters, return_exceptions=True)
        if ready_task in done:
            return
        if gone_task is not None and gone_task in done:
            raise asyncio.CancelledError("Caller disconnected while waiting for the editor")
        raise NotReadyError(
            f"Editor not ready after {timeout:g}s", timeout=timeout
        )


class DocumentGuard:
    """Per-document single-flight lock."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}

    def lock_for(self, document_id: str) -> asyncio.Lock:
        lock = self._locks.get(document_id)
        if lock is None:
            lock = self._locks[document_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, document_id: str) -> AsyncIterator[None]:
        async with self.lock_for(document_id):
            yield


class Bridge:
    """Serves tool calls for one editor session.

    Attributes:
        dispatcher: Dispatcher bound to the session.
        ready: Readiness signal of the tree owner.
        ready_timeout: Seconds a call waits for readiness.
        guard: Per-document lock.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        ready: ReadinessSignal | None = None,
        ready_timeout: float | None = None,
        guard: DocumentGuard | None = None,
    ):
        self.dispatcher = dispatcher
        self.ready = ready or ReadinessSignal(ready=True)
        self.ready_timeout = get_environment(
            EnvVar.EDITOR_READY_TIMEOUT, override=ready_timeout
        )
        self.guard = guard or DocumentGuard()
        self.closed = False
        self._unsubscribe: list[Callable[[], None]] = []

    @property
    def owner(self):
        return self.dispatcher.session.owner

    # =========================================================================
    # Editor events
    # =========================================================================

    def attach(self) -> None:
        """Subscribe to the editor's inbound commands."""
        if self._unsubscribe:
            return
        handlers: dict[str, Callable[[Any], None]] = {
            "menu-save": lambda _: self._command("editor", "save"),
            "menu-undo": lambda _: self._command("editor", "undo"),
            "menu-redo": lambda _: self._command("editor", "redo"),
            "close": self._on_close,
            "change:changesCount": self._on_change,
        }
        for event, handler in handlers.items():
            self._unsubscribe.append(self.owner.on(event, handler))
        logger.debug(f"Attached to editor events of {self.owner.document_id}")

    def detach(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()

    def _command(self, noun: str, action: str) -> None:
        response = self.dispatcher.dispatch(ToolRequest(noun=noun, action=action))
        if not response.success:
            logger.warning(f"Editor command {noun}.{action} failed: {response.error}")

    def _on_change(self, changes: Any) -> None:
        if changes:
            self.owner.notify("mark_unsaved", {"changes": changes})

    def _on_close(self, _: Any) -> None:
        self.closed = True
        self.ready.clear()
        self.detach()
        logger.info(f"Editor {self.owner.document_id} closed")

    # =========================================================================
    # Tool calls
    # =========================================================================

    async def handle(
        self,
        request: ToolRequest | dict[str, Any],
        disconnected: asyncio.Event | None = None,
    ) -> ToolResponse:
        """Wait for readiness, then dispatch under the document lock."""
        try:
            await self.ready.wait(self.ready_timeout, disconnected)
        except NotReadyError as e:
            logger.warning(e.message)
            return ToolResponse(success=False, error=e.message, extra=e.to_extra())
        async with self.guard.hold(self.owner.document_id):
            return self.dispatcher.dispatch(request)


__all__ = ["ReadinessSignal", "DocumentGuard", "Bridge"]
