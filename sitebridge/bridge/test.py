"""Tests for readiness, document locking and editor event wiring."""

import asyncio

import pytest

from sitebridge.errors import NotReadyError

from .lib import Bridge, DocumentGuard, ReadinessSignal


@pytest.fixture
def bridge(dispatcher):
    bridge = Bridge(dispatcher, ready_timeout=0.5)
    bridge.attach()
    yield bridge
    bridge.detach()


class TestReadinessSignal:
    """Tests for ReadinessSignal."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ready_returns(self):
        signal = ReadinessSignal(ready=True)
        await signal.wait(timeout=0.01)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self):
        with pytest.raises(NotReadyError) as exc:
            await ReadinessSignal().wait(timeout=0.01)
        assert exc.value.to_extra()["status"] == "not_ready"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_set_while_waiting(self):
        signal = ReadinessSignal()
        asyncio.get_running_loop().call_later(0.01, signal.set)
        await signal.wait(timeout=1.0)
        assert signal.is_set()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_disconnect_cancels(self):
        signal = ReadinessSignal()
        gone = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, gone.set)
        with pytest.raises(asyncio.CancelledError):
            await signal.wait(timeout=1.0, disconnected=gone)


class TestDocumentGuard:
    """Tests for DocumentGuard."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_document_serialized(self):
        guard = DocumentGuard()
        order: list[str] = []

        async def work(name: str):
            async with guard.hold("doc"):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(work("a"), work("b"))
        assert order == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.unit
    def test_locks_per_document(self):
        guard = DocumentGuard()
        assert guard.lock_for("a") is guard.lock_for("a")
        assert guard.lock_for("a") is not guard.lock_for("b")


class TestBridge:
    """Tests for Bridge.handle and event wiring."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_handle_dispatches(self, bridge, editor):
        response = await bridge.handle(
            {"noun": "component", "action": "add", "params": {"html": "<p>Hi</p>"}}
        )
        assert response.success is True
        assert len(editor.get_root().children) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_not_ready_envelope(self, dispatcher):
        bridge = Bridge(dispatcher, ready=ReadinessSignal(), ready_timeout=0.01)
        response = await bridge.handle({"noun": "page", "action": "list"})
        assert response.success is False
        assert response.extra["status"] == "not_ready"

    @pytest.mark.unit
    def test_change_marks_unsaved(self, bridge, editor):
        editor.checkpoint("edit")
        assert ("mark_unsaved", {"changes": 1}) in editor.state.notifications

    @pytest.mark.unit
    def test_menu_save_stores(self, bridge, editor):
        editor.checkpoint("edit")
        editor.emit("menu-save")
        assert editor.state.saved_at is not None
        assert editor.state.changes == 0

    @pytest.mark.unit
    def test_menu_undo(self, bridge, editor, dispatcher):
        dispatcher.dispatch(
            {"noun": "component", "action": "add", "params": {"html": "<p>x</p>"}}
        )
        editor.emit("menu-undo")
        assert editor.get_root().children == []

    @pytest.mark.unit
    def test_close_detaches(self, bridge, editor):
        editor.emit("close")
        assert bridge.closed is True
        assert bridge.ready.is_set() is False
        editor.checkpoint("after close")
        assert editor.state.notifications == []
