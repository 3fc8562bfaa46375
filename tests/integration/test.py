"""End-to-end scenarios through the bridge.

Each scenario drives a fresh in-memory editor the way an agent would:
request envelopes in, response envelopes out.
"""

import asyncio

import pytest

from sitebridge.bridge import Bridge, ReadinessSignal
from sitebridge.dispatch import Dispatcher
from sitebridge.feedback import FeedbackLog


@pytest.fixture
def bridge(cms_session, feedback_path) -> Bridge:
    """Bridge over the editor with the blog data source."""
    dispatcher = Dispatcher(cms_session, feedback=FeedbackLog(feedback_path))
    bridge = Bridge(dispatcher)
    bridge.attach()
    return bridge


@pytest.fixture
def call(bridge):
    """Synchronous shortcut for dispatching one request."""

    def _call(noun, action, **params):
        return bridge.dispatcher.dispatch(
            {"noun": noun, "action": action, "params": params}
        )

    return _call


@pytest.mark.integration
class TestAuthoring:
    """Building and styling a page."""

    def test_add_to_empty_page(self, call, cms_editor):
        """Markup on an empty page lands at the root as one text component."""
        response = call("component", "add", html="<h1>Hello</h1>")

        assert response.success
        root = cms_editor.get_root()
        assert len(root.children) == 1
        heading = root.children[0]
        assert heading.editable is True
        assert heading.style == {}

    def test_inline_styles_become_warnings(self, call, cms_editor):
        response = call(
            "component",
            "add",
            html='<div style="color:red"><p style="margin:0">x</p></div>',
        )

        assert response.success
        assert len(response.warnings) == 2
        div = cms_editor.get_root().children[0]
        assert div.style == {}
        assert div.children[0].style == {}

    def test_style_without_active_rule(self, call):
        response = call("style", "set", selector=".missing")

        assert not response.success
        assert response.extra["type"] == "NoSelectionError"
        assert "selector(action:'select'" in response.extra["recovery"]

    def test_styling_flow(self, call, cms_editor):
        """Create a class, style it, then style it again for mobile."""
        call("component", "add", html="<section><h2>Title</h2></section>")
        created = call("selector", "create", selector="hero")
        assert created.data["selector"] == ".hero"

        first = call("style", "set", properties={"padding": "16px"})
        second = call("style", "set", properties={"padding": "16px"})
        assert first.data["style"] == second.data["style"] == {"padding": "16px"}

        call("device", "set", name="mobile")
        mobile = call("style", "set", css="padding: 4px")
        assert mobile.data["media"] == "480px"

        desktop_rule = cms_editor.get_rule(".hero", "")
        assert desktop_rule.declarations == {"padding": "16px"}

    def test_rejected_style_writes_nothing(self, call, cms_editor):
        call("component", "add", html="<div></div>")
        call("selector", "create", selector=".box")

        response = call("style", "set", properties={"color": "red", "colour": "blue"})

        assert not response.success
        assert response.extra["valid"] == {"color": "red"}
        assert response.extra["invalid"] == {"colour": "blue"}
        assert cms_editor.get_rule(".box", "") is None

    def test_undo_add(self, call, cms_editor):
        call("component", "add", html="<p>Draft</p>")

        response = call("editor", "undo")

        assert response.success
        assert cms_editor.get_root().children == []


@pytest.mark.integration
class TestSymbols:
    """Reusable symbols across pages."""

    def test_place_without_selection(self, call, cms_editor):
        """Placing 'after' with nothing selected puts the symbol first."""
        call("component", "add", html="<main></main>")
        call("symbol", "create", label="Header", html="<header>Site</header>")
        cms_editor.select(None)

        response = call("symbol", "place", label="Header", position="after")

        assert response.success
        first = cms_editor.get_root().children[0]
        assert first.symbol.label == "Header"

    def test_place_on_pages_keeps_page(self, call, cms_editor):
        """Placing on other pages leaves the selected page unchanged."""
        call("page", "add", name="about")
        about = cms_editor.get_selected_page()
        call("page", "select", page_id="index")
        home = cms_editor.get_selected_page()
        call("symbol", "create", label="Footer", html="<footer>(c)</footer>")

        response = call("symbol", "place", label="Footer", page_ids=[about.id, home.id])

        assert response.success
        assert len(response.data["placements"]) == 2
        assert cms_editor.get_selected_page() is home


@pytest.mark.integration
class TestContentBinding:
    """Binding blog posts to a list of cards."""

    def test_loop_and_bind(self, call, cms_editor):
        call("component", "add", html="<article class='card'><h3>Post</h3></article>")
        card = cms_editor.get_root().children[0]

        loop = call("cms", "set_loop", expression="blog.posts")
        call("component", "select", component_id=card.children[0].id)
        bind = call("cms", "bind_content", expression="blog.posts.title")

        assert loop.success and bind.success
        title_state = card.children[0].private_states[0]
        assert [t["field_id"] for t in title_state.tokens] == ["posts", "title"]

    def test_bad_segment(self, call):
        call("component", "add", html="<p>x</p>")

        response = call("cms", "bind_content", expression="blog.posts.nope")

        assert not response.success
        assert response.extra["segment_index"] == 2
        assert response.extra["segment"] == "nope"
        assert response.extra["candidates"] == ["title", "slug", "body", "author", "tags"]


@pytest.mark.integration
class TestBridgeConcurrency:
    """Readiness and per-document serialization."""

    @pytest.mark.asyncio
    async def test_calls_wait_for_readiness(self, bridge):
        bridge.ready = ReadinessSignal()

        async def become_ready():
            await asyncio.sleep(0.01)
            bridge.ready.set()

        asyncio.get_running_loop().create_task(become_ready())
        response = await bridge.handle(
            {"noun": "component", "action": "add", "params": {"html": "<p>a</p>"}}
        )

        assert response.success

    @pytest.mark.asyncio
    async def test_concurrent_calls_serialize(self, bridge, cms_editor):
        """Concurrent adds on one document all land, with distinct ids."""
        requests = [
            {
                "noun": "component",
                "action": "add",
                "params": {"html": f"<p>{n}</p>", "position": "after"},
            }
            for n in range(5)
        ]

        responses = await asyncio.gather(*(bridge.handle(r) for r in requests))

        assert all(r.success for r in responses)
        ids = [r.data["created"][0] for r in responses]
        assert len(set(ids)) == 5
        assert len(cms_editor.get_root().children) == 5

    @pytest.mark.asyncio
    async def test_disconnect_cancels_wait(self, bridge):
        bridge.ready = ReadinessSignal()
        disconnected = asyncio.Event()
        disconnected.set()

        with pytest.raises(asyncio.CancelledError):
            await bridge.handle(
                {"noun": "component", "action": "get_tree"}, disconnected
            )
