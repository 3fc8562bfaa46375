"""Tests for the tool dispatcher."""

import httpx
import pytest

from sitebridge.editor import ComponentNode, EditorCapabilities, InMemoryEditor, SymbolRef
from sitebridge.feedback import FeedbackLog
from sitebridge.session import Session
from sitebridge.website import SiteClient

from .lib import ACTIONS, Dispatcher
from .models import ToolRequest, ToolResponse


def call(dispatcher, noun, action, **params) -> ToolResponse:
    return dispatcher.dispatch({"noun": noun, "action": action, "params": params})


class TestRequestValidation:
    """Tests for shape, noun, action and required params."""

    @pytest.mark.unit
    def test_unknown_noun(self, dispatcher):
        response = call(dispatcher, "widget", "list")
        assert response.success is False
        assert response.extra["type"] == "ValidationError"
        assert "component" in response.extra["valid"]

    @pytest.mark.unit
    def test_unknown_action(self, dispatcher):
        response = call(dispatcher, "component", "explode")
        assert response.extra["valid"] == list(ACTIONS["component"])

    @pytest.mark.unit
    def test_missing_params_no_handler(self, dispatcher, editor):
        """Missing required params fail before any handler or checkpoint."""
        response = call(dispatcher, "component", "add")
        assert response.extra["missing"] == ["html"]
        assert editor.state.changes == 0

    @pytest.mark.unit
    def test_malformed_request(self, dispatcher):
        response = dispatcher.dispatch({"noun": "component"})
        assert response.success is False
        assert response.extra["invalid"] == ["action"]

    @pytest.mark.unit
    def test_unknown_params_warn(self, dispatcher):
        response = call(dispatcher, "component", "get_tree", depth=3)
        assert response.success is True
        assert "Ignored unknown parameter(s): depth" in response.warnings


class TestPrerequisites:
    """Tests for the open-website check and capability gating."""

    @pytest.mark.unit
    def test_requires_open_website(self, editor, feedback_path):
        dispatcher = Dispatcher(Session(owner=editor), feedback=FeedbackLog(feedback_path))
        response = call(dispatcher, "component", "get_tree")
        assert response.extra["type"] == "NoSelectionError"
        assert "website(action:'open'" in response.error

    @pytest.mark.unit
    def test_feedback_without_website(self, editor, feedback_path):
        dispatcher = Dispatcher(Session(owner=editor), feedback=FeedbackLog(feedback_path))
        response = call(dispatcher, "feedback", "report", description="slow")
        assert response.success is True
        assert feedback_path.exists()

    @pytest.mark.unit
    def test_capability_gated(self, dispatcher):
        """cms bindings need data sources; eval needs evaluate."""
        response = call(dispatcher, "cms", "bind_content", expression="blog.posts")
        assert response.extra == {
            "type": "UnsupportedOperationError",
            "capability": "data_sources",
        }
        response = call(dispatcher, "eval", "run", code="1")
        assert response.extra["capability"] == "evaluate"

    @pytest.mark.unit
    def test_history_disabled(self, feedback_path):
        editor = InMemoryEditor(capabilities=EditorCapabilities(history=False))
        dispatcher = Dispatcher(
            Session(owner=editor, website_id="s"), feedback=FeedbackLog(feedback_path)
        )
        assert call(dispatcher, "editor", "undo").extra["capability"] == "history"
        call(dispatcher, "component", "add", html="<p>x</p>")
        assert editor.state.changes == 0

    @pytest.mark.unit
    def test_website_without_client(self, dispatcher):
        response = call(dispatcher, "website", "list")
        assert response.extra["capability"] == "site_api"


class TestEnvelope:
    """Tests for the success envelope and error conversion."""

    @pytest.mark.unit
    def test_add_on_empty_tree(self, dispatcher, editor):
        """<h1>Hello</h1> with no selection lands at the root as editable text."""
        response = call(dispatcher, "component", "add", html="<h1>Hello</h1>")
        assert response.success is True
        root = editor.get_root()
        assert len(root.children) == 1
        node = root.children[0]
        assert node.is_text and node.editable and node.style == {}
        assert response.data["selection"]["component_id"] == node.id
        assert response.data["next_steps"].startswith("selector(action:'create'")

    @pytest.mark.unit
    def test_mutation_checkpoints(self, dispatcher, editor):
        call(dispatcher, "component", "add", html="<p>a</p>")
        assert editor.state.changes == 1
        response = call(dispatcher, "editor", "undo")
        assert response.data["undone"] is True
        assert editor.get_root().children == []

    @pytest.mark.unit
    def test_rejected_mutation_keeps_history(self, dispatcher, editor):
        """A failed mutation leaves redo and the change count untouched."""
        call(dispatcher, "component", "add", html="<h1>A</h1>")
        call(dispatcher, "editor", "undo")
        changes = editor.state.changes

        failed = call(dispatcher, "component", "add", html="   ")
        assert failed.success is False
        assert editor.state.changes == changes

        redone = call(dispatcher, "editor", "redo")
        assert redone.data["redone"] is True
        assert len(editor.get_root().children) == 1

    @pytest.mark.unit
    def test_missing_rule(self, dispatcher):
        response = call(dispatcher, "style", "set", selector=".missing", properties={"color": "red"})
        assert response.extra["type"] == "NoSelectionError"
        assert response.extra["recovery"].startswith("selector(action:'select'")

    @pytest.mark.unit
    def test_style_roundtrip(self, dispatcher):
        call(dispatcher, "component", "add", html="<div class='hero'></div>")
        response = call(dispatcher, "style", "set", selector="hero", properties={"color": "red"})
        assert response.success is True
        assert response.warnings == ["Selector 'hero' corrected to '.hero'"]
        assert call(dispatcher, "style", "get").data["style"] == {"color": "red"}

    @pytest.mark.unit
    def test_failure_keeps_warnings(self, dispatcher):
        """Corrections made before a failure are reported in the envelope."""
        call(dispatcher, "component", "add", html="<div class='hero'></div>")
        response = call(
            dispatcher, "style", "set", selector="hero", properties={}, colour="red"
        )
        assert response.success is False
        assert response.warnings == [
            "Selector 'hero' corrected to '.hero'",
            "Ignored unknown parameter(s): colour",
        ]

    @pytest.mark.unit
    def test_unexpected_error_contained(self, dispatcher, monkeypatch):
        """Non-taxonomy exceptions become a generic failure."""

        def boom(**kwargs):
            raise RuntimeError("kaboom")

        monkeypatch.setattr(dispatcher._targets["component"], "get_tree", boom)
        response = call(dispatcher, "component", "get_tree")
        assert response.success is False
        assert response.extra == {"type": "RuntimeError"}
        assert "kaboom" in response.error

    @pytest.mark.unit
    def test_wire_omits_none(self, dispatcher):
        wire = call(dispatcher, "device", "list").to_wire()
        assert wire["success"] is True
        assert "error" not in wire
        assert "warnings" not in wire

    @pytest.mark.unit
    def test_accepts_tool_request(self, dispatcher):
        response = dispatcher.dispatch(ToolRequest(noun="page", action="list"))
        assert response.data["pages"][0]["id"] == "index"


class TestNouns:
    """End-to-end checks for nouns beyond the component tree."""

    @pytest.mark.unit
    def test_cms_binding(self, cms_dispatcher, cms_editor):
        call(cms_dispatcher, "component", "add", html="<h2>Title</h2>")
        response = call(cms_dispatcher, "cms", "bind_content", expression="blog.posts.nope")
        assert response.extra["segment_index"] == 2
        assert response.extra["candidates"] == ["title", "slug", "body", "author", "tags"]
        response = call(cms_dispatcher, "cms", "bind_content", expression="blog.posts.title")
        assert response.success is True

    @pytest.mark.unit
    def test_symbol_place_without_selection(self, dispatcher, editor):
        call(dispatcher, "component", "add", html="<main></main>")
        call(dispatcher, "symbol", "create", label="Header", html="<header></header>")
        editor.select(None)
        response = call(dispatcher, "symbol", "place", label="Header", position="after")
        placed = response.data["placements"][0]["component_id"]
        assert editor.get_root().children[0].id == placed

    @pytest.mark.unit
    def test_symbol_place_from_other_page(self, dispatcher, editor):
        """A symbol placed on another page without a definition can be placed."""
        about = editor.add_page("about")
        about.root.append(
            ComponentNode(id="f-1", tag="footer", symbol=SymbolRef("gone", "Footer"))
        )
        response = call(dispatcher, "symbol", "place", label="Footer")
        assert response.success is True
        assert response.data["placements"][0]["page_id"] == "index"
        assert editor.get_root().children[0].symbol.label == "Footer"
        assert response.data["selection"]["page_id"] == "index"

    @pytest.mark.unit
    def test_block_insert_undoable(self, dispatcher, editor):
        response = call(dispatcher, "block", "insert", block_id="columns")
        assert response.success is True
        assert response.data["next_steps"].startswith("selector(action:'create'")
        call(dispatcher, "editor", "undo")
        assert editor.get_root().children == []

    @pytest.mark.unit
    def test_block_unknown(self, dispatcher):
        response = call(dispatcher, "block", "insert", block_id="nope")
        assert response.extra["type"] == "NotFoundError"
        assert "text" in response.extra["available"]

    @pytest.mark.unit
    def test_feedback_list(self, dispatcher):
        call(dispatcher, "feedback", "report", description="one")
        call(dispatcher, "feedback", "report", description="two")
        entries = call(dispatcher, "feedback", "list", limit=1).data["entries"]
        assert [e["description"] for e in entries] == ["two"]

    @pytest.mark.unit
    def test_website_open(self, editor, feedback_path):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json=[]))
        client = SiteClient("http://sites.test", transport=transport)
        dispatcher = Dispatcher(
            Session(owner=editor), feedback=FeedbackLog(feedback_path), site_client=client
        )
        response = call(dispatcher, "website", "open", website_id="blog")
        assert response.data["selection"]["website_id"] == "blog"
        assert call(dispatcher, "page", "list").success is True
