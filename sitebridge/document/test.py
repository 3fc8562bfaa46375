"""Tests for page, device, settings and editor operations."""

import json

import pytest

from sitebridge.editor import ComponentNode, EditorCapabilities, InMemoryEditor
from sitebridge.errors import NotFoundError, UnsupportedOperationError, ValidationError
from sitebridge.session import Session

from .lib import DeviceAccessor, EditorAccessor, PageAccessor, SiteSettingsAccessor


@pytest.fixture
def pages(session):
    return PageAccessor(session)


class TestPages:
    """Tests for page operations."""

    @pytest.mark.unit
    def test_add_selects(self, pages, session):
        outcome = pages.add("About", slug="about")
        assert outcome.data["page"]["id"] == "about"
        assert session.page.id == "about"
        assert outcome.warnings == []

    @pytest.mark.unit
    def test_select_by_name(self, pages, session):
        pages.add("Contact Us", slug="contact")
        pages.select("index")
        pages.select("Contact Us")
        assert session.page.id == "contact"

    @pytest.mark.unit
    def test_select_unknown(self, pages):
        with pytest.raises(NotFoundError) as exc:
            pages.select("nope")
        assert exc.value.available == ["index"]

    @pytest.mark.unit
    def test_cannot_remove_last(self, pages):
        with pytest.raises(ValidationError):
            pages.remove("index")

    @pytest.mark.unit
    def test_rename_warns_without_index(self, pages):
        """Renaming the homepage away from 'index' warns."""
        outcome = pages.rename("Home")
        assert outcome.data["page"]["name"] == "Home"
        assert len(outcome.warnings) == 1

    @pytest.mark.unit
    def test_update_settings_merges(self, pages, session):
        pages.update_settings({"title": "Welcome", "lang": "en"})
        pages.update_settings({"lang": None, "description": "Hi"})
        assert session.page.settings == {"title": "Welcome", "description": "Hi"}

    @pytest.mark.unit
    def test_unknown_setting(self, pages):
        with pytest.raises(ValidationError) as exc:
            pages.update_settings({"titel": "x"})
        assert exc.value.extra["invalid"] == ["titel"]


class TestDevices:
    """Tests for device operations."""

    @pytest.mark.unit
    def test_set_case_insensitive(self, session):
        devices = DeviceAccessor(session)
        devices.set("mobile")
        assert session.device.id == "mobilePortrait"
        devices.set("TABLET")
        assert session.device.media_width == "992px"

    @pytest.mark.unit
    def test_unknown(self, session):
        with pytest.raises(NotFoundError) as exc:
            DeviceAccessor(session).set("watch")
        assert exc.value.available == ["Desktop", "Tablet", "Mobile"]


class TestSiteSettings:
    """Tests for site settings."""

    @pytest.mark.unit
    def test_set_and_get(self, session):
        settings = SiteSettingsAccessor(session)
        settings.set({"og:title": "My Site"})
        assert settings.get().data["settings"] == {"og:title": "My Site"}


class TestEditor:
    """Tests for history, save and eval."""

    @pytest.mark.unit
    def test_undo_restores_tree(self, session):
        editor = EditorAccessor(session)
        session.owner.checkpoint("add")
        session.owner.get_root().append(ComponentNode(id="x"))
        assert editor.undo().data["undone"] is True
        assert session.owner.get_root().children == []
        assert editor.redo().data["redone"] is True
        assert session.owner.get_root().find("x") is not None

    @pytest.mark.unit
    def test_nothing_to_undo(self, session):
        outcome = EditorAccessor(session).undo()
        assert outcome.data["undone"] is False
        assert outcome.warnings == ["Nothing to undo"]

    @pytest.mark.unit
    def test_save(self, session, editor):
        EditorAccessor(session).save()
        assert editor.state.saved_at is not None
        assert editor.state.changes == 0

    @pytest.mark.unit
    def test_eval_unsupported(self, session):
        with pytest.raises(UnsupportedOperationError):
            EditorAccessor(session).run("1 + 1")

    @pytest.mark.unit
    def test_eval_output_file(self, tmp_path, monkeypatch):
        editor = InMemoryEditor(capabilities=EditorCapabilities(evaluate=True))
        monkeypatch.setattr(editor, "evaluate", lambda code: {"pages": 1})
        target = tmp_path / "out.json"
        outcome = EditorAccessor(Session(owner=editor, website_id="s")).run(
            "getPages()", output_file=str(target)
        )
        assert json.loads(target.read_text(encoding="utf-8")) == {"pages": 1}
        assert outcome.data["output_file"] == str(target)
