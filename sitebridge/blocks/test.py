"""Tests for the block panel accessor."""

import pytest

from sitebridge.editor import Block, ComponentNode
from sitebridge.errors import NotFoundError

from .lib import BlockAccessor


@pytest.fixture
def blocks(session):
    return BlockAccessor(session)


class TestList:
    """Tests for listing registered blocks."""

    @pytest.mark.unit
    def test_default_blocks(self, blocks):
        listed = blocks.list().data["blocks"]
        assert {"id": "text", "label": "Text", "category": "Basic"} in listed

    @pytest.mark.unit
    def test_registered_block_listed(self, blocks, session):
        """A block registered under an existing id replaces it."""
        session.owner.add_block(Block(id="text", label="Lead", content="<p>Lead</p>"))
        labels = [b["label"] for b in blocks.list().data["blocks"] if b["id"] == "text"]
        assert labels == ["Lead"]


class TestInsert:
    """Tests for inserting a block relative to the selection."""

    @pytest.mark.unit
    def test_insert_without_selection(self, blocks, session):
        """With nothing selected the block goes to the start of the root."""
        session.owner.get_root().append(ComponentNode(id="existing"))
        outcome = blocks.insert("section")
        root = session.owner.get_root()
        assert outcome.data["block_id"] == "section"
        assert root.children[0].tag == "section"
        assert session.selected is root.children[0]

    @pytest.mark.unit
    def test_insert_after_selection(self, blocks, session):
        anchor = ComponentNode(id="anchor")
        session.owner.get_root().append(anchor)
        session.select(anchor)
        outcome = blocks.insert("text", position="after")
        assert outcome.data["index"] == 1
        assert session.owner.get_root().children[1].content == "Insert your text here"

    @pytest.mark.unit
    def test_template_is_sanitized(self, blocks, session):
        """Block markup goes through the same stripping as component add."""
        session.owner.add_block(
            Block(id="styled", label="Styled", content='<div style="color:red"></div>')
        )
        outcome = blocks.insert("styled")
        assert len(outcome.warnings) == 1
        assert session.owner.get_root().children[0].style == {}

    @pytest.mark.unit
    def test_unknown_block(self, blocks, session):
        with pytest.raises(NotFoundError) as exc:
            blocks.insert("hero-banner")
        assert "section" in exc.value.available
        assert session.owner.get_root().children == []
