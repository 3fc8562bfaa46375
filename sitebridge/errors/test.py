"""Unit tests for the error taxonomy."""

import pytest

from . import (
    BridgeError,
    NoSelectionError,
    NotFoundError,
    NotReadyError,
    SchemaResolutionError,
    StyleRejectedError,
    UnsupportedOperationError,
    ValidationError,
)


class TestErrorPayloads:
    """Each error exposes its corrective payload through to_extra."""

    @pytest.mark.unit
    def test_all_are_bridge_errors(self):
        """Every taxonomy member derives from BridgeError."""
        for cls in (
            ValidationError,
            NotFoundError,
            NoSelectionError,
            SchemaResolutionError,
            StyleRejectedError,
            UnsupportedOperationError,
            NotReadyError,
        ):
            assert issubclass(cls, BridgeError)

    @pytest.mark.unit
    def test_not_found_carries_available(self):
        """NotFoundError always lists alternatives."""
        err = NotFoundError("Page 'x' not found", available=["index", "about"])
        extra = err.to_extra()
        assert extra["type"] == "NotFoundError"
        assert extra["available"] == ["index", "about"]

    @pytest.mark.unit
    def test_no_selection_names_recovery(self):
        """NoSelectionError message names the call to make first."""
        err = NoSelectionError(
            "No component selected.",
            recovery="component(action:'select', component_id:'...')",
        )
        assert "component(action:'select'" in str(err)
        assert err.to_extra()["recovery"].startswith("component(")

    @pytest.mark.unit
    def test_schema_resolution_fields(self):
        """SchemaResolutionError exposes segment details."""
        err = SchemaResolutionError(
            "Unknown field 'nope'",
            segment_index=2,
            segment="nope",
            resolved_path="blog.posts",
            candidates=["title", "slug"],
        )
        extra = err.to_extra()
        assert extra["segment_index"] == 2
        assert extra["resolved_path"] == "blog.posts"
        assert extra["candidates"] == ["title", "slug"]

    @pytest.mark.unit
    def test_style_rejected_partition(self):
        """StyleRejectedError keeps the valid/invalid partition."""
        err = StyleRejectedError(
            "rejected", valid={"color": "red"}, invalid={"colr": "red"}
        )
        assert err.to_extra()["valid"] == {"color": "red"}
        assert err.to_extra()["invalid"] == {"colr": "red"}

    @pytest.mark.unit
    def test_not_ready_status(self):
        """NotReadyError reports a not_ready status."""
        assert NotReadyError("editor timeout").to_extra()["status"] == "not_ready"

    @pytest.mark.unit
    def test_unsupported_capability(self):
        """UnsupportedOperationError names the missing capability."""
        err = UnsupportedOperationError("no CMS", capability="data_sources")
        assert err.to_extra()["capability"] == "data_sources"
