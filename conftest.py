"""Root pytest configuration and fixtures.

This module provides:
- Environment setup (loads .env)
- Editor, session and dispatcher fixtures
- A blog data source for content-binding tests
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

if TYPE_CHECKING:
    from sitebridge.dispatch import Dispatcher
    from sitebridge.editor import DataSource, InMemoryEditor
    from sitebridge.session import Session

# Load environment variables from .env file
load_dotenv()


# =============================================================================
# Schema Fixtures
# =============================================================================


@pytest.fixture
def blog_source() -> DataSource:
    """Create a blog data source.

    Shape:
        blog.posts -> PostConnection{title, slug, body, author, tags}
        blog.site  -> SiteInfo{name, logo}
        PostConnection.author -> Author{name, bio}
        PostConnection.tags   -> Tag{label}
    """
    from sitebridge.editor import DataSource, SchemaField, SchemaType

    return DataSource(
        id="blog",
        label="Blog",
        queryables=[
            SchemaField(id="posts", label="Posts", kind="list", type_ids=["PostConnection"]),
            SchemaField(id="site", label="Site", kind="object", type_ids=["SiteInfo"]),
        ],
        types=[
            SchemaType(
                id="PostConnection",
                fields=[
                    SchemaField(id="title", label="Title", type_ids=["String"]),
                    SchemaField(id="slug", label="Slug", type_ids=["String"]),
                    SchemaField(id="body", label="Body", type_ids=["String"]),
                    SchemaField(
                        id="author", label="Author", kind="object", type_ids=["Author"]
                    ),
                    SchemaField(id="tags", label="Tags", kind="list", type_ids=["Tag"]),
                ],
            ),
            SchemaType(
                id="Author",
                fields=[
                    SchemaField(id="name", label="Name", type_ids=["String"]),
                    SchemaField(id="bio", label="Bio", type_ids=["String"]),
                ],
            ),
            SchemaType(
                id="Tag",
                fields=[SchemaField(id="label", label="Label", type_ids=["String"])],
            ),
            SchemaType(
                id="SiteInfo",
                fields=[
                    SchemaField(id="name", label="Name", type_ids=["String"]),
                    SchemaField(id="logo", label="Logo", type_ids=["String"]),
                ],
            ),
            SchemaType(id="String"),
        ],
    )


# =============================================================================
# Editor Fixtures
# =============================================================================


@pytest.fixture
def editor() -> InMemoryEditor:
    """Create an empty in-memory editor without data sources."""
    from sitebridge.editor import InMemoryEditor

    return InMemoryEditor(document_id="doc-test")


@pytest.fixture
def cms_editor(blog_source: DataSource) -> InMemoryEditor:
    """Create an in-memory editor with the blog data source configured."""
    from sitebridge.editor import InMemoryEditor

    return InMemoryEditor(document_id="doc-cms", data_sources=[blog_source])


@pytest.fixture
def session(editor: InMemoryEditor) -> Session:
    """Create a session with a website open on the empty editor."""
    from sitebridge.session import Session

    return Session(owner=editor, website_id="site-1")


@pytest.fixture
def cms_session(cms_editor: InMemoryEditor) -> Session:
    """Create a session on the editor with data sources."""
    from sitebridge.session import Session

    return Session(owner=cms_editor, website_id="site-1")


# =============================================================================
# Dispatcher Fixtures
# =============================================================================


@pytest.fixture
def feedback_path(tmp_path):
    """Isolated feedback log location."""
    return tmp_path / "feedback.jsonl"


@pytest.fixture
def dispatcher(session: Session, feedback_path) -> Dispatcher:
    """Create a dispatcher bound to the default session."""
    from sitebridge.dispatch import Dispatcher
    from sitebridge.feedback import FeedbackLog

    return Dispatcher(session, feedback=FeedbackLog(feedback_path))


@pytest.fixture
def cms_dispatcher(cms_session: Session, feedback_path) -> Dispatcher:
    """Create a dispatcher bound to the session with data sources."""
    from sitebridge.dispatch import Dispatcher
    from sitebridge.feedback import FeedbackLog

    return Dispatcher(cms_session, feedback=FeedbackLog(feedback_path))
