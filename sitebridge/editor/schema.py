"""Content-binding schema models.

A data source exposes root-level queryable fields and a registry of types.
Expressions such as ``blog.posts.title`` are resolved against this graph by
``sitebridge.expression``.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FieldKind(str, Enum):
    """Shape of the value a schema field yields."""

    SCALAR = "scalar"
    OBJECT = "object"
    LIST = "list"


class SchemaField(BaseModel):
    """A field of a schema type (or a root-level queryable)."""

    id: str = Field(description="Field identifier used in expressions")
    label: str = Field(default="", description="Human-readable label")
    kind: FieldKind = Field(default=FieldKind.SCALAR, description="Value shape")
    type_ids: list[str] = Field(
        default_factory=list,
        description="Ids of the types this field's value can have",
    )

    model_config = {"use_enum_values": True}


class SchemaType(BaseModel):
    """A named type with fields."""

    id: str
    label: str = ""
    fields: list[SchemaField] = Field(default_factory=list)

    def field_ids(self) -> list[str]:
        return [f.id for f in self.fields]

    def get_field(self, field_id: str) -> SchemaField | None:
        for f in self.fields:
            if f.id == field_id:
                return f
        return None


class DataSource(BaseModel):
    """A content source with its queryables and type registry.

    Example:
        >>> source = DataSource(
        ...     id="blog",
        ...     queryables=[SchemaField(id="posts", kind="list", type_ids=["Post"])],
        ...     types=[SchemaType(id="Post", fields=[SchemaField(id="title")])],
        ... )
        >>> source.get_type("Post").field_ids()
        ['title']
    """

    id: str
    label: str = ""
    queryables: list[SchemaField] = Field(default_factory=list)
    types: list[SchemaType] = Field(default_factory=list)

    def queryable_ids(self) -> list[str]:
        return [q.id for q in self.queryables]

    def get_queryable(self, field_id: str) -> SchemaField | None:
        for q in self.queryables:
            if q.id == field_id:
                return q
        return None

    def get_type(self, type_id: str) -> SchemaType | None:
        for t in self.types:
            if t.id == type_id:
                return t
        return None

    def summary(self) -> dict[str, Any]:
        """Compact description for listings."""
        return {
            "id": self.id,
            "label": self.label or self.id,
            "queryables": [
                {"id": q.id, "kind": q.kind, "type_ids": list(q.type_ids)}
                for q in self.queryables
            ],
            "types": {t.id: t.field_ids() for t in self.types},
        }


class Token(BaseModel):
    """One resolved segment of a content expression.

    Attributes:
        data_source_id: Source the expression starts from.
        field_id: Field matched by this segment.
        label: Field label (falls back to the id).
        kind: Value shape of the field.
        type_ids: Types reachable from this field.
        parent_type_id: Type the field was found in; None for queryables.
    """

    data_source_id: str
    field_id: str
    label: str
    kind: FieldKind
    type_ids: list[str] = Field(default_factory=list)
    parent_type_id: str | None = None

    model_config = {"use_enum_values": True}


__all__ = [
    "FieldKind",
    "SchemaField",
    "SchemaType",
    "DataSource",
    "Token",
]
