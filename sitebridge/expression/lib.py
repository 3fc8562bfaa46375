"""Content expression resolver.

Resolves dot-path expressions such as ``blog.posts.author.name`` against
the typed schema graph of the configured data sources. Resolution is exact:
it never partial-matches or guesses, and a failure names the first invalid
segment with the ids that would have been accepted there.
"""

from sitebridge.editor import DataSource, SchemaField, Token
from sitebridge.errors import SchemaResolutionError, ValidationError


def split_expression(expression: str) -> list[str]:
    """Split an expression into segments.

    Raises:
        ValidationError: Empty expression or empty segment.
    """
    if not isinstance(expression, str) or not expression.strip():
        raise ValidationError("Expression must be a non-empty dot path like 'source.field'")
    segments = [segment.strip() for segment in expression.strip().split(".")]
    if any(not segment for segment in segments):
        raise ValidationError(
            f"Expression '{expression}' has an empty segment",
            expression=expression,
        )
    return segments


def _token(source: DataSource, field: SchemaField, parent_type_id: str | None) -> Token:
    return Token(
        data_source_id=source.id,
        field_id=field.id,
        label=field.label or field.id,
        kind=field.kind,
        type_ids=list(field.type_ids),
        parent_type_id=parent_type_id,
    )


def resolve_expression(expression: str, sources: list[DataSource]) -> list[Token]:
    """Resolve an expression to an ordered token list.

    Args:
        expression: Dot path starting with a data source id.
        sources: Available data sources.

    Returns:
        One token per segment after the source id.

    Raises:
        ValidationError: Malformed expression.
        SchemaResolutionError: A segment does not exist in the schema.

    Example:
        >>> tokens = resolve_expression("blog.posts.title", [blog])
        >>> [t.field_id for t in tokens]
        ['posts', 'title']
    """
    segments = split_expression(expression)

    source = next((s for s in sources if s.id == segments[0]), None)
    if source is None:
        raise SchemaResolutionError(
            f"Unknown data source '{segments[0]}'",
            segment_index=0,
            segment=segments[0],
            resolved_path="",
            candidates=[s.id for s in sources],
        )

    if len(segments) < 2:
        raise SchemaResolutionError(
            f"Expression '{expression}' needs a field after the data source",
            segment_index=1,
            segment="",
            resolved_path=source.id,
            candidates=source.queryable_ids(),
        )

    root_field = source.get_queryable(segments[1])
    if root_field is None:
        raise SchemaResolutionError(
            f"Unknown field '{segments[1]}' in data source '{source.id}'",
            segment_index=1,
            segment=segments[1],
            resolved_path=source.id,
            candidates=source.queryable_ids(),
        )
    tokens = [_token(source, root_field, None)]

    for index in range(2, len(segments)):
        segment = segments[index]
        searched: list[str] = []
        match = None
        for type_id in tokens[-1].type_ids:
            schema_type = source.get_type(type_id)
            if schema_type is None:
                continue
            for field in schema_type.fields:
                if field.id not in searched:
                    searched.append(field.id)
            field = schema_type.get_field(segment)
            if field is not None:
                match = _token(source, field, schema_type.id)
                break
        if match is None:
            resolved = ".".join(segments[:index])
            raise SchemaResolutionError(
                f"Unknown field '{segment}' after '{resolved}'",
                segment_index=index,
                segment=segment,
                resolved_path=resolved,
                candidates=searched,
            )
        tokens.append(match)

    return tokens


def is_chain_valid(tokens: list[Token]) -> bool:
    """Check that every token is reachable from the previous one."""
    return all(
        tokens[i + 1].parent_type_id in tokens[i].type_ids
        for i in range(len(tokens) - 1)
    )


def tokens_to_state(tokens: list[Token]) -> list[dict]:
    """Serialize tokens for storage in a data state."""
    return [
        {"type": "property", **token.model_dump()}
        for token in tokens
    ]


__all__ = [
    "split_expression",
    "resolve_expression",
    "is_chain_valid",
    "tokens_to_state",
]
