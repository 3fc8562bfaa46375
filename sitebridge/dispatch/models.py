"""Wire models for tool calls."""

from typing import Any

from pydantic import BaseModel, Field


class ToolRequest(BaseModel):
    """A structured tool call.

    Example:
        >>> ToolRequest(noun="component", action="add", params={"html": "<h1>Hi</h1>"})
    """

    noun: str = Field(description="Resource the call acts on")
    action: str = Field(description="Operation on the noun")
    params: dict[str, Any] = Field(default_factory=dict)


class ToolResponse(BaseModel):
    """Uniform success/error envelope.

    On success ``data`` is set; on failure ``error`` and ``extra`` (with the
    error ``type`` and corrective information) are set. ``warnings`` lists
    corrections applied to the request.
    """

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    extra: dict[str, Any] | None = None
    warnings: list[str] | None = None

    def to_wire(self) -> dict[str, Any]:
        """Serialize with unset fields omitted."""
        return self.model_dump(exclude_none=True)


__all__ = ["ToolRequest", "ToolResponse"]
