"""Document tree accessor.

CRUD and bounded traversal over the component tree of the selected page.
Every operation validates its input before touching the tree, so a failed
call leaves the document unchanged.
"""

from dataclasses import dataclass
from typing import Any

from sitebridge.core import get_logger
from sitebridge.editor import (
    ComponentNode,
    NodeAttributes,
    NodeType,
    TreeOwner,
)
from sitebridge.errors import ValidationError
from sitebridge.markup import ComponentSpec, parse_markup
from sitebridge.session import Session
from sitebridge.validation import Outcome, Position, parse_position

logger = get_logger("tree")

DEFAULT_MAX_DEPTH = 2
DEFAULT_MAX_COUNT = 50


@dataclass
class TraversalBudget:
    """Explicit limits for a bounded tree walk.

    Attributes:
        max_depth: Deepest level whose children are expanded (root is 0).
        max_count: Maximum number of nodes reported.
        visited: Nodes reported so far.
        truncated: Whether any subtree was cut off.
    """

    max_depth: int = DEFAULT_MAX_DEPTH
    max_count: int = DEFAULT_MAX_COUNT
    visited: int = 0
    truncated: bool = False

    def take(self) -> bool:
        """Consume one node from the budget; False when exhausted."""
        if self.visited >= self.max_count:
            self.truncated = True
            return False
        self.visited += 1
        return True


def walk_bounded(
    node: ComponentNode, budget: TraversalBudget, depth: int = 0
) -> dict[str, Any]:
    """Describe ``node`` and its subtree within ``budget``.

    Nodes at the depth limit, or whose children do not fit the budget,
    report ``children_count`` instead of ``children``.
    """
    entry = node.summary()
    if not node.children:
        return entry
    if depth >= budget.max_depth:
        entry["children_count"] = len(node.children)
        budget.truncated = True
        return entry
    children = []
    for child in node.children:
        if not budget.take():
            break
        children.append(walk_bounded(child, budget, depth + 1))
    if len(children) < len(node.children):
        entry["children_count"] = len(node.children)
    entry["children"] = children
    return entry


def resolve_insertion(
    owner: TreeOwner, position: Position
) -> tuple[ComponentNode, int]:
    """Find the container and index for new content.

    Resolution:
        no selection (or the root selected with before/after) -> start of root
        inside -> after the last child of the selected node
        before/after -> the selected node's parent at its index (+1 for after)
    """
    root = owner.get_root()
    selected = owner.get_selected()
    if selected is None:
        return root, 0
    if position is Position.INSIDE:
        return selected, len(selected.children)
    parent = selected.parent
    if parent is None:
        return root, 0
    index = selected.index_in_parent()
    return parent, index + 1 if position is Position.AFTER else index


def build_nodes(
    specs: list[ComponentSpec], owner: TreeOwner
) -> tuple[list[ComponentNode], list[str]]:
    """Create detached nodes from parsed specs.

    Markup ids are kept when unused in the document, otherwise a fresh id is
    minted and a warning reported.

    Raises:
        ValidationError: An attribute cannot be stored.
    """
    used: set[str] = set()
    warnings: list[str] = []

    def build(spec: ComponentSpec) -> ComponentNode:
        node_id = spec.html_id
        if node_id and (node_id in used or owner.has_id(node_id)):
            warnings.append(f"Id '{node_id}' already exists; a new id was assigned")
            node_id = None
        while not node_id or node_id in used:
            node_id = owner.new_id()
        used.add(node_id)

        attributes = NodeAttributes()
        for name, value in spec.attributes.items():
            attributes.set(name, value)
        node = ComponentNode(
            id=node_id,
            tag=spec.tag,
            type=NodeType.TEXT if spec.text else NodeType.DEFAULT,
            classes=list(spec.classes),
            attributes=attributes,
            content=spec.content,
            editable=spec.text,
        )
        for child in spec.children:
            node.append(build(child))
        return node

    return [build(spec) for spec in specs], warnings


class TreeAccessor:
    """Component operations for the ``component`` noun.

    Example:
        >>> tree = TreeAccessor(session)
        >>> outcome = tree.add("<h1>Hello</h1>")
        >>> outcome.data["created"]
        ['c-2']
    """

    def __init__(self, session: Session):
        self.session = session

    @property
    def owner(self) -> TreeOwner:
        return self.session.owner

    def get_tree(
        self, max_depth: int | None = None, max_count: int | None = None
    ) -> Outcome:
        """Bounded depth-first description of the selected page."""
        budget = TraversalBudget(
            max_depth=DEFAULT_MAX_DEPTH if max_depth is None else max_depth,
            max_count=DEFAULT_MAX_COUNT if max_count is None else max_count,
        )
        if budget.max_depth < 0 or budget.max_count < 1:
            raise ValidationError("max_depth must be >= 0 and max_count >= 1")
        budget.take()
        tree = walk_bounded(self.owner.get_root(), budget)
        return Outcome(
            data={
                "page_id": self.session.page.id,
                "tree": tree,
                "visited": budget.visited,
                "truncated": budget.truncated,
            }
        )

    def get(self, component_id: str | None = None) -> Outcome:
        node = self.session.resolve_component(component_id)
        return Outcome(data={"component": node.to_dict()})

    def select(self, component_id: str) -> Outcome:
        node = self.session.resolve_component(component_id)
        self.session.select(node)
        return Outcome(data={"component": node.summary()})

    def add(self, html: str, position: str | None = None) -> Outcome:
        """Parse markup and insert the resulting nodes.

        The first created node becomes the selection.
        """
        if not html or not html.strip():
            raise ValidationError("html must not be empty")
        where = parse_position(position)
        parsed = parse_markup(html)
        if not parsed.specs:
            error = ValidationError("Markup produced no components")
            error.warnings.extend(parsed.warnings)
            raise error
        nodes, id_warnings = build_nodes(parsed.specs, self.owner)
        parent, index = resolve_insertion(self.owner, where)
        for offset, node in enumerate(nodes):
            parent.insert(index + offset, node)
        self.session.select(nodes[0])
        logger.debug(f"Added {len(nodes)} component(s) to '{parent.id}' at {index}")
        return Outcome(
            data={
                "created": [node.id for node in nodes],
                "parent_id": parent.id,
                "index": index,
            },
            warnings=parsed.warnings + id_warnings,
        )

    def update(
        self,
        component_id: str | None = None,
        content: str | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> Outcome:
        """Update text content and/or attributes.

        ``class`` replaces the class set, ``id`` is rejected, ``style`` is
        ignored with a warning and ``None`` values delete.
        """
        if content is None and attributes is None:
            raise ValidationError("Provide content and/or attributes to update")
        if attributes is not None and not isinstance(attributes, dict):
            raise ValidationError("attributes must be an object of name -> value")
        node = self.session.resolve_component(component_id)
        warnings: list[str] = []

        if content is not None and not node.is_text and node.children:
            raise ValidationError(
                f"Component '{node.id}' has child components; "
                "update a text component or remove the children first",
                children=[child.id for child in node.children],
            )

        staged = node.attributes.copy()
        classes = list(node.classes)
        for name, value in (attributes or {}).items():
            if name == "id":
                raise ValidationError("Component ids are stable and cannot be changed")
            if name == "style":
                warnings.append(
                    "Ignored 'style' attribute; use style(action:'set') on a selector"
                )
                continue
            if name == "class":
                classes = []
                for cls in str(value or "").split():
                    if cls not in classes:
                        classes.append(cls)
                continue
            staged.set(name, value)

        if content is not None:
            node.content = content
        node.attributes = staged
        node.classes = classes
        return Outcome(data={"component": node.to_dict()}, warnings=warnings)

    def move(
        self,
        target_id: str,
        component_id: str | None = None,
        position: str | None = None,
    ) -> Outcome:
        """Move a component relative to ``target_id``."""
        where = parse_position(position)
        node = self.session.resolve_component(component_id)
        target = self.session.resolve_component(target_id)
        if node is target:
            raise ValidationError("Cannot move a component relative to itself")
        if node.is_ancestor_of(target):
            raise ValidationError(
                f"Cannot move '{node.id}' into its own subtree ('{target.id}')"
            )
        if node is self.owner.get_root():
            raise ValidationError("The page root cannot be moved")

        if where is Position.INSIDE:
            parent = target
            node.detach()
            index = len(parent.children)
        else:
            parent = target.parent
            if parent is None:
                raise ValidationError("Cannot place a component beside the page root")
            node.detach()
            # Index recomputed after detaching
            index = target.index_in_parent()
            if where is Position.AFTER:
                index += 1
        parent.insert(index, node)
        return Outcome(
            data={"component_id": node.id, "parent_id": parent.id, "index": index}
        )

    def remove(self, component_id: str | None = None) -> Outcome:
        node = self.session.resolve_component(component_id)
        if node is self.owner.get_root():
            raise ValidationError("The page root cannot be removed")
        selected = self.owner.get_selected()
        clears_selection = selected is not None and (
            selected is node or node.is_ancestor_of(selected)
        )
        removed = [n.id for n in node.walk()]
        node.detach()
        if clears_selection:
            self.session.select(None)
        return Outcome(data={"removed": removed})


__all__ = [
    "TraversalBudget",
    "TreeAccessor",
    "walk_bounded",
    "resolve_insertion",
    "build_nodes",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_MAX_COUNT",
]
