"""Block panel accessor.

Blocks are markup templates the editor registers for its block panel.
Inserting one goes through the same parse and insertion path as
``component(action:'add')``, so the template is stripped and positioned
exactly like hand-written markup.
"""

from __future__ import annotations

from sitebridge.core import get_logger
from sitebridge.editor import Block, TreeOwner
from sitebridge.errors import NotFoundError
from sitebridge.session import Session
from sitebridge.tree import TreeAccessor
from sitebridge.validation import Outcome

logger = get_logger("blocks")


class BlockAccessor:
    """Operations for the ``block`` noun."""

    def __init__(self, session: Session):
        self.session = session
        self.tree = TreeAccessor(session)

    @property
    def owner(self) -> TreeOwner:
        return self.session.owner

    def _find(self, block_id: str) -> Block:
        blocks = self.owner.get_blocks()
        for block in blocks:
            if block.id == block_id:
                return block
        raise NotFoundError(
            f"Block '{block_id}' not found", available=[b.id for b in blocks]
        )

    def list(self) -> Outcome:
        return Outcome(data={"blocks": [b.to_dict() for b in self.owner.get_blocks()]})

    def insert(self, block_id: str, position: str | None = None) -> Outcome:
        """Insert a block relative to the selection, positioned like ``add``.

        Raises:
            NotFoundError: Unknown block id, with the registered ids.
        """
        block = self._find(block_id)
        outcome = self.tree.add(block.content, position)
        logger.debug(f"Inserted block {block.id}")
        return Outcome(data={"block_id": block.id, **outcome.data}, warnings=outcome.warnings)


__all__ = ["BlockAccessor"]
