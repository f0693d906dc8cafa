from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import uuid

from .Block import Block
from .BlockShapes import apply_shape


# Get a logger for this module
logger = logging.getLogger(__name__)


@dataclass
class VariableModel:
    name: str
    type: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass
class WorkspaceOptions:
    # When True, list indices in the visual program start at 1 and are shifted
    # down by one in the generated code.
    one_based_index: bool = False


class Workspace:
    """Container for the blocks and declared variables of one visual program."""

    def __init__(self, name: str = "workspace", options: Optional[WorkspaceOptions] = None):
        self.name = name
        self.options = options if options is not None else WorkspaceOptions()
        self.blocks: Dict[str, Block] = {}
        self.variables: List[VariableModel] = []

    def __repr__(self):
        return f"Workspace({self.name}, blocks={len(self.blocks)}, variables={len(self.variables)})"

    # ── Variables ────────────────────────────────────────────────────────────

    def create_variable(self, name: str, type: str = "", id: Optional[str] = None) -> VariableModel:
        existing = self.get_variable(name)
        if existing is not None:
            return existing
        variable = VariableModel(name, type, id or uuid.uuid4().hex)
        self.variables.append(variable)
        return variable

    def get_variable(self, name: str) -> Optional[VariableModel]:
        # Variable names are case-insensitive.
        lowered = name.lower()
        return next((v for v in self.variables if v.name.lower() == lowered), None)

    def get_all_variables(self) -> List[VariableModel]:
        return list(self.variables)

    # ── Blocks ───────────────────────────────────────────────────────────────

    def add_block(self, block: Block) -> Block:
        if block.id in self.blocks:
            raise ValueError(f"Block with id '{block.id}' already exists in workspace '{self.name}'")
        block.workspace = self
        self.blocks[block.id] = block
        return block

    def new_block(self, type: str, id: Optional[str] = None, mutation: Optional[Dict[str, Any]] = None, **fields) -> Block:
        """Create a block of a registered type, shaped and added to this workspace."""
        block = Block(self, type, id)
        if mutation:
            block.mutation.update(mutation)
        apply_shape(block)
        block.fields.update(fields)
        logger.debug(f"New block {block!r} in workspace '{self.name}'")
        return self.add_block(block)

    def get_block_by_id(self, block_id: str) -> Optional[Block]:
        return self.blocks.get(block_id)

    def get_top_blocks(self, ordered: bool = False) -> List[Block]:
        """Blocks with no parent, in creation order or sorted top-to-bottom when `ordered`."""
        tops = [b for b in self.blocks.values() if b.get_parent() is None]
        if ordered:
            tops.sort(key=lambda b: (b.y, b.x))
        return tops
