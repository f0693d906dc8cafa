from typing import Optional, List, Dict, Any, TYPE_CHECKING
import logging
import uuid

from .Connection import Connection
from .Types import ConnectionType, InputType

if TYPE_CHECKING:
    from .Workspace import Workspace


# Get a logger for this module
logger = logging.getLogger(__name__)


class Input:
    """A named row on a block: a value socket, a statement socket or a plain field row."""

    def __init__(self, type: InputType, name: str, source_block: 'Block', connection: Optional[Connection] = None):
        self.type = type
        self.name = name
        self.source_block = source_block
        self.connection = connection

    def __repr__(self):
        return f"Input({self.name}, {self.type.value})"


class Block:
    """
    One node of a visual program.

    Blocks are built either by hand (tests, `Workspace.new_block`) or by the
    JSON deserialiser.  The generator only ever reads them.
    """

    def __init__(self, workspace: Optional['Workspace'], type: str, id: Optional[str] = None):
        self.id = id or uuid.uuid4().hex
        self.type = type
        self.workspace = workspace

        self.inputs: List[Input] = []
        self.fields: Dict[str, Any] = {}

        self.output_connection: Optional[Connection] = None
        self.previous_connection: Optional[Connection] = None
        self.next_connection: Optional[Connection] = None

        self.comment: Optional[str] = None
        self.disabled = False
        self.x = 0
        self.y = 0

        # Extra per-type data, e.g. the parameter list of a procedure.
        self.mutation: Dict[str, Any] = {}

    def __repr__(self):
        return f"Block({self.type}, {self.id})"

    # ── Shape ────────────────────────────────────────────────────────────────

    def _append_input(self, type: InputType, name: str, connection: Optional[Connection]) -> Input:
        if name and self.get_input(name) is not None:
            raise ValueError(f"Input '{name}' already exists on block '{self.type}'")
        row = Input(type, name, self, connection)
        self.inputs.append(row)
        return row

    def append_value_input(self, name: str, check: Optional[List[str]] = None) -> Input:
        return self._append_input(InputType.VALUE, name, Connection(self, ConnectionType.INPUT_VALUE, check))

    def append_statement_input(self, name: str, check: Optional[List[str]] = None) -> Input:
        return self._append_input(InputType.STATEMENT, name, Connection(self, ConnectionType.NEXT_STATEMENT, check))

    def append_dummy_input(self, name: str = "") -> Input:
        return self._append_input(InputType.DUMMY, name, None)

    def set_output(self, check: Optional[List[str]] = None) -> None:
        if self.previous_connection is not None:
            raise ValueError(f"Block '{self.type}' cannot have both an output and a previous connection")
        self.output_connection = Connection(self, ConnectionType.OUTPUT_VALUE, check)

    def set_previous_statement(self, check: Optional[List[str]] = None) -> None:
        if self.output_connection is not None:
            raise ValueError(f"Block '{self.type}' cannot have both an output and a previous connection")
        self.previous_connection = Connection(self, ConnectionType.PREVIOUS_STATEMENT, check)

    def set_next_statement(self, check: Optional[List[str]] = None) -> None:
        self.next_connection = Connection(self, ConnectionType.NEXT_STATEMENT, check)

    # ── Lookup ───────────────────────────────────────────────────────────────

    def get_input(self, name: str) -> Optional[Input]:
        for row in self.inputs:
            if row.name == name:
                return row
        return None

    def get_input_target_block(self, name: str) -> Optional['Block']:
        row = self.get_input(name)
        if row is None or row.connection is None:
            return None
        return row.connection.target_block()

    def get_field_value(self, name: str) -> Any:
        return self.fields.get(name)

    def set_field_value(self, name: str, value: Any) -> None:
        self.fields[name] = value

    def get_comment_text(self) -> Optional[str]:
        return self.comment

    def set_comment_text(self, text: Optional[str]) -> None:
        self.comment = text or None

    def get_next_block(self) -> Optional['Block']:
        if self.next_connection is None:
            return None
        return self.next_connection.target_block()

    def get_parent(self) -> Optional['Block']:
        for plug in (self.output_connection, self.previous_connection):
            if plug is not None and plug.target is not None:
                return plug.target.source_block
        return None

    def is_inline_value(self) -> bool:
        """True when this block's output is plugged into another block."""
        return self.output_connection is not None and self.output_connection.is_connected()

    def is_procedure_def(self) -> bool:
        return self.type.startswith("procedures_def")

    def get_children(self) -> List['Block']:
        """Blocks plugged into this one: every input in order, then the next block."""
        children = []
        for row in self.inputs:
            if row.connection is not None:
                child = row.connection.target_block()
                if child is not None:
                    children.append(child)
        next_block = self.get_next_block()
        if next_block is not None:
            children.append(next_block)
        return children

    def get_descendants(self) -> List['Block']:
        blocks = [self]
        for child in self.get_children():
            blocks.extend(child.get_descendants())
        return blocks

    # ── Wiring helpers ───────────────────────────────────────────────────────

    def connect_input(self, name: str, child: 'Block') -> 'Block':
        row = self.get_input(name)
        if row is None or row.connection is None:
            raise ValueError(f"Block '{self.type}' has no input socket named '{name}'")
        plug = child.output_connection if row.type == InputType.VALUE else child.previous_connection
        if plug is None:
            raise ValueError(f"Block '{child.type}' cannot be plugged into input '{name}' of '{self.type}'")
        row.connection.connect(plug)
        return child

    def connect_next(self, child: 'Block') -> 'Block':
        if self.next_connection is None or child.previous_connection is None:
            raise ValueError(f"Block '{child.type}' cannot follow block '{self.type}'")
        self.next_connection.connect(child.previous_connection)
        return child
