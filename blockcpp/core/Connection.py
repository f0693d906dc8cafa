from typing import List, Optional, TYPE_CHECKING
import logging

from .Types import ConnectionType

if TYPE_CHECKING:
    from .Block import Block


# Get a logger for this module
logger = logging.getLogger(__name__)


class Connection:
    """
    One attachment point on a block.

    A block exposes at most one OUTPUT_VALUE or PREVIOUS_STATEMENT connection
    (its "plug") and any number of INPUT_VALUE / NEXT_STATEMENT connections
    (its "sockets").  Connections are always linked in pairs; `target` points
    at the connection on the other block.
    """

    def __init__(self, source_block: 'Block', type: ConnectionType, check: Optional[List[str]] = None):
        self.source_block = source_block
        self.type = type
        self.check = list(check) if check else None
        self.target: Optional['Connection'] = None

    def __repr__(self):
        return f"Connection({self.source_block.type}.{self.type.name})"

    def is_connected(self) -> bool:
        return self.target is not None

    def target_block(self) -> Optional['Block']:
        if self.target is None:
            return None
        return self.target.source_block

    def check_type(self, other: 'Connection') -> bool:
        # Untyped connections accept anything.
        if not self.check or not other.check:
            return True
        return any(name in other.check for name in self.check)

    def connect(self, other: 'Connection') -> None:
        if other.type is not self.type.opposite():
            raise ValueError(
                f"Cannot connect {self.type.name} on '{self.source_block.type}' "
                f"to {other.type.name} on '{other.source_block.type}'"
            )
        if other.source_block is self.source_block:
            raise ValueError(f"Cannot connect block '{self.source_block.type}' to itself")
        if not self.check_type(other):
            raise ValueError(
                f"Type check failed connecting '{self.source_block.type}' ({self.check}) "
                f"to '{other.source_block.type}' ({other.check})"
            )
        if self.target is not None or other.target is not None:
            raise ValueError(
                f"Connection on '{self.source_block.type}' or '{other.source_block.type}' is already in use"
            )

        logger.debug(f"Connecting {self!r} to {other!r}")
        self.target = other
        other.target = self

    def disconnect(self) -> None:
        if self.target is None:
            return
        logger.debug(f"Disconnecting {self!r} from {self.target!r}")
        self.target.target = None
        self.target = None
