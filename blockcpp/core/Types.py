from enum import Enum, auto
from functools import total_ordering


class ConnectionType(Enum):
    INPUT_VALUE = auto()
    OUTPUT_VALUE = auto()
    NEXT_STATEMENT = auto()
    PREVIOUS_STATEMENT = auto()

    def opposite(self) -> 'ConnectionType':
        return _OPPOSITES[self]


_OPPOSITES = {
    ConnectionType.INPUT_VALUE: ConnectionType.OUTPUT_VALUE,
    ConnectionType.OUTPUT_VALUE: ConnectionType.INPUT_VALUE,
    ConnectionType.NEXT_STATEMENT: ConnectionType.PREVIOUS_STATEMENT,
    ConnectionType.PREVIOUS_STATEMENT: ConnectionType.NEXT_STATEMENT,
}


class InputType(Enum):
    VALUE = "value"
    STATEMENT = "statement"
    DUMMY = "dummy"


class NameCategory(Enum):
    VARIABLE = "VARIABLE"
    PROCEDURE = "PROCEDURE"
    DEVELOPER = "DEVELOPER_VARIABLE"


@total_ordering
class Order(Enum):
    """
    Operator precedence of a generated expression.
    Lower values bind tighter; NONE is the loosest context, e.g. a function
    argument or the right-hand side of an assignment.
    """
    ATOMIC = 0          # literals, identifiers
    UNARY_POSTFIX = 1   # expr++ expr-- () [] .
    UNARY_PREFIX = 2    # -expr !expr ~expr ++expr --expr
    MULTIPLICATIVE = 3  # * / %
    ADDITIVE = 4        # + -
    SHIFT = 5           # << >>
    BITWISE_AND = 6     # &
    BITWISE_XOR = 7     # ^
    BITWISE_OR = 8      # |
    RELATIONAL = 9      # >= > <= <
    EQUALITY = 10       # == !=
    LOGICAL_AND = 11    # &&
    LOGICAL_OR = 12     # ||
    IF_NULL = 13        # ??
    CONDITIONAL = 14    # expr ? expr : expr
    CASCADE = 15        # ..
    ASSIGNMENT = 16     # = *= /= %= += -= <<= >>= &= ^= |=
    NONE = 99           # (...)

    def __lt__(self, other):
        if not isinstance(other, Order):
            return NotImplemented
        return self.value < other.value
