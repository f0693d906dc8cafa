"""
Block shape registry
====================
Maps each known block type to the sockets, fields and connections a block of
that type carries.  `Workspace.new_block()` and the JSON deserialiser both use
it, so a hand-built block and a deserialised block always have the same shape.

Shape keys
----------
    output      check list for the output plug, or None      (value blocks)
    statement   True for blocks with previous + next connections
    inputs      list of (name, "value" | "statement", check)
    fields      {field_name: default}
    mutator     name of a function that appends per-instance inputs from
                `block.mutation` (dynamic item lists, else-if arms, arguments)
    choices     {field_name: allowed values} for dropdown fields

Adding a new block type
-----------------------
Add an entry here and a template to compiler/templates.py TEMPLATE_REGISTRY.
"""

from typing import Any, Callable, Dict

from .Block import Block

_S = Dict[str, Any]   # type alias for a shape spec dict

_NUMBER = ["Number"]
_BOOLEAN = ["Boolean"]
_STRING = ["String"]
_ARRAY = ["Array"]


BLOCK_SHAPES: Dict[str, _S] = {

    # ── Math ────────────────────────────────────────────────────────────────

    "math_number": {
        "output": _NUMBER,
        "fields": {"NUM": 0},
    },
    "math_arithmetic": {
        "output": _NUMBER,
        "inputs": [("A", "value", _NUMBER), ("B", "value", _NUMBER)],
        "fields": {"OP": "ADD"},
        "choices": {"OP": ("ADD", "MINUS", "MULTIPLY", "DIVIDE", "POWER")},
    },
    "math_single": {
        "output": _NUMBER,
        "inputs": [("NUM", "value", _NUMBER)],
        "fields": {"OP": "NEG"},
        "choices": {"OP": ("NEG", "ABS", "ROOT", "LN", "EXP", "LOG10")},
    },
    "math_change": {
        "statement": True,
        "inputs": [("DELTA", "value", _NUMBER)],
        "fields": {"VAR": "item"},
    },
    "math_random_int": {
        "output": _NUMBER,
        "inputs": [("FROM", "value", _NUMBER), ("TO", "value", _NUMBER)],
    },

    # ── Logic ───────────────────────────────────────────────────────────────

    "logic_boolean": {
        "output": _BOOLEAN,
        "fields": {"BOOL": "TRUE"},
        "choices": {"BOOL": ("TRUE", "FALSE")},
    },
    "logic_compare": {
        "output": _BOOLEAN,
        "inputs": [("A", "value", None), ("B", "value", None)],
        "fields": {"OP": "EQ"},
        "choices": {"OP": ("EQ", "NEQ", "LT", "LTE", "GT", "GTE")},
    },
    "logic_operation": {
        "output": _BOOLEAN,
        "inputs": [("A", "value", _BOOLEAN), ("B", "value", _BOOLEAN)],
        "fields": {"OP": "AND"},
        "choices": {"OP": ("AND", "OR")},
    },
    "logic_negate": {
        "output": _BOOLEAN,
        "inputs": [("BOOL", "value", _BOOLEAN)],
    },
    "logic_ternary": {
        "output": None,
        "inputs": [("IF", "value", _BOOLEAN), ("THEN", "value", None), ("ELSE", "value", None)],
    },

    # ── Text ────────────────────────────────────────────────────────────────

    "text": {
        "output": _STRING,
        "fields": {"TEXT": ""},
    },
    "text_join": {
        "output": _STRING,
        "mutator": "items",
    },
    "text_print": {
        "statement": True,
        "inputs": [("TEXT", "value", None)],
    },

    # ── Variables ───────────────────────────────────────────────────────────

    "variables_get": {
        "output": None,
        "fields": {"VAR": "item"},
    },
    "variables_set": {
        "statement": True,
        "inputs": [("VALUE", "value", None)],
        "fields": {"VAR": "item"},
    },

    # ── Control ─────────────────────────────────────────────────────────────

    "controls_if": {
        "statement": True,
        "mutator": "if_arms",
    },
    "controls_repeat_ext": {
        "statement": True,
        "inputs": [("TIMES", "value", _NUMBER), ("DO", "statement", None)],
    },
    "controls_whileUntil": {
        "statement": True,
        "inputs": [("BOOL", "value", _BOOLEAN), ("DO", "statement", None)],
        "fields": {"MODE": "WHILE"},
        "choices": {"MODE": ("WHILE", "UNTIL")},
    },

    # ── Lists ───────────────────────────────────────────────────────────────

    "lists_create_with": {
        "output": _ARRAY,
        "mutator": "items",
    },
    "lists_getIndex": {
        "output": None,
        "inputs": [("VALUE", "value", _ARRAY), ("AT", "value", _NUMBER)],
        "fields": {"WHERE": "FROM_START"},
        "choices": {"WHERE": ("FIRST", "LAST", "FROM_START", "FROM_END")},
    },

    # ── Procedures ──────────────────────────────────────────────────────────

    "procedures_defnoreturn": {
        "inputs": [("STACK", "statement", None)],
        "fields": {"NAME": "do_something"},
    },
    "procedures_callnoreturn": {
        "statement": True,
        "fields": {"NAME": "do_something"},
        "mutator": "arguments",
    },
}


# ── Mutators ─────────────────────────────────────────────────────────────────

def _mutate_items(block: Block) -> None:
    for i in range(int(block.mutation.get("items", 0))):
        block.append_value_input(f"ADD{i}")


def _mutate_if_arms(block: Block) -> None:
    block.append_value_input("IF0", _BOOLEAN)
    block.append_statement_input("DO0")
    for i in range(1, int(block.mutation.get("elseif", 0)) + 1):
        block.append_value_input(f"IF{i}", _BOOLEAN)
        block.append_statement_input(f"DO{i}")
    if block.mutation.get("else"):
        block.append_statement_input("ELSE")


def _mutate_arguments(block: Block) -> None:
    for i, _ in enumerate(block.mutation.get("params", [])):
        block.append_value_input(f"ARG{i}")


_MUTATORS: Dict[str, Callable[[Block], None]] = {
    "items": _mutate_items,
    "if_arms": _mutate_if_arms,
    "arguments": _mutate_arguments,
}


def is_known_type(type_name: str) -> bool:
    return type_name in BLOCK_SHAPES


def apply_shape(block: Block) -> Block:
    """Give a freshly constructed block the sockets its type declares."""
    shape = BLOCK_SHAPES.get(block.type)
    if shape is None:
        raise ValueError(f"Unknown block type '{block.type}'")

    if "output" in shape:
        block.set_output(shape["output"])
    if shape.get("statement"):
        block.set_previous_statement()
        block.set_next_statement()

    for name, kind, check in shape.get("inputs", []):
        if kind == "statement":
            block.append_statement_input(name, check)
        else:
            block.append_value_input(name, check)

    for name, default in shape.get("fields", {}).items():
        block.fields.setdefault(name, default)

    mutator = shape.get("mutator")
    if mutator:
        _MUTATORS[mutator](block)
    return block
