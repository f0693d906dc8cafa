"""
blockcpp Compiler — Block Code Templates
========================================
A BlockTemplate turns one block into source text:

  to_code(block, emitter, ctx)
      Value blocks return `(code, Order)` where Order is the precedence of
      the outermost operator in `code`.
      Statement blocks return the complete statement text, newline-terminated.
      Returning None means the template stored its output in the definition
      table itself (procedure definitions).

Children are always fetched through the emitter (`value_to_code`,
`statement_to_code`, `get_adjusted`) so precedence, comments and disabled
blocks are handled in one place.

Adding a new block type
-----------------------
1. Add its shape to core/BlockShapes.py BLOCK_SHAPES.
2. Subclass BlockTemplate and implement to_code().
3. Register: TEMPLATE_REGISTRY["my_block_type"] = MyBlockTemplate()

If a type is not registered, DefaultTemplate is used (emits a placeholder)
unless the emitter runs in strict mode.
"""

from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING, Any, Dict, Tuple, Union

from blockcpp.core.Block import Block
from blockcpp.core.Types import NameCategory, Order

if TYPE_CHECKING:
    from .context import GenerationContext
    from .emitter import CppEmitter

Value = Tuple[str, Order]

_IDENTIFIER_RE = re.compile(r"^\w+$")


def _include(ctx: "GenerationContext", header: str) -> None:
    ctx.add_definition(f"include_{header}", f"#include <{header}>")


# ── Base template ─────────────────────────────────────────────────────────────

class BlockTemplate:
    """Base class; one subclass per block type."""

    def to_code(self, block: Block, emitter: "CppEmitter", ctx: "GenerationContext") -> Union[str, Value, None]:
        raise NotImplementedError(f"{type(self).__name__} does not implement to_code()")


# ── Math ──────────────────────────────────────────────────────────────────────

def _parse_number(raw: Any) -> Union[int, float]:
    """Integers stay exact; only decimals and infinities become floats."""
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, (int, float)):
        return raw
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


class MathNumberTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        value = _parse_number(block.get_field_value("NUM") or 0)
        if isinstance(value, float):
            if math.isinf(value):
                _include(ctx, "cmath")
                return ("INFINITY", Order.ATOMIC) if value > 0 else ("-INFINITY", Order.UNARY_PREFIX)
            if value.is_integer():
                value = int(value)
        code = str(value) if isinstance(value, int) else repr(value)
        return code, Order.ATOMIC if value >= 0 else Order.UNARY_PREFIX


class MathArithmeticTemplate(BlockTemplate):
    OPERATORS: Dict[str, Tuple[str, Order]] = {
        "ADD": (" + ", Order.ADDITIVE),
        "MINUS": (" - ", Order.ADDITIVE),
        "MULTIPLY": (" * ", Order.MULTIPLICATIVE),
        "DIVIDE": (" / ", Order.MULTIPLICATIVE),
    }

    def to_code(self, block, emitter, ctx):
        op = block.get_field_value("OP")
        if op == "POWER":
            _include(ctx, "cmath")
            a = emitter.value_to_code(ctx, block, "A", Order.NONE, "0")
            b = emitter.value_to_code(ctx, block, "B", Order.NONE, "0")
            return f"pow({a}, {b})", Order.UNARY_POSTFIX

        operator, order = self.OPERATORS[op]
        a = emitter.value_to_code(ctx, block, "A", order, "0")
        b = emitter.value_to_code(ctx, block, "B", order, "0")
        return a + operator + b, order


class MathSingleTemplate(BlockTemplate):
    FUNCTIONS = {"ABS": "fabs", "ROOT": "sqrt", "LN": "log", "EXP": "exp", "LOG10": "log10"}

    def to_code(self, block, emitter, ctx):
        op = block.get_field_value("OP")
        if op == "NEG":
            arg = emitter.value_to_code(ctx, block, "NUM", Order.UNARY_PREFIX, "0")
            if arg.startswith("-"):
                # --3 is a decrement; keep the minus signs apart.
                arg = " " + arg
            return "-" + arg, Order.UNARY_PREFIX

        _include(ctx, "cmath")
        arg = emitter.value_to_code(ctx, block, "NUM", Order.NONE, "0")
        return f"{self.FUNCTIONS[op]}({arg})", Order.UNARY_POSTFIX


class MathChangeTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        delta = emitter.value_to_code(ctx, block, "DELTA", Order.ASSIGNMENT, "0")
        var = ctx.names.get_name(block.get_field_value("VAR"), NameCategory.VARIABLE)
        return f"{var} += {delta};\n"


class MathRandomIntTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        _include(ctx, "cstdlib")
        low = emitter.value_to_code(ctx, block, "FROM", Order.NONE, "0")
        high = emitter.value_to_code(ctx, block, "TO", Order.NONE, "0")
        function_name = emitter.provide_function(ctx, "math_random_int", [
            f"int {emitter.FUNCTION_NAME_PLACEHOLDER}(int a, int b) {{",
            "  if (a > b) {",
            "    // Swap a and b to ensure a is smaller.",
            "    int c = a;",
            "    a = b;",
            "    b = c;",
            "  }",
            "  return a + std::rand() % (b - a + 1);",
            "}",
        ])
        return f"{function_name}({low}, {high})", Order.UNARY_POSTFIX


# ── Logic ─────────────────────────────────────────────────────────────────────

class LogicBooleanTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        code = "true" if block.get_field_value("BOOL") == "TRUE" else "false"
        return code, Order.ATOMIC


class LogicCompareTemplate(BlockTemplate):
    OPERATORS = {"EQ": "==", "NEQ": "!=", "LT": "<", "LTE": "<=", "GT": ">", "GTE": ">="}

    def to_code(self, block, emitter, ctx):
        op = block.get_field_value("OP")
        order = Order.EQUALITY if op in ("EQ", "NEQ") else Order.RELATIONAL
        a = emitter.value_to_code(ctx, block, "A", order, "0")
        b = emitter.value_to_code(ctx, block, "B", order, "0")
        return f"{a} {self.OPERATORS[op]} {b}", order


class LogicOperationTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        if block.get_field_value("OP") == "AND":
            operator, order = "&&", Order.LOGICAL_AND
        else:
            operator, order = "||", Order.LOGICAL_OR
        a = emitter.value_to_code(ctx, block, "A", order)
        b = emitter.value_to_code(ctx, block, "B", order)
        if not a and not b:
            a = b = "false"
        else:
            # One side missing: use the identity value of the operator.
            identity = "true" if operator == "&&" else "false"
            a = a or identity
            b = b or identity
        return f"{a} {operator} {b}", order


class LogicNegateTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        arg = emitter.value_to_code(ctx, block, "BOOL", Order.UNARY_PREFIX, "true")
        return "!" + arg, Order.UNARY_PREFIX


class LogicTernaryTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        condition = emitter.value_to_code(ctx, block, "IF", Order.CONDITIONAL, "false")
        then = emitter.value_to_code(ctx, block, "THEN", Order.CONDITIONAL, "0")
        otherwise = emitter.value_to_code(ctx, block, "ELSE", Order.CONDITIONAL, "0")
        return f"{condition} ? {then} : {otherwise}", Order.CONDITIONAL


# ── Text ──────────────────────────────────────────────────────────────────────

class TextTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        return emitter.quote(block.get_field_value("TEXT") or ""), Order.ATOMIC


class TextJoinTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        count = int(block.mutation.get("items", 0))
        if count == 0:
            return "''", Order.ATOMIC
        parts = [emitter.value_to_code(ctx, block, f"ADD{i}", Order.ADDITIVE, "''") for i in range(count)]
        return " + ".join(parts), Order.ADDITIVE


class TextPrintTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        _include(ctx, "iostream")
        msg = emitter.value_to_code(ctx, block, "TEXT", Order.SHIFT, "''")
        return f"std::cout << {msg} << std::endl;\n"


# ── Variables ─────────────────────────────────────────────────────────────────

class VariablesGetTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        return ctx.names.get_name(block.get_field_value("VAR"), NameCategory.VARIABLE), Order.ATOMIC


class VariablesSetTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        value = emitter.value_to_code(ctx, block, "VALUE", Order.ASSIGNMENT, "0")
        var = ctx.names.get_name(block.get_field_value("VAR"), NameCategory.VARIABLE)
        return f"{var} = {value};\n"


# ── Control ───────────────────────────────────────────────────────────────────

class ControlsIfTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        code = ""
        n = 0
        while True:
            condition = emitter.value_to_code(ctx, block, f"IF{n}", Order.NONE, "false")
            branch = emitter.statement_to_code(ctx, block, f"DO{n}")
            code += (" else " if n > 0 else "") + f"if ({condition}) {{\n{branch}}}"
            n += 1
            if block.get_input(f"IF{n}") is None:
                break
        if block.get_input("ELSE") is not None:
            code += f" else {{\n{emitter.statement_to_code(ctx, block, 'ELSE')}}}"
        return code + "\n"


class ControlsRepeatTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        repeats = emitter.value_to_code(ctx, block, "TIMES", Order.ASSIGNMENT, "0")
        branch = emitter.statement_to_code(ctx, block, "DO")
        code = ""
        loop_var = ctx.names.get_distinct_name("count", NameCategory.VARIABLE)
        end_var = repeats
        if not _IDENTIFIER_RE.match(repeats) and not emitter.is_number(repeats):
            # Evaluate the count expression once.
            end_var = ctx.names.get_distinct_name("repeat_end", NameCategory.VARIABLE)
            code += f"int {end_var} = {repeats};\n"
        code += f"for (int {loop_var} = 0; {loop_var} < {end_var}; {loop_var}++) {{\n{branch}}}\n"
        return code


class ControlsWhileUntilTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        until = block.get_field_value("MODE") == "UNTIL"
        arg = emitter.value_to_code(ctx, block, "BOOL", Order.UNARY_PREFIX if until else Order.NONE, "false")
        if until:
            arg = "!" + arg
        branch = emitter.statement_to_code(ctx, block, "DO")
        return f"while ({arg}) {{\n{branch}}}\n"


# ── Lists ─────────────────────────────────────────────────────────────────────

class ListsCreateWithTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        count = int(block.mutation.get("items", 0))
        elements = [emitter.value_to_code(ctx, block, f"ADD{i}", Order.NONE, "0") for i in range(count)]
        return "{" + ", ".join(elements) + "}", Order.ATOMIC


class ListsGetIndexTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        where = block.get_field_value("WHERE") or "FROM_START"
        items = emitter.value_to_code(ctx, block, "VALUE", Order.UNARY_POSTFIX, "{}")
        if where == "FIRST":
            return f"{items}.front()", Order.UNARY_POSTFIX
        if where == "LAST":
            return f"{items}.back()", Order.UNARY_POSTFIX
        if where == "FROM_END":
            at = emitter.get_adjusted(ctx, block, "AT", 1, False, Order.ADDITIVE)
            return f"{items}[{items}.size() - {at}]", Order.UNARY_POSTFIX
        at = emitter.get_adjusted(ctx, block, "AT")
        return f"{items}[{at}]", Order.UNARY_POSTFIX


# ── Procedures ────────────────────────────────────────────────────────────────

class ProceduresDefTemplate(BlockTemplate):
    """Hoists the function into the definition table; emits nothing inline."""

    def to_code(self, block, emitter, ctx):
        name = ctx.names.get_name(block.get_field_value("NAME"), NameCategory.PROCEDURE)
        params = [ctx.names.get_name(p, NameCategory.VARIABLE) for p in block.mutation.get("params", [])]
        branch = emitter.statement_to_code(ctx, block, "STACK")
        code = f"void {name}({', '.join(params)}) {{\n{branch}}}"
        ctx.add_definition(f"%{name}", emitter.scrub(ctx, block, code))
        return None


class ProceduresCallTemplate(BlockTemplate):

    def to_code(self, block, emitter, ctx):
        name = ctx.names.get_name(block.get_field_value("NAME"), NameCategory.PROCEDURE)
        count = len(block.mutation.get("params", []))
        args = [emitter.value_to_code(ctx, block, f"ARG{i}", Order.NONE, "0") for i in range(count)]
        return f"{name}({', '.join(args)});\n"


# ── Default (unknown type) ────────────────────────────────────────────────────

class DefaultTemplate(BlockTemplate):
    """Fallback for unregistered block types: emits a clearly marked placeholder."""

    def to_code(self, block, emitter, ctx):
        if block.output_connection is not None:
            return "0", Order.ATOMIC
        return f"// TODO: no template for block type '{block.type}'\n"


# ── Registry ──────────────────────────────────────────────────────────────────

TEMPLATE_REGISTRY: Dict[str, BlockTemplate] = {
    "math_number":             MathNumberTemplate(),
    "math_arithmetic":         MathArithmeticTemplate(),
    "math_single":             MathSingleTemplate(),
    "math_change":             MathChangeTemplate(),
    "math_random_int":         MathRandomIntTemplate(),
    "logic_boolean":           LogicBooleanTemplate(),
    "logic_compare":           LogicCompareTemplate(),
    "logic_operation":         LogicOperationTemplate(),
    "logic_negate":            LogicNegateTemplate(),
    "logic_ternary":           LogicTernaryTemplate(),
    "text":                    TextTemplate(),
    "text_join":               TextJoinTemplate(),
    "text_print":              TextPrintTemplate(),
    "variables_get":           VariablesGetTemplate(),
    "variables_set":           VariablesSetTemplate(),
    "controls_if":             ControlsIfTemplate(),
    "controls_repeat_ext":     ControlsRepeatTemplate(),
    "controls_whileUntil":     ControlsWhileUntilTemplate(),
    "lists_create_with":       ListsCreateWithTemplate(),
    "lists_getIndex":          ListsGetIndexTemplate(),
    "procedures_defnoreturn":  ProceduresDefTemplate(),
    "procedures_callnoreturn": ProceduresCallTemplate(),
}

DEFAULT_TEMPLATE = DefaultTemplate()

