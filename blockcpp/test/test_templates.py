import pytest

from blockcpp.compiler.emitter import CppEmitter
from blockcpp.core.Block import Block
from blockcpp.core.Types import Order
from blockcpp.core.Workspace import Workspace, WorkspaceOptions


@pytest.fixture
def ws():
    return Workspace("templates")


@pytest.fixture
def emitter():
    return CppEmitter()


def value(emitter, ws, block):
    """(code, order) for a single value block."""
    return emitter.block_to_code(emitter.init(ws), block)


def statement(emitter, ws, block):
    return emitter.generate(emitter.init(ws), block)


def plug(block, **children):
    for name, child in children.items():
        block.connect_input(name, child)
    return block


def var(ws, name):
    return ws.new_block("variables_get", VAR=name)


def number(ws, n):
    return ws.new_block("math_number", NUM=n)


def say(ws, message):
    return plug(ws.new_block("text_print"), TEXT=ws.new_block("text", TEXT=message))


class TestMath:

    @pytest.mark.parametrize("num, expected", [
        (3, ("3", Order.ATOMIC)),
        (3.0, ("3", Order.ATOMIC)),
        (2.5, ("2.5", Order.ATOMIC)),
        ("7", ("7", Order.ATOMIC)),
        (-4, ("-4", Order.UNARY_PREFIX)),
        (9007199254740993, ("9007199254740993", Order.ATOMIC)),
        ("9007199254740993", ("9007199254740993", Order.ATOMIC)),
        ("-2.0", ("-2", Order.UNARY_PREFIX)),
    ])
    def test_number(self, emitter, ws, num, expected):
        assert value(emitter, ws, number(ws, num)) == expected

    def test_infinity(self, emitter, ws):
        ctx = emitter.init(ws)
        assert emitter.block_to_code(ctx, number(ws, float("inf"))) == ("INFINITY", Order.ATOMIC)
        assert ctx.definitions["include_cmath"] == "#include <cmath>"

    def test_arithmetic_defaults(self, emitter, ws):
        assert value(emitter, ws, ws.new_block("math_arithmetic", OP="DIVIDE")) == ("0 / 0", Order.MULTIPLICATIVE)

    def test_power(self, emitter, ws):
        block = plug(ws.new_block("math_arithmetic", OP="POWER"),
                     A=var(ws, "x"),
                     B=plug(ws.new_block("math_arithmetic"), A=number(ws, 1), B=number(ws, 2)))
        ctx = emitter.init(ws)
        assert emitter.block_to_code(ctx, block) == ("pow(x, 1 + 2)", Order.UNARY_POSTFIX)
        assert "include_cmath" in ctx.definitions

    def test_negate_negative_literal(self, emitter, ws):
        """A negated negative literal never produces a decrement operator."""
        block = plug(ws.new_block("math_single", OP="NEG"), NUM=number(ws, -1))
        code, order = value(emitter, ws, block)
        assert code == "-(-1)"
        assert "--" not in code
        assert order == Order.UNARY_PREFIX

    def test_negate_variable(self, emitter, ws):
        block = plug(ws.new_block("math_single", OP="NEG"), NUM=var(ws, "x"))
        assert value(emitter, ws, block) == ("-x", Order.UNARY_PREFIX)

    def test_single_function(self, emitter, ws):
        block = plug(ws.new_block("math_single", OP="ROOT"), NUM=var(ws, "x"))
        assert value(emitter, ws, block) == ("sqrt(x)", Order.UNARY_POSTFIX)

    def test_change(self, emitter, ws):
        block = plug(ws.new_block("math_change", VAR="x"), DELTA=number(ws, 2))
        assert statement(emitter, ws, block) == "x += 2;\n"
        assert statement(emitter, ws, ws.new_block("math_change", VAR="y")) == "y += 0;\n"


class TestLogic:

    def test_boolean(self, emitter, ws):
        assert value(emitter, ws, ws.new_block("logic_boolean")) == ("true", Order.ATOMIC)
        assert value(emitter, ws, ws.new_block("logic_boolean", BOOL="FALSE")) == ("false", Order.ATOMIC)

    def test_compare(self, emitter, ws):
        eq = plug(ws.new_block("logic_compare"), A=var(ws, "a"), B=var(ws, "b"))
        assert value(emitter, ws, eq) == ("a == b", Order.EQUALITY)

        sum_ = plug(ws.new_block("math_arithmetic"), A=var(ws, "a"), B=var(ws, "b"))
        lt = plug(ws.new_block("logic_compare", OP="LT"), A=sum_, B=var(ws, "c"))
        assert value(emitter, ws, lt) == ("a + b < c", Order.RELATIONAL)

    def test_operation_missing_operands(self, emitter, ws):
        """A missing side takes the operator's identity value."""
        assert value(emitter, ws, ws.new_block("logic_operation"))[0] == "false && false"

        and_ = plug(ws.new_block("logic_operation"), A=var(ws, "a"))
        assert value(emitter, ws, and_)[0] == "a && true"

        or_ = plug(ws.new_block("logic_operation", OP="OR"), B=var(ws, "b"))
        assert value(emitter, ws, or_)[0] == "false || b"

    def test_or_inside_and_parenthesised(self, emitter, ws):
        or_ = plug(ws.new_block("logic_operation", OP="OR"), A=var(ws, "a"), B=var(ws, "b"))
        and_ = plug(ws.new_block("logic_operation"), A=or_, B=var(ws, "c"))
        assert value(emitter, ws, and_)[0] == "(a || b) && c"

    def test_negate(self, emitter, ws):
        assert value(emitter, ws, ws.new_block("logic_negate")) == ("!true", Order.UNARY_PREFIX)

        eq = plug(ws.new_block("logic_compare"), A=var(ws, "a"), B=var(ws, "b"))
        assert value(emitter, ws, plug(ws.new_block("logic_negate"), BOOL=eq))[0] == "!(a == b)"

    def test_ternary(self, emitter, ws):
        block = plug(ws.new_block("logic_ternary"), IF=var(ws, "c"), THEN=number(ws, 1), ELSE=number(ws, 2))
        assert value(emitter, ws, block) == ("c ? 1 : 2", Order.CONDITIONAL)


class TestText:

    def test_text_quoted(self, emitter, ws):
        assert value(emitter, ws, ws.new_block("text", TEXT="it's")) == ("'it\\'s'", Order.ATOMIC)

    def test_join(self, emitter, ws):
        assert value(emitter, ws, ws.new_block("text_join")) == ("''", Order.ATOMIC)

        join = ws.new_block("text_join", mutation={"items": 3})
        plug(join, ADD0=ws.new_block("text", TEXT="a"), ADD2=var(ws, "x"))
        assert value(emitter, ws, join) == ("'a' + '' + x", Order.ADDITIVE)

    def test_print(self, emitter, ws):
        ctx = emitter.init(ws)
        assert emitter.generate(ctx, say(ws, "hi")) == "std::cout << 'hi' << std::endl;\n"
        assert ctx.definitions == {"include_iostream": "#include <iostream>"}

    def test_print_empty(self, emitter, ws):
        assert statement(emitter, ws, ws.new_block("text_print")) == "std::cout << '' << std::endl;\n"


class TestVariables:

    def test_get_and_set(self, emitter, ws):
        assert value(emitter, ws, var(ws, "total")) == ("total", Order.ATOMIC)
        setter = plug(ws.new_block("variables_set", VAR="total"), VALUE=number(ws, 5))
        assert statement(emitter, ws, setter) == "total = 5;\n"

    def test_set_conditional_not_parenthesised(self, emitter, ws):
        ternary = plug(ws.new_block("logic_ternary"), IF=var(ws, "c"), THEN=number(ws, 1), ELSE=number(ws, 2))
        setter = plug(ws.new_block("variables_set", VAR="x"), VALUE=ternary)
        assert statement(emitter, ws, setter) == "x = c ? 1 : 2;\n"

    def test_reserved_name(self, emitter, ws):
        assert value(emitter, ws, var(ws, "while"))[0] == "while2"


class TestControls:

    def test_if_elseif_else(self, emitter, ws):
        block = ws.new_block("controls_if", mutation={"elseif": 1, "else": True})
        plug(block,
             IF0=var(ws, "a"), DO0=say(ws, "one"),
             IF1=var(ws, "b"), DO1=say(ws, "two"),
             ELSE=say(ws, "three"))

        assert statement(emitter, ws, block) == (
            "if (a) {\n"
            "  std::cout << 'one' << std::endl;\n"
            "} else if (b) {\n"
            "  std::cout << 'two' << std::endl;\n"
            "} else {\n"
            "  std::cout << 'three' << std::endl;\n"
            "}\n"
        )

    def test_if_empty(self, emitter, ws):
        assert statement(emitter, ws, ws.new_block("controls_if")) == "if (false) {\n}\n"

    def test_repeat_literal(self, emitter, ws):
        block = plug(ws.new_block("controls_repeat_ext"), TIMES=number(ws, 3), DO=say(ws, "x"))
        assert statement(emitter, ws, block) == (
            "for (int count = 0; count < 3; count++) {\n"
            "  std::cout << 'x' << std::endl;\n"
            "}\n"
        )

    def test_repeat_expression_evaluated_once(self, emitter, ws):
        times = plug(ws.new_block("math_arithmetic"), A=var(ws, "n"), B=number(ws, 1))
        block = plug(ws.new_block("controls_repeat_ext"), TIMES=times)
        assert statement(emitter, ws, block) == (
            "int repeat_end = n + 1;\n"
            "for (int count = 0; count < repeat_end; count++) {\n"
            "}\n"
        )

    def test_nested_repeat_distinct_counters(self, emitter, ws):
        inner = plug(ws.new_block("controls_repeat_ext"), TIMES=number(ws, 3))
        outer = plug(ws.new_block("controls_repeat_ext"), TIMES=number(ws, 2), DO=inner)
        assert statement(emitter, ws, outer) == (
            "for (int count2 = 0; count2 < 2; count2++) {\n"
            "  for (int count = 0; count < 3; count++) {\n"
            "  }\n"
            "}\n"
        )

    def test_while(self, emitter, ws):
        block = plug(ws.new_block("controls_whileUntil"), BOOL=var(ws, "running"))
        assert statement(emitter, ws, block) == "while (running) {\n}\n"

    def test_until_negates(self, emitter, ws):
        eq = plug(ws.new_block("logic_compare"), A=var(ws, "a"), B=var(ws, "b"))
        block = plug(ws.new_block("controls_whileUntil", MODE="UNTIL"), BOOL=eq)
        assert statement(emitter, ws, block) == "while (!(a == b)) {\n}\n"
        assert statement(emitter, ws, ws.new_block("controls_whileUntil", MODE="UNTIL")) == "while (!false) {\n}\n"


class TestLists:

    def test_create_with(self, emitter, ws):
        block = ws.new_block("lists_create_with", mutation={"items": 3})
        plug(block, ADD0=number(ws, 1), ADD1=number(ws, 2))
        assert value(emitter, ws, block) == ("{1, 2, 0}", Order.ATOMIC)

    @pytest.mark.parametrize("where, expected", [
        ("FIRST", "list.front()"),
        ("LAST", "list.back()"),
    ])
    def test_get_ends(self, emitter, ws, where, expected):
        block = plug(ws.new_block("lists_getIndex", WHERE=where), VALUE=var(ws, "list"))
        assert value(emitter, ws, block) == (expected, Order.UNARY_POSTFIX)

    def test_get_from_start(self, emitter, ws):
        block = plug(ws.new_block("lists_getIndex"), VALUE=var(ws, "list"), AT=number(ws, 2))
        assert value(emitter, ws, block)[0] == "list[2]"

    def test_get_from_start_one_based(self, emitter):
        ws = Workspace(options=WorkspaceOptions(one_based_index=True))
        block = plug(ws.new_block("lists_getIndex"), VALUE=var(ws, "list"), AT=number(ws, 2))
        assert value(emitter, ws, block)[0] == "list[1]"

    def test_get_from_end(self, emitter, ws):
        block = plug(ws.new_block("lists_getIndex", WHERE="FROM_END"), VALUE=var(ws, "list"), AT=var(ws, "i"))
        assert value(emitter, ws, block)[0] == "list[list.size() - (i + 1)]"

        folded = plug(ws.new_block("lists_getIndex", WHERE="FROM_END"), VALUE=var(ws, "list"), AT=number(ws, 2))
        assert value(emitter, ws, folded)[0] == "list[list.size() - 3]"


class TestGetAdjusted:

    def at_block(self, ws, child=None):
        block = ws.new_block("lists_getIndex")
        if child is not None:
            block.connect_input("AT", child)
        return block

    @pytest.mark.parametrize("delta, negate, order, expected", [
        (1, False, None, "i + 1"),
        (1, False, Order.MULTIPLICATIVE, "(i + 1)"),
        (1, False, Order.ADDITIVE, "(i + 1)"),
        (1, False, Order.RELATIONAL, "i + 1"),
        (-2, False, None, "i - 2"),
        (0, True, None, "-i"),
        (0, True, Order.UNARY_PREFIX, "(-i)"),
        (1, True, None, "-(i + 1)"),
        (0, False, None, "i"),
    ])
    def test_expression(self, emitter, ws, delta, negate, order, expected):
        block = self.at_block(ws, var(ws, "i"))
        ctx = emitter.init(ws)
        assert emitter.get_adjusted(ctx, block, "AT", delta, negate, order) == expected

    @pytest.mark.parametrize("delta, negate, expected", [
        (0, False, "3"),
        (1, False, "4"),
        (-1, False, "2"),
        (1, True, "-4"),
    ])
    def test_literal_folded(self, emitter, ws, delta, negate, expected):
        block = self.at_block(ws, number(ws, 3))
        ctx = emitter.init(ws)
        assert emitter.get_adjusted(ctx, block, "AT", delta, negate) == expected

    def test_large_literal_folded_exactly(self, emitter, ws):
        """Integers beyond float precision still fold to operand + delta."""
        block = self.at_block(ws, number(ws, 9007199254740993))
        ctx = emitter.init(ws)
        assert emitter.get_adjusted(ctx, block, "AT", 1) == "9007199254740994"
        assert emitter.get_adjusted(ctx, block, "AT", -1, True) == "-9007199254740992"

    def test_unconnected(self, emitter, ws):
        ctx = emitter.init(ws)
        assert emitter.get_adjusted(ctx, self.at_block(ws), "AT") == "0"
        assert emitter.get_adjusted(ctx, self.at_block(ws), "AT", 2) == "2"

    def test_one_based(self, emitter):
        ws = Workspace(options=WorkspaceOptions(one_based_index=True))
        ctx = emitter.init(ws)
        assert emitter.get_adjusted(ctx, self.at_block(ws, number(ws, 3)), "AT") == "2"
        assert emitter.get_adjusted(ctx, self.at_block(ws, var(ws, "i")), "AT") == "i - 1"
        assert emitter.get_adjusted(ctx, self.at_block(ws), "AT") == "0"


class TestProcedures:

    def test_definition_hoisted(self, emitter, ws):
        definition = ws.new_block("procedures_defnoreturn", NAME="add_up", mutation={"params": ["x", "y"]})
        ctx = emitter.init(ws)
        assert emitter.generate(ctx, definition) == ""
        assert ctx.definitions["%add_up"] == "void add_up(x, y) {\n}"

    def test_call_with_arguments(self, emitter, ws):
        call = ws.new_block("procedures_callnoreturn", NAME="add_up", mutation={"params": ["x", "y"]})
        call.connect_input("ARG0", number(ws, 1))
        assert statement(emitter, ws, call) == "add_up(1, 0);\n"

    def test_name_collides_with_variable(self, emitter, ws):
        """A procedure never shares its emitted name with a variable."""
        ws.create_variable("greet")
        definition = ws.new_block("procedures_defnoreturn", NAME="greet")
        call = ws.new_block("procedures_callnoreturn", NAME="greet")
        call.y = 10

        source = emitter.workspace_to_code(ws)
        assert "var greet;" in source
        assert "void greet2() {\n}" in source
        assert source.endswith("greet2();\n")
        assert definition.is_procedure_def()


class TestDefaultTemplate:

    def test_unknown_value_block(self, emitter, ws):
        block = Block(ws, "mystery_value")
        block.set_output()
        ws.add_block(block)
        assert value(emitter, ws, block) == ("0", Order.ATOMIC)
