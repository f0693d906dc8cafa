"""
blockcpp Compiler — C++ Source Emitter
======================================
Walks the blocks of a Workspace and emits C++-like source text.

Pipeline for one pass:

    ctx  = emitter.init(workspace)          # name registry + definition table
    body = emitter.generate(ctx, top_block)  # per-block templates, comments, next chain
    src  = emitter.finish(ctx, body)        # hoisted imports + definitions + body

`workspace_to_code()` runs all three for every top-level block.

Operator precedence
-------------------
Every value template returns `(code, Order)`.  A parent never concatenates
child code directly; it asks `value_to_code()` for the child at the order the
parent's operator demands, and the child is wrapped in parentheses when it
binds no tighter than that.
"""

from __future__ import annotations

import logging
import re
import textwrap
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple, Union

from blockcpp.core.Block import Block
from blockcpp.core.Types import InputType, NameCategory, Order
from blockcpp.core.Workspace import Workspace

from .context import GenerationContext
from .names import NameRegistry
from .templates import DEFAULT_TEMPLATE, TEMPLATE_REGISTRY, BlockTemplate

# Get a logger for this module
logger = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

# Identifiers user variables and functions must not take.  This only prevents
# accidental clobbering of built-ins; it is not a sandbox.
RESERVED_WORDS: frozenset[str] = frozenset((
    # language keywords
    "assert,break,case,catch,class,const,continue,default,do,else,enum,"
    "extends,false,final,finally,for,if,in,is,new,null,rethrow,return,super,"
    "switch,this,throw,true,try,var,void,while,with,"
    "auto,bool,char,delete,double,float,include,int,long,namespace,nullptr,"
    "operator,private,protected,public,short,signed,sizeof,static,std,struct,"
    "template,typedef,typename,union,unsigned,using,virtual,"
    # core library names
    "print,identityHashCode,identical,BidirectionalIterator,Comparable,"
    "Function,Invocation,Iterable,Iterator,List,Map,Match,num,"
    "Pattern,RegExp,Set,StackTrace,String,StringSink,Type,DateTime,"
    "Deprecated,Duration,Expando,Null,Object,RuneIterator,Runes,Stopwatch,"
    "StringBuffer,Symbol,Uri,Comparator,AbstractClassInstantiationError,"
    "ArgumentError,AssertionError,CastError,ConcurrentModificationError,"
    "CyclicInitializationError,Error,Exception,FallThroughError,"
    "FormatException,IntegerDivisionByZeroException,NoSuchMethodError,"
    "NullThrownError,OutOfMemoryError,RangeError,StackOverflowError,"
    "StateError,TypeError,UnimplementedError,UnsupportedError"
).split(","))

COMMENT_WRAP = 60
INDENT = "  "
VARIABLE_KEYWORD = "var"

# Marker replaced by the collision-free name in provide_function() sources.
FUNCTION_NAME_PLACEHOLDER = "{%FUNCTION_NAME%}"

_IMPORT_RE = re.compile(r"^(?:import|#include)\s")
_NUMBER_RE = re.compile(r"^\s*-?\d+(\.\d+)?\s*$")
_INTEGER_RE = re.compile(r"^\s*-?\d+\s*$")

# (outer, inner) pairs that never need parentheses even though the orders tie.
_ORDER_OVERRIDES = frozenset({
    (Order.UNARY_POSTFIX, Order.UNARY_POSTFIX),   # a.b().c
    (Order.LOGICAL_AND, Order.LOGICAL_AND),       # a && b && c
    (Order.LOGICAL_OR, Order.LOGICAL_OR),         # a || b || c
})

CodeResult = Union[str, Tuple[str, Order], None]


class GeneratorError(Exception):
    """Raised for contract violations by a template or an unknown block type in strict mode."""


# ── Text helpers ──────────────────────────────────────────────────────────────

def prefix_lines(text: str, prefix: str) -> str:
    """Prefix every line of `text`; a trailing newline does not start a new line."""
    return prefix + re.sub(r"\n(?!\Z)", "\n" + prefix, text)


def wrap(text: str, limit: int) -> str:
    """Word-wrap each paragraph of `text` without splitting words."""
    return "\n".join(
        textwrap.fill(line, limit, break_long_words=False, break_on_hyphens=False)
        for line in text.split("\n")
    )


def is_number(text: str) -> bool:
    return bool(_NUMBER_RE.match(text))


def needs_parens(outer: Order, inner: Order) -> bool:
    """True when an expression of order `inner` must be wrapped where `outer` is required."""
    if outer > inner:
        return False
    if outer == inner and outer in (Order.ATOMIC, Order.NONE):
        return False
    return (outer, inner) not in _ORDER_OVERRIDES


# ── Emitter ───────────────────────────────────────────────────────────────────

class CppEmitter:
    """
    Stateless C++ generator.  All per-pass state lives in the
    GenerationContext returned by init(), so one emitter can serve any number
    of passes.

    Args:
        templates:      type name → BlockTemplate.  Defaults to the built-in
                        TEMPLATE_REGISTRY.
        strict:         Raise GeneratorError for block types with no template
                        instead of emitting a placeholder.
        reserved_words: Extra identifiers to keep out of generated names.
    """

    FUNCTION_NAME_PLACEHOLDER = FUNCTION_NAME_PLACEHOLDER
    INDENT = INDENT

    is_number = staticmethod(is_number)

    def __init__(
        self,
        templates: Optional[Dict[str, BlockTemplate]] = None,
        strict: bool = False,
        reserved_words: Optional[List[str]] = None,
    ):
        self.templates: Dict[str, BlockTemplate] = dict(TEMPLATE_REGISTRY if templates is None else templates)
        self.strict = strict
        self.reserved_words = set(RESERVED_WORDS)
        if reserved_words:
            self.reserved_words.update(reserved_words)

    def register(self, type_name: str, template: BlockTemplate) -> None:
        self.templates[type_name] = template

    def get_template(self, type_name: str) -> BlockTemplate:
        template = self.templates.get(type_name)
        if template is not None:
            return template
        if self.strict:
            raise GeneratorError(f"No template registered for block type '{type_name}'")
        logger.warning(f"No template registered for block type '{type_name}', emitting placeholder")
        return DEFAULT_TEMPLATE

    # ── Pass lifecycle ────────────────────────────────────────────────────────

    def init(self, workspace: Workspace) -> GenerationContext:
        """Start a pass: fresh name registry, and the variable declarations of `workspace`."""
        ctx = GenerationContext(names=NameRegistry(self.reserved_words), workspace=workspace)

        variables = workspace.get_all_variables()
        if variables:
            names = [ctx.names.get_name(v.name, NameCategory.VARIABLE) for v in variables]
            ctx.add_definition("variables", f"{VARIABLE_KEYWORD} {', '.join(names)};")
        logger.debug(f"Initialised pass for '{workspace.name}' with {len(variables)} variable(s)")
        return ctx

    def finish(self, ctx: GenerationContext, code: str) -> str:
        """Prepend hoisted imports and definitions to `code` and clear the pass state."""
        imports: List[str] = []
        definitions: List[str] = []
        for definition in ctx.definitions.values():
            if _IMPORT_RE.match(definition):
                imports.append(definition)
            else:
                definitions.append(definition)
        ctx.clear()

        all_defs = "\n".join(imports) + "\n\n" + "\n\n".join(definitions)
        all_defs = re.sub(r"\n\n+", "\n\n", all_defs)
        return all_defs.rstrip("\n") + "\n\n\n" + code

    @contextmanager
    def generation_pass(self, workspace: Workspace) -> Iterator[GenerationContext]:
        """Scope one pass; the context is cleared on exit even if generation fails."""
        ctx = self.init(workspace)
        try:
            yield ctx
        finally:
            ctx.clear()

    def workspace_to_code(self, workspace: Workspace) -> str:
        """Generate the complete source file for every top-level block of `workspace`."""
        with self.generation_pass(workspace) as ctx:
            chunks: List[str] = []
            for block in workspace.get_top_blocks(ordered=True):
                line = self.generate(ctx, block)
                if line and block.output_connection is not None:
                    # A value block sitting on its own needs a terminator.
                    line = self.scrub_naked_value(line)
                if line:
                    chunks.append(line)
            source = self.finish(ctx, "\n".join(chunks))

        source = re.sub(r"\A\s+\n", "", source)
        source = re.sub(r"\n\s+\Z", "\n", source)
        source = re.sub(r"[ \t]+\n", "\n", source)
        return source

    # ── Block dispatch ────────────────────────────────────────────────────────

    def block_to_code(self, ctx: GenerationContext, block: Optional[Block]) -> CodeResult:
        """
        Code for `block` and every block chained after it.

        Returns a `(code, order)` tuple for value blocks and a string for
        statement blocks.  Disabled blocks are skipped.
        """
        if block is None:
            return ""
        if block.disabled:
            return self.block_to_code(ctx, block.get_next_block())

        template = self.get_template(block.type)
        code = template.to_code(block, self, ctx)
        if isinstance(code, tuple):
            return self.scrub(ctx, block, code[0]), code[1]
        if code is None:
            # The template stored its output as a definition instead.
            return ""
        return self.scrub(ctx, block, code)

    def generate(self, ctx: GenerationContext, top_block: Optional[Block]) -> str:
        """Code for the statement chain starting at `top_block`."""
        code = self.block_to_code(ctx, top_block)
        if isinstance(code, tuple):
            return code[0]
        return code or ""

    def value_to_code(self, ctx: GenerationContext, block: Block, name: str, order: Order, default: str = "") -> str:
        """
        Code for the expression plugged into value input `name`.

        `order` is the loosest precedence the surrounding operator can accept
        without parentheses.  Returns `default` when nothing is connected.
        """
        if not isinstance(order, Order):
            raise TypeError(f"Expecting an Order for input '{name}' of '{block.type}', got {order!r}")

        target = block.get_input_target_block(name)
        if target is None:
            return default
        result = self.block_to_code(ctx, target)
        if result == "":
            # Disabled value block.
            return default
        if not isinstance(result, tuple):
            raise GeneratorError(
                f"Expecting (code, order) from value block '{target.type}', got {type(result).__name__}"
            )

        code, inner_order = result
        if not code:
            return default
        if needs_parens(order, inner_order):
            code = f"({code})"
        return code

    def statement_to_code(self, ctx: GenerationContext, block: Block, name: str) -> str:
        """Indented code for the statement chain plugged into statement input `name`."""
        code = self.generate(ctx, block.get_input_target_block(name))
        if code:
            code = prefix_lines(code, INDENT)
        return code

    def get_adjusted(
        self,
        ctx: GenerationContext,
        block: Block,
        name: str,
        delta: int = 0,
        negate: bool = False,
        order: Optional[Order] = None,
    ) -> str:
        """
        Index expression for value input `name`, shifted by `delta` and
        optionally negated.

        Numeric literals are folded now.  Anything else is adjusted in the
        emitted code and parenthesised when `order` is not looser than the
        resulting `+`/`-` or unary minus.  One-based workspaces shift every
        index down by one.
        """
        order = Order.NONE if order is None else order
        one_based = ctx.options.one_based_index
        if one_based:
            delta -= 1
        default_at = "1" if one_based else "0"

        if delta:
            at = self.value_to_code(ctx, block, name, Order.ADDITIVE, default_at)
        elif negate:
            at = self.value_to_code(ctx, block, name, Order.UNARY_PREFIX, default_at)
        else:
            at = self.value_to_code(ctx, block, name, order, default_at)

        if is_number(at):
            # Integer literals fold exactly; only decimals go through float.
            value = (int(at) if _INTEGER_RE.match(at) else int(float(at))) + delta
            if negate:
                value = -value
            return str(value)

        inner_order: Optional[Order] = None
        if delta > 0:
            at = f"{at} + {delta}"
            inner_order = Order.ADDITIVE
        elif delta < 0:
            at = f"{at} - {-delta}"
            inner_order = Order.ADDITIVE
        if negate:
            at = f"-({at})" if delta else f"-{at}"
            inner_order = Order.UNARY_PREFIX

        # Wrap when the caller binds at least as tightly as the adjustment; NONE never wraps.
        if inner_order is not None and order <= inner_order:
            at = f"({at})"
        return at

    # ── Comments and chaining ─────────────────────────────────────────────────

    def all_nested_comments(self, block: Block) -> str:
        """Comments on `block` and everything plugged into it, one per line."""
        comments = []
        for descendant in block.get_descendants():
            comment = descendant.get_comment_text()
            if comment:
                comments.append(comment)
        if comments:
            comments.append("")
        return "\n".join(comments)

    def scrub(self, ctx: GenerationContext, block: Block, code: str) -> str:
        """
        Attach comments to `code` and append the code of the next block.

        Inline value blocks carry no comments of their own; their parent
        statement collects them.  Comments inside nested statement inputs are
        left to those statements.
        """
        comment_code = ""
        if not block.is_inline_value():
            comment = block.get_comment_text()
            if comment:
                comment = wrap(comment, COMMENT_WRAP - 3)
                prefix = "/// " if block.is_procedure_def() else "// "
                comment_code += prefix_lines(comment + "\n", prefix)

            for row in block.inputs:
                if row.type is not InputType.VALUE:
                    continue
                child = row.connection.target_block()
                if child is not None:
                    nested = self.all_nested_comments(child)
                    if nested:
                        comment_code += prefix_lines(nested, "// ")

        next_code = self.generate(ctx, block.get_next_block())
        return comment_code + code + next_code

    # ── Literals and helpers ──────────────────────────────────────────────────

    @staticmethod
    def scrub_naked_value(line: str) -> str:
        """Terminate a value expression used as a statement."""
        return line + ";\n"

    @staticmethod
    def quote(text: str) -> str:
        """Encode `text` as a single-quoted literal.  Backslashes are escaped first."""
        text = (text.replace("\\", "\\\\")
                    .replace("\n", "\\n")
                    .replace("$", "\\$")
                    .replace("'", "\\'"))
        return f"'{text}'"

    def provide_function(self, ctx: GenerationContext, desired_name: str, lines: List[str]) -> str:
        """
        Hoist a helper function once per pass and return its emitted name.

        `lines` may use FUNCTION_NAME_PLACEHOLDER wherever the function refers
        to itself.
        """
        if desired_name not in ctx.definitions:
            function_name = ctx.names.get_distinct_name(desired_name, NameCategory.PROCEDURE)
            ctx.function_names[desired_name] = function_name
            source = "\n".join(lines).replace(FUNCTION_NAME_PLACEHOLDER, function_name)
            ctx.add_definition(desired_name, source)
            logger.debug(f"Provided helper '{desired_name}' as '{function_name}'")
        return ctx.function_names[desired_name]
