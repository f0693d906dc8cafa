"""
blockcpp Compiler — JSON Deserialiser
=====================================
Converts a serialised workspace JSON file (or dict) into a live Workspace of
connected Blocks ready for the emitter.

Pipeline
--------
    workspace.json  →  [schema.validate]              →  dict
    dict            →  [deserialiser.json_to_workspace] →  Workspace
    Workspace       →  [emitter.workspace_to_code]      →  C++ source str

See compiler/schema.py for the format.

Shape inference
---------------
Known block types get their sockets from core/BlockShapes.py.  Unknown types
(allowed unless strict) are shaped from where they appear: a block plugged
into a value socket gets an output plug, anything else becomes a statement.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from blockcpp.core.Block import Block
from blockcpp.core.BlockShapes import BLOCK_SHAPES, is_known_type
from blockcpp.core.Types import InputType
from blockcpp.core.Workspace import Workspace, WorkspaceOptions

from .schema import validate

# Get a logger for this module
logger = logging.getLogger(__name__)


# ── Block construction ────────────────────────────────────────────────────────

def _is_value_block(data: Dict[str, Any]) -> bool:
    shape = BLOCK_SHAPES.get(data["type"])
    return shape is not None and "output" in shape


def _build_unknown(workspace: Workspace, data: Dict[str, Any], as_value: bool) -> Block:
    block = Block(workspace, data["type"], data.get("id"))
    block.mutation.update(data.get("mutation", {}))
    if as_value:
        block.set_output()
    else:
        block.set_previous_statement()
        block.set_next_statement()
    for name, child in data.get("inputs", {}).items():
        if _is_value_block(child):
            block.append_value_input(name)
        else:
            block.append_statement_input(name)
    logger.debug(f"Inferred shape for unknown block type '{block.type}' (value={as_value})")
    return workspace.add_block(block)


def _build_block(workspace: Workspace, data: Dict[str, Any], as_value: bool = False) -> Block:
    if is_known_type(data["type"]):
        block = workspace.new_block(data["type"], data.get("id"), data.get("mutation"))
    else:
        block = _build_unknown(workspace, data, as_value)

    block.fields.update(data.get("fields", {}))
    block.set_comment_text(data.get("comment"))
    block.disabled = bool(data.get("disabled", False))
    block.x = data.get("x", 0)
    block.y = data.get("y", 0)

    for name, child_data in data.get("inputs", {}).items():
        row = block.get_input(name)
        if row is None or row.connection is None:
            raise ValueError(f"Block '{block.type}' has no input socket named '{name}'")
        child = _build_block(workspace, child_data, as_value=row.type is InputType.VALUE)
        block.connect_input(name, child)

    next_data = data.get("next")
    if next_data is not None:
        block.connect_next(_build_block(workspace, next_data))

    var_name = block.get_field_value("VAR")
    if isinstance(var_name, str) and var_name:
        # Variables used by blocks are implicitly declared.
        workspace.create_variable(var_name)
    return block


# ── Public API ────────────────────────────────────────────────────────────────

def json_to_workspace(data: Dict[str, Any], *, strict: bool = False, one_based_index: Optional[bool] = None) -> Workspace:
    """
    Build a Workspace from a parsed workspace JSON dict.

    Args:
        data:            Parsed JSON (validated here before building).
        strict:          Reject unknown block types.
        one_based_index: Overrides `options.one_based_index` when not None.

    Raises:
        SchemaError: If the JSON structure is invalid.
        ValueError:  If blocks cannot be connected as described.
    """
    validate(data, strict=strict)

    options = WorkspaceOptions(**{k: v for k, v in data.get("options", {}).items() if k == "one_based_index"})
    if one_based_index is not None:
        options.one_based_index = one_based_index
    workspace = Workspace(data["name"], options)

    for variable in data.get("variables", []):
        workspace.create_variable(variable["name"], variable.get("type", ""), variable.get("id"))

    for block_data in data["blocks"]:
        _build_block(workspace, block_data)

    logger.info(f"Loaded workspace '{workspace.name}': {len(workspace.blocks)} blocks, {len(workspace.variables)} variables")
    return workspace


def load_workspace(path: Union[str, Path], *, strict: bool = False, one_based_index: Optional[bool] = None) -> Workspace:
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    return json_to_workspace(data, strict=strict, one_based_index=one_based_index)


__all__ = ["json_to_workspace", "load_workspace"]
