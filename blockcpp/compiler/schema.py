"""
blockcpp Compiler — Workspace JSON Schema + Validator
=====================================================
Defines the canonical serialisation format for block workspaces and provides
a lightweight validator that runs without any third-party JSON Schema library.

Canonical JSON format
---------------------

    {
      "name":      "blink",                          // human label (str, required)
      "options":   { "one_based_index": false },      // (dict, optional)
      "variables": [ { "name": "count" } ],           // declared variables (list, optional)
      "blocks": [                                     // top-level blocks (list, required)
        {
          "id":       "b1",                           // unique id (str, optional)
          "type":     "variables_set",                // registered type name (str, required)
          "fields":   { "VAR": "count" },             // field values (dict, optional)
          "mutation": {},                             // per-instance shape data (dict, optional)
          "comment":  "Reset the counter",            // (str, optional)
          "disabled": false,                          // (bool, optional)
          "x": 10, "y": 20,                           // position (number, optional)
          "inputs": {                                 // socket name → nested block (dict, optional)
            "VALUE": { "type": "math_number", "fields": { "NUM": 0 } }
          },
          "next": { "type": "text_print", ... }       // following statement (dict, optional)
        }
      ]
    }

Nested blocks use the same format.  Positions only matter for top-level
blocks, which are emitted top-to-bottom.

For known block types the field values are checked too: dropdown fields must
hold one of the choices listed in BLOCK_SHAPES, `VAR` and `NAME` must be
non-empty strings, `NUM` must be numeric and `TEXT` a string.
"""

from __future__ import annotations

import json
import logging
import warnings
from pathlib import Path
from typing import Any, Dict, List, Set, Union

from blockcpp.core.BlockShapes import BLOCK_SHAPES, is_known_type

# Get a logger for this module
logger = logging.getLogger(__name__)


# ── Validation helpers ────────────────────────────────────────────────────────

class SchemaError(ValueError):
    """Raised when workspace JSON fails structural validation."""


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise SchemaError(message)


def _require_keys(obj: Dict, keys: List[str], context: str) -> None:
    for key in keys:
        _require(key in obj, f"{context}: missing required field '{key}'")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def _validate_fields(fields: Dict[str, Any], shape: Dict[str, Any], ctx: str) -> None:
    for name, allowed in shape.get("choices", {}).items():
        if name in fields:
            _require(fields[name] in allowed, f"{ctx}.fields.{name} must be one of {', '.join(allowed)}")
    for name in ("VAR", "NAME"):
        if name in fields:
            _require(isinstance(fields[name], str) and fields[name] != "", f"{ctx}.fields.{name} must be a non-empty string")
    if "NUM" in fields:
        _require(_is_number(fields["NUM"]), f"{ctx}.fields.NUM must be a number")
    if "TEXT" in fields:
        _require(isinstance(fields["TEXT"], str), f"{ctx}.fields.TEXT must be a string")


def _validate_mutation(mutation: Dict[str, Any], ctx: str) -> None:
    for key in ("items", "elseif"):
        if key in mutation:
            value = mutation[key]
            _require(isinstance(value, int) and not isinstance(value, bool) and value >= 0,
                     f"{ctx}.mutation.{key} must be a non-negative integer")
    if "else" in mutation:
        _require(isinstance(mutation["else"], bool), f"{ctx}.mutation.else must be a boolean")
    if "params" in mutation:
        params = mutation["params"]
        _require(isinstance(params, list) and all(isinstance(p, str) and p for p in params),
                 f"{ctx}.mutation.params must be a list of non-empty strings")


def _validate_block(block: Any, ctx: str, seen_ids: Set[str], strict: bool) -> None:
    _require(isinstance(block, dict), f"{ctx}: each block must be a JSON object")
    _require_keys(block, ["type"], ctx)
    _require(isinstance(block["type"], str), f"{ctx}.type must be a string")

    if "id" in block:
        _require(isinstance(block["id"], str), f"{ctx}.id must be a string")
        _require(block["id"] not in seen_ids, f"{ctx}: duplicate block id '{block['id']}'")
        seen_ids.add(block["id"])

    for key in ("fields", "mutation", "inputs"):
        if key in block:
            _require(isinstance(block[key], dict), f"{ctx}.{key} must be an object")
    if "comment" in block:
        _require(block["comment"] is None or isinstance(block["comment"], str), f"{ctx}.comment must be a string")
    if "disabled" in block:
        _require(isinstance(block["disabled"], bool), f"{ctx}.disabled must be a boolean")
    for key in ("x", "y"):
        if key in block:
            _require(isinstance(block[key], (int, float)), f"{ctx}.{key} must be a number")

    type_name = block["type"]
    if not is_known_type(type_name):
        msg = f"{ctx}: unknown block type '{type_name}'"
        if strict:
            raise SchemaError(msg)
        warnings.warn(msg + " (compilation will emit a placeholder)", stacklevel=4)
    else:
        _validate_fields(block.get("fields", {}), BLOCK_SHAPES[type_name], ctx)
        _validate_mutation(block.get("mutation", {}), ctx)

    for name, child in block.get("inputs", {}).items():
        _validate_block(child, f"{ctx}.inputs.{name}", seen_ids, strict)
    if block.get("next") is not None:
        _validate_block(block["next"], f"{ctx}.next", seen_ids, strict)


# ── Public validator ─────────────────────────────────────────────────────────

def validate(data: Dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a parsed workspace JSON dict.

    Args:
        data:   A pre-parsed dict (result of json.load / json.loads).
        strict: When True, raise SchemaError for unknown block types.
                When False (default), unknown types produce a warning.

    Raises:
        SchemaError: On any structural violation.
    """
    _require(isinstance(data, dict), "workspace JSON must be a JSON object at the top level")
    _require_keys(data, ["name", "blocks"], "workspace root")

    _require(isinstance(data["name"], str), "name must be a string")
    _require(isinstance(data["blocks"], list), "blocks must be a list")

    options = data.get("options", {})
    _require(isinstance(options, dict), "options must be an object")
    if "one_based_index" in options:
        _require(isinstance(options["one_based_index"], bool), "options.one_based_index must be a boolean")

    # ── Validate variables ──────────────────────────────────────────────────

    variables = data.get("variables", [])
    _require(isinstance(variables, list), "variables must be a list")
    for i, variable in enumerate(variables):
        ctx = f"variables[{i}]"
        _require(isinstance(variable, dict), f"{ctx}: each variable must be a JSON object")
        _require_keys(variable, ["name"], ctx)
        _require(isinstance(variable["name"], str) and variable["name"] != "", f"{ctx}.name must be a non-empty string")

    # ── Validate blocks ─────────────────────────────────────────────────────

    seen_ids: Set[str] = set()
    for i, block in enumerate(data["blocks"]):
        _validate_block(block, f"blocks[{i}]", seen_ids, strict)


def validate_file(path: Union[str, Path], *, strict: bool = False) -> Dict[str, Any]:
    """
    Load and validate a workspace JSON file.

    Returns:
        The parsed dict on success.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        SchemaError: If the workspace structure is invalid.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    validate(data, strict=strict)
    logger.debug(f"Validated workspace JSON {path}")
    return data


__all__ = ["SchemaError", "validate", "validate_file"]
