"""
blockcpp Compiler
=================
Converts a block workspace into a C++ source file.

Pipeline:
    workspace.json → [schema + deserialiser] → Workspace
    Workspace      → [emitter]               → C++ source str

Public API
----------
    from blockcpp.compiler import compile_workspace, compile_json

    source = compile_workspace(workspace)
    # or straight from a parsed JSON dict
    source = compile_json(data, strict=True)
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from blockcpp.core.Workspace import Workspace

from .deserialiser import json_to_workspace
from .emitter import CppEmitter, GeneratorError
from .schema import SchemaError


def compile_workspace(workspace: Workspace, *, strict: bool = False) -> str:
    """
    Generate the complete C++ source for `workspace`.

    Args:
        workspace: The Workspace to compile.
        strict:    Raise GeneratorError for block types without a template
                   instead of emitting placeholders.

    Returns:
        Complete source as a single string.
    """
    return CppEmitter(strict=strict).workspace_to_code(workspace)


def compile_json(data: Dict[str, Any], *, strict: bool = False, one_based_index: Optional[bool] = None) -> str:
    """Validate, deserialise and compile a parsed workspace JSON dict."""
    workspace = json_to_workspace(data, strict=strict, one_based_index=one_based_index)
    return compile_workspace(workspace, strict=strict)


__all__ = ["CppEmitter", "GeneratorError", "SchemaError", "compile_json", "compile_workspace"]
