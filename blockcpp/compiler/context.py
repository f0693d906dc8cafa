"""
blockcpp Compiler — Generation Context
======================================
Everything one generation pass mutates lives here rather than on the emitter,
so the emitter itself is reusable and two passes never share a half-built
definition table.

    ctx = emitter.init(workspace)
    body = emitter.generate(ctx, top_block)
    source = emitter.finish(ctx, body)      # ctx is cleared afterwards
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, TYPE_CHECKING

from blockcpp.core.Workspace import WorkspaceOptions
from .names import NameRegistry

if TYPE_CHECKING:
    from blockcpp.core.Workspace import Workspace


@dataclass
class GenerationContext:
    names: NameRegistry
    workspace: Optional["Workspace"] = None

    # Definition table: key → source text hoisted above the generated body.
    # Insertion order is preserved in the output.
    definitions: Dict[str, str] = field(default_factory=dict)

    # Desired helper-function name → collision-free emitted name.
    function_names: Dict[str, str] = field(default_factory=dict)

    @property
    def options(self) -> WorkspaceOptions:
        if self.workspace is None:
            return WorkspaceOptions()
        return self.workspace.options

    def add_definition(self, key: str, code: str) -> None:
        self.definitions[key] = code

    def clear(self) -> None:
        self.definitions.clear()
        self.function_names.clear()
        self.names.reset()
