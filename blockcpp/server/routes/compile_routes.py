"""
Compile REST routes.

All routes are mounted under the configured API prefix (default /api) by main.py.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from blockcpp.compiler import CppEmitter, GeneratorError, SchemaError
from blockcpp.compiler.deserialiser import json_to_workspace
from blockcpp.compiler.templates import TEMPLATE_REGISTRY
from blockcpp.config import get_settings
from blockcpp.core.BlockShapes import BLOCK_SHAPES

logger = logging.getLogger(__name__)

router = APIRouter()


# ── POST /compile ─────────────────────────────────────────────────────────────

class CompileBody(BaseModel):
    workspace: Dict[str, Any]
    strict: bool = False
    one_based_index: Optional[bool] = None


@router.post("/compile")
async def compile_workspace(body: CompileBody) -> Dict[str, Any]:
    try:
        workspace = json_to_workspace(body.workspace, strict=body.strict, one_based_index=body.one_based_index)
    except SchemaError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        code = CppEmitter(strict=body.strict).workspace_to_code(workspace)
    except GeneratorError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    logger.info(f"Compiled workspace '{workspace.name}' ({len(workspace.blocks)} blocks)")
    return {"name": workspace.name, "blocks": len(workspace.blocks), "code": code}


# ── GET /block-types ──────────────────────────────────────────────────────────

@router.get("/block-types")
async def list_block_types() -> List[Dict[str, Any]]:
    return [
        {"type": type_name, "value": "output" in shape, "compilable": type_name in TEMPLATE_REGISTRY}
        for type_name, shape in BLOCK_SHAPES.items()
    ]


# ── GET /config ───────────────────────────────────────────────────────────────

@router.get("/config")
async def get_config() -> Dict[str, Any]:
    settings = get_settings()
    return {"appName": settings.app_name, "baseUrl": settings.base_url}
