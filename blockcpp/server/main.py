"""
blockcpp HTTP API.

Start with:
    python -m blockcpp.server.main

Or via uvicorn directly:
    uvicorn blockcpp.server.main:app --port 3001 --reload
"""
from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blockcpp.config import get_settings
from blockcpp.server.routes.compile_routes import router

settings = get_settings()

# ---------------------------------------------------------------------------
# FastAPI application
# ---------------------------------------------------------------------------

app = FastAPI(title=f"{settings.app_name} API", version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix=settings.api_prefix)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=settings.log_level_value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(
        "blockcpp.server.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    run()
