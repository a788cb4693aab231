"""Health check endpoint, served by uvicorn inside the relay's event loop."""

from datetime import datetime, timezone

import uvicorn
from fastapi import APIRouter, FastAPI

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Liveness probe."""
    return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}


def create_app() -> FastAPI:
    app = FastAPI(title="relaybot", docs_url=None, redoc_url=None)
    app.include_router(router)
    return app


def create_server(host: str, port: int) -> uvicorn.Server:
    """uvicorn server for the health app; run with `await server.serve()`."""
    config = uvicorn.Config(create_app(), host=host, port=port, log_level="warning")
    return uvicorn.Server(config)
