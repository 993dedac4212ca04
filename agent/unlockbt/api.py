# agent/unlockbt/api.py
"""
FastAPI app — unlock listing, token views, backtest, static frontend.

The DataStore is loaded once at startup (or passed in) and kept on
app.state; handlers receive it through dependencies and never mutate it.
"""
import os
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from . import config
from .backtest.data_loader import DataStore, load_store
from .sources.dropstab import DropsTabSource
from .routers import unlock_router, backtest_router
from .routers.deps import get_store, get_source
from .monitoring.logger import get_logger

logger = get_logger("api")


# ─────────────────────────────────────────────
# Error responses: {"error": "<message>"}
# ─────────────────────────────────────────────

async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.warning("Rejected request body", path=request.url.path, error=message)
    return JSONResponse(status_code=400, content={"error": message})


# ─────────────────────────────────────────────
# CORS: every response, OPTIONS answered directly
# ─────────────────────────────────────────────

CORS_HEADERS = {
    "Access-Control-Allow-Origin":  "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


async def _cors(request: Request, call_next) -> Response:
    if request.method == "OPTIONS":
        response = Response(status_code=200)
    else:
        response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


# ─────────────────────────────────────────────
# Health
# ─────────────────────────────────────────────

def health(
    store: DataStore = Depends(get_store),
    source: DropsTabSource = Depends(get_source),
) -> Dict[str, Any]:
    return {
        "ok":                  True,
        "unlocks":             len(store.unlocks),
        "tokens":              len(store.prices),
        "dropstab_configured": source.configured,
    }


# ─────────────────────────────────────────────
# App factory
# ─────────────────────────────────────────────

def create_app(
    store: Optional[DataStore] = None,
    source: Optional[DropsTabSource] = None,
    public_dir: Optional[str] = None,
) -> FastAPI:
    app = FastAPI(title="Token Unlock Backtester")
    app.state.store  = store
    app.state.source = source

    app.add_middleware(BaseHTTPMiddleware, dispatch=_cors)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    app.include_router(unlock_router)
    app.include_router(backtest_router)
    app.add_api_route("/health", health, methods=["GET"])

    @app.on_event("startup")
    def _startup() -> None:
        if app.state.store is None:
            app.state.store = load_store()
        if app.state.source is None:
            app.state.source = DropsTabSource()
        logger.info(
            "Startup complete",
            unlocks=len(app.state.store.unlocks),
            tokens=len(app.state.store.prices),
            dropstab=app.state.source.configured,
        )

    # Mounted last so /api/* and /health win over static paths
    public_dir = public_dir or config.PUBLIC_DIR
    if os.path.isdir(public_dir):
        app.mount("/", StaticFiles(directory=public_dir, html=True), name="public")

    return app


app = create_app()
