"""FastAPI app creation, CORS, global state, and helper functions."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..app import Trackline

logger = logging.getLogger(__name__)

_app: Optional[Trackline] = None


def _try_load_app():
    """Attempt to load Trackline from config. Logs and stays unset on failure."""
    global _app
    try:
        _app = Trackline()
    except Exception as e:
        logger.warning(f"Failed to load config: {e}")
        _app = None


def require_app() -> Trackline:
    """Raise 503 if the app cannot be loaded. Lazy-loads on first call."""
    global _app
    if _app is None:
        _try_load_app()
    if _app is None:
        raise HTTPException(503, "Tracking service is not configured")
    return _app


def set_app(new_app: Optional[Trackline]):
    """Set the global _app instance."""
    global _app
    _app = new_app


def get_app_instance() -> Optional[Trackline]:
    """Get the current global _app instance (may be None)."""
    return _app


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def success_response(**fields: Any) -> Dict[str, Any]:
    return {"success": True, **fields}


@asynccontextmanager
async def _lifespan(_api: FastAPI):
    yield
    if _app is not None:
        await _app.shutdown()


# --- FastAPI app creation (after all helpers are defined to avoid circular imports) ---

def _create_api() -> FastAPI:
    """Create and configure the FastAPI app with routes."""
    _api = FastAPI(title="Trackline", version="0.1.0", lifespan=_lifespan)

    allowed_origins_str = os.getenv(
        "TRACKLINE_ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    )
    allowed_origins = [o.strip() for o in allowed_origins_str.split(",") if o.strip()]
    _api.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routes import register_routes
    register_routes(_api)
    return _api


api = _create_api()
