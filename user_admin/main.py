from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from user_admin import deps
from user_admin.errors import ConfigurationError, DispatchError
from user_admin.logging_config import configure_logging
from user_admin.responses import envelope_response
from user_admin.routers.users import router as users_router
from user_admin.settings import Settings, get_settings
from user_admin.user_store import bootstrap_store

_startup_settings = get_settings()

configure_logging(_startup_settings.log_level)

logger = logging.getLogger("user_admin")

APP_VERSION = "1.0.0"

_HTTP_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A missing DATABASE_URL or an unreachable database aborts startup.
    try:
        bootstrap_store(deps.get_settings_dep())
    except Exception:
        logger.critical("Could not connect to the database; refusing to start")
        raise
    yield


app = FastAPI(title="User Admin", version=APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_startup_settings.cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(users_router)


@app.exception_handler(DispatchError)
async def dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    return envelope_response(exc.status_code, exc.message)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Request rejected, store is not configured: %s", exc)
    return envelope_response(500, str(exc))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = _HTTP_MESSAGES.get(exc.status_code) or str(exc.detail)
    response = envelope_response(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Only reachable for bodies that are not valid JSON.
    return envelope_response(400, "Invalid request")


@app.get("/")
@app.get("/index.html")
def index(settings: Settings = Depends(deps.get_settings_dep)):
    path = settings.static_dir / "index.html"
    if not path.is_file():
        return envelope_response(404, "Not found")
    return FileResponse(path, media_type="text/html")


@app.get("/healthz")
def healthz():
    return JSONResponse({"ok": True, "service": "user-admin", "version": APP_VERSION})


def serve() -> None:
    """Console entry point: run the API under uvicorn on HOST:PORT."""
    s = get_settings()
    logger.info("Starting server on port %s with CORS enabled", s.port)
    uvicorn.run(app, host=s.host, port=s.port, log_level=(s.log_level or "info").lower())
