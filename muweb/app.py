import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from muweb import __version__
from muweb.config import is_development, load_config
from muweb.database import (
    SchemaCapabilities,
    check_connection,
    create_db_engine,
    create_session_factory,
    probe_schema,
)
from muweb.envelope import failure
from muweb.errors import InternalError, MuWebError
from muweb.routes import admin, auth, downloads, guilds, news, players, rankings, server, user

log = logging.getLogger(__name__)

ROUTERS = (auth, rankings, players, guilds, news, server, downloads, user, admin)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.capabilities = probe_schema(app.state.engine)
    log.info("MU web API %s started (%s)", __version__, app.state.config.get("environment"))
    yield
    app.state.engine.dispose()
    log.info("Database pool closed")


def register_error_handlers(app: FastAPI):
    development = is_development(app.state.config)

    @app.exception_handler(MuWebError)
    async def muweb_error(request: Request, exc: MuWebError):
        message = exc.message
        if isinstance(exc, InternalError) and development and exc.__cause__ is not None:
            message = f"{exc.message}: {exc.__cause__}"
        return JSONResponse(status_code=exc.status_code, content=failure(message))

    @app.exception_handler(RequestValidationError)
    async def invalid_payload(request: Request, exc: RequestValidationError):
        log.debug("Invalid payload for %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content=failure("Invalid request payload"))

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content=failure(message))

    @app.exception_handler(SQLAlchemyError)
    async def database_error(request: Request, exc: SQLAlchemyError):
        log.error("Database error on %s %s: %s", request.method, request.url.path, exc)
        message = f"Database error: {exc}" if development else "Internal server error"
        return JSONResponse(status_code=500, content=failure(message))

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        log.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = str(exc) if development else "Internal server error"
        return JSONResponse(status_code=500, content=failure(message))


def create_app(config=None, engine=None):
    """Build the API; tests pass their own config and engine"""
    config = config if config is not None else load_config()
    engine = engine if engine is not None else create_db_engine(config)

    app = FastAPI(title="MU Online Web API", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.capabilities = SchemaCapabilities()
    app.state.started_at = time.time()

    # Allow the website frontends
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get("cors_origins", []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    for module in ROUTERS:
        app.include_router(module.router)

    @app.get("/api/health")
    def health():
        connected = check_connection(app.state.engine)
        return JSONResponse(
            status_code=200 if connected else 503,
            content={
                "success": connected,
                "data": {
                    "status": "OK" if connected else "DEGRADED",
                    "database": "connected" if connected else "unavailable",
                    "uptime": round(time.time() - app.state.started_at, 1),
                    "environment": config.get("environment"),
                    "version": __version__,
                },
            },
        )

    return app
