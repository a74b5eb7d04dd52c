import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auth.local.routes import router as usuarios_router
from funcionarios.routes import router as funcionarios_router
from utils.config import Settings, load_settings
from utils.db_init import ensure_schema
from utils.db_utils import Database
from utils.errors import ApiError, StoreError, StoreUnavailable

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

APP_TITLE = "API - Gerenciamento de Horas"
APP_VERSION = "1.0.0"


# FastAPI lifespan management
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🔄 Starting up...")
    if app.state.settings is None:
        app.state.settings = load_settings()
    settings: Settings = app.state.settings
    logging.getLogger().setLevel(settings.log_level)

    try:
        await ensure_schema(settings)
    except StoreUnavailable:
        if settings.bootstrap_strict:
            logger.critical("Schema bootstrap failed; refusing to start (BOOTSTRAP_STRICT=true)")
            raise
        logger.warning("Schema bootstrap failed; serving anyway (BOOTSTRAP_STRICT=false)")

    db = app.state.db or Database.from_settings(settings)
    try:
        await db.connect()
    except StoreUnavailable:
        if settings.bootstrap_strict:
            raise
        logger.warning("Connection pool unavailable; store calls will fail until restart")
    app.state.db = db

    yield
    logger.info("🔻 Shutting down...")
    await db.close()


def _error_body(message: str, details=None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        details = exc.details
        if isinstance(exc, StoreError):
            settings = request.app.state.settings
            if settings is not None and not settings.expose_error_details:
                details = None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, details),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {"loc": list(err.get("loc", [])), "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=_error_body("Dados de entrada inválidos.", details),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=_error_body("Erro interno do servidor."))


def create_app(settings: Optional[Settings] = None, db: Optional[Database] = None) -> FastAPI:
    """
    Build the application. ``settings`` are loaded from the environment at
    startup when not given; ``db`` lets callers supply a ready gateway.
    """
    app = FastAPI(
        title=APP_TITLE,
        version=APP_VERSION,
        description="Documentação da API de Funcionários, Usuários e Autenticação",
        lifespan=lifespan,
        docs_url="/api-docs",
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.db = db

    register_exception_handlers(app)

    # Include routers
    app.include_router(usuarios_router)
    app.include_router(funcionarios_router)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok", "service": APP_TITLE, "version": APP_VERSION}

    @app.get("/health/db", tags=["Health"])
    async def health_db(request: Request):
        db = request.app.state.db
        if db is None:
            return {"database": "error", "error": "not initialized"}
        ok, error = await db.healthcheck()
        return {"database": "ok" if ok else "error", "error": error}

    return app


app = create_app()


if __name__ == "__main__":
    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())
