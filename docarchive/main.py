
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from docarchive.middleware.ratelimit import RateLimitMiddleware, make_key_func
from docarchive.config import settings
from docarchive.db.session import init_db
from docarchive.errors import ArchiveError, StorageFailure, Unauthenticated
from docarchive.utils.security import get_token_issuer
from docarchive.auth.routes import router as auth_router
from docarchive.documents.routes import router as documents_router
from docarchive.external.routes import router as external_router

logger = logging.getLogger(__name__)

def configure_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

def register_error_handlers(app: FastAPI):
    @app.exception_handler(ArchiveError)
    async def archive_error(request: Request, exc: ArchiveError):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors(include_url=False, include_context=False))})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, exc: SQLAlchemyError):
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc, exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": StorageFailure.detail})

def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        window_seconds=settings.rate_limit_window_seconds,
        max_calls=settings.rate_limit_max_calls,
        key_func=make_key_func(get_token_issuer),
        include_path_prefixes=("/auth/login", "/auth/register", "/external"),
    )

    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(documents_router)
    app.include_router(external_router)

    @app.on_event("startup")
    def on_startup():
        init_db()

    @app.get("/", tags=["root"])
    def root():
        return {"name": settings.app_name, "env": settings.app_env}

    @app.get("/health", tags=["root"])
    def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app

app = create_app()
