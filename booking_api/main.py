from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
import logging

# Load environment variables as early as possible
load_dotenv()

from .core.config import Settings, settings as default_settings
from .database import build_engine, create_db_and_tables
from .exceptions import (
    BookingError,
    booking_exception_handler,
    http_exception_handler,
    request_validation_handler,
    storage_exception_handler,
)
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.persistence.memory import InMemoryStore
from .infrastructure.security.passwords import BcryptPasswordHasher
from .infrastructure.security.tokens import JwtTokenIssuer
from .middleware import (
    ErrorHandlingMiddleware,
    LoggingMiddleware,
    RateLimitMiddleware,
    RequestSizeLimitMiddleware,
    SecurityMiddleware,
)
from .routers import appointments_router, auth_router, doctors_router
from .utils import utcnow

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT
    )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    clock: Callable[[], datetime] = utcnow,
    bcrypt_rounds: int = 12,
) -> FastAPI:
    """Build the API. ``STORAGE_BACKEND=memory`` swaps the SQL repositories
    for per-app in-memory ones; ``engine`` overrides ``DATABASE_URL``."""
    settings = settings or default_settings
    configure_logging(settings)

    use_memory = settings.STORAGE_BACKEND.lower() == "memory"
    if not use_memory and engine is None:
        engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME} ({'memory' if use_memory else 'sql'} storage)")
        if not use_memory:
            create_db_and_tables(app.state.engine)
        yield
        logger.info(f"Shutting down {settings.APP_NAME}...")
        if app.state.engine is not None:
            app.state.engine.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
    )

    app.state.settings = settings
    app.state.clock = clock
    app.state.engine = None if use_memory else engine
    app.state.memory_store = InMemoryStore(clock=clock) if use_memory else None
    app.state.hasher = BcryptPasswordHasher(rounds=bcrypt_rounds)
    app.state.tokens = JwtTokenIssuer(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        expires_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    app.state.audit = StdAuditLogger()

    app.add_exception_handler(BookingError, booking_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, storage_exception_handler)

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_REQUEST_SIZE)
    app.add_middleware(RateLimitMiddleware, rate_limit=settings.RATE_LIMIT_PER_MINUTE)
    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router)
    app.include_router(doctors_router.router)
    app.include_router(appointments_router.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "booking_api.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower()
    )
