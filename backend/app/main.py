"""
Khata Backend: customers and their debit/credit ledger.

ARCHITECTURE:
- FastAPI: JSON API for the admin panel and the customer portal
- SQLAlchemy: customers/entries store (PostgreSQL in production, SQLite locally)
- reportlab: khata PDF export
- smtplib: emailing the PDF to the customer

Balances are always derived from entries, never stored.
"""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from app.api.routes import customers, portal
from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.init_db import init_db
from app.db.session import create_db_engine, create_session_factory

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(session_factory: Optional[sessionmaker] = None) -> FastAPI:
    """
    Build the application.

    With no ``session_factory`` the store is opened from ``DATABASE_URL`` at
    startup; tests pass their own factory instead.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if session_factory is not None:
            app.state.session_factory = session_factory
            yield
            return

        if not settings.DATABASE_URL:
            logger.critical("DATABASE_URL is not set")
            raise RuntimeError("DATABASE_URL is not set")

        engine = create_db_engine(settings.DATABASE_URL)
        logger.info("Initializing database...")
        init_db(engine)
        logger.info("Connected to database")
        app.state.session_factory = create_session_factory(engine)
        yield

    app = FastAPI(
        title="Khata API",
        description="Customer ledgers: debit/credit entries, portal lookup, PDF export and email.",
        version="0.1.0",
        lifespan=lifespan,
    )
    if session_factory is not None:
        app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.CORS_ORIGIN],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
        )
        return response

    register_exception_handlers(app)

    app.include_router(customers.router, prefix="/api/customers", tags=["customers"])
    app.include_router(portal.router, prefix="/api/portal", tags=["portal"])

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
