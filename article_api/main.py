import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from article_api import __version__
from article_api.config import Settings, settings
from article_api.database import create_engine, create_sessionmaker
from article_api.handler import INTERNAL_ERROR_DETAIL, ArticleHandler
from article_api.log_config import setup_logging
from article_api.middleware import RequestContextMiddleware
from article_api.routers import articles
from article_api.services.article_store import ArticleStore

logger = logging.getLogger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Malformed input is the client's fault: 400 rather than FastAPI's 422.
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content={"detail": INTERNAL_ERROR_DETAIL})


def create_app(app_settings: Settings | None = None, engine: AsyncEngine | None = None) -> FastAPI:
    """
    Build the application and everything it depends on.

    The engine (connection pool), store and handler are created here once
    and attached to ``app.state``.  Pass *engine* to run against a database
    other than ``DATABASE_URL``; the caller then remains responsible for
    disposing it.
    """
    app_settings = app_settings or settings
    setup_logging(app_settings)

    owns_engine = engine is None
    if owns_engine:
        engine = create_engine(app_settings)
    store = ArticleStore(create_sessionmaker(engine))
    handler = ArticleHandler(
        store,
        logging.getLogger("article_api.handler"),
        timeout=app_settings.REQUEST_TIMEOUT_SECONDS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Article API starting (env=%s)", app_settings.APP_ENV)
        yield
        # Shutdown: a caller-supplied engine stays open for its owner.
        if owns_engine:
            await engine.dispose()
        logger.info("Article API stopped")

    app = FastAPI(
        title="Article API",
        description="Create, list and update articles",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.engine = engine
    app.state.article_store = store
    app.state.article_handler = handler

    # Middleware
    app.add_middleware(RequestContextMiddleware, logger=logging.getLogger("article_api.access"))

    # Error mapping
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(articles.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()
