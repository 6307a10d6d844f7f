# storefront/app.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .db import make_engine, make_sessionmaker, create_tables, check_connection
from .exceptions import StorefrontError
from .limits import BodySizeLimitMiddleware
from .logging_config import RequestLoggingMiddleware, setup_logging
from .services import OrderService, QueryService, build_cache
from . import orders, products, users

logger = logging.getLogger(__name__)

SERVER_ERROR = "Internal server error"


def _server_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": SERVER_ERROR, "message": message})


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message,
                         extra={"details": exc.details})
            return JSONResponse(status_code=exc.status_code,
                                content={"error": SERVER_ERROR, "message": exc.message})
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("%s %s store error", request.method, request.url.path, exc_info=exc)
        return _server_error(str(getattr(exc, "orig", None) or exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[AsyncEngine] = None,
    cache=None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    owns_engine = engine is None
    if engine is None:
        engine = make_engine(
            settings.database_url,
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_recycle=settings.pool_recycle,
        )
    if cache is None:
        cache = build_cache(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await create_tables(engine)
        await check_connection(engine)
        yield
        await cache.close()
        if owns_engine:
            await engine.dispose()

    app = FastAPI(
        title="Storefront API",
        description="Users, products, orders and co-purchase suggestions",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = make_sessionmaker(engine)
    app.state.cache = cache
    app.state.query_service = QueryService(cache)
    app.state.order_service = OrderService()

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(RequestLoggingMiddleware)
    # added last so it wraps every response, 413s and 500s included
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_error_handlers(app)

    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(orders.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()


def main() -> None:
    settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("Starting storefront on port %s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
