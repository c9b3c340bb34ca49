from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, AsyncIterator, Callable

from fastapi import FastAPI, Request

if TYPE_CHECKING:
    from hybrid.Container.Container import Abstract
    from hybrid.Foundation.Application import Application

logger = logging.getLogger(__name__)


def lifespan(app: Application) -> Callable[[FastAPI], Any]:
    """Build a FastAPI lifespan that bootstraps the application on startup."""

    @asynccontextmanager
    async def _lifespan(fastapi_app: FastAPI) -> AsyncIterator[None]:
        app.bootstrap()
        app.boot()

        app.instance('fastapi', fastapi_app)
        fastapi_app.state.hybrid = app

        logger.info(f"Application started in [{app.environment()}] environment")

        try:
            yield
        finally:
            app.terminate()
            logger.info("Application terminated")

    return _lifespan


def create_fastapi_app(app: Application, **options: Any) -> FastAPI:
    """Create a FastAPI application whose lifecycle drives the given application."""
    return FastAPI(lifespan=lifespan(app), **options)


def resolve(abstract: Abstract) -> Callable[[Request], Any]:
    """Build a FastAPI dependency resolving `abstract` from the application.

    Usage::

        @router.get('/')
        def index(config: Repository = Depends(resolve('config'))): ...
    """

    def dependency(request: Request) -> Any:
        return request.app.state.hybrid.make(abstract)

    return dependency
