"""
FastAPI application entrypoint for the DevOps Lab API.

Run locally with ``uvicorn api.main:app`` from the devlab directory, or
``python -m api.main``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import make_url

from common.config import Settings, get_settings
from common.db import create_engine_from_url, create_schema, create_session_factory
from common.logging_conf import setup_fastapi_logging
from modules.rule_catalog import build_rule_catalog
from modules.simulator import ExecutionSimulator
from modules.validator import Validator

from .v1.router import api_router

logger = logging.getLogger(__name__)


def _open_database(app: FastAPI, settings: Settings) -> None:
    engine = create_engine_from_url(settings.database_url, echo=settings.debug)
    if settings.auto_create_schema:
        create_schema(engine)

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    logger.info(
        "Database ready at "
        f"{make_url(settings.database_url).render_as_string(hide_password=True)}"
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load settings, start logging and open the database."""
    settings = get_settings()
    setup_fastapi_logging(settings)
    logger.info("Starting DevOps Lab API...")

    app.state.settings = settings
    _open_database(app, settings)

    yield

    logger.info("Shutting down DevOps Lab API...")
    app.state.engine.dispose()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    The rule catalog, validator and simulator are built here rather than
    in the lifespan since they need no configuration.

    Returns:
        FastAPI: Configured application
    """
    app = FastAPI(
        title="DevOps Lab API",
        description="DevOps tutorial playground and progress tracking API",
        version="0.1.0",
        lifespan=lifespan
    )

    app.state.validator = Validator(build_rule_catalog())
    app.state.simulator = ExecutionSimulator()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
