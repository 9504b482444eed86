from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from app.config import get_text_generation_settings, load_env_files
from app.logging_utils import configure_logging
from app.schemas.analysis import HealthResponse


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    load_env_files()
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    application = FastAPI(
        title="Churn Persona API",
        version="1.0.0",
    )

    from app.api.routers import analysis_router

    application.include_router(analysis_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(
            status="ok",
            text_generation_backend=get_text_generation_settings().backend,
        )

    logging.getLogger(__name__).info(
        "API initialised with text generation backend=%s",
        get_text_generation_settings().backend,
    )
    return application


app = create_app()
