from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lightcheck.api.v2.dependencies import ReviewContext, build_review_context
from lightcheck.api.v2.router import router as v2_router
from lightcheck.core.config import get_settings
from lightcheck.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(context: ReviewContext | None = None) -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.review.analysis.close()
        logger.info("Review session closed (%d records)", app.state.review.session.total_processed)

    app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)
    app.state.review = context or build_review_context(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v2_router)

    @app.get("/healthz", tags=["health"])
    def healthz() -> dict[str, str]:
        return {"ok": "true"}

    return app


configure_logging(logging.INFO)
app = create_app()
