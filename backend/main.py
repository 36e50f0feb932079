"""
main.py
=======
FastAPI application entry point for PharmaGuard.

Run locally:
  uvicorn backend.main:app --reload --port 3001

The genomics reference tables are plain module-level constants, built once at
import and shared read-only by every request; nothing needs warming here
beyond logging the active configuration.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.api.analyze import router as analyze_router
from backend.api.errors import register_error_handlers
from backend.api.health import router as health_router
from backend.config import API_VERSION, Settings, get_settings
from genomics_engine.pgx_reference import SUPPORTED_DRUGS, TARGET_GENES

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


# ---------------------------------------------------------------------------
# Lifespan: startup / shutdown
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("PharmaGuard backend starting up…")
    logger.info("Genes: %s", ", ".join(TARGET_GENES))
    logger.info("Drugs: %s", ", ".join(SUPPORTED_DRUGS))
    if settings.llm_enabled:
        logger.info(
            "Explanation LLM: %s (timeout %.1fs)",
            settings.openai_model, settings.llm_timeout_seconds,
        )
    else:
        logger.info("Explanation LLM not configured; template explanations only.")
    yield
    logger.info("PharmaGuard backend shutting down.")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title       = "PharmaGuard API",
        description = (
            "Pharmacogenomic risk prediction — VCF parsing, CPIC-aligned "
            "diplotype/phenotype classification, deterministic drug risk "
            "rules and LLM clinical explanations."
        ),
        version     = API_VERSION,
        docs_url    = "/docs",
        redoc_url   = "/redoc",
        lifespan    = lifespan,
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── CORS ──────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins     = list(settings.cors_origins),
        allow_credentials = True,
        allow_methods     = ["*"],
        allow_headers     = ["*"],
    )

    # ── Errors & routers ──────────────────────────────────────────────────
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(analyze_router)

    return app


app = create_app()
