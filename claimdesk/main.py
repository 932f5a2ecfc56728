"""
ClaimDesk Agent Review API

FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from claimdesk.api import router as claims_router, vehicles_router
from claimdesk.config import Settings, get_settings
from claimdesk.monitors.process_monitor import ProcessMonitor
from claimdesk.repository.claim_store import ClaimStore, build_claim_store

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=settings.log_format
    )


def create_app(settings: Optional[Settings] = None, store: Optional[ClaimStore] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Runtime settings; read from the environment when omitted
        store: Claim store to serve; built from the settings when omitted

    Returns:
        The configured FastAPI application
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle management."""
        logger.info("Starting ClaimDesk agent review API")
        yield
        logger.info("Shutting down ClaimDesk agent review API")

    app = FastAPI(
        title="ClaimDesk Agent Review API",
        description="""
    Agent review workflow for auto insurance claims, driven by a
    deterministic mock AI.

    ## Features

    - **Case Files**: Severity, next-step routing, line-item estimate, repair duration,
      comparable claims and review signals with a final recommendation
    - **Guardrails**: Overrides of AI values need a reason; approval needs senior review
    - **Workflow**: New → In Review ↔ Needs More Photos → Pending Approval → Authorized
    - **Vehicle Lookup**: Simulated plate / VIN extraction and lookup

    ## Workflow

    1. Pick a claim from `GET /claims`
    2. Run the AI pipeline with `POST /claims/{id}/assess`
    3. Save a draft with `POST /claims/{id}/draft`, then `POST /claims/{id}/submit`
    4. A senior adjuster authorizes with `POST /claims/{id}/approve`
    """,
        version="1.0.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.claim_store = store or build_claim_store(settings)
    app.state.process_monitor = ProcessMonitor(app.state.claim_store)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(claims_router)
    app.include_router(vehicles_router)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with system info."""
        return {
            "system": "ClaimDesk Agent Review API",
            "version": "1.0.0",
            "status": "operational",
            "docs": "/docs"
        }

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
