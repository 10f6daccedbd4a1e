import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from transcripts_machine.components.remote_session.browserbase import BrowserbaseClient
from transcripts_machine.config import get_automation_settings
from transcripts_machine_api.api.v1.router import api_router
from transcripts_machine_api.core.config import get_settings
from transcripts_machine_api.core.errors import register_exception_handlers
from transcripts_machine_api.core.registry import ExtractionRegistry

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True,
)

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager: owns the Browserbase client and registry."""
    settings = get_settings()
    _logger.info(f"Starting {settings.project_name} v{settings.version}")
    app.state.browserbase = BrowserbaseClient(get_automation_settings())
    app.state.registry = ExtractionRegistry()
    yield
    pending = app.state.registry.pending_sessions
    if pending:
        _logger.info(f"Releasing {len(pending)} unused session(s)")
    await app.state.registry.release_pending(app.state.browserbase)
    await app.state.browserbase.close()
    _logger.info(f"Shutting down {settings.project_name}")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        description="Extract timestamped YouTube transcripts with a remote browser and AI",
        docs_url="/docs",
        redoc_url=None,  # Disable ReDoc
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    # Root endpoint
    @app.get("/")
    async def root():
        return JSONResponse(
            {
                "message": f"Welcome to {settings.project_name}",
                "version": settings.version,
                "docs": "/docs",
                "api": settings.api_v1_prefix,
                "health": f"{settings.api_v1_prefix}/health",
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "transcripts_machine_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        reload=settings.debug,
    )
