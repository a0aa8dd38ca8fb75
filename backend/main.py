"""
AI Code Editor - Backend Application

FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from datetime import datetime

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ai_editor.core.config import get_config, get_log_path
from ai_editor.core.logging import setup_logging, get_logger
from ai_editor.api import api_router
from ai_editor.services import build_ai_service, create_response_cache


# Record startup time globally
_startup_time = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Builds the shared HTTP client, response cache and AI service on startup
    and releases them on shutdown.
    """
    # Startup
    global _startup_time
    _startup_time = datetime.utcnow().isoformat()
    logger = setup_logging()
    config = get_config()
    logger.info("Starting AI Code Editor backend...")
    logger.debug("Log level: %s, log file: %s", config.logging.level, get_log_path() if config.logging.file else "disabled")

    http_client = httpx.AsyncClient(timeout=httpx.Timeout(config.ai.request_timeout))
    cache = create_response_cache(config.cache)
    cache.start_sweeper()

    service = build_ai_service(config.ai, http_client, cache)
    app.state.response_cache = cache
    app.state.ai_service = service

    configured = service.registry.list_configured()
    if configured:
        logger.info("Configured AI providers: %s", ", ".join(p.id for p in configured))
    else:
        logger.warning("No AI providers configured; AI routes will return ConfigurationError")

    logger.info("Application startup complete")

    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down application...")
        try:
            await cache.stop_sweeper()
        finally:
            await http_client.aclose()


# Create FastAPI application
app = FastAPI(
    title="AI Code Editor",
    description="Multi-provider AI backend for the code editor",
    version="0.1.0",
    lifespan=lifespan,
)

# Request logging middleware (flow-wise: log each request and response)
@app.middleware("http")
async def log_requests(request, call_next):
    logger = get_logger()
    method = request.method
    path = request.url.path
    logger.debug("Request started: %s %s", method, path)
    response = await call_next(request)
    logger.debug("Request completed: %s %s -> %s", method, path, response.status_code)
    return response

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "name": "AI Code Editor",
        "version": "0.1.0",
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint with startup time."""
    return {
        "status": "healthy",
        "startup_time": _startup_time,
        "timestamp": datetime.utcnow().isoformat(),
    }


if __name__ == "__main__":
    import uvicorn

    config = get_config()
    uvicorn.run(
        "main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
    )
