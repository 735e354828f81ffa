"""
Ghost Backend - FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers import config, ghost
from services.config_manager import ConfigManager
from services.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    config_manager = ConfigManager.get_instance()
    logging_config = config_manager.get("logging", {})
    log_path = setup_logging(logging_config.get("level", "INFO"), log_dir=logging_config.get("dir"))
    logger.info("Starting Ghost Backend (log file: %s)", log_path)

    yield
    ghost.sessions.clear()
    logger.info("Shutting down Ghost Backend")


app = FastAPI(
    title="Ghost Backend",
    description="Streaming search/replace suggestion parser for IDE ghost edits",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware for local IDE plugin communication
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(ghost.router, prefix="/api/ghost", tags=["ghost"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "ghost-backend", "sessions": len(ghost.sessions)}


if __name__ == "__main__":
    import uvicorn

    server = ConfigManager.get_instance().get("server", {})
    uvicorn.run(app, host=server.get("host", "127.0.0.1"), port=server.get("port", 8000))
