"""FastAPI application entry point."""

import logging
import secrets
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .config import get_settings
from .api import slides_router
from .slide_manager import get_slide_manager
from .storage import get_storage

# Configure logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    logger.info(f"slidelocal starting, slides file: {settings.slides_file}")
    storage = get_storage()
    manager = get_slide_manager()
    for config in storage.list_slides():
        await manager.add_or_update(config, default_poll_interval=storage.poll_interval)
    manager.start()
    yield
    await manager.shutdown()
    logger.info("slidelocal shutting down")


# Create FastAPI app
app = FastAPI(
    title="slidelocal",
    description="Local bridge for Slide curtain controllers",
    version="0.1.0",
    lifespan=lifespan,
)

# Basic auth setup
security = HTTPBasic(auto_error=False)


def verify_auth(credentials: Optional[HTTPBasicCredentials] = Depends(security)):
    """Verify basic authentication if enabled."""
    if not settings.auth_enabled:
        return True

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(
        credentials.username.encode("utf8"),
        settings.username.encode("utf8"),
    )
    correct_password = secrets.compare_digest(
        credentials.password.encode("utf8"),
        settings.password.encode("utf8"),
    )

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )
    return True


# Include API routers
app.include_router(slides_router, dependencies=[Depends(verify_auth)])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "slides": len(get_slide_manager())}
