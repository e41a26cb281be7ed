import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api import events, roles, users
from app.core.config import settings
from app.core.exceptions import StorageFailure

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="User Role Management API", version="1.0.0")


@app.exception_handler(StorageFailure)
async def storage_failure_handler(request: Request, exc: StorageFailure):
    """Database unavailable or statement rejected"""
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": f"Storage unavailable: {exc.operation} failed"}
    )


# Include routers
app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(roles.router, prefix="/roles", tags=["roles"])
app.include_router(events.router, prefix="/events", tags=["events"])


@app.get("/")
async def root():
    return {"message": "User Role Management API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
