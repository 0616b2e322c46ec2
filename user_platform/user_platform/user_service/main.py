from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from .config import settings
from .db import init_db
from .errors import (
    UserServiceError,
    ValidationError,
    ConflictError,
    AuthError,
    NotFoundError,
    StorageError,
    KeyMaterialError,
)
from .routes import health, users
from .utils.event_logger import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AuthError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Create tables on startup"""
    init_db()
    yield


app = FastAPI(title="User Service", version="1.0.0", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users.router)
app.include_router(health.router)


@app.exception_handler(UserServiceError)
def handle_user_service_error(request: Request, exc: UserServiceError):
    if isinstance(exc, (StorageError, KeyMaterialError)):
        logger.error("Internal failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )

    for error_type, status_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return JSONResponse(status_code=status_code, content={"message": exc.message})

    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": exc.message})
