from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging
import traceback
from app.core.config import settings
from app.core.data_store import get_store
from app.core.exceptions import (
    FSILanguagesException,
    ValidationError,
    NotFoundError,
    ConflictError,
    WorkbookFormatError,
)

# Import API router
from app.api.v1 import api_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="FSI Languages API",
    description="Language difficulty data on the FSI scale, with spreadsheet import/export",
    version="1.0.0",
)

# Application exception -> HTTP status; anything unlisted is a server error
EXCEPTION_STATUS_CODES = [
    ((ValidationError, WorkbookFormatError), status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def status_code_for(exc: FSILanguagesException) -> int:
    for exception_types, status_code in EXCEPTION_STATUS_CODES:
        if isinstance(exc, exception_types):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors reduced to type, location and message."""
    return [
        {key: value for key, value in error.items() if key in ("type", "loc", "msg")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log request validation errors and return them without the raw input."""
    errors = jsonable_errors(exc)
    logger.error(f"Validation error on {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"success": False, "detail": errors},
    )


@app.exception_handler(FSILanguagesException)
async def fsi_languages_exception_handler(request: Request, exc: FSILanguagesException):
    """Turn application exceptions into the shared failure shape."""
    status_code = status_code_for(exc)
    logger.warning(
        f"{type(exc).__name__} on {request.method} {request.url.path} ({status_code}): {exc}"
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "detail": str(exc),
            "type": type(exc).__name__,
            "errors": exc.errors,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and return a generic failure."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}", exc_info=exc)

    content = {
        "success": False,
        "detail": "An internal server error occurred. Please try again later.",
        "type": "InternalServerError",
    }
    # Full error details only in development
    if settings.is_development:
        content.update(detail=str(exc), type=type(exc).__name__, traceback=traceback.format_exc())
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Load the language dataset on startup."""
    store = get_store()
    try:
        store.load()
    except FSILanguagesException as e:
        # Keep serving; the next read retries the load and reports the error
        logger.warning(f"Could not load dataset from {store.data_dir}: {e}")


@app.get("/")
async def root():
    return {
        "message": "FSI Languages API",
        "status": "running",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc"
        }
    }


@app.get("/health")
async def health():
    store = get_store()
    return {"status": "healthy", "data_loaded": store.is_loaded}


app.include_router(api_router, prefix=settings.api_v1_prefix)
