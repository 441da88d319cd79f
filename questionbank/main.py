"""
Main FastAPI application entry point.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from questionbank.api.auth import router as auth_router
from questionbank.api.grading import router as grading_router
from questionbank.api.participant import router as participant_router
from questionbank.api.questions import router as questions_router
from questionbank.core.config import settings
from questionbank.core.database import init_db
from questionbank.core.errors import (
    MalformedDocument, QuestionBankError, SourceNotFound, UnresolvedReference,
)
from questionbank.services.views import verify_catalog

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    SourceNotFound: status.HTTP_404_NOT_FOUND,
    MalformedDocument: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UnresolvedReference: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}...")
    init_db()
    verify_catalog()
    yield
    logger.info("Shutdown complete")


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])
app.include_router(questions_router, prefix=settings.API_V1_PREFIX, tags=["questions"])
app.include_router(participant_router, prefix=f"{settings.API_V1_PREFIX}/participant", tags=["participant"])
app.include_router(grading_router, prefix=f"{settings.API_V1_PREFIX}/grading", tags=["grading"])


# Exception handlers
@app.exception_handler(QuestionBankError)
async def question_bank_exception_handler(request: Request, exc: QuestionBankError):
    """Map domain errors to JSON error bodies."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{exc.error_type} on {request.url.path}: {exc}", exc_info=exc)
    error = {"message": str(exc), "type": exc.error_type}
    if isinstance(exc, MalformedDocument):
        error["field"] = exc.field
    if status_code >= 500 and settings.is_production():
        error["message"] = "An internal error occurred"
    return JSONResponse(status_code=status_code, content={"error": error})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.detail,
                "type": "http_error",
                "status_code": exc.status_code
            }
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "message": "Validation error",
                "type": "validation_error",
                "details": jsonable_errors(exc),
            }
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    error = {"message": str(exc), "type": "internal_error"}
    if settings.is_production():
        error["message"] = "An internal error occurred"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error})


def jsonable_errors(exc: RequestValidationError):
    # pydantic may put exception instances in ``ctx``
    return [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors()]


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok", "version": settings.APP_VERSION, "environment": settings.ENVIRONMENT}
