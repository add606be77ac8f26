import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("app.errors")


class AppError(Exception):
    """Expected failure with a client-safe message."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailure(AppError):
    pass


class PaymentCreationFailed(AppError):
    def __init__(self, detail: str):
        super().__init__(f"Payment creation failed: {detail}")
        self.detail = detail


def app_error_handler(request: Request, exc: AppError):
    logger.info(
        "%s %s path=%s: %s",
        type(exc).__name__,
        exc.status_code,
        request.url.path,
        exc.message,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "detail": exc.message},
    )


def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.info("HTTPException %s path=%s", exc.status_code, request.url.path)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("ValidationError path=%s", request.url.path)
    return JSONResponse(
        status_code=422, content={"success": False, "detail": "Invalid request"}
    )


def unhandled_exception_handler(request: Request, exc: Exception):
    # full stack trace stays server-side
    logger.exception(
        "UnhandledException method=%s path=%s", request.method, request.url.path
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "detail": "Internal Server Error"},
    )
