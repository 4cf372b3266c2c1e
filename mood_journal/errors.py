# api error types and handlers
# every error leaves the api as {"error": <label>, "message": <text>}

import logging
from http import HTTPStatus

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """http error with a short machine-friendly label and a human message"""

    def __init__(self, status_code: int, error: str, message: str | None = None, headers: dict | None = None):
        self.error = error
        self.message = message or error
        super().__init__(status_code=status_code, detail=self.message, headers=headers)


class OAuthVerificationError(Exception):
    """the oauth provider rejected the token or returned an unusable profile"""


class GenerationError(Exception):
    """the llm call failed or returned nothing usable"""


# common errors

def bad_request(message: str) -> ApiError:
    return ApiError(status.HTTP_400_BAD_REQUEST, "Bad request", message)


def invalid_entry_id() -> ApiError:
    return ApiError(
        status.HTTP_400_BAD_REQUEST,
        "Invalid id",
        "Diary id must be numeric.",
    )


def not_authenticated(message: str = "Login required.") -> ApiError:
    return ApiError(status.HTTP_401_UNAUTHORIZED, "Authentication required", message)


def access_denied(message: str = "You do not have permission to access this entry.") -> ApiError:
    return ApiError(status.HTTP_403_FORBIDDEN, "Access denied", message)


def entry_not_found() -> ApiError:
    return ApiError(status.HTTP_404_NOT_FOUND, "Diary entry not found", "No diary entry with this id.")


def _error_body(error: str, message: str) -> dict:
    return {"error": error, "message": message}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.error, exc.message),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """framework-raised http errors (404 route, 405 method) in the same shape"""
    try:
        label = HTTPStatus(exc.status_code).phrase
    except ValueError:
        label = "Error"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(label, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(
        status_code=422,
        content=_error_body("Invalid request", "; ".join(messages)),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """anything unexpected (database down, a bug) still leaves as json"""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "Something went wrong. Please try again."),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
