"""Error kinds of the user API and the handlers that render them.

Every error leaves the API as ``{"erreur": "<message>"}`` with the status code
of its kind.
"""

import logging
from typing import Any, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Pydantic error types meaning the body could not be read as an object at all
MALFORMED_BODY_ERRORS = {
    "json_invalid",
    "missing",
    "model_attributes_type",
    "model_type",
    "dict_type",
}


class UserResourceError(Exception):
    """Base class for errors reported to the client."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "the request could not be processed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthenticated(UserResourceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "could not retrieve profile, please reconnect."


class NotFound(UserResourceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "not found."


class MalformedInput(UserResourceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "the submitted JSON data could not be interpreted."


class ValidationFailed(UserResourceError):
    status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    default_message = "the submitted data is invalid."


class ConfirmationMismatch(UserResourceError):
    status_code = status.HTTP_417_EXPECTATION_FAILED
    default_message = "password confirmation failed, please try again."


class InvalidCredentials(UserResourceError):
    status_code = status.HTTP_406_NOT_ACCEPTABLE
    default_message = "current password is incorrect."


class StorageFailure(UserResourceError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    default_message = "problem saving image."


class DeletionFailed(UserResourceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "an error occurred during deletion."


def format_validation_errors(errors: list[dict[str, Any]]) -> str:
    """Aggregate pydantic errors into one ``field: message`` line each."""
    lines = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        lines.append(f"{field}: {error.get('msg', 'invalid value')}")
    return "\n".join(lines)


def is_malformed_body(errors: list[dict[str, Any]]) -> bool:
    """Check whether validation failed because the body itself is unusable."""
    for error in errors:
        if error.get("type") == "json_invalid":
            return True
        if tuple(error.get("loc", ())) == ("body",) and error.get("type") in MALFORMED_BODY_ERRORS:
            return True
    return False


def validation_error(errors: list[dict[str, Any]]) -> UserResourceError:
    """Pick the error kind for a failed validation."""
    if is_malformed_body(errors):
        return MalformedInput()
    return ValidationFailed(format_validation_errors(errors))


async def parse_body(request: Request, schema: type[SchemaT]) -> SchemaT:
    """Validate the raw request body against a schema.

    Used by endpoints that must resolve the principal before looking at the
    payload; errors are shaped the same way as FastAPI's own body validation.
    """
    body = await request.body()
    try:
        return schema.model_validate_json(body)
    except ValidationError as e:
        errors = [{**error, "loc": ("body", *error["loc"])} for error in e.errors()]
        error = validation_error(errors)
        logger.info(f"Rejected {request.method} {request.url.path}: {error.message}")
        raise error from e


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"erreur": message})


async def user_resource_error_handler(request: Request, exc: UserResourceError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = validation_error(list(exc.errors()))
    logger.info(f"Rejected {request.method} {request.url.path}: {error.message}")
    return error_response(error.status_code, error.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"erreur": message},
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the API exception handlers to the application."""
    app.add_exception_handler(UserResourceError, user_resource_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
