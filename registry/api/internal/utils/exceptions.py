# Third-party imports
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import sentry_sdk

# Local application imports
from registry.core.exceptions import (
    PartialMutationFailure,
    ResidentNotFound,
    StoreUnavailable,
    ValidationFailure,
)
from registry.core.monitoring.logging import get_contextual_logger
from registry.schemas.common import BaseResponse

logger = get_contextual_logger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    # Map specific HTTP status codes to custom error codes
    error_map = {
        400: "bad_request",
        404: "not_found",
        405: "method_not_allowed",
        422: "unprocessable_entity",
        500: "internal_server_error",
    }

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,  # noqa
        exc: HTTPException,
    ) -> JSONResponse:
        error_code = error_map.get(exc.status_code, "error")
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = BaseResponse.failure(code=error_code, message=detail)
        return JSONResponse(status_code=exc.status_code, content=response.model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,  # noqa
        exc: RequestValidationError,
    ) -> JSONResponse:
        error_details = []
        for error in exc.errors():
            message = error.get("msg", "")

            # Remove the "Value error, " prefix pydantic adds to validator messages
            val_error_prefix = "Value error, "
            if message.startswith(val_error_prefix):
                message = message[len(val_error_prefix) :]

            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            error_details.append(f"{location}: {message}" if location else message)

        max_errors = 5
        shown = error_details[:max_errors]
        if len(error_details) > max_errors:
            shown.append("...and more errors")
        detail = "; ".join(shown) if shown else "Invalid request data"

        response = BaseResponse.failure(code="bad_request", message=detail)
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(
        request: Request,  # noqa
        exc: ValidationFailure,
    ) -> JSONResponse:
        response = BaseResponse.failure(code="bad_request", message=str(exc), details=exc.field)
        return JSONResponse(status_code=400, content=response.model_dump())

    @app.exception_handler(ResidentNotFound)
    async def not_found_handler(
        request: Request,  # noqa
        exc: ResidentNotFound,
    ) -> JSONResponse:
        response = BaseResponse.failure(code="not_found", message="Resident not found")
        return JSONResponse(status_code=404, content=response.model_dump())

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(
        request: Request,
        exc: StoreUnavailable,
    ) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed, store unavailable: {exc}")
        sentry_sdk.capture_exception(exc)
        response = BaseResponse.failure(
            code="store_unavailable",
            message="The resident store is unavailable. Please try again later.",
        )
        return JSONResponse(status_code=500, content=response.model_dump())

    @app.exception_handler(PartialMutationFailure)
    async def partial_mutation_handler(
        request: Request,
        exc: PartialMutationFailure,
    ) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed part-way: {exc}")
        sentry_sdk.capture_exception(exc)
        response = BaseResponse.failure(
            code="internal_server_error",
            message="The resident could not be saved. Please try again later.",
        )
        return JSONResponse(status_code=500, content=response.model_dump())

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,  # noqa
        exc: Exception,
    ) -> JSONResponse:
        sentry_sdk.capture_exception(exc)
        response = BaseResponse.failure(
            code="internal_server_error",
            message="An unexpected error occurred. Please try again later.",
        )
        return JSONResponse(status_code=500, content=response.model_dump())
