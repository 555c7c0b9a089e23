"""Global exception handlers mapping domain exceptions to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from medcard.exceptions import (
    BlobStoreError,
    InvalidRequest,
    MalformedModelOutput,
    MedcardError,
    RecordNotFoundError,
    UpstreamGatewayError,
    UpstreamStoreError,
)

log = logging.getLogger(__name__)


def _error(status_code: int, message: str, error_type: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "type": error_type})


def register_error_handlers(app: FastAPI) -> None:
    """Register exception-to-HTTP-status mappings."""

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
        log.info("Rejected request to %s: invalid %s", request.url.path, fields)
        return _error(400, f"Missing or invalid fields: {', '.join(fields)}", "invalid_request")

    @app.exception_handler(InvalidRequest)
    async def handle_invalid_request(request: Request, exc: InvalidRequest) -> JSONResponse:
        return _error(400, str(exc), "invalid_request")

    @app.exception_handler(RecordNotFoundError)
    async def handle_not_found(request: Request, exc: RecordNotFoundError) -> JSONResponse:
        log.warning("Not found on %s: %s", request.url.path, exc)
        return _error(404, str(exc), "not_found")

    @app.exception_handler(UpstreamStoreError)
    async def handle_store_error(request: Request, exc: UpstreamStoreError) -> JSONResponse:
        log.error("Store failure on %s: %s", request.url.path, exc)
        return _error(500, str(exc), "store_error")

    @app.exception_handler(UpstreamGatewayError)
    async def handle_gateway_error(request: Request, exc: UpstreamGatewayError) -> JSONResponse:
        log.error("Gateway failure on %s: %s", request.url.path, exc)
        return _error(500, str(exc), "gateway_error")

    @app.exception_handler(BlobStoreError)
    async def handle_blob_error(request: Request, exc: BlobStoreError) -> JSONResponse:
        log.error("Blob storage failure on %s: %s", request.url.path, exc)
        return _error(500, str(exc), "blob_store_error")

    @app.exception_handler(MalformedModelOutput)
    async def handle_malformed_output(request: Request, exc: MalformedModelOutput) -> JSONResponse:
        log.error("Malformed model output on %s: %s", request.url.path, exc, extra={"raw": exc.raw_response[:200]})
        return _error(500, str(exc), "malformed_model_output")

    @app.exception_handler(MedcardError)
    async def handle_generic_error(request: Request, exc: MedcardError) -> JSONResponse:
        log.error("Unhandled medcard error on %s: %s", request.url.path, exc)
        return _error(500, str(exc), "medcard_error")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        log.exception("Unexpected error on %s", request.url.path)
        return _error(500, "Internal server error", "internal_error")
