import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from transcripts_machine.core.errors import (
    ExtractionCancelled,
    ExtractionError,
    SessionCreationError,
    SessionNotFoundError,
    StepTimeoutError,
    SummarizationError,
    TranscriptsMachineError,
    ValidationError,
)
from transcripts_machine_api.schemas.v1.responses import ErrorResponse

_logger = logging.getLogger(__name__)

# Most specific first
_STATUS_BY_ERROR: list[tuple[type[TranscriptsMachineError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND),
    (ExtractionCancelled, status.HTTP_409_CONFLICT),
    (StepTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (SessionCreationError, status.HTTP_502_BAD_GATEWAY),
    (ExtractionError, status.HTTP_502_BAD_GATEWAY),
    (SummarizationError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: TranscriptsMachineError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc: TranscriptsMachineError) -> ErrorResponse:
    cause = exc.__cause__
    return ErrorResponse(
        error=type(exc).__name__,
        message=str(exc),
        detail=str(cause) if cause is not None else None,
    )


async def _handle_pipeline_error(
    request: Request, exc: TranscriptsMachineError
) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        _logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        _logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_code, content=error_response(exc).model_dump()
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Turn pipeline errors into ErrorResponse bodies with matching status codes."""
    app.add_exception_handler(TranscriptsMachineError, _handle_pipeline_error)  # type: ignore[arg-type]
