# groupgrade/core/exceptions.py
from fastapi import Request, status
from fastapi.responses import JSONResponse


class ScoringError(Exception):
    """Base class for errors raised by the scoring services."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ScoreConfigurationError(ScoringError):
    """Project weights violate W1 + W2 + W3 == 1.0 or W4 >= 0."""
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(ScoringError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidAdjustmentError(ScoringError):
    status_code = status.HTTP_400_BAD_REQUEST


async def scoring_error_handler(request: Request, exc: ScoringError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})
