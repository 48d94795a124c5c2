from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class ScreenError(Exception):
    """Base class for errors raised while driving a screen."""

    status_code: int = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class PermissionDeniedError(ScreenError):
    status_code = 403


class ImageDecodeError(ScreenError):
    status_code = 422


class RequestFailure(ScreenError):
    status_code = 502


class SubmitDisabledError(ScreenError):
    status_code = 409


class SubmissionInProgressError(ScreenError):
    status_code = 409


class PermissionPendingError(ScreenError):
    status_code = 409


class ScreenNotFoundError(ScreenError):
    status_code = 404


class ScreenLimitError(ScreenError):
    status_code = 503


class InvalidTransitionError(ScreenError):
    status_code = 500


def create_error_response(error_message: str, status_code: int = 400) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error_message
    }

async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )

async def screen_exception_handler(request: Request, exc: ScreenError) -> JSONResponse:
    """Map screen errors onto the standard error envelope"""
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.detail, exc.status_code)
    )
