from typing import Any

from fastapi.responses import JSONResponse

from app.utils.errors import ApiError


def success_body(data: Any = None, message: str = "Success", status_code: int = 200) -> dict:
    return {
        "statusCode": status_code,
        "data": data if data is not None else {},
        "message": message,
        "success": status_code < 400,
    }


def failure_body(status_code: int, message: str, errors: list[Any] | None = None) -> dict:
    return {
        "statusCode": status_code,
        "message": message,
        "success": False,
        "errors": list(errors or []),
    }


def api_response(data: Any = None, message: str = "Success", status_code: int = 200) -> JSONResponse:
    """Wrap `data` in the success envelope."""
    return JSONResponse(status_code=status_code, content=success_body(data, message, status_code))


def error_response(error: ApiError) -> JSONResponse:
    """Render an ApiError as the failure envelope."""
    return JSONResponse(
        status_code=error.status_code,
        content=failure_body(error.status_code, error.message, error.errors),
    )
