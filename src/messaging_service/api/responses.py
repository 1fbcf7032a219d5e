from __future__ import annotations

from fastapi.responses import JSONResponse

from messaging_service.api.v1.schemas.common import ErrorResponse


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message).model_dump(by_alias=True),
    )
