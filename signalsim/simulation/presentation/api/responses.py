"""
Response envelope helpers shared by the routes.
"""
from typing import Any, List, Optional

from fastapi.responses import JSONResponse

from ....common.schemas.simulation import ApiResponse


def envelope(data: Any = None, message: Optional[str] = None) -> dict:
    return ApiResponse[Any](data=data, message=message).model_dump(mode="json", by_alias=True)


def error_response(status_code: int, message: str, errors: Optional[List[str]] = None) -> JSONResponse:
    body = ApiResponse[Any](success=False, message=message, errors=errors)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", by_alias=True))
