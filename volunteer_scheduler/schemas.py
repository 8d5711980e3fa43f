from typing import Annotated, Any, Optional

from fastapi import Path
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .shared.validators import MAX_ID

# Path id that fits the database column
PathId = Annotated[int, Path(gt=0, le=MAX_ID)]


class ApiResponse(BaseModel):
    """Envelope wrapped around every response body"""

    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None


def api_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = 200,
) -> JSONResponse:
    """Success envelope; unset top-level keys are left out, nested nulls are kept"""
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = jsonable_encoder(data)
    return JSONResponse(status_code=status_code, content=body)


def api_error(error: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse(success=False, error=error).model_dump(exclude_none=True),
    )
