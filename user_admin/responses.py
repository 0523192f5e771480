from __future__ import annotations

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class Envelope(BaseModel):
    message: str
    data: Optional[Any] = None


def envelope_response(status_code: int, message: str, data: Any = None) -> JSONResponse:
    """Every API response, success or failure, goes out through here.

    `data` is left out of the body entirely when it is None.
    """
    body = Envelope(message=message, data=data).model_dump()
    if body["data"] is None:
        del body["data"]
    return JSONResponse(jsonable_encoder(body, by_alias=True), status_code=status_code)
