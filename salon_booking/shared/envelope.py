"""Response envelope shared by every API endpoint: {"isSuccess": bool, "content": any}"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(is_success: bool, content: Any) -> dict:
    return {"isSuccess": is_success, "content": content}


def envelope_response(is_success: bool, content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(envelope(is_success, content)))
