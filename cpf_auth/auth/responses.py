from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from cpf_auth.schemas.auth import ErrorOut

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
}


def json_response(status_code: int, body: BaseModel | dict[str, Any]) -> dict[str, Any]:
    """API Gateway proxy response with a JSON body."""
    payload = body.model_dump(by_alias=True) if isinstance(body, BaseModel) else body
    return {
        "statusCode": status_code,
        "headers": dict(CORS_HEADERS),
        "body": json.dumps(payload, ensure_ascii=False),
    }


def error_response(status_code: int, error: str, message: str) -> dict[str, Any]:
    return json_response(status_code, ErrorOut(error=error, message=message))


def bad_request(message: str) -> dict[str, Any]:
    return error_response(400, "Bad Request", message)


def internal_error(exc: BaseException) -> dict[str, Any]:
    return error_response(500, "Internal Server Error", str(exc))
