# cinedb/api/helpers.py
"""Request parsing and JSON envelope helpers shared by the routers."""

import json
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from cinedb.core.validator import Validator

MAX_BODY_BYTES = 1_048_576
MAX_ID = 2 ** 63 - 1

M = TypeVar("M", bound=BaseModel)


class BadRequest(Exception):
    """Malformed request body; the message is safe to show the client."""


class EnvelopeResponse(JSONResponse):
    """JSON rendered with tab indentation and a trailing newline."""

    def render(self, content: Any) -> bytes:
        return (json.dumps(content, indent="\t", ensure_ascii=False) + "\n").encode("utf-8")


def write_json(status: int, data: Dict[str, Any], headers: Optional[Mapping[str, str]] = None) -> EnvelopeResponse:
    return EnvelopeResponse(content=data, status_code=status, headers=dict(headers or {}))


def read_id_param(raw: str) -> Optional[int]:
    """Positive integer id from a path segment, or None."""
    # plain ASCII digits only: no sign, spaces or underscores
    if not (isinstance(raw, str) and raw.isascii() and raw.isdigit()):
        return None
    value = int(raw)
    # ids are BIGSERIAL
    return value if 1 <= value <= MAX_ID else None


async def read_json(request: Request, model: Type[M]) -> M:
    """
    Decode the request body into `model`.

    The body must be a single JSON object of at most MAX_BODY_BYTES with
    no keys beyond the model's fields. Any problem raises BadRequest.
    """
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > MAX_BODY_BYTES:
            raise BadRequest(f"body must not be larger than {MAX_BODY_BYTES} bytes")

    if not body.strip():
        raise BadRequest("body must not be empty")

    try:
        data = json.loads(body)
    except UnicodeDecodeError:
        raise BadRequest("body contains badly-formed JSON")
    except json.JSONDecodeError as e:
        if e.msg == "Extra data":
            raise BadRequest("body must only contain a single JSON value")
        raise BadRequest(f"body contains badly-formed JSON (at character {e.pos})")

    if not isinstance(data, dict):
        raise BadRequest("body contains incorrect JSON type (expected an object)")

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise BadRequest(_describe(e)) from e


def _describe(err: ValidationError) -> str:
    first = err.errors()[0]
    key = str(first["loc"][0]) if first["loc"] else ""
    if first["type"] == "extra_forbidden":
        return f'body contains unknown key "{key}"'
    if first["type"] == "value_error":
        return str(first["ctx"]["error"])
    return f'body contains incorrect JSON type for "{key}"'


# ─── Query-string readers ────────────────────────────────────────────────────
def read_str(qs: Mapping[str, str], key: str, default: str) -> str:
    return qs.get(key) or default


def read_csv(qs: Mapping[str, str], key: str, default: List[str]) -> List[str]:
    raw = qs.get(key)
    if not raw:
        return default
    return [part.strip() for part in raw.split(",") if part.strip()]


def read_int(qs: Mapping[str, str], key: str, default: int, v: Validator) -> int:
    raw = qs.get(key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        v.add_error(key, "must be an integer value")
        return default
