# app/services/serializer.py
import json
from typing import Any

from fastapi.encoders import jsonable_encoder

from app.errors import SerializationError


def dumps(payload: Any) -> str:
    """Encode a handler payload (pydantic models included) as compact JSON text."""
    try:
        return json.dumps(jsonable_encoder(payload), separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as ex:
        raise SerializationError(f"payload is not serializable: {ex}") from ex


def loads(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError as ex:
        raise SerializationError(f"stored value is not valid JSON: {ex}") from ex
