# tests/test_serializer.py

from datetime import datetime, timezone
from uuid import UUID

import pytest

from app.errors import SerializationError
from app.schemas.user import User
from app.services.serializer import dumps, loads


def test_structures_survive_the_text_form():
    payload = {"users": [{"Id": 1, "Name": "Jerson", "IsActive": True}], "total": 1, "next": None, "ratio": 0.5}
    assert loads(dumps(payload)) == payload


def test_models_and_special_types_are_encoded_as_json():
    text = dumps({
        "user": User(Id=4, Name="Fulano", IsActive=False),
        "id": UUID("c9cae7ec-5761-4873-a855-6b1edba0482c"),
        "at": datetime(2025, 8, 10, 12, 0, tzinfo=timezone.utc),
    })
    assert loads(text) == {
        "user": {"Id": 4, "Name": "Fulano", "IsActive": False},
        "id": "c9cae7ec-5761-4873-a855-6b1edba0482c",
        "at": "2025-08-10T12:00:00+00:00",
    }


def test_text_is_compact_and_keeps_unicode():
    assert dumps({"name": "Zoë", "tags": ["a", "b"]}) == '{"name":"Zoë","tags":["a","b"]}'


def test_unserializable_payload_raises():
    with pytest.raises(SerializationError):
        dumps({"handle": object()})


def test_corrupt_text_raises():
    with pytest.raises(SerializationError):
        loads("{not json")


def test_self_referencing_payload_raises():
    payload = {"name": "loop"}
    payload["self"] = payload
    with pytest.raises(SerializationError):
        dumps(payload)
