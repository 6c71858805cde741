# tests/test_cache_keys.py

from uuid import UUID

import pytest

from app.errors import ConfigurationError
from app.services.cache_keys import build_hashed_key, build_key, get_key_builder

UUID_JERSON = "5acdbd58-14da-4048-8f1f-83359eca16bd"


def test_build_key_matches_documented_format():
    key = build_key("test-by-id", "Test.Get", [("uuid", UUID(UUID_JERSON))])
    assert key == f"test-by-id-Test.Get-uuid-{UUID_JERSON}"


def test_build_key_is_deterministic():
    args = [("status", True), ("page", 2)]
    assert build_key("test-all", "Test.GetByStatus", args) == build_key("test-all", "Test.GetByStatus", list(args))


def test_build_key_keeps_argument_order():
    assert build_key("s", "H", [("a", 1), ("b", 2)]) == "s-H-a-1-b-2"
    assert build_key("s", "H", [("b", 2), ("a", 1)]) == "s-H-b-2-a-1"


def test_none_argument_uses_empty_marker_and_is_not_omitted():
    with_none = build_key("test-all", "Test.GetByStatus", [("status", None)])
    assert with_none == "test-all-Test.GetByStatus-status-"
    assert with_none != build_key("test-all", "Test.GetByStatus", [])


def test_distinct_values_give_distinct_keys():
    keys = {
        build_key("test-all", "Test.GetByStatus", [("status", value)])
        for value in (None, True, False)
    }
    assert len(keys) == 3


def test_schema_and_identity_are_part_of_the_key():
    args = [("uuid", UUID_JERSON)]
    assert build_key("test-by-id", "Test.Get", args) != build_key("test-all", "Test.Get", args)
    assert build_key("test-by-id", "Test.Get", args) != build_key("test-by-id", "Other.Get", args)


def test_hashed_key_separates_delimiter_collisions():
    one_arg = [("a", "x-b-y")]
    two_args = [("a", "x"), ("b", "y")]
    # readable keys collide when a value contains the delimiter
    assert build_key("s", "H", one_arg) == build_key("s", "H", two_args)
    assert build_hashed_key("s", "H", one_arg) != build_hashed_key("s", "H", two_args)


def test_hashed_key_is_deterministic_and_prefixed():
    args = [("uuid", UUID_JERSON)]
    key = build_hashed_key("test-by-id", "Test.Get", args)
    assert key == build_hashed_key("test-by-id", "Test.Get", args)
    assert key.startswith("test-by-id-Test.Get-")
    assert len(key.rsplit("-", 1)[1]) == 64


def test_get_key_builder():
    assert get_key_builder("readable") is build_key
    assert get_key_builder("hashed") is build_hashed_key
    with pytest.raises(ConfigurationError):
        get_key_builder("md5")
