"""
Unit tests for key namespacing and the record codec.
"""

import json

import pytest

from redis_session_store.errors.exceptions import (
    SessionSerializationError,
    StoreConfigurationError,
)
from redis_session_store.session.codec import RecordCodec
from redis_session_store.session.keyspace import KeyNamespace, resolve_prefix


class TestResolvePrefix:

    def test_default(self):
        assert resolve_prefix() == "sess:"

    def test_prefix_wins_over_key_prefix(self):
        assert resolve_prefix(prefix="app:", key_prefix="other:") == "app:"

    def test_key_prefix_used_without_prefix(self):
        assert resolve_prefix(key_prefix="other:") == "other:"

    def test_empty_values_fall_through(self):
        assert resolve_prefix(prefix="", key_prefix="") == "sess:"
        assert resolve_prefix(prefix="", key_prefix="k:") == "k:"


class TestKeyNamespace:

    def test_physical_key_concatenates(self):
        namespace = KeyNamespace("sess:")
        assert namespace.physical_key("abc") == "sess:abc"
        assert namespace.physical_key("a:b/c") == "sess:a:b/c"

    def test_session_id_strips_prefix(self):
        namespace = KeyNamespace("sess:")
        assert namespace.session_id("sess:abc") == "abc"

    def test_match_pattern(self):
        assert KeyNamespace("sess:").match_pattern() == "sess:*"

    def test_match_pattern_escapes_glob_characters(self):
        assert KeyNamespace("a*[b]?:").match_pattern() == "a\\*\\[b\\]\\?:*"

    def test_is_immutable(self):
        namespace = KeyNamespace("sess:")
        with pytest.raises(Exception):
            namespace.prefix = "other:"


class TestRecordCodec:

    def test_default_serializer_is_json(self):
        codec = RecordCodec()
        assert codec.serializer is json
        assert codec.encode({"a": 1}, "sid") == '{"a": 1}'

    def test_decodes_bytes_and_text(self):
        codec = RecordCodec()
        assert codec.decode(b'{"a": 1}', "sid") == {"a": 1}
        assert codec.decode('{"a": 1}', "sid") == {"a": 1}

    def test_encode_failure_is_serialization_error(self):
        codec = RecordCodec()
        with pytest.raises(SessionSerializationError) as exc_info:
            codec.encode({"when": object()}, "sid")

        assert exc_info.value.details == {"session_id": "sid"}
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_decode_failure_is_serialization_error(self):
        codec = RecordCodec()
        with pytest.raises(SessionSerializationError):
            codec.decode(b"{not json", "sid")

    def test_invalid_utf8_is_serialization_error(self):
        codec = RecordCodec()
        with pytest.raises(SessionSerializationError):
            codec.decode(b"\xff\xfe", "sid")

    def test_custom_serializer(self):
        class Upper:
            @staticmethod
            def dumps(value):
                return json.dumps(value).upper()

            @staticmethod
            def loads(text):
                return json.loads(text.lower())

        codec = RecordCodec(Upper)
        assert codec.encode({"a": "b"}, "sid") == '{"A": "B"}'
        assert codec.decode('{"A": "B"}', "sid") == {"a": "b"}

    def test_serializer_without_loads_is_rejected(self):
        class WriteOnly:
            @staticmethod
            def dumps(value):
                return ""

        with pytest.raises(StoreConfigurationError):
            RecordCodec(WriteOnly)

    @pytest.mark.parametrize("raw", [None, b"", ""])
    def test_empty_payload_is_absent(self, raw):
        assert RecordCodec.is_absent(raw)

    def test_non_empty_payload_is_present(self):
        assert not RecordCodec.is_absent(b"{}")
