"""Unit tests for RequestDescriptor."""

from __future__ import annotations

import dataclasses

import pytest

from azstore.auth import RequestDescriptor, StreamBody

URL = "https://acct.blob.core.windows.net/c/b"


class TestBuild:
    def test_method_uppercased_and_values_stringified(self):
        request = RequestDescriptor.build("put", URL, params={"timeout": 30}, headers={"content-length": 5})
        assert request.method == "PUT"
        assert request.params == (("timeout", "30"),)
        assert request.headers == (("content-length", "5"),)

    def test_mapping_list_values_expand_to_repeated_pairs(self):
        request = RequestDescriptor.build("GET", URL, params={"include": ["metadata", "snapshots"]})
        assert request.params == (("include", "metadata"), ("include", "snapshots"))

    def test_str_body_encoded_as_utf8(self):
        assert RequestDescriptor.build("PUT", URL, body="é").body == b"\xc3\xa9"

    def test_bytearray_body_copied_to_bytes(self):
        assert RequestDescriptor.build("PUT", URL, body=bytearray(b"ab")).body == b"ab"

    def test_unsupported_body_rejected(self):
        with pytest.raises(TypeError):
            RequestDescriptor.build("PUT", URL, body={"a": 1})

    def test_is_immutable(self):
        request = RequestDescriptor.build("GET", URL)
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.method = "PUT"  # type: ignore[misc]


class TestContentLength:
    def test_no_body(self):
        assert RequestDescriptor.build("GET", URL).content_length == 0

    def test_bytes(self):
        assert RequestDescriptor.build("PUT", URL, body=b"abc").content_length == 3

    def test_stream_known_and_unknown(self):
        assert RequestDescriptor.build("PUT", URL, body=StreamBody([b"a"], length=1)).content_length == 1
        assert RequestDescriptor.build("PUT", URL, body=StreamBody([b"a"])).content_length is None


class TestHeaders:
    def test_lookup_is_case_insensitive_and_joins_repeats(self):
        request = RequestDescriptor.build("GET", URL, headers=[("X-Thing", "1"), ("x-thing", "2")])
        assert request.header_values("X-THING") == ["1", "2"]
        assert request.header("x-thing") == "1,2"
        assert request.header("missing") is None

    def test_with_header_replaces_all_values(self):
        request = RequestDescriptor.build("GET", URL, headers=[("X-Thing", "1"), ("x-thing", "2"), ("a", "b")])
        updated = request.with_header("x-thing", "3")
        assert updated.headers == (("a", "b"), ("x-thing", "3"))
        assert request.header("x-thing") == "1,2"

