"""Tests for jsonfetch.builder -- query strings, bodies, header blocks."""

from __future__ import annotations

import json
from pathlib import Path
from urllib.parse import parse_qsl

import pytest

from jsonfetch.builder import (
    BOUNDARY_PREFIX,
    build_query,
    build_url,
    encode_body,
    encode_multipart,
    is_upload_payload,
    merge_header,
    new_boundary,
    parse_headers,
    query_pairs,
    render_headers,
)
from jsonfetch.exceptions import UploadError
from jsonfetch.models import UploadFile


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    path = tmp_path / "a.txt"
    path.write_bytes(b"hi")
    return path


# ---------------------------------------------------------------------------
# Query strings and URLs
# ---------------------------------------------------------------------------


class TestBuildQuery:
    def test_empty_params(self) -> None:
        assert build_query({}) == ""
        assert build_query(None) == ""

    def test_preserves_iteration_order(self) -> None:
        assert build_query({"z": "1", "a": "2", "m": "3"}) == "z=1&a=2&m=3"

    def test_encodes_reserved_characters(self) -> None:
        assert build_query({"q": "a b&c=d"}) == "q=a+b%26c%3Dd"

    def test_round_trips_through_parse_qsl(self) -> None:
        params = {"name": "Zoë", "filter": "x>1 & y<2", "path": "/a/b?c", "empty": ""}
        decoded = parse_qsl(build_query(params), keep_blank_values=True)
        assert decoded == list(params.items())

    def test_list_values_repeat_key(self) -> None:
        assert build_query({"id": [1, 2, 3]}) == "id=1&id=2&id=3"

    def test_booleans_and_none(self) -> None:
        assert build_query({"a": True, "b": False, "c": None}) == "a=1&b=0"

    def test_query_pairs_match_wire_query(self) -> None:
        params = {"active": True, "id": [1, 2], "skip": None, "q": "a b"}
        pairs = query_pairs(params)
        assert pairs == [("active", "1"), ("id", "1"), ("id", "2"), ("q", "a b")]
        assert parse_qsl(build_query(params)) == pairs


class TestBuildUrl:
    def test_no_query(self) -> None:
        assert build_url("https://api.example.com", "/users") == "https://api.example.com/users"

    def test_empty_params_do_not_add_question_mark(self) -> None:
        assert build_url("https://api.example.com", "/users", {}) == "https://api.example.com/users"

    def test_with_query(self) -> None:
        url = build_url("https://api.example.com", "/users", {"page": 2})
        assert url == "https://api.example.com/users?page=2"

    def test_all_none_params(self) -> None:
        assert build_url("https://x", "/a", {"a": None}) == "https://x/a"


# ---------------------------------------------------------------------------
# Bodies
# ---------------------------------------------------------------------------


class TestEncodeBody:
    def test_none_payload_is_empty(self) -> None:
        body = encode_body(None)
        assert body.content == b""
        assert body.content_type is None

    def test_empty_mapping_is_empty(self) -> None:
        assert encode_body({}).content == b""

    def test_json_payload(self) -> None:
        body = encode_body({"name": "x", "tags": [1, 2]})
        assert body.content == b'{"name":"x","tags":[1,2]}'
        assert body.content_type is None

    def test_falsy_marker_is_plain_json(self) -> None:
        body = encode_body({"is_upload": False, "a": 1})
        assert json.loads(body.content) == {"is_upload": False, "a": 1}

    def test_upload_payload_strips_marker(self, text_file: Path) -> None:
        payload = {
            "is_upload": True,
            "doc": {"fieldName": "f", "name": "a.txt", "path": str(text_file), "type": "text/plain"},
        }
        body = encode_body(payload, boundary="XYZ")
        assert body.content_type == "multipart/form-data; boundary=XYZ"
        assert b"is_upload" not in body.content
        # caller's mapping is untouched
        assert payload["is_upload"] is True

    def test_is_upload_payload(self) -> None:
        assert is_upload_payload({"is_upload": 1})
        assert not is_upload_payload({"is_upload": 0})
        assert not is_upload_payload([{"is_upload": True}])


class TestEncodeMultipart:
    def test_single_file_exact_body(self, text_file: Path) -> None:
        upload = UploadFile(field_name="f", file_name="a.txt", path=str(text_file), mime_type="text/plain")
        body = encode_multipart([upload], boundary="B")
        assert body.content == (
            b"--B\r\n"
            b'Content-Disposition: form-data; name="f"; filename="a.txt"\r\n'
            b"Content-Type: text/plain\r\n"
            b"\r\n"
            b"hi\r\n"
            b"--B--\r\n"
        )

    def test_single_file_generated_boundary(self, text_file: Path) -> None:
        body = encode_multipart(
            [{"field_name": "f", "file_name": "a.txt", "path": str(text_file), "mime_type": "text/plain"}]
        )
        boundary = body.content_type.split("boundary=", 1)[1]
        assert boundary.startswith(BOUNDARY_PREFIX)
        assert body.content.count(b"Content-Disposition") == 1
        assert b'name="f"; filename="a.txt"' in body.content
        assert b"Content-Type: text/plain" in body.content
        assert body.content.endswith(f"--{boundary}--\r\n".encode())

    def test_multiple_files(self, tmp_path: Path) -> None:
        first = tmp_path / "one.bin"
        first.write_bytes(b"\x00\x01")
        second = tmp_path / "two.json"
        second.write_bytes(b"{}")
        body = encode_multipart(
            [
                UploadFile(field_name="a", file_name="one.bin", path=str(first)),
                UploadFile(field_name="b", file_name="two.json", path=str(second), mime_type="application/json"),
            ],
            boundary="B",
        )
        assert body.content.count(b"--B\r\n") == 2
        assert b"Content-Type: application/octet-stream\r\n\r\n\x00\x01\r\n" in body.content
        assert body.content.endswith(b"--B--\r\n")

    def test_no_files_only_closing_delimiter(self) -> None:
        assert encode_multipart([], boundary="B").content == b"--B--\r\n"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        upload = UploadFile(field_name="f", file_name="x", path=str(tmp_path / "missing"))
        with pytest.raises(UploadError, match="Cannot read upload file"):
            encode_multipart([upload])

    def test_malformed_entry_raises(self) -> None:
        with pytest.raises(UploadError, match="Invalid upload entry"):
            encode_multipart([{"path": "/tmp/x"}])

    def test_boundaries_are_unique(self) -> None:
        assert len({new_boundary() for _ in range(50)}) == 50


# ---------------------------------------------------------------------------
# Header blocks
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_render(self) -> None:
        block = render_headers({"Content-type": "application/json", "Accept": "application/json"})
        assert block == "Content-type: application/json\r\nAccept: application/json"

    def test_render_pairs(self) -> None:
        assert render_headers([("A", "1"), ("B", "2")]) == "A: 1\r\nB: 2"

    def test_round_trip_preserves_order(self) -> None:
        headers = {"X-Z": "last", "Accept": "*/*", "X-Time": "12:30:00", "Empty": ""}
        assert parse_headers(render_headers(headers)) == list(headers.items())

    def test_parse_skips_blank_and_malformed_lines(self) -> None:
        assert parse_headers("A: 1\r\n\r\nnot-a-header\r\nB: 2\r\n") == [("A", "1"), ("B", "2")]

    def test_merge_replaces_in_place_case_insensitive(self) -> None:
        merged = merge_header([("Accept", "x"), ("content-type", "a"), ("X", "y")], "Content-type", "b")
        assert merged == [("Accept", "x"), ("Content-type", "b"), ("X", "y")]

    def test_merge_appends_or_prepends_new(self) -> None:
        assert merge_header([("A", "1")], "B", "2") == [("A", "1"), ("B", "2")]
        assert merge_header([("A", "1")], "B", "2", prepend=True) == [("B", "2"), ("A", "1")]

    def test_merge_collapses_duplicates(self) -> None:
        merged = merge_header([("X", "1"), ("A", "a"), ("x", "2")], "X", "3")
        assert merged == [("X", "3"), ("A", "a")]
