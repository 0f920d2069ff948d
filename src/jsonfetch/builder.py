"""Request construction: query strings, URLs, bodies, and header blocks.

Everything here is a pure function of its inputs (apart from reading
upload files), so :class:`~jsonfetch.client.FetchClient` can assemble a
:class:`~jsonfetch.models.PreparedRequest` without touching the network.

Bodies come in three shapes:

- no payload -- empty body;
- any other payload -- compact JSON;
- a mapping carrying a truthy ``is_upload`` marker -- multipart/form-data,
  one part per remaining value (each an :class:`~jsonfetch.models.UploadFile`
  or a mapping coercible to one).

Multipart bodies are built in memory, so very large uploads should be sent
some other way.
"""

from __future__ import annotations

import json
import secrets
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, NamedTuple, Optional
from urllib.parse import urlencode

from pydantic import ValidationError

from jsonfetch.exceptions import UploadError
from jsonfetch.models import UploadFile

UPLOAD_MARKER = "is_upload"
BOUNDARY_PREFIX = "--------JsonfetchBoundary"
CRLF = "\r\n"


class EncodedBody(NamedTuple):
    """Encoded request body and the content type it needs (``None`` = keep the configured one)."""

    content: bytes
    content_type: Optional[str] = None


# --- Query strings and URLs ---


def _form_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (list, tuple)):
        return [_form_value(v) for v in value]
    return value


def _form_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value if isinstance(value, str) else str(value)


def query_pairs(params: Optional[Mapping[str, Any]]) -> list[tuple[str, str]]:
    """Flatten *params* into the ``(key, value)`` text pairs sent on the wire.

    List values repeat the key, booleans become ``1``/``0`` and ``None``
    values are dropped.  Request signers use the same pairs so they sign
    exactly what :func:`build_query` sends.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        value = _form_value(value)
        values = value if isinstance(value, list) else [value]
        pairs.extend((str(key), _form_text(v)) for v in values)
    return pairs


def build_query(params: Optional[Mapping[str, Any]]) -> str:
    """URL-form-encode *params* in their iteration order (see :func:`query_pairs`)."""
    return urlencode(query_pairs(params))


def build_url(base_url: str, path: str = "", params: Optional[Mapping[str, Any]] = None) -> str:
    """Join *base_url* and *path*, appending ``?query`` only when there is one."""
    url = f"{base_url}{path}"
    query = build_query(params)
    return f"{url}?{query}" if query else url


# --- Bodies ---


def is_upload_payload(payload: Any) -> bool:
    """Return ``True`` when *payload* is a mapping with a truthy ``is_upload`` marker."""
    return isinstance(payload, Mapping) and bool(payload.get(UPLOAD_MARKER))


def encode_json(payload: Any) -> bytes:
    """Serialise *payload* as compact JSON."""
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def new_boundary() -> str:
    """Return a fresh multipart boundary token."""
    return BOUNDARY_PREFIX + secrets.token_hex(16)


def _coerce_upload(entry: Any) -> UploadFile:
    if isinstance(entry, UploadFile):
        return entry
    try:
        return UploadFile.model_validate(entry)
    except ValidationError as exc:
        raise UploadError(f"Invalid upload entry {entry!r}: {exc}") from exc


def _read_file(upload: UploadFile) -> bytes:
    path = Path(upload.path).expanduser()
    try:
        return path.read_bytes()
    except OSError as exc:
        raise UploadError(f"Cannot read upload file {path}: {exc}") from exc


def encode_multipart(files: Iterable[Any], boundary: Optional[str] = None) -> EncodedBody:
    """Encode *files* as a multipart/form-data body.

    Args:
        files: :class:`~jsonfetch.models.UploadFile` instances or mappings
            with ``field_name``/``file_name``/``path``/``mime_type`` keys
            (or their legacy aliases).
        boundary: Boundary token to use.  A random one is generated when
            omitted.

    Returns:
        An :class:`EncodedBody` whose ``content_type`` carries the boundary.

    Raises:
        UploadError: If an entry is malformed or its file cannot be read.
    """
    boundary = boundary or new_boundary()
    chunks: list[bytes] = []
    for entry in files:
        upload = _coerce_upload(entry)
        head = (
            f"--{boundary}{CRLF}"
            f'Content-Disposition: form-data; name="{upload.field_name}"; '
            f'filename="{upload.file_name}"{CRLF}'
            f"Content-Type: {upload.mime_type}{CRLF}{CRLF}"
        )
        chunks.append(head.encode("utf-8"))
        chunks.append(_read_file(upload))
        chunks.append(CRLF.encode("ascii"))

    # closing delimiter carries the trailing "--"
    chunks.append(f"--{boundary}--{CRLF}".encode("ascii"))
    return EncodedBody(b"".join(chunks), f"multipart/form-data; boundary={boundary}")


def encode_body(payload: Any, boundary: Optional[str] = None) -> EncodedBody:
    """Encode *payload* as an empty, JSON, or multipart body.

    The ``is_upload`` marker is stripped before multipart encoding; the
    caller's mapping is left untouched.
    """
    if payload is None or (isinstance(payload, (Mapping, list, tuple, str)) and not payload):
        return EncodedBody(b"")
    if is_upload_payload(payload):
        files = [value for key, value in payload.items() if key != UPLOAD_MARKER]
        return encode_multipart(files, boundary=boundary)
    return EncodedBody(encode_json(payload))


# --- Header blocks ---


def render_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]]) -> str:
    """Render headers as ``Name: Value`` lines joined by CRLF."""
    items = headers.items() if isinstance(headers, Mapping) else headers
    return CRLF.join(f"{name}: {value}" for name, value in items)


def parse_headers(block: str) -> list[tuple[str, str]]:
    """Parse a CRLF header block back into ordered ``(name, value)`` pairs.

    Blank lines are skipped; only the first ``:`` separates name from value.
    """
    pairs: list[tuple[str, str]] = []
    for line in block.split(CRLF):
        if not line.strip():
            continue
        name, sep, value = line.partition(":")
        if not sep:
            continue
        pairs.append((name.strip(), value.strip()))
    return pairs


def merge_header(
    headers: Iterable[tuple[str, str]], name: str, value: str, prepend: bool = False
) -> list[tuple[str, str]]:
    """Return *headers* with every *name* entry (case-insensitive) replaced by one ``name: value``.

    The new header takes the position of the first replaced entry, or goes
    to the front (``prepend=True``) or back when there was none.
    """
    merged: list[tuple[str, str]] = []
    placed = False
    lowered = name.lower()
    for key, existing in headers:
        if key.lower() == lowered:
            if not placed:
                merged.append((name, value))
                placed = True
            continue
        merged.append((key, existing))
    if not placed:
        if prepend:
            merged.insert(0, (name, value))
        else:
            merged.append((name, value))
    return merged
