"""Response decoding and the bridge from exchanges to the output system.

:func:`decode_json` turns response bytes into a Python value and reports
(rather than raises) parse failures, so the client can apply its decode
policy in one place.  :func:`format_exchange` prints a finished
:class:`~jsonfetch.models.ExchangeRecord` for the CLI: the status line
and optional request details on stderr, the decoded body on stdout.

See Also:
    :mod:`jsonfetch.output` -- the output manager that renders data.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from jsonfetch.models import ExchangeRecord
from jsonfetch.output import get_output


def decode_json(content: bytes) -> tuple[Any, Optional[str]]:
    """Decode *content* as JSON.

    Returns:
        ``(value, None)`` on success, or ``(None, message)`` when the bytes
        are not valid UTF-8 JSON.  The decoded value is returned verbatim
        (object, array, scalar, or ``None`` for a JSON ``null``).
    """
    try:
        return json.loads(content), None
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        return None, str(exc)


def format_exchange(exchange: ExchangeRecord, show_request: bool = False) -> None:
    """Print *exchange* using the global output manager.

    Args:
        exchange: A completed exchange.
        show_request: Also print the request line, headers, and response
            headers to stderr.
    """
    output = get_output()
    request = exchange.request
    response = exchange.response

    if show_request:
        output.info(f"> {request.method} {request.url}")
        for name, value in request.headers:
            output.info(f"> {name}: {value}")
        if request.body:
            output.info(f"> ({len(request.body)} byte body)")

    if response is None:
        return

    if response.status_code is not None:
        output.info(f"HTTP {response.status_code}")
    if show_request:
        for line in response.headers:
            output.info(f"< {line}")
    if response.decode_error:
        output.warning(f"Response body is not JSON: {response.decode_error}")
    if response.error is None:
        output.format_response(response.data)
