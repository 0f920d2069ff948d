"""Typer application and CLI entry point for jsonfetch.

``jsonfetch request BASE_URL [PATH]`` sends one request through
:class:`~jsonfetch.client.FetchClient` and prints the decoded JSON body to
stdout.  Status lines, request details and warnings go to stderr.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  :class:`~jsonfetch.exceptions.JsonfetchError`
instances exit with their ``exit_code``; anything else is written to a
crash log under the data directory.

See Also:
    :mod:`jsonfetch.config`: Config files and credential sources.
    :mod:`jsonfetch.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import json
import mimetypes
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from jsonfetch import __version__
from jsonfetch.exceptions import AuthError, InvalidUsageError
from jsonfetch.exit_codes import EXIT_GENERIC_FAILURE
from jsonfetch.models import BasicCredentials, OAuthCredentials, UploadFile

app = typer.Typer(
    name="jsonfetch",
    help="Send JSON requests with Basic or OAuth 1.0a auth.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"jsonfetch {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write the response body to a file."
    ),
) -> None:
    """Root callback: install the global output manager and log handler."""
    from jsonfetch.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    configure_logging(output)


# ------------------------------------------------------------------ #
# Argument parsing helpers
# ------------------------------------------------------------------ #


def _parse_params(values: list[str]) -> dict[str, Any]:
    """Turn ``key=value`` strings into an ordered mapping; repeated keys become lists."""
    params: dict[str, Any] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Query parameter must be key=value (got {item!r})")
        if key in params:
            existing = params[key]
            params[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


def _parse_headers(values: list[str]) -> list[tuple[str, str]]:
    headers: list[tuple[str, str]] = []
    for item in values:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise InvalidUsageError(f"Header must be 'Name: value' (got {item!r})")
        headers.append((name.strip(), value.strip()))
    return headers


def _parse_file(item: str) -> UploadFile:
    """Parse ``field=path[;type=mime]`` into an :class:`UploadFile`."""
    spec, _, options = item.partition(";")
    field, sep, path = spec.partition("=")
    if not sep or not field or not path:
        raise InvalidUsageError(f"File must be field=path[;type=mime] (got {item!r})")

    mime_type: Optional[str] = None
    if options:
        key, _, value = options.partition("=")
        if key.strip() != "type" or not value.strip():
            raise InvalidUsageError(f"Unknown file option {options!r} (expected type=mime)")
        mime_type = value.strip()
    if mime_type is None:
        mime_type = mimetypes.guess_type(path)[0] or "application/octet-stream"

    return UploadFile(
        field_name=field,
        file_name=Path(path).name,
        path=path,
        mime_type=mime_type,
    )


def _parse_data(data: str) -> Any:
    try:
        return json.loads(data)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--data is not valid JSON: {exc}") from exc


def _resolve_basic(source: str) -> BasicCredentials:
    from jsonfetch.config import resolve_credential

    raw = resolve_credential(source)
    username, sep, password = raw.partition(":")
    if not sep:
        raise AuthError(
            "Basic auth credential must be in 'username:password' format "
            "(colon separator is required)"
        )
    return BasicCredentials(username=username, password=password)


def _resolve_oauth(
    consumer_key: Optional[str],
    consumer_secret: Optional[str],
    token: Optional[str],
    token_secret: Optional[str],
) -> Optional[OAuthCredentials]:
    from jsonfetch.config import resolve_credential

    given = [consumer_key, consumer_secret, token, token_secret]
    if not any(given):
        return None
    if not all(given):
        raise AuthError(
            "OAuth requires --oauth-consumer-key, --oauth-consumer-secret, "
            "--oauth-token and --oauth-token-secret"
        )
    assert consumer_key and consumer_secret and token and token_secret
    return OAuthCredentials(
        consumer_key=consumer_key,
        consumer_secret=resolve_credential(consumer_secret),
        token=token,
        token_secret=resolve_credential(token_secret),
    )


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("request")
def request_command(
    base_url: Optional[str] = typer.Argument(
        None, help="Base URL (falls back to the config file or JSONFETCH_BASE_URL)."
    ),
    path: str = typer.Argument("", help="Path appended to the base URL."),
    method: Optional[str] = typer.Option(None, "--method", "-X", help="HTTP method."),
    param: list[str] = typer.Option([], "--param", "-p", help="Query parameter key=value."),
    header: list[str] = typer.Option([], "--header", "-H", help="Header 'Name: value'."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="JSON request body."),
    file: list[str] = typer.Option(
        [], "--file", "-F", help="Upload field=path[;type=mime] as multipart/form-data."
    ),
    basic: Optional[str] = typer.Option(
        None, "--basic", help="Credential source resolving to user:pass."
    ),
    oauth_consumer_key: Optional[str] = typer.Option(None, "--oauth-consumer-key"),
    oauth_consumer_secret: Optional[str] = typer.Option(
        None, "--oauth-consumer-secret", help="Credential source for the consumer secret."
    ),
    oauth_token: Optional[str] = typer.Option(None, "--oauth-token"),
    oauth_token_secret: Optional[str] = typer.Option(
        None, "--oauth-token-secret", help="Credential source for the token secret."
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Timeout in seconds."),
    strict: bool = typer.Option(False, "--strict", help="Fail when the body is not JSON."),
    show_exchange: bool = typer.Option(
        False, "--show-exchange", help="Print request and response headers to stderr."
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="JSON or YAML client config."),
) -> None:
    """Send one request and print the decoded JSON response."""
    from jsonfetch.client import FetchClient, format_exchange
    from jsonfetch.config import load_client_config
    from jsonfetch.exceptions import RequestError

    if data is not None and file:
        raise InvalidUsageError("--data and --file cannot be combined")
    oauth_options = (oauth_consumer_key, oauth_consumer_secret, oauth_token, oauth_token_secret)
    if basic and any(oauth_options):
        raise InvalidUsageError("Choose either --basic or OAuth credentials, not both")

    cfg = load_client_config(config, base_url=base_url, timeout=timeout)
    if method:
        cfg.method = method.upper()
    if strict:
        cfg.strict_json = True
    for name, value in _parse_headers(header):
        cfg.headers[name] = value

    params = _parse_params(param)
    payload: Any = None
    if data is not None:
        payload = _parse_data(data)
    elif file:
        payload = {"is_upload": True}
        for index, item in enumerate(file):
            payload[f"file{index}"] = _parse_file(item)

    auth = _resolve_basic(basic) if basic else _resolve_oauth(
        oauth_consumer_key, oauth_consumer_secret, oauth_token, oauth_token_secret
    )

    with FetchClient.from_config(cfg) as client:
        client.set_auth(auth)
        try:
            exchange = client.send(path, params, payload)
        except RequestError as exc:
            if show_exchange and exc.exchange is not None:
                format_exchange(exc.exchange, show_request=True)
            raise
    format_exchange(exchange, show_request=show_exchange)


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from jsonfetch.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``jsonfetch`` console script.

    Unhandled :class:`~jsonfetch.exceptions.JsonfetchError` instances
    cause a clean exit with the error's ``exit_code``.  All other
    exceptions produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from jsonfetch.exceptions import JsonfetchError
        from jsonfetch.output import error

        if isinstance(exc, JsonfetchError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
