"""Shared test fixtures for jsonfetch.

Provides fixtures for isolating environment variables and XDG paths,
resetting the global output manager, building clients on top of
:class:`httpx.MockTransport`, and running CLI commands.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import httpx
import pytest

from jsonfetch.client import FetchClient
from jsonfetch.output import OutputFormat, OutputManager, reset_output, set_output
from jsonfetch.transport import HttpxTransport

FIXED_TIMESTAMP = 1700000000
FIXED_NONCE = "nonce123"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams per invocation.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_jsonfetch_logger() -> None:
    """Undo configure_logging() so caplog sees jsonfetch records again."""
    yield
    logger = logging.getLogger("jsonfetch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_DATA_HOME at tmp_path and clear JSONFETCH_* variables."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["JSONFETCH_BASE_URL", "JSONFETCH_TIMEOUT"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format output manager."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True, no_color=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# Client fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def signer_options() -> dict:
    """Deterministic clock and nonce for OAuth signing."""
    return {"clock": lambda: FIXED_TIMESTAMP, "nonce_factory": lambda: FIXED_NONCE}


@pytest.fixture
def mock_client() -> Callable[..., FetchClient]:
    """Factory: ``mock_client(handler, **kwargs)`` -> FetchClient over httpx.MockTransport."""
    created: list[FetchClient] = []

    def _factory(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> FetchClient:
        base_url = kwargs.pop("base_url", "https://api.example.com/v1")
        transport = HttpxTransport(httpx.Client(transport=httpx.MockTransport(handler)))
        client = FetchClient(base_url, transport=transport, **kwargs)
        created.append(client)
        return client

    yield _factory
    for client in created:
        client.close()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
