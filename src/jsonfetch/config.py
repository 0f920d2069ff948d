"""Configuration loading, credential sources, and XDG data paths.

This module handles the settings the ``jsonfetch`` CLI (and library users
who want file-based configuration) need:

* **Client config** -- :func:`load_client_config` reads a JSON or YAML
  file into a :class:`~jsonfetch.models.ClientConfig` and layers
  environment variables and explicit arguments on top.
* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, interactive prompts, or inline literals, so that
  passwords and OAuth secrets never have to appear on the command line.
* **Data directory** -- :func:`get_data_dir` locates the XDG data
  directory where crash logs are written.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from jsonfetch.exceptions import ConfigError
from jsonfetch.models import DEFAULT_HEADERS, ClientConfig

_APP_NAME = "jsonfetch"

ENV_BASE_URL = "JSONFETCH_BASE_URL"
ENV_TIMEOUT = "JSONFETCH_TIMEOUT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/jsonfetch/`` (default ``~/.local/share/jsonfetch/``).
    On macOS/Windows: ``~/.jsonfetch/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_DATA_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".local" / "share"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Client config ---


def _read_config_file(path: Path) -> dict[str, Any]:
    """Parse a JSON or YAML config file into a dict."""
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc

    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain an object (got {type(data).__name__})")
    return data


def load_client_config(
    path: Optional[str | Path] = None,
    *,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ClientConfig:
    """Build a :class:`~jsonfetch.models.ClientConfig` from file, environment, and arguments.

    Precedence (high to low):
        1. Explicit arguments (``base_url``, ``timeout``)
        2. Environment variables (``JSONFETCH_BASE_URL``, ``JSONFETCH_TIMEOUT``)
        3. The config file at *path* (``.json``, ``.yaml`` or ``.yml``)
        4. Defaults

    When the result has no headers, :data:`~jsonfetch.models.DEFAULT_HEADERS`
    are injected.

    Raises:
        ConfigError: If the file is unreadable or invalid, ``JSONFETCH_TIMEOUT``
            is not a number, or no base URL is configured anywhere.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data = _read_config_file(Path(path).expanduser())

    env_base_url = os.environ.get(ENV_BASE_URL)
    if env_base_url:
        data["base_url"] = env_base_url
    env_timeout = os.environ.get(ENV_TIMEOUT)
    if env_timeout:
        try:
            data["timeout"] = float(env_timeout)
        except ValueError as exc:
            raise ConfigError(f"{ENV_TIMEOUT} must be a number (got {env_timeout!r})") from exc

    if base_url is not None:
        data["base_url"] = base_url
    if timeout is not None:
        data["timeout"] = timeout

    if not data.get("base_url"):
        raise ConfigError(f"No base URL configured (pass one or set {ENV_BASE_URL})")
    if not data.get("headers"):
        data["headers"] = dict(DEFAULT_HEADERS)

    try:
        return ClientConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client config: {exc}") from exc


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)
        - ``"literal:VALUE"`` -- uses ``VALUE`` as-is

    Raises:
        ConfigError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential: ")

    if source.startswith("literal:"):
        return source[8:]

    raise ConfigError(f"Unknown credential source format: {source}")
