"""Configuration management with XDG paths, atomic writes, and precedence resolution.

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.reqmorph/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- a :class:`~reqmorph.models.GlobalConfig` JSON file
  holding output and render defaults.
* **Project config** -- an optional ``./reqmorph.json`` with the same
  shape (any subset of keys), for per-repository defaults.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project config and global config.

Configuration is resolved once, at the CLI edge. The engine and emitters
never read it; commands hand them a :class:`~reqmorph.engine.context.MorphContext`
built from the resolved values (:func:`make_context`).
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from reqmorph.engine.context import MorphContext
from reqmorph.exceptions import ConfigError
from reqmorph.models import GlobalConfig

_APP_NAME = "reqmorph"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "reqmorph.json"

ENV_OUT_DIR = "REQMORPH_OUT_DIR"
ENV_MISSING_FIELDS = "REQMORPH_MISSING_FIELDS"
ENV_GOFMT = "REQMORPH_GOFMT"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    return Path.home().joinpath(*default_segments)


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/reqmorph/`` (default ``~/.config/reqmorph/``).
    On macOS/Windows: ``~/.reqmorph/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/reqmorph/`` (default ``~/.local/share/reqmorph/``).
    On macOS/Windows: ``~/.reqmorph/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* through a temp file in the same directory and a rename."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration, or defaults when no file exists.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    path = global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist *config* atomically."""
    data = config.model_dump(mode="json")
    _atomic_write(global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load ``./reqmorph.json`` if present.

    Returns:
        The parsed object, or ``None`` when the file does not exist.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# --- Precedence resolution ---


def resolve_config(
    cli_format: Optional[str] = None,
    cli_out_dir: Optional[str] = None,
    cli_missing_fields: Optional[str] = None,
    cli_gofmt: Optional[str] = None,
) -> GlobalConfig:
    """Resolve the effective configuration.

    Precedence (high to low):
        1. CLI flags
        2. Environment variables (``REQMORPH_OUT_DIR``,
           ``REQMORPH_MISSING_FIELDS``, ``REQMORPH_GOFMT``)
        3. Project config (``./reqmorph.json``)
        4. User config (``~/.config/reqmorph/config.json``)
        5. Defaults

    Raises:
        ConfigError: If a config file is invalid or a resolved value fails
            validation (for example an unknown missing-field policy).
    """
    data = load_global_config().model_dump(mode="json")

    project = load_project_config()
    if project is not None:
        data = _merge(data, project)

    render = data.setdefault("render", {})
    env_overrides = {
        "out_dir": os.environ.get(ENV_OUT_DIR),
        "missing_fields": os.environ.get(ENV_MISSING_FIELDS),
        "gofmt": os.environ.get(ENV_GOFMT),
    }
    for key, value in env_overrides.items():
        if value:
            render[key] = value

    cli_overrides = {
        "out_dir": cli_out_dir,
        "missing_fields": cli_missing_fields,
        "gofmt": cli_gofmt,
    }
    for key, value in cli_overrides.items():
        if value is not None:
            render[key] = value
    if cli_format is not None:
        data.setdefault("output", {})["format"] = cli_format

    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def make_context(config: GlobalConfig, logger: Optional[logging.Logger] = None) -> MorphContext:
    """Build the engine context for one invocation from resolved *config*."""
    return MorphContext(
        missing_fields=config.render.missing_fields,
        logger=logger or logging.getLogger("reqmorph.engine"),
        gofmt=config.render.gofmt,
        curl_auth_header=config.render.curl_auth_header,
    )
