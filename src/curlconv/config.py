"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for curlconv:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.curlconv/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- A single :class:`~curlconv.models.GlobalConfig`
  JSON file storing the default target language, preferred variants, and
  output settings.
* **Project config** -- An optional ``./curlconv.json`` that pins the
  target language for a repository.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, project-local config, and global config into the
  effective :class:`Target`.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) to prevent data loss on crash or power failure.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, NamedTuple, Optional

from curlconv.exceptions import ConfigError
from curlconv.models import GlobalConfig

_APP_NAME = "curlconv"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "curlconv.json"


class Target(NamedTuple):
    """The resolved conversion target: a language key and an optional variant."""

    language: str
    variant: Optional[str]


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses XDG Base Directories (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/curlconv/`` (default ``~/.config/curlconv/``).
    On macOS/Windows: ``~/.curlconv/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/curlconv/`` (default ``~/.local/share/curlconv/``).
    On macOS/Windows: ``~/.curlconv/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
    """
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
        fd = None  # prevent double-close below
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


def _global_config_path() -> Path:
    """Path to the global config file."""
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~curlconv.models.GlobalConfig`. If the
        file does not exist, a default instance is returned.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            Pydantic validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    _atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./curlconv.json``.

    Project-local config sits between global config and environment
    variables in the precedence chain. It typically sets
    ``default_language`` so that a repository's snippets come out in the
    language the project is written in.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
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


# --- Precedence resolution ---


def resolve_config(
    cli_language: Optional[str] = None,
    cli_variant: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> tuple[GlobalConfig, Target]:
    """Resolve the conversion target with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_language``, ``cli_variant``, ``cli_format``)
        2. Environment variables (``CURLCONV_LANGUAGE``, ``CURLCONV_VARIANT``)
        3. Project config (``./curlconv.json``)
        4. User config (``~/.config/curlconv/config.json``)
        5. Defaults

    A variant is only inherited from config when it was configured for
    the language that won; an explicit variant always wins.

    Returns:
        A tuple of ``(global_config, target)``.
    """
    global_cfg = load_global_config()
    variants = dict(global_cfg.variants)

    language = global_cfg.default_language

    project = load_project_config()
    if project is not None:
        if project.get("default_language"):
            language = str(project["default_language"])
        project_variants = project.get("variants")
        if isinstance(project_variants, dict):
            variants.update({str(k): str(v) for k, v in project_variants.items()})

    env_language = os.environ.get("CURLCONV_LANGUAGE")
    if env_language:
        language = env_language
    if cli_language is not None:
        language = cli_language

    variant: Optional[str] = variants.get(language)
    env_variant = os.environ.get("CURLCONV_VARIANT")
    if env_variant:
        variant = env_variant
    if cli_variant is not None:
        variant = cli_variant

    if cli_format is not None:
        global_cfg.output.format = cli_format  # type: ignore[assignment]

    return global_cfg, Target(language=language, variant=variant)
