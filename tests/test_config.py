"""Tests for curlconv.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from curlconv.config import (
    _atomic_write,
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
)
from curlconv.exceptions import ConfigError
from curlconv.exit_codes import EXIT_GENERIC_FAILURE
from curlconv.models import GlobalConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> None:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestXDGPaths:
    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("curlconv.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_config_dir()
        assert result == tmp_path / ".config" / "curlconv"
        assert result.is_dir()

    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("curlconv.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        assert get_config_dir() == custom / "curlconv"

    def test_data_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("curlconv.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".local" / "share" / "curlconv"

    def test_fallback_dirs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("curlconv.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".curlconv"
        assert get_data_dir() == tmp_path / ".curlconv" / "logs"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_creates_file_with_content(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        _atomic_write(target, "hello world")
        assert target.read_text(encoding="utf-8") == "hello world"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        target.write_text("old content", encoding="utf-8")
        _atomic_write(target, "new content")
        assert target.read_text(encoding="utf-8") == "new content"

    def test_no_temp_files_left_on_success(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        _atomic_write(target, "content")
        assert list(tmp_path.iterdir()) == [target]

    def test_no_temp_files_left_on_error(self, tmp_path: Path) -> None:
        target = tmp_path / "test.txt"
        with patch("curlconv.config.os.fsync", side_effect=OSError("disk error")):
            with pytest.raises(OSError, match="disk error"):
                _atomic_write(target, "will fail")
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_load_returns_defaults_when_missing(self, isolated_config: Path) -> None:
        assert load_global_config() == GlobalConfig()

    def test_save_and_load_roundtrip(self, isolated_config: Path) -> None:
        config = GlobalConfig(default_language="rust", variants={"rust": "Ureq"})
        save_global_config(config)
        assert load_global_config() == config

    def test_saved_config_is_valid_json(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig())
        path = get_config_dir() / "config.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["default_language"] == "python"

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        (get_config_dir() / "config.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            load_global_config()
        assert exc_info.value.exit_code == EXIT_GENERIC_FAILURE

    def test_load_invalid_schema_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"output": {"format": "yaml"}})
        with pytest.raises(ConfigError):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_load_returns_none_when_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_load_valid_project_config(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "curlconv.json", {"default_language": "go"})
        assert load_project_config() == {"default_language": "go"}

    def test_load_invalid_json_raises_config_error(self, isolated_config: Path) -> None:
        (isolated_config / "curlconv.json").write_text("[oops", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_project_config()

    def test_non_object_raises_config_error(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "curlconv.json", ["go"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence resolution
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        _, target = resolve_config()
        assert target.language == "python"
        assert target.variant is None

    def test_global_language_and_variant(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_language="nodejs", variants={"nodejs": "Got"}))
        _, target = resolve_config()
        assert target == ("nodejs", "Got")

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_language="nodejs"))
        _write_json(
            isolated_config / "curlconv.json",
            {"default_language": "java", "variants": {"java": "OkHttp"}},
        )
        _, target = resolve_config()
        assert target == ("java", "OkHttp")

    def test_env_overrides_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "curlconv.json", {"default_language": "java"})
        monkeypatch.setenv("CURLCONV_LANGUAGE", "php")
        monkeypatch.setenv("CURLCONV_VARIANT", "Guzzle")
        _, target = resolve_config()
        assert target == ("php", "Guzzle")

    def test_cli_overrides_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CURLCONV_LANGUAGE", "php")
        _, target = resolve_config(cli_language="dart", cli_variant="Dio")
        assert target == ("dart", "Dio")

    def test_variant_only_inherited_for_winning_language(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(variants={"python": "HTTP Client"}))
        _, target = resolve_config(cli_language="go")
        assert target == ("go", None)

    def test_cli_format_overrides_global(self, isolated_config: Path) -> None:
        config, _ = resolve_config(cli_format="json")
        assert config.output.format == "json"
