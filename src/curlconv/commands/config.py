"""Config commands -- view and modify global configuration.

Provides the ``curlconv config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~curlconv.models.GlobalConfig`). Settings are persisted in the
curlconv config directory and control the default target language, the
preferred variant per language, and output preferences.
"""

from __future__ import annotations

import typer

from curlconv.exit_codes import EXIT_INVALID_USAGE, EXIT_UNKNOWN_LANGUAGE
from curlconv.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration.

    Loads the global config from disk and prints the config directory
    path followed by the full configuration as formatted output.

    Example::

        curlconv config show
        curlconv --json config show
    """
    from curlconv.config import get_config_dir, load_global_config
    from curlconv.exceptions import ConfigError

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


def _check_language(key: str) -> None:
    from curlconv.generators import supported_languages

    if key not in supported_languages():
        error(f"Unknown language: {key}")
        raise typer.Exit(code=EXIT_UNKNOWN_LANGUAGE)


def _check_variant(language: str, variant: str) -> str:
    """Return the registered spelling of *variant* for *language*."""
    from curlconv.generators import get_generators

    _check_language(language)
    for name in get_generators(language) or {}:
        if name.lower() == variant.lower():
            return name
    error(f"Unknown variant '{variant}' for {language}")
    raise typer.Exit(code=EXIT_INVALID_USAGE)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'output.format' or 'variants.python')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. ``variants.<language>`` may add a
    new entry; every other key must already exist. Language keys and
    variant names are checked against the generator registry, and the
    updated config is validated against
    :class:`~curlconv.models.GlobalConfig` before saving.

    Args:
        key: Dot-separated config key path (e.g. ``output.format``).
        value: String value to set.

    Raises:
        typer.Exit: With code 2 if the key path or value is invalid, or 4
            if a language key is not supported.

    Example::

        curlconv config set default_language go
        curlconv config set variants.nodejs Axios
        curlconv config set output.format plain
    """
    from curlconv.config import load_global_config, save_global_config
    from curlconv.exceptions import ConfigError
    from curlconv.models import GlobalConfig

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    # Navigate the dot-separated key path.
    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[k]

    final_key = keys[-1]
    if keys[0] == "variants" and len(keys) == 2:
        value = _check_variant(final_key, value)
    elif final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    elif key == "default_language":
        _check_language(value)

    target[final_key] = value

    try:
        new_config = GlobalConfig.model_validate(data)
    except Exception as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip the confirmation prompt."
    ),
) -> None:
    """Reset configuration to defaults.

    Replaces the persisted global config with a fresh
    :class:`~curlconv.models.GlobalConfig` instance containing all
    default values. Asks for confirmation unless ``--force`` is given.

    Raises:
        typer.Exit: If the user declines confirmation.

    Example::

        curlconv config reset
        curlconv config reset --force
    """
    from curlconv.config import save_global_config
    from curlconv.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
