"""Config commands -- view and modify global configuration.

Provides the ``reqmorph config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~reqmorph.models.GlobalConfig`). Project files
(``./reqmorph.json``) and environment variables are not touched here;
``config show --effective`` prints the result of layering them.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError

from reqmorph.exceptions import ConfigError
from reqmorph.exit_codes import EXIT_INVALID_USAGE
from reqmorph.output import error, info, print_json, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False, "--effective", help="Apply project config and environment overrides."
    ),
) -> None:
    """Show the current configuration.

    Example::

        reqmorph config show
        reqmorph config show --effective --json
    """
    from reqmorph.config import get_config_dir, load_global_config, resolve_config

    try:
        config = resolve_config() if effective else load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config directory: {get_config_dir()}")
    print_json(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'render.out_dir')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The updated configuration is validated before it is saved, so an
    unknown key or an invalid value (``render.missing_fields maybe``)
    leaves the file unchanged.

    Example::

        reqmorph config set render.out_dir generated
        reqmorph config set render.missing_fields error
        reqmorph config set render.gofmt /usr/local/go/bin/gofmt
    """
    from reqmorph.config import load_global_config, save_global_config
    from reqmorph.models import GlobalConfig

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for part in keys[:-1]:
        if not isinstance(target.get(part), dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        target = target[part]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=EXIT_INVALID_USAGE)
    target[final_key] = value

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=EXIT_INVALID_USAGE) from None

    save_global_config(new_config)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults.

    Example::

        reqmorph config reset --force
    """
    from reqmorph.config import save_global_config
    from reqmorph.models import GlobalConfig

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
