"""Config commands -- view and modify the global configuration.

Provides the ``vmscli config`` sub-command group for reading and updating
``config.json`` (:class:`~vmscli.models.GlobalConfig`): the portal base URL,
the preferred credential store, the access-token cookie prefix and HTTP
request settings.
"""

from __future__ import annotations

import typer

from vmscli.output import error, format_response, info, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the current configuration.

    Example::

        vmscli config show
        vmscli --json config show
    """
    from vmscli.config import get_config_path, load_global_config
    from vmscli.exceptions import ConfigError

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    info(f"Config file: {get_config_path()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("path")
def config_path() -> None:
    """Print the config file and credentials file locations."""
    from vmscli.config import get_config_path, get_credentials_path

    print_data(str(get_config_path()))
    print_data(str(get_credentials_path()))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'request.timeout')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type (bool, number or
    string) and the result is validated before it is saved.
    ``credential_store`` must be one of ``auto``, ``keyring``, ``file``.

    Raises:
        typer.Exit: With code 2 for an unknown key or an invalid value.

    Example::

        vmscli config set base_url https://portal.example.com
        vmscli config set credential_store file
        vmscli config set request.verify_ssl false
    """
    from vmscli.auth.credential_store import normalize_store_kind, validate_store_kind
    from vmscli.config import load_global_config, save_global_config
    from vmscli.exceptions import ConfigError, ValidationError
    from vmscli.models import GlobalConfig

    try:
        config = load_global_config()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = config.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    coerced: object
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, (int, float)):
        try:
            coerced = float(value) if "." in value else int(value)
        except ValueError:
            error(f"Expected a number for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    else:
        coerced = value

    if key == "credential_store":
        try:
            validate_store_kind(value)
        except ValidationError as exc:
            error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None
        coerced = normalize_store_kind(value)

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")
