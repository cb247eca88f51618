"""The `config` command group: edit ~/.rdsjump/config.toml."""

from __future__ import annotations

import click

from rdsjump.cli._output import format_config
from rdsjump.cli._shared import config_option, fail
from rdsjump.config import Configuration, config_path, load_config, save_config
from rdsjump.errors import RdsJumpError
from rdsjump.models import EnvironmentProfile, JumpHostBinding


def _load(config_file: str | None) -> Configuration:
    try:
        return load_config(config_file)
    except RdsJumpError as e:
        fail(e)


@click.group("config")
def config_group() -> None:
    """Manage regions, jump hosts and RDS credentials (~/.rdsjump/config.toml)."""


@config_group.command("show")
@config_option
def config_show(config_file: str | None) -> None:
    """Show the configuration (passwords masked)."""
    click.echo(f"# {config_path(config_file)}")
    click.echo(format_config(_load(config_file)))


@config_group.command("add-region")
@click.argument("region")
@config_option
def config_add_region(region: str, config_file: str | None) -> None:
    """Add a region to search, e.g. us-east-1."""
    config = _load(config_file)
    if region in config.regions:
        click.echo(f"Region '{region}' already configured.")
        return
    config.regions.append(region)
    path = save_config(config, config_file)
    click.echo(f"Saved region '{region}' to {path}")


@config_group.command("add-env")
@click.argument("prefix")
@click.argument("jumphost")
@config_option
def config_add_env(prefix: str, jumphost: str, config_file: str | None) -> None:
    """Tunnel through JUMPHOST for addresses starting with PREFIX.

    \b
    Examples:
      rdsjump config add-env pro bastion.prod.example.com
      rdsjump config add-env stg ubuntu@bastion.staging.example.com
    """
    config = _load(config_file)
    binding = JumpHostBinding(prefix=prefix, jumphost=jumphost)
    # Replace in place: first match in file order wins.
    existing = [i for i, e in enumerate(config.environments) if e.prefix == prefix]
    if existing:
        config.environments[existing[0]] = binding
    else:
        config.environments.append(binding)
    path = save_config(config, config_file)
    click.echo(f"Saved environment '{prefix}' to {path}")


@config_group.command("add-rds")
@click.argument("prefix")
@click.argument("user")
@click.argument("password")
@click.option("--database", default="", help="Database name (default: derived from the address).")
@config_option
def config_add_rds(
    prefix: str, user: str, password: str, database: str, config_file: str | None
) -> None:
    """Use USER/PASSWORD for instances whose address starts with PREFIX."""
    config = _load(config_file)
    profile = EnvironmentProfile(prefix=prefix, user=user, password=password, database=database)
    existing = [i for i, r in enumerate(config.rds) if r.prefix == prefix]
    if existing:
        config.rds[existing[0]] = profile
    else:
        config.rds.append(profile)
    path = save_config(config, config_file)
    click.echo(f"Saved RDS credentials for '{prefix}' to {path}")


@config_group.command("remove-env")
@click.argument("prefix")
@config_option
def config_remove_env(prefix: str, config_file: str | None) -> None:
    """Remove the jump host entry for PREFIX."""
    config = _load(config_file)
    kept = [e for e in config.environments if e.prefix != prefix]
    if len(kept) == len(config.environments):
        click.echo(f"Environment '{prefix}' not found.", err=True)
        raise SystemExit(1)
    config.environments = kept
    save_config(config, config_file)
    click.echo(f"Removed environment '{prefix}'.")


@config_group.command("remove-rds")
@click.argument("prefix")
@config_option
def config_remove_rds(prefix: str, config_file: str | None) -> None:
    """Remove the RDS credentials for PREFIX."""
    config = _load(config_file)
    kept = [r for r in config.rds if r.prefix != prefix]
    if len(kept) == len(config.rds):
        click.echo(f"RDS configuration '{prefix}' not found.", err=True)
        raise SystemExit(1)
    config.rds = kept
    save_config(config, config_file)
    click.echo(f"Removed RDS configuration '{prefix}'.")
