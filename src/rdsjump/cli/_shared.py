"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import click

from rdsjump.cli._output import format_error
from rdsjump.directory import InstanceSource
from rdsjump.errors import RdsJumpError

config_option = click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="RDSJUMP_CONFIG",
    help="Config file (default: ~/.rdsjump/config.toml).",
)

aws_profile_option = click.option(
    "--aws-profile",
    default=None,
    envvar="AWS_PROFILE",
    help="boto3 named profile (overrides the config file).",
)


def fail(error: RdsJumpError, *, output_format: str = "text") -> NoReturn:
    """Print a pipeline error and exit with status 1."""
    if output_format == "json":
        click.echo(format_error(error, output_format="json"))
    else:
        click.echo(format_error(error), err=True)
    raise SystemExit(1) from error


def instance_source(profile: str | None) -> InstanceSource:
    """The boto3-backed source, imported lazily so `config` commands stay fast."""
    from rdsjump.aws import RDSInstanceSource

    return RDSInstanceSource(profile=profile)
