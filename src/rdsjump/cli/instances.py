"""The `instances` command: discovery only, no tunnel."""

from __future__ import annotations

import asyncio

import click

from rdsjump.cli._output import format_instances
from rdsjump.cli._shared import aws_profile_option, config_option, fail, instance_source
from rdsjump.config import require_config
from rdsjump.directory import discover
from rdsjump.errors import RdsJumpError


@click.command()
@click.argument("filter_", metavar="[FILTER]", required=False, default="")
@config_option
@aws_profile_option
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format.",
)
def instances(
    filter_: str,
    config_file: str | None,
    aws_profile: str | None,
    output_format: str,
) -> None:
    """List RDS instances whose address contains FILTER, across all regions."""
    try:
        config = require_config(config_file)
        found = asyncio.run(
            discover(filter_, config.regions, instance_source(aws_profile or config.profile))
        )
    except RdsJumpError as e:
        fail(e, output_format=output_format)

    click.echo(format_instances(found, output_format=output_format))
