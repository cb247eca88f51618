"""CLI entry point. Both `rdsjump` and `rdsj` resolve here."""

from __future__ import annotations

import click

from rdsjump.cli.config import config_group
from rdsjump.cli.connect import connect
from rdsjump.cli.instances import instances


@click.group()
@click.version_option(package_name="rdsjump")
def main() -> None:
    """rdsjump: open a database client on an RDS instance through a bastion."""


main.add_command(connect)
main.add_command(instances)
main.add_command(config_group)
