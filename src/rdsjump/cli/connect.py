"""The `connect` command: discover → select → resolve → tunnel → client.

The tunnel is torn down before this command returns, whatever the client
does. The process exit code is the client's exit code.
"""

from __future__ import annotations

import asyncio
import time

import click

from rdsjump.cli._shared import aws_profile_option, config_option, fail, instance_source
from rdsjump.config import Configuration, require_config
from rdsjump.directory import InstanceSource, discover
from rdsjump.errors import RdsJumpError
from rdsjump.resolver import resolve
from rdsjump.selector import ClickPicker, Picker, select_instance
from rdsjump.session import run_session
from rdsjump.sessionlog import cleanup_old_logs, log_session
from rdsjump.tunnel import POLL_INTERVAL, TunnelManager


def _run_connect(
    filter_: str,
    override_args: tuple[str, ...],
    config: Configuration,
    *,
    source: InstanceSource,
    picker: Picker,
    manager: TunnelManager,
) -> int:
    """Run the full pipeline. Returns the client's exit code."""
    # Step 1: Discovery across all configured regions
    instances = asyncio.run(discover(filter_, config.regions, source))

    # Step 2: Selection (prompt only when ambiguous)
    instance = select_instance(instances, picker)

    # Step 3: Resolve jump host, credentials, client defaults
    resolution = resolve(instance.address, instance.engine, config)

    # Step 4: Tunnel
    local_port = manager.choose_port()
    click.echo(
        f"Connecting to {local_port}:{instance.address}:{resolution.engine.default_port} "
        f"through {resolution.jump_host}",
        err=True,
    )
    click.echo("Waiting for tunnel...", err=True)
    tunnel = manager.open(
        resolution.jump_host,
        instance.address,
        resolution.engine.default_port,
        local_port=local_port,
    )

    # Step 5: Client session (closes the tunnel)
    t0 = time.monotonic()
    exit_code = None
    error = None
    try:
        exit_code = run_session(
            resolution.engine, resolution.profile, tunnel, override_args
        )
    except RdsJumpError as e:
        error = str(e.code)
        raise
    finally:
        log_session(
            address=instance.address,
            engine=instance.engine,
            region=instance.region,
            jump_host=resolution.jump_host,
            local_port=tunnel.local_port,
            command=list(override_args) or None,
            exit_code=exit_code,
            duration_ms=(time.monotonic() - t0) * 1000,
            error=error,
        )
    return exit_code


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("filter_", metavar="FILTER")
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@config_option
@aws_profile_option
@click.option(
    "--tunnel-timeout",
    type=float,
    default=10.0,
    show_default=True,
    help="Seconds to wait for the tunnel (0 to wait indefinitely).",
)
def connect(
    filter_: str,
    command: tuple[str, ...],
    config_file: str | None,
    aws_profile: str | None,
    tunnel_timeout: float,
) -> None:
    """Open a client on the RDS instance whose address contains FILTER.

    \b
    Examples:
      rdsjump connect app-prod
      rdsjump connect app-prod -- pg_dump --schema-only
    """
    cleanup_old_logs()
    max_attempts = None if tunnel_timeout <= 0 else max(1, round(tunnel_timeout / POLL_INTERVAL))

    try:
        config = require_config(config_file)
        exit_code = _run_connect(
            filter_,
            command,
            config,
            source=instance_source(aws_profile or config.profile),
            picker=ClickPicker(),
            manager=TunnelManager(max_attempts=max_attempts),
        )
    except RdsJumpError as e:
        fail(e)

    if exit_code != 0:
        click.echo(f"error: client exited with status {exit_code}", err=True)
        # Killed by a signal: report it the way a shell would.
        raise SystemExit(exit_code if exit_code > 0 else 128 - exit_code)
