"""Run the database client against an open tunnel, then tear the tunnel down."""

from __future__ import annotations

import contextlib
import os
import shutil
import signal
import subprocess
from collections.abc import Callable, Iterator, Mapping, Sequence

import click

from rdsjump.errors import ClientLaunchError, ClientNotFound
from rdsjump.models import EngineProfile, EnvironmentProfile
from rdsjump.tunnel import Tunnel

LOCALHOST = "127.0.0.1"
DEFAULT_LOCALE = "en_US.UTF-8"

_PASSTHROUGH = ("PATH", "TERM", "EDITOR")


def build_environment(
    profile: EnvironmentProfile,
    local_port: int,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Child environment: a few caller variables plus connection settings.

    The same settings are exported under the libpq (PG*), MySQL (MYSQL_*)
    and generic (DB_*) names so any client or script finds them.
    """
    environ = os.environ if environ is None else environ
    port = str(local_port)
    env = {name: environ[name] for name in _PASSTHROUGH if name in environ}
    env["LC_ALL"] = environ.get("LC_ALL", DEFAULT_LOCALE)
    env["LANG"] = environ.get("LANG", DEFAULT_LOCALE)
    env.update({
        "PGHOST": LOCALHOST,
        "PGPORT": port,
        "PGDATABASE": profile.database,
        "PGUSER": profile.user,
        "PGPASSWORD": profile.password,
        "DB_HOST": LOCALHOST,
        "DB_PORT": port,
        "DB_NAME": profile.database,
        "DB_USER": profile.user,
        "DB_PASS": profile.password,
        "DB_PASSWORD": profile.password,
        "MYSQL_HOST": LOCALHOST,
        "MYSQL_TCP_PORT": port,
        # The mysql client ignores MYSQL_USER/MYSQL_DATABASE; scripts use them.
        "MYSQL_USER": profile.user,
        "MYSQL_DATABASE": profile.database,
        "MYSQL_PWD": profile.password,
    })
    return env


def resolve_command(
    engine: EngineProfile,
    override_args: Sequence[str],
    which: Callable[[str], str | None] = shutil.which,
) -> tuple[str, list[str]]:
    """Pick the program to run and its arguments."""
    args = list(override_args)
    if args and args[0] == "--":
        args = args[1:]
    if args:
        return args[0], args[1:]

    for client in engine.clients:
        path = which(client)
        if path:
            return path, []
    raise ClientNotFound(
        f"neither {engine.primary_client} nor {engine.fallback_client} found on PATH"
    ).help(f"install {engine.primary_client} and/or {engine.fallback_client}")


def is_default_client(engine: EngineProfile, command: str) -> bool:
    return os.path.basename(command) in engine.clients


def client_arguments(
    engine: EngineProfile,
    profile: EnvironmentProfile,
    command: str,
    args: Sequence[str],
) -> list[str]:
    """MySQL clients don't read user/database from the environment; pass them."""
    args = list(args)
    if engine.name == "mysql" and is_default_client(engine, command):
        args += [f"-u'{profile.user}'", profile.database]
    return args


@contextlib.contextmanager
def _ignore_interrupts() -> Iterator[None]:
    """Let Ctrl-C reach the foreground client without killing us."""
    try:
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    except ValueError:
        # Not the main thread; nothing to restore.
        yield
        return
    try:
        yield
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)


def run_session(
    engine: EngineProfile,
    profile: EnvironmentProfile,
    tunnel: Tunnel,
    override_args: Sequence[str] = (),
    *,
    environ: Mapping[str, str] | None = None,
    which: Callable[[str], str | None] = shutil.which,
    popen: Callable[..., subprocess.Popen] = subprocess.Popen,
) -> int:
    """Run the client in the foreground and return its exit status.

    The tunnel is closed on every path out of this function.
    """
    try:
        command, args = resolve_command(engine, override_args, which)
        args = client_arguments(engine, profile, command, args)
        env = build_environment(profile, tunnel.local_port, environ)

        click.echo(f"Running: {' '.join([command, *args])}", err=True)
        try:
            # stdin/stdout/stderr are inherited.
            child = popen([command, *args], env=env)
        except OSError as e:
            raise ClientLaunchError(f"could not run {command}: {e}") from e

        with _ignore_interrupts():
            return child.wait()
    finally:
        tunnel.close()
