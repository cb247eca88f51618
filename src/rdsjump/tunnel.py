"""SSH port-forward supervision: spawn, wait until connectable, tear down."""

from __future__ import annotations

import random
import socket
import subprocess
import sys
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import IO

from rdsjump.errors import TunnelNotReady, TunnelStartError

PORT_RANGE = (40000, 60000)
POLL_INTERVAL = 0.1
MAX_ATTEMPTS = 100

# iTerm2 background colours.
_BG_PRODUCTION = "\033]Ph501010\033\\"
_BG_OTHER = "\033]Ph403010\033\\"
_BG_SAFE = "\033]Ph103010\033\\"


def port_is_open(port: int) -> bool:
    """Return True if something accepts TCP connections on 127.0.0.1:port."""
    try:
        with socket.create_connection(("127.0.0.1", port), timeout=1):
            return True
    except OSError:
        return False


def _set_background(stream: IO[str], sequence: str) -> None:
    if stream.isatty():
        stream.write(sequence)
        stream.flush()


def background_for(address: str) -> str:
    return _BG_PRODUCTION if address.startswith("pro") else _BG_OTHER


@dataclass
class Tunnel:
    local_port: int
    remote_host: str
    remote_port: int
    jump_host: str
    process: subprocess.Popen
    stream: IO[str] = field(default=sys.stderr, repr=False)
    closed: bool = field(default=False, init=False)

    @property
    def path(self) -> str:
        return f"{self.local_port}:{self.remote_host}:{self.remote_port}"

    def close(self) -> None:
        """Kill the forwarding process. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        _set_background(self.stream, _BG_SAFE)
        if self.process.poll() is None:
            self.process.kill()
        self.process.wait()


class TunnelManager:
    """Opens one ssh -NL forward through a jump host.

    ``rng``, ``spawn``, ``probe``, ``port_in_use`` and ``sleep`` are injectable
    so tests can run without ssh or sockets. ``max_attempts=None`` polls forever.
    A port that already answers before ssh starts is refused, and ssh is told
    to exit when it cannot bind the forward.
    """

    def __init__(
        self,
        *,
        rng: random.Random | None = None,
        spawn: Callable[..., subprocess.Popen] = subprocess.Popen,
        probe: Callable[[int], bool] = port_is_open,
        port_in_use: Callable[[int], bool] = port_is_open,
        sleep: Callable[[float], None] = time.sleep,
        poll_interval: float = POLL_INTERVAL,
        max_attempts: int | None = MAX_ATTEMPTS,
        ssh: str = "ssh",
        stream: IO[str] | None = None,
    ) -> None:
        self._rng = rng if rng is not None else random.Random()
        self._spawn = spawn
        self._probe = probe
        self._port_in_use = port_in_use
        self._sleep = sleep
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._ssh = ssh
        self._stream = stream if stream is not None else sys.stderr

    def choose_port(self) -> int:
        return self._rng.randrange(*PORT_RANGE)

    def open(
        self,
        jump_host: str,
        remote_address: str,
        remote_port: int,
        *,
        local_port: int | None = None,
    ) -> Tunnel:
        if local_port is None:
            local_port = self.choose_port()
        path = f"{local_port}:{remote_address}:{remote_port}"
        # The client sends credentials to this port; it must belong to our ssh.
        if self._port_in_use(local_port):
            raise TunnelStartError(f"local port {local_port} is already in use").help(
                "run the command again to pick another port"
            )
        try:
            process = self._spawn(
                [self._ssh, "-o", "ExitOnForwardFailure=yes", "-NL", path, jump_host],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                # Own session: a Ctrl-C meant for the client must not reach ssh.
                start_new_session=True,
            )
        except OSError as e:
            raise TunnelStartError(f"could not start {self._ssh}: {e}") from e

        tunnel = Tunnel(
            local_port=local_port,
            remote_host=remote_address,
            remote_port=remote_port,
            jump_host=jump_host,
            process=process,
            stream=self._stream,
        )
        try:
            self._wait_until_ready(tunnel)
        except BaseException:
            tunnel.close()
            raise

        _set_background(self._stream, background_for(remote_address))
        return tunnel

    def _wait_until_ready(self, tunnel: Tunnel) -> None:
        attempts = 0
        while self._max_attempts is None or attempts < self._max_attempts:
            attempts += 1
            self._sleep(self._poll_interval)
            status = tunnel.process.poll()
            if status is not None:
                raise TunnelStartError(
                    f"ssh exited with status {status} before {tunnel.path} was ready"
                ).note(f"local port {tunnel.local_port} may already be in use").help(
                    f"check that `ssh {tunnel.jump_host}` works on its own"
                )
            if self._probe(tunnel.local_port):
                return
        waited = attempts * self._poll_interval
        raise TunnelNotReady(
            f"tunnel did not become ready after {waited:.1f}s ({tunnel.path} via {tunnel.jump_host})"
        ).help("raise --tunnel-timeout, or use 0 to wait indefinitely")

    def close(self, tunnel: Tunnel) -> None:
        tunnel.close()
