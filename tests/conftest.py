"""Root conftest: shared fixtures and fakes for process boundaries."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest

from rdsjump.config import Configuration
from rdsjump.models import EnvironmentProfile, InstanceRecord, JumpHostBinding
from rdsjump.tunnel import Tunnel


class FakeProcess:
    """Stands in for subprocess.Popen; counts kills."""

    def __init__(self, returncode: int | None = None, wait_returns: int | None = None) -> None:
        self.returncode = returncode
        self.wait_returns = wait_returns
        self.kills = 0
        self.waits = 0

    def poll(self) -> int | None:
        return self.returncode

    def kill(self) -> None:
        self.kills += 1
        self.returncode = -9

    def wait(self) -> int | None:
        self.waits += 1
        if self.wait_returns is not None:
            return self.wait_returns
        return self.returncode


class StaticSource:
    """InstanceSource returning canned records per region."""

    def __init__(self, by_region: dict[str, list[InstanceRecord]]) -> None:
        self.by_region = by_region
        self.calls: list[str] = []

    async def describe(self, region: str) -> list[InstanceRecord]:
        self.calls.append(region)
        return list(self.by_region[region])


class StubPicker:
    def __init__(self, answer: int | None = 0) -> None:
        self.answer = answer
        self.calls = 0
        self.items = None
        self.searcher = None

    def pick(self, items, searcher):
        self.calls += 1
        self.items = items
        self.searcher = searcher
        return self.answer


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path):
    """Keep config and session logs out of the real home directory."""
    with patch("rdsjump.config._CONFIG_FILE", tmp_path / "config.toml"), patch(
        "rdsjump.sessionlog._LOG_ROOT", tmp_path / "logs"
    ):
        yield


@pytest.fixture
def configuration() -> Configuration:
    return Configuration(
        regions=["us-east-1", "us-west-2"],
        environments=[
            JumpHostBinding(prefix="app-prod", jumphost="bastion.prod.example.com"),
            JumpHostBinding(prefix="app", jumphost="bastion.staging.example.com"),
        ],
        rds=[
            EnvironmentProfile(prefix="app-prod", user="app", password="s3cret"),
            EnvironmentProfile(prefix="app", user="dev", password="dev", database="appdb"),
        ],
    )


@pytest.fixture
def fake_process():
    return FakeProcess


@pytest.fixture
def static_source():
    return StaticSource


@pytest.fixture
def stub_picker():
    return StubPicker


@pytest.fixture
def make_tunnel():
    def _make(process: FakeProcess | None = None, local_port: int = 45000) -> Tunnel:
        return Tunnel(
            local_port=local_port,
            remote_host="app-prod.x.rds.example.com",
            remote_port=5432,
            jump_host="bastion.prod.example.com",
            process=process or FakeProcess(),
            stream=io.StringIO(),
        )

    return _make
