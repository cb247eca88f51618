"""Core records shared by discovery, resolution, and the session runner."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InstanceRecord:
    """One RDS instance as returned by discovery."""

    address: str
    engine: str
    region: str

    @property
    def name(self) -> str:
        """Short name: the address up to its first '.'."""
        return self.address.split(".", 1)[0]


@dataclass(frozen=True)
class EnvironmentProfile:
    """Credentials for every instance whose address starts with ``prefix``."""

    prefix: str
    user: str
    password: str
    database: str = ""


@dataclass(frozen=True)
class JumpHostBinding:
    prefix: str
    jumphost: str


@dataclass(frozen=True)
class EngineProfile:
    name: str
    default_port: int
    primary_client: str
    fallback_client: str

    @property
    def clients(self) -> tuple[str, str]:
        return (self.primary_client, self.fallback_client)


MYSQL = EngineProfile("mysql", 3306, "mycli", "mysql")
POSTGRES = EngineProfile("postgres", 5432, "pgcli", "psql")


@dataclass(frozen=True)
class Resolution:
    """Everything needed to tunnel to and log into one instance."""

    profile: EnvironmentProfile
    jump_host: str
    engine: EngineProfile
