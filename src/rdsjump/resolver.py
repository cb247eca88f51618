"""Map an instance address and engine to credentials, jump host, and client defaults."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from rdsjump.config import Configuration
from rdsjump.errors import NoEnvironmentMatched, NoProfileMatched
from rdsjump.models import (
    MYSQL,
    POSTGRES,
    EngineProfile,
    EnvironmentProfile,
    JumpHostBinding,
    Resolution,
)


def engine_profile(engine: str) -> EngineProfile:
    """Only MySQL is special-cased; every other engine gets the Postgres defaults."""
    if engine == "mysql":
        return MYSQL
    return POSTGRES


def derive_database(address: str) -> str:
    """Best-effort database name from an '<app>-<env>.<rest>' style address.

    "mydb-prod.abcdef.us-east-1.rds.amazonaws.com" -> "prod". Addresses that
    do not follow the convention may produce an empty or surprising name.
    """
    segments = address.split("-")
    if len(segments) < 2:
        return ""
    segment = segments[1]
    if len(segment) > 1:
        return segment.split(".", 1)[0]
    return ""


def resolve_jump_host(address: str, environments: Sequence[JumpHostBinding]) -> str:
    for env in environments:
        if address.startswith(env.prefix):
            return env.jumphost
    raise NoEnvironmentMatched(f"no environment matched {address}").help(
        "add one: rdsjump config add-env <prefix> <jumphost>"
    )


def resolve_profile(address: str, profiles: Sequence[EnvironmentProfile]) -> EnvironmentProfile:
    for profile in profiles:
        if address.startswith(profile.prefix):
            if not profile.database:
                return replace(profile, database=derive_database(address))
            return profile
    raise NoProfileMatched(f"no RDS configuration found for {address}").help(
        "add one: rdsjump config add-rds <prefix> <user> <password>"
    )


def resolve(address: str, engine: str, config: Configuration) -> Resolution:
    jump_host = resolve_jump_host(address, config.environments)
    profile = resolve_profile(address, config.rds)
    return Resolution(profile=profile, jump_host=jump_host, engine=engine_profile(engine))
