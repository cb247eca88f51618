"""Configuration file: ~/.rdsjump/config.toml.

Layout::

    [aws]
    profile = "work"                     # optional boto3 named profile
    regions = ["us-east-1", "eu-west-1"]

    [[aws.environments]]
    prefix = "pro"
    jumphost = "bastion.prod.example.com"

    [[aws.rds]]
    prefix = "app-prod"
    database = ""                        # empty: derived from the address
    user = "app"
    password = "secret"
"""

from __future__ import annotations

import os
import stat
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from rdsjump.errors import ConfigError
from rdsjump.models import EnvironmentProfile, JumpHostBinding

_CONFIG_FILE = Path.home() / ".rdsjump" / "config.toml"


@dataclass
class Configuration:
    regions: list[str] = field(default_factory=list)
    environments: list[JumpHostBinding] = field(default_factory=list)
    rds: list[EnvironmentProfile] = field(default_factory=list)
    profile: str | None = None


def config_path(path: str | os.PathLike | None = None) -> Path:
    return Path(path) if path is not None else _CONFIG_FILE


def _escape_toml_value(v: str) -> str:
    """Escape a string for safe inclusion in a TOML double-quoted value."""
    return v.replace("\\", "\\\\").replace('"', '\\"')


def _quote(v: str) -> str:
    return f'"{_escape_toml_value(v)}"'


def _write_toml(config: Configuration, path: Path) -> None:
    """Serialize the configuration to TOML and write with restricted permissions."""
    lines = ["[aws]"]
    if config.profile:
        lines.append(f"profile = {_quote(config.profile)}")
    lines.append("regions = [" + ", ".join(_quote(r) for r in config.regions) + "]")
    lines.append("")

    for env in config.environments:
        lines.append("[[aws.environments]]")
        lines.append(f"prefix = {_quote(env.prefix)}")
        lines.append(f"jumphost = {_quote(env.jumphost)}")
        lines.append("")

    for rds in config.rds:
        lines.append("[[aws.rds]]")
        lines.append(f"prefix = {_quote(rds.prefix)}")
        lines.append(f"database = {_quote(rds.database)}")
        lines.append(f"user = {_quote(rds.user)}")
        lines.append(f"password = {_quote(rds.password)}")
        lines.append("")

    path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
    path.write_text("\n".join(lines))
    os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)  # 0600


def _require(entry: dict, key: str, where: str) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{where}: missing or empty '{key}'")
    return value


def _tables(aws: dict, key: str) -> list[tuple[str, dict]]:
    """Entries of an [[aws.<key>]] array, each paired with its location."""
    entries = aws.get(key, [])
    if not isinstance(entries, list):
        raise ConfigError(f"aws.{key} must be an array of tables, written [[aws.{key}]]")
    tables = []
    for i, entry in enumerate(entries):
        where = f"aws.{key}[{i}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where} must be a table")
        tables.append((where, entry))
    return tables


def parse_config(data: dict) -> Configuration:
    """Build a Configuration from decoded TOML. Raises ConfigError on bad shape."""
    aws = data.get("aws", {})
    if not isinstance(aws, dict):
        raise ConfigError("[aws] must be a table")

    regions = aws.get("regions", [])
    if not isinstance(regions, list) or not all(isinstance(r, str) for r in regions):
        raise ConfigError("[aws] regions must be a list of strings")

    environments = [
        JumpHostBinding(
            prefix=_require(e, "prefix", where),
            jumphost=_require(e, "jumphost", where),
        )
        for where, e in _tables(aws, "environments")
    ]

    rds = [
        EnvironmentProfile(
            prefix=_require(r, "prefix", where),
            user=_require(r, "user", where),
            password=str(r.get("password", "")),
            database=str(r.get("database", "")),
        )
        for where, r in _tables(aws, "rds")
    ]

    profile = aws.get("profile")
    return Configuration(
        regions=list(regions),
        environments=environments,
        rds=rds,
        profile=str(profile) if profile else None,
    )


def _load_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        return tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e


def load_config(path: str | os.PathLike | None = None) -> Configuration:
    """Load the configuration, or an empty one if the file does not exist."""
    return parse_config(_load_file(config_path(path)))


def require_config(path: str | os.PathLike | None = None) -> Configuration:
    """Load the configuration and fail if it cannot drive a connection."""
    resolved = config_path(path)
    config = load_config(resolved)
    if not config.regions:
        raise ConfigError(f"no regions configured in {resolved}").help(
            "add one: rdsjump config add-region <region>"
        )
    return config


def save_config(config: Configuration, path: str | os.PathLike | None = None) -> Path:
    resolved = config_path(path)
    _write_toml(config, resolved)
    return resolved
