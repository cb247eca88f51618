"""Shared output formatting for CLI commands."""

from __future__ import annotations

import json
from collections.abc import Sequence

from rdsjump.config import Configuration
from rdsjump.errors import RdsJumpError, render_json, render_text
from rdsjump.models import InstanceRecord

_COLUMNS = ("name", "engine", "region", "address")


def format_error(error: RdsJumpError, *, output_format: str = "text") -> str:
    if output_format == "json":
        return json.dumps(render_json(error), indent=2)
    return render_text(error)


def format_instances(
    instances: Sequence[InstanceRecord], *, output_format: str = "text"
) -> str:
    rows = [
        {"name": i.name, "engine": i.engine, "region": i.region, "address": i.address}
        for i in instances
    ]
    if output_format == "json":
        return json.dumps({"instances": rows, "count": len(rows)}, indent=2)

    # Text format: simple tabular output.
    widths = {c: max([len(c), *(len(r[c]) for r in rows)]) for c in _COLUMNS}
    lines = [" | ".join(c.ljust(widths[c]) for c in _COLUMNS).rstrip()]
    lines.append("-+-".join("-" * widths[c] for c in _COLUMNS))
    for row in rows:
        lines.append(" | ".join(row[c].ljust(widths[c]) for c in _COLUMNS).rstrip())
    lines.append(f"\n({len(rows)} instances)")
    return "\n".join(lines)


def _mask(password: str) -> str:
    return "****" if password else ""


def format_config(config: Configuration) -> str:
    """Render the configuration for `config show`, with passwords masked."""
    lines = []
    if config.profile:
        lines.append(f"aws profile: {config.profile}")
    lines.append("regions: " + (", ".join(config.regions) or "(none)"))

    lines.append("environments:")
    if not config.environments:
        lines.append("  (none)")
    for env in config.environments:
        lines.append(f"  {env.prefix}* -> {env.jumphost}")

    lines.append("rds:")
    if not config.rds:
        lines.append("  (none)")
    for rds in config.rds:
        database = rds.database or "(derived)"
        lines.append(
            f"  {rds.prefix}*: user={rds.user}, password={_mask(rds.password)}, "
            f"database={database}"
        )
    return "\n".join(lines)
