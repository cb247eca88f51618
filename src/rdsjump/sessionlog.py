"""Session logging: one JSONL line per connect, daily files, retention cleanup."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

DEFAULT_RETENTION_DAYS = 30
_LOG_ROOT = Path.home() / ".rdsjump" / "logs"


def _today_file() -> Path:
    today = datetime.now(UTC).strftime("%Y-%m-%d")
    return _LOG_ROOT / f"{today}.jsonl"


def log_session(
    *,
    address: str,
    engine: str | None = None,
    region: str | None = None,
    jump_host: str | None = None,
    local_port: int | None = None,
    command: list[str] | None = None,
    exit_code: int | None = None,
    duration_ms: float | None = None,
    error: str | None = None,
) -> None:
    """Append a session entry to today's JSONL file. Never records credentials."""
    entry = {
        "ts": datetime.now(UTC).isoformat(),
        "address": address,
        "engine": engine,
        "region": region,
        "jump_host": jump_host,
        "local_port": local_port,
        "command": command,
        "exit_code": exit_code,
        "duration_ms": duration_ms,
        "error": error,
    }

    log_file = _today_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    with open(log_file, "a") as f:
        f.write(json.dumps(entry, default=str) + "\n")


def cleanup_old_logs(*, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
    """Delete log files older than retention_days. Returns count of deleted files."""
    cutoff = datetime.now(UTC) - timedelta(days=retention_days)
    deleted = 0

    if not _LOG_ROOT.exists():
        return 0

    for log_file in _LOG_ROOT.glob("*.jsonl"):
        # Parse date from filename (YYYY-MM-DD.jsonl)
        try:
            file_date = datetime.strptime(log_file.stem, "%Y-%m-%d").replace(tzinfo=UTC)
        except ValueError:
            continue
        if file_date < cutoff:
            log_file.unlink()
            deleted += 1

    return deleted
