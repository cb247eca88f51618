"""Stable error codes and the exception hierarchy for the connect pipeline.

Ranges:
- R01xx: Discovery
- R02xx: Selection
- R03xx: Resolution (jump host, RDS profile)
- R04xx: Tunnel
- R05xx: Client session
- R06xx: Configuration

Core modules raise these; only the CLI renders them and picks an exit code.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ErrorCode:
    value: int

    def __str__(self) -> str:
        return f"R{self.value:04d}"


# Discovery (R01xx)
DISCOVERY_FAILED = ErrorCode(101)
NO_INSTANCES = ErrorCode(102)

# Selection (R02xx)
SELECTION_CANCELLED = ErrorCode(201)

# Resolution (R03xx)
NO_ENVIRONMENT = ErrorCode(301)
NO_RDS_PROFILE = ErrorCode(302)

# Tunnel (R04xx)
TUNNEL_START_FAILED = ErrorCode(401)
TUNNEL_NOT_READY = ErrorCode(402)

# Client session (R05xx)
CLIENT_NOT_FOUND = ErrorCode(501)
CLIENT_LAUNCH_FAILED = ErrorCode(502)

# Configuration (R06xx)
CONFIG_INVALID = ErrorCode(601)


class RdsJumpError(Exception):
    """Base for every fatal error in the pipeline."""

    code: ErrorCode = ErrorCode(0)

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.notes: list[str] = []
        self.helps: list[str] = []

    def note(self, note: str) -> RdsJumpError:
        self.notes.append(note)
        return self

    def help(self, text: str) -> RdsJumpError:
        self.helps.append(text)
        return self


class DiscoveryError(RdsJumpError):
    code = DISCOVERY_FAILED

    def __init__(self, region: str, cause: BaseException) -> None:
        super().__init__(f"instance discovery failed in {region}: {cause}")
        self.region = region


class NoInstancesFound(RdsJumpError):
    code = NO_INSTANCES


class SelectionCancelled(RdsJumpError):
    code = SELECTION_CANCELLED


class NoEnvironmentMatched(RdsJumpError):
    code = NO_ENVIRONMENT


class NoProfileMatched(RdsJumpError):
    code = NO_RDS_PROFILE


class TunnelStartError(RdsJumpError):
    code = TUNNEL_START_FAILED


class TunnelNotReady(RdsJumpError):
    code = TUNNEL_NOT_READY


class ClientNotFound(RdsJumpError):
    code = CLIENT_NOT_FOUND


class ClientLaunchError(RdsJumpError):
    code = CLIENT_LAUNCH_FAILED


class ConfigError(RdsJumpError):
    code = CONFIG_INVALID


def render_text(error: RdsJumpError) -> str:
    """Render an error the way the CLI prints it to stderr."""
    lines = [f"error[{error.code}]: {error.message}"]
    for note in error.notes:
        lines.append(f"  = note: {note}")
    for text in error.helps:
        lines.append(f"  = help: {text}")
    return "\n".join(lines)


def render_json(error: RdsJumpError) -> dict:
    return {
        "error": error.message,
        "code": str(error.code),
        "notes": error.notes,
        "help": error.helps,
    }
