"""Error types shared by the epirus CLI."""

from __future__ import annotations


class EpirusError(RuntimeError):
    """Base CLI error."""


class ExecutionError(EpirusError):
    """An external process could not be launched or exited non-zero."""

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class CredentialError(EpirusError):
    """Credential options could not be turned into a usable credential."""


class MissingCredentialError(CredentialError):
    """No credential was supplied and no default wallet is configured."""


class TelemetryError(EpirusError):
    """Telemetry endpoint could not be reached or rejected the upload."""


class UpdateCheckError(EpirusError):
    """Version endpoint could not be reached or returned an unusable body."""
