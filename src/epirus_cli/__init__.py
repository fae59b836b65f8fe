"""Epirus CLI public surface."""

from epirus_cli.credentials import (
    CredentialOptions,
    JsonCredential,
    RawKeyCredential,
    ResolvedCredential,
    WalletCredential,
    resolve_credential,
)
from epirus_cli.errors import (
    CredentialError,
    EpirusError,
    ExecutionError,
    MissingCredentialError,
    TelemetryError,
    UpdateCheckError,
)
from epirus_cli.executor import ProcessExecutor, image_exists
from epirus_cli.invocation import base_run_args, build_image_args, build_run_args, render_args
from epirus_cli.telemetry import invoke_telemetry_upload, upload_telemetry

__all__ = [
    "EpirusError",
    "ExecutionError",
    "CredentialError",
    "MissingCredentialError",
    "TelemetryError",
    "UpdateCheckError",
    "CredentialOptions",
    "WalletCredential",
    "RawKeyCredential",
    "JsonCredential",
    "ResolvedCredential",
    "resolve_credential",
    "base_run_args",
    "build_run_args",
    "build_image_args",
    "render_args",
    "ProcessExecutor",
    "image_exists",
    "upload_telemetry",
    "invoke_telemetry_upload",
]
