"""Anonymous usage telemetry."""

from __future__ import annotations

import logging
import platform
import threading
from dataclasses import dataclass, field
from typing import Any, Sequence
from urllib.parse import urlparse

import requests

from epirus_cli.errors import TelemetryError
from epirus_cli.web import DEFAULT_TIMEOUT, build_session

logger = logging.getLogger(__name__)

DEFAULT_TELEMETRY_URL = "https://internal.services.web3labs.com/api/epirus/telemetry"
TELEMETRY_URL_ENV_VAR = "EPIRUS_TELEMETRY_URL"
TELEMETRY_FLAG = "--telemetry"


def strip_telemetry_flag(args: Sequence[str]) -> list[str]:
    return [arg for arg in args if arg != TELEMETRY_FLAG]


def build_telemetry_payload(
    args: Sequence[str],
    *,
    client_id: str | None = None,
    version: str | None = None,
) -> dict[str, Any]:
    return {
        "os": platform.system().lower(),
        "client_id": client_id,
        "version": version,
        "data": " ".join(strip_telemetry_flag(args)),
    }


@dataclass
class TelemetryClient:
    endpoint_url: str
    client_id: str | None = None
    version: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    retries: int = 1
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = build_session(self.retries)

    def upload(self, args: Sequence[str]) -> None:
        payload = build_telemetry_payload(args, client_id=self.client_id, version=self.version)
        try:
            response = self._session.request(
                "POST",
                self.endpoint_url,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TelemetryError(f"telemetry upload failed: {exc}") from exc
        if not 200 <= response.status_code < 300:
            raise TelemetryError(f"telemetry upload rejected: {response.status_code}")


def upload_telemetry(
    endpoint_url: str,
    args: Sequence[str],
    *,
    client_id: str | None = None,
    version: str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> None:
    TelemetryClient(
        endpoint_url=endpoint_url,
        client_id=client_id,
        version=version,
        timeout=timeout,
    ).upload(args)


def _check_endpoint(endpoint_url: str) -> None:
    parsed = urlparse(endpoint_url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise TelemetryError(f"invalid telemetry endpoint: {endpoint_url!r}")


def invoke_telemetry_upload(
    args: Sequence[str],
    *,
    client_id: str | None = None,
    version: str | None = None,
    endpoint_url: str = DEFAULT_TELEMETRY_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> threading.Thread:
    """Upload in a daemon thread and wait for it at most ``timeout`` seconds.

    Upload failures are only logged. An unusable endpoint raises
    ``TelemetryError`` before anything is started.
    """
    _check_endpoint(endpoint_url)

    def _upload() -> None:
        try:
            upload_telemetry(
                endpoint_url,
                args,
                client_id=client_id,
                version=version,
                timeout=timeout,
            )
        except TelemetryError as exc:
            logger.warning("%s", exc)

    thread = threading.Thread(target=_upload, name="epirus-telemetry", daemon=True)
    thread.start()
    thread.join(timeout)
    if thread.is_alive():
        logger.debug("telemetry upload still running after %.1fs; not waiting", timeout)
    return thread
