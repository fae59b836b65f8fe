"""Release update checks."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

import requests

from epirus_cli.cli.config import Configuration
from epirus_cli.errors import UpdateCheckError
from epirus_cli.web import DEFAULT_TIMEOUT, build_session

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_URL = "https://internal.services.web3labs.com/api/epirus/versions/latest"
UPDATE_URL_ENV_VAR = "EPIRUS_UPDATE_URL"
INSTALL_HINT = "curl -L get.epirus.io | sh"


def parse_version_tuple(raw: str) -> tuple[int, ...]:
    parts: list[int] = []
    for piece in re.split(r"[.+-]", raw):
        if not piece:
            continue
        if piece.isdigit():
            parts.append(int(piece))
            continue
        digits = "".join(ch for ch in piece if ch.isdigit())
        if digits:
            parts.append(int(digits))
            break
        break
    return tuple(parts)


def is_newer(candidate: str, current: str) -> bool:
    return parse_version_tuple(candidate) > parse_version_tuple(current)


def _update_prompt(current_version: str, latest_version: str) -> str:
    return (
        f"Your current Epirus version is {current_version}. "
        f"The latest version is {latest_version}. To update, run: {INSTALL_HINT}"
    )


@dataclass
class Updater:
    config: Configuration
    current_version: str
    endpoint_url: str = DEFAULT_UPDATE_URL
    timeout: float = DEFAULT_TIMEOUT
    _session: requests.Session = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._session = build_session(retries=0)

    def fetch_latest_version(self) -> str:
        try:
            response = self._session.request("GET", self.endpoint_url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UpdateCheckError(f"update check failed: {exc}") from exc
        if response.status_code >= 400:
            raise UpdateCheckError(f"update check failed: {response.status_code}")
        try:
            body = response.json()
        except ValueError as exc:
            raise UpdateCheckError("update check returned invalid JSON") from exc
        latest = body.get("latest") if isinstance(body, dict) else None
        version = latest.get("version") if isinstance(latest, dict) else None
        if not isinstance(version, str) or not version.strip():
            raise UpdateCheckError("update check response is missing latest.version")
        return version.strip()

    def online_update_check(self) -> str | None:
        """Refresh the cached latest version; network problems are ignored."""
        try:
            latest = self.fetch_latest_version()
        except UpdateCheckError as exc:
            logger.info("%s", exc)
            return None
        if latest != self.config.latest_version:
            self.config.set_latest_version(latest, _update_prompt(self.current_version, latest))
        return latest

    def prompt_if_update_available(self, stdout) -> bool:
        self.online_update_check()
        latest = self.config.latest_version
        if not latest or not is_newer(latest, self.current_version):
            return False
        prompt = self.config.update_prompt or _update_prompt(self.current_version, latest)
        print(prompt, file=stdout)
        return True
