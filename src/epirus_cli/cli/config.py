"""Persisted configuration for the epirus CLI."""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import tomli_w

DEFAULT_CONFIG_DIR = Path.home() / ".epirus"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.toml"
CONFIG_PATH_ENV_VAR = "EPIRUS_CONFIG"

# camelCase keys written by releases before the TOML config.
_LEGACY_KEYS = {
    "defaultWalletPath": "default_wallet_path",
    "defaultWalletPassword": "default_wallet_password",
    "telemetryDisabled": "telemetry_disabled",
    "loginToken": "login_token",
    "clientId": "client_id",
    "latestVersion": "latest_version",
    "updatePrompt": "update_prompt",
}
_KNOWN_KEYS = frozenset(_LEGACY_KEYS.values())


class ConfigError(ValueError):
    """Raised when CLI config is invalid or cannot be persisted."""


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc

    try:  # Python 3.11+
        import tomllib  # type: ignore[attr-defined]
        try:
            return tomllib.loads(raw)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    except ModuleNotFoundError:
        try:
            import tomli
        except ModuleNotFoundError as exc:
            raise ConfigError("toml parser unavailable; install tomli for Python < 3.11") from exc
        try:
            return tomli.loads(raw)
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc


def _to_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "1", "yes", "on"}:
            return True
        if lowered in {"false", "0", "no", "off"}:
            return False
    raise ConfigError(f"{field_name} must be a boolean")


def _optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{field_name} must be a string")
    return value


def _chmod_owner_only(path: Path) -> None:
    if os.name != "posix":
        return
    path.chmod(0o600)


@dataclass
class Configuration:
    """Single-owner settings handle; every mutator writes the file back."""

    path: Path
    default_wallet_path: str | None = None
    default_wallet_password: str | None = None
    telemetry_disabled: bool = False
    login_token: str | None = None
    client_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    latest_version: str | None = None
    update_prompt: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def has_default_wallet(self) -> bool:
        return bool(self.default_wallet_path)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.extra)
        payload["client_id"] = self.client_id
        payload["telemetry_disabled"] = self.telemetry_disabled
        # TOML has no null; unset optionals are omitted.
        optional = {
            "default_wallet_path": self.default_wallet_path,
            "default_wallet_password": self.default_wallet_password,
            "login_token": self.login_token,
            "latest_version": self.latest_version,
            "update_prompt": self.update_prompt,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload

    def save(self) -> Path:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(tomli_w.dumps(self.to_dict()), encoding="utf-8")
            _chmod_owner_only(self.path)
        except OSError as exc:
            raise ConfigError(f"failed to write config file: {self.path}") from exc
        return self.path

    def set_default_wallet(self, wallet_path: str, password: str) -> None:
        self.default_wallet_path = wallet_path
        self.default_wallet_password = password
        self.save()

    def set_default_wallet_password(self, password: str) -> None:
        self.default_wallet_password = password
        self.save()

    def set_login_token(self, token: str) -> None:
        self.login_token = token
        self.save()

    def clear_login_token(self) -> None:
        self.login_token = None
        self.save()

    def set_telemetry_disabled(self, disabled: bool) -> None:
        self.telemetry_disabled = disabled
        self.save()

    def set_latest_version(self, version: str, prompt: str | None = None) -> None:
        self.latest_version = version
        self.update_prompt = prompt
        self.save()


def resolve_config_path(
    path: str | Path | None = None,
    environment: Mapping[str, str] | None = None,
) -> Path:
    if path:
        return Path(path).expanduser()
    env_path = (environment or {}).get(CONFIG_PATH_ENV_VAR)
    if env_path and env_path.strip():
        return Path(env_path.strip()).expanduser()
    return DEFAULT_CONFIG_PATH


def _normalize_keys(parsed: dict[str, Any]) -> dict[str, Any]:
    source: dict[str, Any] = {}
    for key, value in parsed.items():
        source[_LEGACY_KEYS.get(key, key)] = value
    return source


def load_config(path: str | Path | None = None) -> Configuration:
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        return Configuration(path=config_path)

    source = _normalize_keys(_load_toml(config_path))

    client_id = _optional_str(source.get("client_id"), "client_id")
    config = Configuration(
        path=config_path,
        default_wallet_path=_optional_str(source.get("default_wallet_path"), "default_wallet_path"),
        default_wallet_password=_optional_str(
            source.get("default_wallet_password"), "default_wallet_password"
        ),
        telemetry_disabled=_to_bool(source.get("telemetry_disabled", False), "telemetry_disabled"),
        login_token=_optional_str(source.get("login_token"), "login_token"),
        latest_version=_optional_str(source.get("latest_version"), "latest_version"),
        update_prompt=_optional_str(source.get("update_prompt"), "update_prompt"),
        extra={key: value for key, value in source.items() if key not in _KNOWN_KEYS},
    )
    if client_id:
        config.client_id = client_id
    return config
