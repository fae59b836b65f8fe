"""Credential option resolution for commands that act on-chain."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from epirus_cli.cli.config import Configuration
from epirus_cli.errors import MissingCredentialError


@dataclass(frozen=True)
class CredentialOptions:
    """Credential options exactly as supplied on the command line."""

    wallet_path: str | None = None
    wallet_password: str = ""
    raw_key: str = ""
    wallet_json: str = ""

    @classmethod
    def from_args(cls, args) -> CredentialOptions:
        return cls(
            wallet_path=args.wallet_path,
            wallet_password=args.wallet_password or "",
            raw_key=args.raw_key or "",
            wallet_json=args.json_wallet or "",
        )


@dataclass(frozen=True)
class WalletCredential:
    path: Path
    password: str = ""


@dataclass(frozen=True)
class RawKeyCredential:
    key: str


@dataclass(frozen=True)
class JsonCredential:
    blob: str


ResolvedCredential = Union[WalletCredential, RawKeyCredential, JsonCredential]


def _wallet_credential(path: str, password: str | None) -> WalletCredential:
    return WalletCredential(path=Path(path).expanduser().absolute(), password=password or "")


def resolve_credential(options: CredentialOptions, config: Configuration) -> ResolvedCredential:
    """Pick exactly one credential source.

    An explicit wallet path wins, then a raw private key, then a wallet JSON
    blob; without any of them the configured default wallet is used. Unused
    options are ignored even when non-empty.
    """
    if options.wallet_path is not None:
        return _wallet_credential(options.wallet_path, options.wallet_password)
    if options.raw_key:
        return RawKeyCredential(key=options.raw_key)
    if options.wallet_json:
        return JsonCredential(blob=options.wallet_json)
    if config.default_wallet_path:
        return _wallet_credential(config.default_wallet_path, config.default_wallet_password)
    raise MissingCredentialError(
        "no credential available; pass --wallet-path, --raw-key or --json-wallet, "
        "or create a default wallet with `epirus wallet create --set-default`"
    )
