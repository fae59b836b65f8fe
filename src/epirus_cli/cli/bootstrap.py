"""First-run setup performed before every command."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from epirus_cli.cli.config import Configuration
from epirus_cli.cli.wallet import create_wallet as _create_wallet
from epirus_cli.cli.wallet import generate_wallet_password

WALLET_FOLDER_NAME = "keystore"

WalletFactory = Callable[[Path, str], Path]


def default_wallet_folder(config: Configuration) -> Path:
    return config.directory / WALLET_FOLDER_NAME


def ensure_default_wallet(
    config: Configuration,
    *,
    create_wallet: WalletFactory = _create_wallet,
    stdout=None,
) -> Path | None:
    if config.has_default_wallet:
        return None
    password = generate_wallet_password()
    wallet_path = create_wallet(default_wallet_folder(config), password)
    config.set_default_wallet(str(wallet_path), password)
    if stdout is not None:
        print(f"Created default wallet: {wallet_path}", file=stdout)
    return wallet_path


def heal_wallet_password(config: Configuration) -> bool:
    # Configs written before the default wallet password existed have none.
    if config.default_wallet_password is not None:
        return False
    config.set_default_wallet_password("")
    return True


def run_bootstrap(
    config: Configuration,
    *,
    create_wallet: WalletFactory = _create_wallet,
    stdout=None,
) -> bool:
    """Bring ``config`` to the fully configured state; True if anything changed."""
    created = ensure_default_wallet(config, create_wallet=create_wallet, stdout=stdout)
    healed = heal_wallet_password(config)
    return created is not None or healed
