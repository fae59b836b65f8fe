from __future__ import annotations

import json
import os
import stat

import pytest

from epirus_cli.cli.wallet import (
    WalletError,
    create_wallet,
    generate_wallet_password,
    load_wallet,
)


def test_generated_password_is_eight_alphanumerics() -> None:
    password = generate_wallet_password()
    assert len(password) == 8
    assert password.isalnum()
    assert password.isascii()


def test_encrypted_wallet_round_trips_with_password(tmp_path) -> None:
    path = create_wallet(tmp_path / "keystore", "Abc12345")

    assert path.parent == tmp_path / "keystore"
    assert path.name.startswith("UTC--")
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["encrypted"] is True
    assert "ENCRYPTED" in payload["private_key_pem"]

    info = load_wallet(path, "Abc12345")
    assert info.public_key_hex == payload["public_key_hex"]
    assert len(info.fingerprint) == 40


def test_wrong_password_is_rejected(tmp_path) -> None:
    path = create_wallet(tmp_path, "right-pass")
    with pytest.raises(WalletError):
        load_wallet(path, "wrong-pass")


def test_empty_password_creates_unencrypted_wallet(tmp_path) -> None:
    path = create_wallet(tmp_path, "")
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["encrypted"] is False
    assert load_wallet(path).path == path


def test_corrupt_wallet_file_is_rejected(tmp_path) -> None:
    path = tmp_path / "wallet.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(WalletError):
        load_wallet(path)


def test_wallet_file_permissions_owner_only_on_posix(tmp_path) -> None:
    path = create_wallet(tmp_path, "pw")

    if os.name != "posix":
        return

    assert stat.S_IMODE(path.stat().st_mode) == 0o600
