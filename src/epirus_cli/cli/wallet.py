"""Local wallet files for the epirus CLI."""

from __future__ import annotations

import hashlib
import json
import os
import secrets
import string
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
    load_pem_private_key,
)

WALLET_FILE_VERSION = 1
DEFAULT_PASSWORD_LENGTH = 8
_PASSWORD_ALPHABET = string.ascii_letters + string.digits


class WalletError(ValueError):
    """Raised when a wallet file cannot be created or read."""


@dataclass(frozen=True)
class WalletInfo:
    path: Path
    public_key_hex: str

    @property
    def fingerprint(self) -> str:
        return _fingerprint(bytes.fromhex(self.public_key_hex))


def _chmod_owner_only(path: Path) -> None:
    if os.name != "posix":
        return
    path.chmod(0o600)


def _fingerprint(public_key_bytes: bytes) -> str:
    return hashlib.sha256(public_key_bytes).hexdigest()[:40]


def generate_wallet_password(length: int = DEFAULT_PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))


def _wallet_file_name(public_key_bytes: bytes) -> str:
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S.%fZ")
    return f"UTC--{timestamp}--{_fingerprint(public_key_bytes)}.json"


def create_wallet(directory: str | Path, password: str) -> Path:
    """Generate a secp256k1 key and write it as a wallet file in ``directory``.

    The private key is PEM encoded and encrypted with ``password`` unless the
    password is empty.
    """
    wallet_dir = Path(directory).expanduser()
    try:
        wallet_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise WalletError(f"cannot create wallet directory: {wallet_dir}") from exc

    private = ec.generate_private_key(ec.SECP256K1())
    encryption = BestAvailableEncryption(password.encode("utf-8")) if password else NoEncryption()
    private_pem = private.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, encryption)
    public_key_bytes = private.public_key().public_bytes(Encoding.X962, PublicFormat.CompressedPoint)

    serialized = {
        "version": WALLET_FILE_VERSION,
        "curve": "secp256k1",
        "encrypted": bool(password),
        "public_key_hex": public_key_bytes.hex(),
        "private_key_pem": private_pem.decode("ascii"),
    }
    wallet_path = wallet_dir / _wallet_file_name(public_key_bytes)
    try:
        wallet_path.write_text(json.dumps(serialized, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise WalletError(f"failed to write wallet file: {wallet_path}") from exc
    _chmod_owner_only(wallet_path)
    return wallet_path


def load_wallet(path: str | Path, password: str = "") -> WalletInfo:
    wallet_path = Path(path).expanduser()
    try:
        payload = json.loads(wallet_path.read_text(encoding="utf-8"))
    except Exception as exc:
        raise WalletError(f"invalid wallet file: {wallet_path}") from exc

    private_key_pem = payload.get("private_key_pem")
    public_key_hex = payload.get("public_key_hex")
    if not isinstance(private_key_pem, str) or not isinstance(public_key_hex, str):
        raise WalletError("wallet file must contain private_key_pem and public_key_hex")

    try:
        private = load_pem_private_key(
            private_key_pem.encode("ascii"),
            password=password.encode("utf-8") if password else None,
        )
    except (TypeError, ValueError) as exc:
        raise WalletError(f"cannot decrypt wallet {wallet_path.name}: wrong password?") from exc

    # Validate keypair consistency.
    expected_public = private.public_key().public_bytes(
        Encoding.X962, PublicFormat.CompressedPoint
    )
    if expected_public.hex() != public_key_hex:
        raise WalletError("wallet file private/public keys do not match")
    return WalletInfo(path=wallet_path, public_key_hex=public_key_hex)
