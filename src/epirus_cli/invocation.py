"""Argument vectors for the container engine."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from epirus_cli.credentials import (
    JsonCredential,
    RawKeyCredential,
    ResolvedCredential,
    WalletCredential,
)

DOCKER = "docker"
DEFAULT_TAG = "web3app"

EPIRUS_VAR_PREFIX = "EPIRUS_"
WEB3J_VAR_PREFIX = "WEB3J_"
WEB3J_OPENAPI_VAR_PREFIX = "WEB3J_OPENAPI_"

OPENAPI_HOST = "0.0.0.0"
OPENAPI_PORT = 9090

CONTAINER_KEY_DIR = "/root/key"
CONTAINER_CONFIG_DIR = "/root/.epirus"
HOST_CONFIG_DIR_NAME = ".epirus"


def _env(name: str, value: object) -> list[str]:
    return ["--env", f"{name}={value}"]


def _volume(host: str, container: str) -> list[str]:
    return ["-v", f"{host}:{container}"]


def base_run_args(login_token: str | None) -> list[str]:
    return [DOCKER, "run", *_env(f"{EPIRUS_VAR_PREFIX}LOGIN_TOKEN", login_token or "")]


def network_args(network: str) -> list[str]:
    return [
        *_env(f"{WEB3J_OPENAPI_VAR_PREFIX}HOST", OPENAPI_HOST),
        *_env(f"{WEB3J_VAR_PREFIX}NETWORK", network),
        *_env(f"{WEB3J_OPENAPI_VAR_PREFIX}PORT", OPENAPI_PORT),
        "-p",
        f"{OPENAPI_PORT}:{OPENAPI_PORT}",
    ]


def credential_args(credential: ResolvedCredential) -> list[str]:
    if isinstance(credential, WalletCredential):
        args = [
            *_env(f"{WEB3J_VAR_PREFIX}WALLET_PATH", f"{CONTAINER_KEY_DIR}/{credential.path.name}"),
            *_volume(str(credential.path.parent), CONTAINER_KEY_DIR),
        ]
        # An empty password means an unencrypted wallet: no variable at all.
        if credential.password:
            args.extend(_env(f"{WEB3J_VAR_PREFIX}WALLET_PASSWORD", credential.password))
        return args
    if isinstance(credential, RawKeyCredential):
        return _env(f"{WEB3J_VAR_PREFIX}PRIVATE_KEY", credential.key)
    if isinstance(credential, JsonCredential):
        return _env(f"{WEB3J_VAR_PREFIX}WALLET_JSON", credential.blob)
    raise TypeError(f"unsupported credential type: {type(credential).__name__}")


def build_run_args(
    base: Sequence[str],
    credential: ResolvedCredential,
    *,
    network: str,
    local_mode: bool,
    tag: str,
    home_dir: str | Path,
) -> list[str]:
    """Assemble the ``docker run`` argument vector.

    Tokens are only ever appended, in this order: ``base``, service
    environment and port publishing, credential environment and mounts, the
    local configuration mount (``local_mode`` only), and finally ``tag``.
    Nothing is read from the environment or filesystem, so the output depends
    on the inputs alone.
    """
    args = list(base)
    args.extend(network_args(network))
    args.extend(credential_args(credential))
    if local_mode:
        args.extend(_volume(f"{home_dir}/{HOST_CONFIG_DIR_NAME}", CONTAINER_CONFIG_DIR))
    args.append(tag)
    return args


def build_image_args(tag: str) -> list[str]:
    return [DOCKER, "build", "-t", tag, "."]


def list_images_args() -> list[str]:
    return [DOCKER, "image", "ls", "-a", "--format", "{{.Repository}}:{{.Tag}}"]


def render_args(args: Sequence[str]) -> str:
    return " ".join(args)
