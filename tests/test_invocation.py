from __future__ import annotations

from pathlib import Path

from epirus_cli.credentials import JsonCredential, RawKeyCredential, WalletCredential
from epirus_cli.invocation import (
    base_run_args,
    build_image_args,
    build_run_args,
    list_images_args,
    render_args,
)

_SERVICE_ARGS = [
    "--env",
    "WEB3J_OPENAPI_HOST=0.0.0.0",
    "--env",
    "WEB3J_NETWORK=rinkeby",
    "--env",
    "WEB3J_OPENAPI_PORT=9090",
    "-p",
    "9090:9090",
]


def _build(credential, *, local_mode: bool = False) -> list[str]:
    return build_run_args(
        base_run_args("tok-1"),
        credential,
        network="rinkeby",
        local_mode=local_mode,
        tag="web3app",
        home_dir="/home/dev",
    )


def test_base_args_carry_login_token() -> None:
    assert base_run_args("tok-1") == ["docker", "run", "--env", "EPIRUS_LOGIN_TOKEN=tok-1"]
    assert base_run_args(None) == ["docker", "run", "--env", "EPIRUS_LOGIN_TOKEN="]


def test_wallet_with_password_full_vector() -> None:
    args = _build(WalletCredential(path=Path("/keys/wallet.json"), password="s3cret"))
    assert args == [
        "docker",
        "run",
        "--env",
        "EPIRUS_LOGIN_TOKEN=tok-1",
        *_SERVICE_ARGS,
        "--env",
        "WEB3J_WALLET_PATH=/root/key/wallet.json",
        "-v",
        "/keys:/root/key",
        "--env",
        "WEB3J_WALLET_PASSWORD=s3cret",
        "web3app",
    ]


def test_wallet_with_empty_password_omits_password_assignment() -> None:
    args = _build(WalletCredential(path=Path("/keys/wallet.json"), password=""))
    assert "WEB3J_WALLET_PATH=/root/key/wallet.json" in args
    assert "/keys:/root/key" in args
    assert not any(token.startswith("WEB3J_WALLET_PASSWORD") for token in args)
    assert args[-1] == "web3app"


def test_raw_key_emits_single_assignment() -> None:
    args = _build(RawKeyCredential(key="0xabc"))
    assert args[-3:] == ["--env", "WEB3J_PRIVATE_KEY=0xabc", "web3app"]
    assert "-v" not in args


def test_json_wallet_emits_single_assignment() -> None:
    args = _build(JsonCredential(blob='{"version":3}'))
    assert args[-3:] == ["--env", 'WEB3J_WALLET_JSON={"version":3}', "web3app"]


def test_local_mode_mounts_home_config_before_tag() -> None:
    args = _build(RawKeyCredential(key="0xabc"), local_mode=True)
    assert args[-3:] == ["-v", "/home/dev/.epirus:/root/.epirus", "web3app"]


def test_service_args_precede_credentials() -> None:
    args = _build(RawKeyCredential(key="0xabc"))
    assert args.index("WEB3J_NETWORK=rinkeby") < args.index("WEB3J_PRIVATE_KEY=0xabc")


def test_build_is_deterministic_and_does_not_mutate_base() -> None:
    base = base_run_args("tok-1")
    credential = WalletCredential(path=Path("/keys/wallet.json"), password="pw")
    first = build_run_args(base, credential, network="kovan", local_mode=True, tag="t", home_dir="/h")
    second = build_run_args(base, credential, network="kovan", local_mode=True, tag="t", home_dir="/h")
    assert first == second
    assert render_args(first) == render_args(second)
    assert base == base_run_args("tok-1")


def test_render_joins_with_single_spaces() -> None:
    assert render_args(["docker", "run", "web3app"]) == "docker run web3app"


def test_image_args() -> None:
    assert build_image_args("web3app") == ["docker", "build", "-t", "web3app", "."]
    assert list_images_args()[:4] == ["docker", "image", "ls", "-a"]
