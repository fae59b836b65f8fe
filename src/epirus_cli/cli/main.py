"""Command-line interface for epirus."""

from __future__ import annotations

import argparse
import contextlib
import difflib
import logging
import os
import re
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version
from pathlib import Path
from typing import Mapping, Sequence

from epirus_cli.cli.bootstrap import default_wallet_folder, run_bootstrap
from epirus_cli.cli.config import ConfigError, Configuration, load_config, resolve_config_path
from epirus_cli.cli.defaults import apply_environment_defaults
from epirus_cli.cli.prompts import ConsolePrompter, Prompter
from epirus_cli.cli.wallet import WalletError, create_wallet, load_wallet
from epirus_cli.credentials import CredentialOptions, resolve_credential
from epirus_cli.errors import CredentialError, ExecutionError, TelemetryError
from epirus_cli.executor import ProcessExecutor, image_exists
from epirus_cli.invocation import (
    DEFAULT_TAG,
    base_run_args,
    build_image_args,
    build_run_args,
    render_args,
)
from epirus_cli.telemetry import (
    DEFAULT_TELEMETRY_URL,
    TELEMETRY_URL_ENV_VAR,
    invoke_telemetry_upload,
    upload_telemetry,
)
from epirus_cli.updater import DEFAULT_UPDATE_URL, UPDATE_URL_ENV_VAR, Updater

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_INVALID_INPUT = 2

DEBUG_ENV_VAR = "EPIRUS_DEBUG"

LOGO = r"""  ______       _
 |  ____|     (_)
 | |__   _ __  _ _ __ _   _ ___
 |  __| | '_ \| | '__| | | / __|
 | |____| |_) | | |  | |_| \__ \
 |______| .__/|_|_|   \__,_|___/
        | |
        |_|"""

BUILD_PROMPT = (
    "It seems that no Docker container has yet been built. "
    "Would you like to build a Dockerized version of your app now?"
)

_SENSITIVE_FIELDS = (
    "password",
    "private_key",
    "raw_key",
    "wallet_json",
    "token",
    "secret",
)


def _cli_version() -> str:
    try:
        return pkg_version("epirus-cli")
    except PackageNotFoundError:
        return "0.0.0+local"


class ParameterError(Exception):
    """Malformed command line; carries the parser that rejected it."""

    def __init__(self, message: str, parser: argparse.ArgumentParser) -> None:
        super().__init__(message)
        self.parser = parser


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        raise ParameterError(message, self)


def _add_credential_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("credentials")
    group.add_argument("-w", "--wallet-path", default=None, help="Path to a wallet file")
    group.add_argument("--wallet-password", default="", help="Password of --wallet-path")
    group.add_argument("-k", "--raw-key", default="", help="Raw hex private key")
    group.add_argument("-j", "--json-wallet", default="", help="Wallet JSON blob")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="epirus",
        description="Run Epirus CLI commands",
        epilog="Epirus CLI is licensed under the Apache License 2.0",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"epirus {_cli_version()}",
    )
    parser.add_argument(
        "--telemetry",
        action="store_true",
        help="Upload telemetry for this invocation and check for updates",
    )

    sub = parser.add_subparsers(dest="command")

    docker = sub.add_parser("docker", help="Build and run your project in docker")
    docker_sub = docker.add_subparsers(dest="docker_command", required=True)

    docker_run = docker_sub.add_parser("run", help="Run project in docker")
    docker_run.add_argument("network", help="Ethereum network [rinkeby/kovan]")
    docker_run.add_argument("-t", "--tag", default=DEFAULT_TAG, help="Image tag")
    docker_run.add_argument(
        "-l",
        "--local",
        action="store_true",
        help="Mount ~/.epirus into the container",
    )
    docker_run.add_argument(
        "-d",
        "--directory",
        default=None,
        help="Directory to run docker in (default: current directory)",
    )
    docker_run.add_argument(
        "-p",
        "--print",
        action="store_true",
        help="Print the docker command instead of running it",
    )
    _add_credential_options(docker_run)

    docker_build = docker_sub.add_parser("build", help="Build the project docker image")
    docker_build.add_argument("-t", "--tag", default=DEFAULT_TAG, help="Image tag")
    docker_build.add_argument(
        "-d",
        "--directory",
        default=None,
        help="Directory containing the Dockerfile (default: current directory)",
    )
    docker_build.add_argument(
        "-p",
        "--print",
        action="store_true",
        help="Print the docker command instead of running it",
    )

    wallet = sub.add_parser("wallet", help="Wallet management")
    wallet_sub = wallet.add_subparsers(dest="wallet_command", required=True)
    wallet_create = wallet_sub.add_parser("create", help="Create a new wallet file")
    wallet_create.add_argument(
        "-d",
        "--directory",
        default=None,
        help="Destination directory (default: ~/.epirus/keystore)",
    )
    wallet_create.add_argument(
        "--password",
        default=None,
        help="Wallet password (prompted when omitted; empty for an unencrypted wallet)",
    )
    wallet_create.add_argument(
        "--set-default",
        action="store_true",
        help="Use the new wallet as the default wallet",
    )
    wallet_sub.add_parser("show", help="Show the default wallet")

    login = sub.add_parser("login", help="Store an Epirus account login token")
    login.add_argument("--token", default=None, help="Login token (prompted when omitted)")
    sub.add_parser("logout", help="Remove the stored login token")

    telemetry = sub.add_parser("telemetry", help="Control anonymous usage telemetry")
    telemetry.add_argument("action", choices=("enable", "disable", "status"))

    return parser


def _sanitize_error_text(value: str) -> str:
    redacted = value
    for field_name in _SENSITIVE_FIELDS:
        redacted = re.sub(
            rf"(?i)({field_name}\s*[=:]\s*)([^,\s]+)",
            r"\1[REDACTED]",
            redacted,
        )
    return redacted


def _print_error(stderr, prefix: str, message: str, *, code: int) -> int:
    print(f"{prefix}: {_sanitize_error_text(message)}", file=stderr)
    return code


def _print_execution_error(stderr, exc: ExecutionError) -> int:
    return _print_error(stderr, "execution error", str(exc), code=exc.exit_code or EXIT_ERROR)


def _suggestions(parser: argparse.ArgumentParser, argv: Sequence[str], message: str) -> list[str]:
    candidates: set[str] = set()
    for action in parser._actions:
        candidates.update(action.option_strings)
        if isinstance(action, argparse._SubParsersAction):
            candidates.update(action.choices)
    mentioned = set(re.findall(r"[\w.:-]+", message))

    suggestions: list[str] = []
    for token in argv:
        if token in candidates or token not in mentioned:
            continue
        for match in difflib.get_close_matches(token, sorted(candidates), n=3, cutoff=0.6):
            if match not in suggestions:
                suggestions.append(match)
    return suggestions


def _handle_parse_error(exc: ParameterError, argv: Sequence[str], *, stdout, stderr) -> int:
    print(str(exc), file=stderr)
    suggestions = _suggestions(exc.parser, argv, str(exc))
    if suggestions:
        print(f"Did you mean: {', '.join(suggestions)}?", file=stdout)
    exc.parser.print_usage(stdout)
    return EXIT_INVALID_INPUT


def _configure_logging(environment: Mapping[str, str]) -> None:
    if environment.get(DEBUG_ENV_VAR):
        logging.basicConfig(level=logging.DEBUG)


def _build_updater(config: Configuration, environment: Mapping[str, str]) -> Updater:
    return Updater(
        config=config,
        current_version=_cli_version(),
        endpoint_url=environment.get(UPDATE_URL_ENV_VAR) or DEFAULT_UPDATE_URL,
    )


def _working_directory(args) -> Path:
    return Path(args.directory).expanduser() if args.directory else Path.cwd()


def _run_docker_run(*, args, config: Configuration, prompter: Prompter, stdout, stderr) -> int:
    try:
        credential = resolve_credential(CredentialOptions.from_args(args), config)
    except CredentialError as exc:
        return _print_error(stderr, "credential error", str(exc), code=EXIT_ERROR)

    run_args = build_run_args(
        base_run_args(config.login_token),
        credential,
        network=args.network,
        local_mode=args.local,
        tag=args.tag,
        home_dir=Path.home(),
    )

    if args.print:
        print(render_args(run_args), file=stdout)
        return EXIT_SUCCESS

    directory = _working_directory(args)
    executor = ProcessExecutor()
    try:
        if not image_exists(executor, args.tag) and prompter.confirm(BUILD_PROMPT):
            executor.execute(build_image_args(args.tag), directory)
        executor.execute(run_args, directory)
    except ExecutionError as exc:
        return _print_execution_error(stderr, exc)
    return EXIT_SUCCESS


def _run_docker_build(*, args, stdout, stderr) -> int:
    build_args = build_image_args(args.tag)
    if args.print:
        print(render_args(build_args), file=stdout)
        return EXIT_SUCCESS
    try:
        ProcessExecutor().execute(build_args, _working_directory(args))
    except ExecutionError as exc:
        return _print_execution_error(stderr, exc)
    return EXIT_SUCCESS


def _run_wallet_create(*, args, config: Configuration, prompter: Prompter, stdout, stderr) -> int:
    directory = Path(args.directory).expanduser() if args.directory else default_wallet_folder(config)
    password = args.password
    if password is None:
        password = prompter.secret("Wallet password (leave empty for none)")

    try:
        wallet_path = create_wallet(directory, password)
        if args.set_default:
            config.set_default_wallet(str(wallet_path), password)
    except (WalletError, ConfigError) as exc:
        return _print_error(stderr, "wallet error", str(exc), code=EXIT_ERROR)

    print(f"wallet_file: {wallet_path}", file=stdout)
    if args.set_default:
        print("default_wallet: updated", file=stdout)
    return EXIT_SUCCESS


def _run_wallet_show(*, config: Configuration, stdout, stderr) -> int:
    if not config.default_wallet_path:
        return _print_error(stderr, "wallet error", "no default wallet configured", code=EXIT_ERROR)
    try:
        info = load_wallet(config.default_wallet_path, config.default_wallet_password or "")
    except WalletError as exc:
        return _print_error(stderr, "wallet error", str(exc), code=EXIT_ERROR)
    print(f"wallet_file: {info.path}", file=stdout)
    print(f"public_key: {info.public_key_hex}", file=stdout)
    return EXIT_SUCCESS


def _run_login(*, args, config: Configuration, prompter: Prompter, stdout, stderr) -> int:
    token = args.token if args.token is not None else prompter.secret("Login token")
    token = (token or "").strip()
    if not token:
        return _print_error(stderr, "login error", "login token must not be empty", code=EXIT_ERROR)
    try:
        config.set_login_token(token)
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_ERROR)
    print("login: token stored", file=stdout)
    return EXIT_SUCCESS


def _run_logout(*, config: Configuration, stdout, stderr) -> int:
    if config.login_token is None:
        print("logout: not logged in", file=stdout)
        return EXIT_SUCCESS
    try:
        config.clear_login_token()
    except ConfigError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_ERROR)
    print("logout: token cleared", file=stdout)
    return EXIT_SUCCESS


def _run_telemetry(*, args, config: Configuration, stdout, stderr) -> int:
    if args.action != "status":
        try:
            config.set_telemetry_disabled(args.action == "disable")
        except ConfigError as exc:
            return _print_error(stderr, "config error", str(exc), code=EXIT_ERROR)
    state = "disabled" if config.telemetry_disabled else "enabled"
    print(f"telemetry: {state}", file=stdout)
    return EXIT_SUCCESS


def _dispatch(args, *, config: Configuration, prompter: Prompter, stdout, stderr) -> int:
    if args.command is None:
        return EXIT_SUCCESS

    if args.command == "docker":
        if args.docker_command == "run":
            return _run_docker_run(
                args=args, config=config, prompter=prompter, stdout=stdout, stderr=stderr
            )
        if args.docker_command == "build":
            return _run_docker_build(args=args, stdout=stdout, stderr=stderr)

    if args.command == "wallet":
        if args.wallet_command == "create":
            return _run_wallet_create(
                args=args, config=config, prompter=prompter, stdout=stdout, stderr=stderr
            )
        if args.wallet_command == "show":
            return _run_wallet_show(config=config, stdout=stdout, stderr=stderr)

    if args.command == "login":
        return _run_login(args=args, config=config, prompter=prompter, stdout=stdout, stderr=stderr)

    if args.command == "logout":
        return _run_logout(config=config, stdout=stdout, stderr=stderr)

    if args.command == "telemetry":
        return _run_telemetry(args=args, config=config, stdout=stdout, stderr=stderr)

    print("unknown command", file=stderr)
    return EXIT_INVALID_INPUT


def _handle_telemetry(
    *,
    args,
    argv: Sequence[str],
    config: Configuration,
    parser: argparse.ArgumentParser,
    environment: Mapping[str, str],
    exit_code: int,
    stdout,
    stderr,
) -> int:
    if not argv:
        parser.print_usage(stdout)

    endpoint_url = environment.get(TELEMETRY_URL_ENV_VAR) or DEFAULT_TELEMETRY_URL
    if args.telemetry:
        try:
            upload_telemetry(
                endpoint_url,
                argv,
                client_id=config.client_id,
                version=_cli_version(),
            )
        except TelemetryError as exc:
            logger.info("%s", exc)
        try:
            _build_updater(config, environment).online_update_check()
        except ConfigError as exc:
            logger.warning("could not store update check result: %s", exc)
        return EXIT_SUCCESS

    if not config.telemetry_disabled:
        try:
            invoke_telemetry_upload(
                argv,
                client_id=config.client_id,
                version=_cli_version(),
                endpoint_url=endpoint_url,
            )
        except TelemetryError as exc:
            print(f"telemetry error: Failed to invoke telemetry upload: {exc}", file=stderr)
    return exit_code


def main(
    argv: Sequence[str] | None = None,
    *,
    environment: Mapping[str, str] | None = None,
    stdout=sys.stdout,
    stderr=sys.stderr,
    config_path: str | Path | None = None,
    prompter: Prompter | None = None,
) -> int:
    arguments = list(sys.argv[1:] if argv is None else argv)
    env = dict(os.environ if environment is None else environment)
    prompter = prompter or ConsolePrompter()
    _configure_logging(env)

    parser = _build_parser()
    try:
        apply_environment_defaults(parser, env)
    except ValueError as exc:
        return _print_error(stderr, "config error", str(exc), code=EXIT_INVALID_INPUT)

    print(LOGO, file=stdout)

    try:
        config = load_config(resolve_config_path(config_path, env))
        run_bootstrap(config, create_wallet=create_wallet, stdout=stdout)
        _build_updater(config, env).prompt_if_update_available(stdout)
    except (ConfigError, WalletError, OSError) as exc:
        return _print_error(
            stderr, "fatal", f"Failed to initialise the CLI: {exc}", code=EXIT_ERROR
        )

    try:
        with contextlib.redirect_stdout(stdout):
            args = parser.parse_args(arguments)
    except ParameterError as exc:
        return _handle_parse_error(exc, arguments, stdout=stdout, stderr=stderr)
    except SystemExit as exc:  # --help / --version
        return exc.code if isinstance(exc.code, int) else EXIT_SUCCESS

    exit_code = _dispatch(args, config=config, prompter=prompter, stdout=stdout, stderr=stderr)
    return _handle_telemetry(
        args=args,
        argv=arguments,
        config=config,
        parser=parser,
        environment=env,
        exit_code=exit_code,
        stdout=stdout,
        stderr=stderr,
    )


if __name__ == "__main__":
    raise SystemExit(main())
