"""Environment-driven default values for CLI options."""

from __future__ import annotations

import argparse
from typing import Iterator, Mapping

ENV_VAR_PREFIX = "EPIRUS"

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def env_var_name(command_path: tuple[str, ...], dest: str, *, prefix: str = ENV_VAR_PREFIX) -> str:
    parts = (prefix, *command_path, dest)
    return "_".join(part.replace("-", "_").upper() for part in parts)


def _iter_parsers(
    parser: argparse.ArgumentParser, path: tuple[str, ...] = ()
) -> Iterator[tuple[tuple[str, ...], argparse.ArgumentParser]]:
    yield path, parser
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            for name, subparser in action.choices.items():
                yield from _iter_parsers(subparser, (*path, name))


def _convert(action: argparse.Action, raw: str, name: str) -> object:
    if isinstance(action, (argparse._StoreTrueAction, argparse._StoreFalseAction)):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"{name} must be a boolean, got {raw!r}")
    if action.type is not None and callable(action.type):
        return action.type(raw)
    return raw


def apply_environment_defaults(
    parser: argparse.ArgumentParser,
    environment: Mapping[str, str],
    *,
    prefix: str = ENV_VAR_PREFIX,
) -> dict[str, str]:
    """Use ``<PREFIX>_<COMMAND PATH>_<OPTION>`` variables as option defaults.

    Only optional arguments are considered; positionals stay required.
    Returns the variables that were applied, keyed by name.
    """
    applied: dict[str, str] = {}
    for path, subparser in _iter_parsers(parser):
        for action in subparser._actions:
            if not action.option_strings or action.dest in {argparse.SUPPRESS, "help", "version"}:
                continue
            name = env_var_name(path, action.dest, prefix=prefix)
            raw = environment.get(name)
            if raw is None:
                continue
            action.default = _convert(action, raw, name)
            applied[name] = raw
    return applied
