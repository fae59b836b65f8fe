"""Interactive console prompts."""

from __future__ import annotations

import getpass
from typing import Protocol


class Prompter(Protocol):
    def confirm(self, prompt: str) -> bool: ...

    def secret(self, prompt: str) -> str: ...


class ConsolePrompter:
    def confirm(self, prompt: str) -> bool:
        try:
            answer = input(f"{prompt} [Y/n] ")
        except EOFError:
            return False
        return answer.strip().lower() in {"", "y", "yes"}

    def secret(self, prompt: str) -> str:
        return getpass.getpass(f"{prompt}: ")
