from __future__ import annotations

from dataclasses import dataclass, field

import pytest


@dataclass
class ServiceCalls:
    invoked: list[list[str]] = field(default_factory=list)
    uploaded: list[tuple[str, list[str]]] = field(default_factory=list)
    update_prompts: int = 0
    online_checks: int = 0


@pytest.fixture(autouse=True)
def service_calls(monkeypatch) -> ServiceCalls:
    """Keep CLI tests off the network: telemetry and update checks are recorded."""
    calls = ServiceCalls()

    class _Updater:
        def __init__(self, *, config, current_version: str, endpoint_url: str) -> None:  # noqa: ARG002
            self.config = config

        def prompt_if_update_available(self, stdout) -> bool:  # noqa: ARG002
            calls.update_prompts += 1
            return False

        def online_update_check(self) -> str | None:
            calls.online_checks += 1
            return None

    def _invoke(args, **kwargs) -> None:  # noqa: ARG001
        calls.invoked.append(list(args))

    def _upload(endpoint_url, args, **kwargs) -> None:  # noqa: ARG001
        calls.uploaded.append((endpoint_url, list(args)))

    monkeypatch.setattr("epirus_cli.cli.main.Updater", _Updater)
    monkeypatch.setattr("epirus_cli.cli.main.invoke_telemetry_upload", _invoke)
    monkeypatch.setattr("epirus_cli.cli.main.upload_telemetry", _upload)
    return calls


class FakePrompter:
    def __init__(self, *, answer: bool = False, secret: str = "") -> None:
        self.answer = answer
        self.secret_value = secret
        self.confirm_prompts: list[str] = []
        self.secret_prompts: list[str] = []

    def confirm(self, prompt: str) -> bool:
        self.confirm_prompts.append(prompt)
        return self.answer

    def secret(self, prompt: str) -> str:
        self.secret_prompts.append(prompt)
        return self.secret_value


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()
