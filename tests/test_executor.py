from __future__ import annotations

import subprocess

import pytest

from epirus_cli.errors import ExecutionError
from epirus_cli.executor import ProcessExecutor, image_exists


def test_execute_runs_vector_in_working_directory(monkeypatch, tmp_path) -> None:
    captured: dict[str, object] = {}

    def fake_run(cmd, *, cwd=None, check=None):  # noqa: ANN001
        captured["cmd"] = cmd
        captured["cwd"] = cwd
        return subprocess.CompletedProcess(args=cmd, returncode=0)

    monkeypatch.setattr("epirus_cli.executor.subprocess.run", fake_run)
    rc = ProcessExecutor().execute(("docker", "run", "web3app"), tmp_path)

    assert rc == 0
    assert captured["cmd"] == ["docker", "run", "web3app"]
    assert captured["cwd"] == str(tmp_path)


def test_execute_non_zero_exit_raises(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(
        "epirus_cli.executor.subprocess.run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(args=cmd, returncode=125),
    )
    with pytest.raises(ExecutionError) as excinfo:
        ProcessExecutor().execute(["docker", "run", "web3app"], tmp_path)
    assert excinfo.value.exit_code == 125
    assert "docker run" in str(excinfo.value)


def test_execute_launch_failure_raises(monkeypatch, tmp_path) -> None:
    def fake_run(cmd, **kwargs):  # noqa: ANN001, ARG001
        raise FileNotFoundError("docker")

    monkeypatch.setattr("epirus_cli.executor.subprocess.run", fake_run)
    with pytest.raises(ExecutionError) as excinfo:
        ProcessExecutor().execute(["docker", "build"], tmp_path)
    assert excinfo.value.exit_code is None


def test_capture_reports_stderr_on_failure(monkeypatch) -> None:
    monkeypatch.setattr(
        "epirus_cli.executor.subprocess.run",
        lambda cmd, **kwargs: subprocess.CompletedProcess(
            args=cmd, returncode=1, stdout="", stderr="Cannot connect to the Docker daemon\n"
        ),
    )
    with pytest.raises(ExecutionError, match="Docker daemon"):
        ProcessExecutor().capture(["docker", "image", "ls"])


class _ListingExecutor(ProcessExecutor):
    def __init__(self, listing: str) -> None:
        self.listing = listing

    def capture(self, args) -> str:  # noqa: ANN001, ARG002
        return self.listing


def test_image_exists_matches_tag_prefix() -> None:
    executor = _ListingExecutor("postgres:15\nweb3app:latest\n")
    assert image_exists(executor, "web3app") is True
    assert image_exists(executor, "other") is False
    assert image_exists(_ListingExecutor(""), "web3app") is False
