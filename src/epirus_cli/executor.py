"""Process execution for external tools (container engine, build tools)."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

from epirus_cli.errors import ExecutionError
from epirus_cli.invocation import list_images_args


class ProcessExecutor:
    """Runs argument vectors synchronously, without a shell."""

    def execute(self, args: Sequence[str], working_directory: str | Path) -> int:
        try:
            result = subprocess.run(list(args), cwd=str(working_directory), check=False)
        except OSError as exc:
            raise ExecutionError(f"failed to launch `{args[0]}`: {exc}") from exc
        if result.returncode != 0:
            raise ExecutionError(
                f"`{' '.join(args[:2])}` exited with code {result.returncode}",
                exit_code=result.returncode,
            )
        return result.returncode

    def capture(self, args: Sequence[str]) -> str:
        try:
            result = subprocess.run(list(args), capture_output=True, text=True, check=False)
        except OSError as exc:
            raise ExecutionError(f"failed to launch `{args[0]}`: {exc}") from exc
        if result.returncode != 0:
            msg = result.stderr.strip() or result.stdout.strip() or f"`{args[0]}` failed"
            raise ExecutionError(msg, exit_code=result.returncode)
        return result.stdout


def image_exists(executor: ProcessExecutor, tag: str) -> bool:
    listing = executor.capture(list_images_args())
    return any(line.strip().startswith(tag) for line in listing.splitlines())
