"""Process operation — allowlisted command execution inside the sandbox root.

The command line is tokenized with shlex and started without a shell, so the
allowlisted executable is the process that actually runs. Execution is
bounded by a timeout; the child is killed and reaped on every exit path.
"""

from __future__ import annotations

import shlex
from typing import Any, Dict, Mapping, Optional

from hostops.logging.diagnostic import diagnostic_logger as diag
from hostops.operations.allowlist import CommandAllowlist
from hostops.operations.errors import (
    CommandNotAllowedError,
    ExecutionError,
    InvalidArgumentError,
)
from hostops.operations.types import OperationType
from hostops.sandbox.backend import SandboxBackend
from hostops.sandbox.local import DEFAULT_TIMEOUT_MS


class ProcessHandler:
    operation_type = OperationType.Process

    def __init__(
        self,
        sb: SandboxBackend,
        allowlist: CommandAllowlist,
        timeout_ms: Optional[int] = DEFAULT_TIMEOUT_MS,
    ):
        self._sb = sb
        self._allowlist = allowlist
        self._timeout_ms = timeout_ms

    async def execute(self, details: Mapping[str, Any]) -> Dict[str, str]:
        command = details.get("command")
        if not isinstance(command, str):
            raise InvalidArgumentError("Process execution requires a command string.")

        try:
            executable = self._allowlist.check(command)
        except CommandNotAllowedError as e:
            diag.warn(f"command blocked: executable={e.executable!r}")
            raise

        try:
            argv = shlex.split(command)
        except ValueError as e:
            raise InvalidArgumentError(f"Malformed command line: {e}") from e

        # str.split and shlex disagree on some separators (\x0b, \xa0, ...);
        # the process started must be exactly the token that was checked.
        if not argv or argv[0] != executable:
            spawned = argv[0] if argv else ""
            diag.warn(f"command blocked: executable={spawned!r} checked={executable!r}")
            raise CommandNotAllowedError(spawned)

        try:
            result = await self._sb.exec(argv, timeout_ms=self._timeout_ms)
        except OSError as e:
            raise ExecutionError(f"Command failed to start: {command}: {e.strerror or e}") from e

        if result.killed:
            diag.warn(f"command timed out: {command!r} after {self._timeout_ms}ms")
            raise ExecutionError(
                f"Command timed out after {self._timeout_ms}ms: {command}",
                stdout=result.stdout,
                stderr=result.stderr,
                exit_code=result.exit_code,
            )
        if result.exit_code != 0:
            raise ExecutionError(
                f"Command failed with exit code {result.exit_code}: {command}",
                stdout=result.stdout,
                stderr=result.stderr,
                exit_code=result.exit_code,
            )

        return {"stdout": result.stdout, "stderr": result.stderr}
