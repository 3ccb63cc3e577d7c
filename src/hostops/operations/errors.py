"""Typed failures raised by the operation handlers.

Every failure carries a ``kind`` from the fixed taxonomy and serializes to a
JSON-ready dict with at least a ``message``. Process failures also carry the
captured ``stdout``/``stderr``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class OperationError(Exception):
    kind = "OperationError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class InvalidArgumentError(OperationError):
    kind = "InvalidArgument"


class PathEscapeError(OperationError):
    kind = "PathEscape"

    def __init__(self, user_path: str):
        super().__init__(f"Path is outside the sandbox: {user_path}")
        self.path = user_path


class CommandNotAllowedError(OperationError):
    kind = "CommandNotAllowed"

    def __init__(self, executable: str):
        super().__init__(
            f"Command not allowed: '{executable}'. Only commands from the allowlist can be executed."
        )
        self.executable = executable


class UnsupportedOperationError(OperationError):
    kind = "UnsupportedOperation"


class ExecutionError(OperationError):
    kind = "ExecutionError"

    def __init__(
        self,
        message: str,
        stdout: str = "",
        stderr: str = "",
        exit_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr
        self.exit_code = exit_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["stdout"] = self.stdout
        data["stderr"] = self.stderr
        if self.exit_code is not None:
            data["exit_code"] = self.exit_code
        return data


class NetworkError(OperationError):
    kind = "NetworkError"


class NotFoundError(OperationError):
    kind = "NotFound"


class FileIOError(OperationError):
    kind = "IOError"


def from_os_error(err: OSError, user_path: str) -> OperationError:
    """Map an OS-level failure on a sandboxed path to the taxonomy."""
    reason = err.strerror or str(err)
    if isinstance(err, FileNotFoundError):
        return NotFoundError(f"No such file or directory: {user_path}")
    return FileIOError(f"{reason}: {user_path}")
