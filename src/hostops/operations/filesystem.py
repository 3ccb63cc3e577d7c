"""File system operations — backed by a pluggable SandboxBackend.

Provides: readFile, writeFile, readdir, mkdir, rm

Every action validates its arguments and confines the target path with
PathGuard before the backend is touched.
"""

from __future__ import annotations

from typing import Any, Mapping

from hostops.logging.diagnostic import diagnostic_logger as diag
from hostops.operations.errors import (
    InvalidArgumentError,
    PathEscapeError,
    from_os_error,
)
from hostops.operations.types import FileAction, OperationType, parse_file_action
from hostops.sandbox.backend import SandboxBackend


class FileSystemHandler:
    operation_type = OperationType.FileSystem

    def __init__(self, sb: SandboxBackend):
        self._sb = sb

    async def execute(self, details: Mapping[str, Any]) -> Any:
        target_path = details.get("path")
        if not target_path or not isinstance(target_path, str):
            raise InvalidArgumentError("File system action requires a path.")

        action = parse_file_action(details.get("action"))
        content = details.get("content")
        if action is FileAction.WriteFile and not isinstance(content, str):
            raise InvalidArgumentError("writeFile action requires string content.")

        try:
            safe_path = self._sb.safe_path(target_path)
        except PathEscapeError:
            diag.warn(f"path escape blocked: action={action.value} path={target_path!r}")
            raise

        if action is FileAction.Rm and safe_path == self._sb.root:
            raise InvalidArgumentError(f"Refusing to delete the sandbox root: {target_path}")

        try:
            if action is FileAction.ReadFile:
                return await self._sb.read_file(safe_path)
            if action is FileAction.WriteFile:
                await self._sb.write_file(safe_path, content)
                return {"result": f"Successfully wrote to {target_path}"}
            if action is FileAction.ReadDir:
                return await self._sb.read_dir(safe_path)
            if action is FileAction.MkDir:
                await self._sb.mkdir(safe_path)
                return {"result": f"Successfully created directory {target_path}"}
            if action is FileAction.Rm:
                await self._sb.remove(safe_path)
                return {"result": f"Successfully deleted {target_path}"}
        except OSError as e:
            raise from_os_error(e, target_path) from e

        raise AssertionError(f"unhandled file action: {action}")
