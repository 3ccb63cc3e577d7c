from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from hostops.operations.errors import UnsupportedOperationError


class OperationType(str, Enum):
    FileSystem = "file_system"
    Network = "network"
    Process = "process"
    SystemInfo = "system_info"


class FileAction(str, Enum):
    ReadFile = "readFile"
    WriteFile = "writeFile"
    ReadDir = "readdir"
    MkDir = "mkdir"
    Rm = "rm"


def parse_operation_type(raw: Any) -> OperationType:
    if isinstance(raw, OperationType):
        return raw
    try:
        return OperationType(raw)
    except ValueError:
        raise UnsupportedOperationError(f"Unsupported operation type: {raw}") from None


def parse_file_action(raw: Any) -> FileAction:
    if isinstance(raw, FileAction):
        return raw
    try:
        return FileAction(raw)
    except ValueError:
        raise UnsupportedOperationError(f"Unsupported file system action: {raw}") from None


@dataclass(frozen=True)
class OperationRequest:
    type: OperationType
    details: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, raw_type: Any, details: Optional[Mapping[str, Any]] = None) -> "OperationRequest":
        return cls(type=parse_operation_type(raw_type), details=dict(details or {}))


class OperationOutcome:
    """Normalized success/failure envelope for outer surfaces (gateway, CLI)."""

    __slots__ = ("success", "result", "error")

    def __init__(self, success: bool, result: Any = None, error: Optional[Dict[str, Any]] = None):
        self.success = success
        self.result = result
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "result": self.result}
        return {"success": False, "error": self.error}
