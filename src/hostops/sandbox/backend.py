"""SandboxBackend — unified abstraction over filesystem + process spawning.

Implementations:
    LocalBackend    — pathlib/os + asyncio subprocesses   (production)
    InMemoryBackend — pure in-process VFS + exec stub     (testing)

Backends receive paths that PathGuard has already confined; they do no
containment checks of their own beyond ``safe_path``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, runtime_checkable


@dataclass(frozen=True)
class ExecResult:
    stdout: str
    stderr: str
    exit_code: int
    killed: bool = False


@runtime_checkable
class SandboxBackend(Protocol):
    """Minimal contract that all sandbox backends must implement."""

    @property
    def kind(self) -> str: ...

    @property
    def root(self) -> str: ...

    # ── Path helpers (pure, no I/O) ─────────────────────────────────

    def safe_path(self, user_path: str) -> str: ...

    # ── File I/O ────────────────────────────────────────────────────

    async def read_file(self, path: str) -> str: ...
    async def write_file(self, path: str, content: str) -> None: ...

    # ── Directory operations ────────────────────────────────────────

    async def read_dir(self, path: str) -> List[str]: ...
    async def mkdir(self, path: str) -> None: ...
    async def remove(self, path: str) -> None: ...

    # ── Process execution ───────────────────────────────────────────

    async def exec(
        self,
        argv: Sequence[str],
        timeout_ms: Optional[int] = None,
    ) -> ExecResult: ...
