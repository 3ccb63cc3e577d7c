"""LocalBackend — SandboxBackend backed by the real filesystem."""

from __future__ import annotations

import asyncio
import os
import shutil
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict, List, Optional, Sequence

from hostops.sandbox.backend import ExecResult
from hostops.sandbox.path_guard import normalize_root, resolve_in_sandbox

DEFAULT_TIMEOUT_MS = 30_000
# Grace period for collecting leftover output after a timed-out child is killed.
_DRAIN_GRACE_S = 1.0


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass


@asynccontextmanager
async def owned_process(
    argv: Sequence[str],
    cwd: str,
    env: Optional[Dict[str, str]] = None,
) -> AsyncIterator[asyncio.subprocess.Process]:
    """Spawn ``argv`` and guarantee the child is killed and reaped on exit.

    Covers normal completion, exceptions, timeouts and task cancellation.
    """
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
        env=env,
    )
    try:
        yield proc
    finally:
        if proc.returncode is None:
            _kill(proc)
            await proc.wait()


class LocalBackend:
    kind = "local"

    def __init__(self, root: Optional[str] = None):
        self._root = normalize_root(root or os.getcwd())

    @property
    def root(self) -> str:
        return self._root

    # ── Path helpers ────────────────────────────────────────────────

    def safe_path(self, user_path: str) -> str:
        return resolve_in_sandbox(self._root, user_path)

    # ── File I/O ────────────────────────────────────────────────────

    async def read_file(self, path: str) -> str:
        return Path(path).read_text("utf-8", errors="replace")

    async def write_file(self, path: str, content: str) -> None:
        Path(path).write_text(content, "utf-8")

    # ── Directory operations ────────────────────────────────────────

    async def read_dir(self, path: str) -> List[str]:
        return sorted(os.listdir(path))

    async def mkdir(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    async def remove(self, path: str) -> None:
        p = Path(path)
        if p.is_symlink() or p.is_file():
            p.unlink()
        elif p.is_dir():
            shutil.rmtree(p)

    # ── Process execution ───────────────────────────────────────────

    async def exec(
        self,
        argv: Sequence[str],
        timeout_ms: Optional[int] = None,
    ) -> ExecResult:
        env = {**os.environ, "PAGER": "cat"}
        timeout_s = (timeout_ms or DEFAULT_TIMEOUT_MS) / 1000.0

        async with owned_process(argv, cwd=self._root, env=env) as proc:
            try:
                stdout_bytes, stderr_bytes = await asyncio.wait_for(
                    proc.communicate(), timeout=timeout_s,
                )
            except asyncio.TimeoutError:
                _kill(proc)
                try:
                    stdout_bytes, stderr_bytes = await asyncio.wait_for(
                        proc.communicate(), timeout=_DRAIN_GRACE_S,
                    )
                except asyncio.TimeoutError:
                    stdout_bytes, stderr_bytes = b"", b""
                return ExecResult(
                    stdout=stdout_bytes.decode("utf-8", errors="replace"),
                    stderr=stderr_bytes.decode("utf-8", errors="replace"),
                    exit_code=proc.returncode if proc.returncode is not None else -1,
                    killed=True,
                )

        return ExecResult(
            stdout=stdout_bytes.decode("utf-8", errors="replace"),
            stderr=stderr_bytes.decode("utf-8", errors="replace"),
            exit_code=proc.returncode or 0,
        )
