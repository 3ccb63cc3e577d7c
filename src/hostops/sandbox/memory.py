"""InMemoryBackend — pure in-process virtual filesystem + exec stub.

Designed for fast, deterministic testing of the handlers and dispatcher
without touching the real filesystem or spawning processes. Raises the same
``OSError`` subclasses the real filesystem would.

Usage:
    mem = InMemoryBackend("/sandbox")
    mem.seed({"notes/todo.txt": "ship it"})
    dispatcher = OperationDispatcher(mem.root, backend=mem)
"""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Union

from hostops.operations.errors import InvalidArgumentError, PathEscapeError
from hostops.sandbox.backend import ExecResult
from hostops.sandbox.path_guard import is_within

ExecStub = Callable[..., Union[Awaitable[ExecResult], ExecResult]]


class _VFSNode:
    __slots__ = ("kind", "content", "mtime_ms")

    def __init__(self, kind: str, content: Optional[str] = None):
        self.kind = kind
        self.content = content
        self.mtime_ms = time.time() * 1000


def _default_exec_stub(*_a: Any, **_kw: Any) -> ExecResult:
    return ExecResult(stdout="", stderr="exec not available in memory backend", exit_code=1)


class InMemoryBackend:
    kind = "memory"

    def __init__(self, root: str = "/sandbox", exec_stub: Optional[ExecStub] = None):
        self._root = self._normalize(root)
        self._nodes: Dict[str, _VFSNode] = {self._root: _VFSNode(kind="dir")}
        self._exec_stub = exec_stub or _default_exec_stub
        self.exec_calls: List[List[str]] = []
        self._ensure_parent_dirs(self._root)

    @property
    def root(self) -> str:
        return self._root

    def seed(self, files: Dict[str, str]) -> None:
        """Pre-populate the VFS. Keys are paths relative to root."""
        for rel_path, content in files.items():
            abs_path = self.safe_path(rel_path)
            self._ensure_parent_dirs(abs_path)
            self._nodes[abs_path] = _VFSNode(kind="file", content=content)

    def snapshot(self) -> Dict[str, Optional[str]]:
        """Relative path -> contents for files, None for directories."""
        prefix = self._root.rstrip("/") + "/"
        return {
            key[len(prefix):]: node.content if node.kind == "file" else None
            for key, node in self._nodes.items()
            if key.startswith(prefix)
        }

    # ── Path helpers ────────────────────────────────────────────────

    def safe_path(self, user_path: str) -> str:
        if "\x00" in user_path:
            raise InvalidArgumentError("Path must not contain NUL bytes.")
        joined = user_path if user_path.startswith("/") else self._root + "/" + user_path
        resolved = self._normalize(joined)
        if not is_within(self._root, resolved, "/"):
            raise PathEscapeError(user_path)
        return resolved

    # ── File I/O ────────────────────────────────────────────────────

    async def read_file(self, path: str) -> str:
        node = self._nodes.get(self._normalize(path))
        if node is None:
            raise FileNotFoundError(2, "No such file or directory", path)
        if node.kind != "file":
            raise IsADirectoryError(21, "Is a directory", path)
        return node.content or ""

    async def write_file(self, path: str, content: str) -> None:
        n = self._normalize(path)
        parent = self._nodes.get(self._dirname(n))
        if parent is None:
            raise FileNotFoundError(2, "No such file or directory", path)
        if parent.kind != "dir":
            raise NotADirectoryError(20, "Not a directory", path)
        existing = self._nodes.get(n)
        if existing is not None and existing.kind == "dir":
            raise IsADirectoryError(21, "Is a directory", path)
        self._nodes[n] = _VFSNode(kind="file", content=content)

    # ── Directory operations ────────────────────────────────────────

    async def read_dir(self, path: str) -> List[str]:
        n = self._normalize(path)
        node = self._nodes.get(n)
        if node is None:
            raise FileNotFoundError(2, "No such file or directory", path)
        if node.kind != "dir":
            raise NotADirectoryError(20, "Not a directory", path)
        prefix = n.rstrip("/") + "/"
        names = {
            key[len(prefix):].split("/")[0]
            for key in self._nodes
            if key.startswith(prefix)
        }
        return sorted(names)

    async def mkdir(self, path: str) -> None:
        n = self._normalize(path)
        node = self._nodes.get(n)
        if node is not None:
            if node.kind != "dir":
                raise FileExistsError(17, "File exists", path)
            return
        self._ensure_parent_dirs(n)
        self._nodes[n] = _VFSNode(kind="dir")

    async def remove(self, path: str) -> None:
        n = self._normalize(path)
        prefix = n.rstrip("/") + "/"
        for key in [k for k in self._nodes if k == n or k.startswith(prefix)]:
            del self._nodes[key]

    # ── Process execution ───────────────────────────────────────────

    async def exec(
        self,
        argv: Sequence[str],
        timeout_ms: Optional[int] = None,
    ) -> ExecResult:
        self.exec_calls.append(list(argv))
        result = self._exec_stub(list(argv), timeout_ms=timeout_ms, cwd=self._root)
        if hasattr(result, "__await__"):
            return await result
        return result  # type: ignore[return-value]

    # ── Internal ────────────────────────────────────────────────────

    @staticmethod
    def _normalize(p: str) -> str:
        stack: List[str] = []
        for part in p.replace("\\", "/").split("/"):
            if part == "..":
                if stack:
                    stack.pop()
            elif part and part != ".":
                stack.append(part)
        return "/" + "/".join(stack)

    @staticmethod
    def _dirname(n: str) -> str:
        idx = n.rfind("/")
        return n[:idx] if idx > 0 else "/"

    def _ensure_parent_dirs(self, abs_path: str) -> None:
        current = ""
        for part in abs_path.split("/")[1:-1]:
            current += "/" + part
            node = self._nodes.get(current)
            if node is None:
                self._nodes[current] = _VFSNode(kind="dir")
            elif node.kind != "dir":
                raise NotADirectoryError(20, "Not a directory", current)
