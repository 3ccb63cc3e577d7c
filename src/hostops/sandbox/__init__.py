from hostops.sandbox.backend import SandboxBackend, ExecResult
from hostops.sandbox.local import LocalBackend
from hostops.sandbox.memory import InMemoryBackend
from hostops.sandbox.path_guard import resolve_in_sandbox

__all__ = [
    "SandboxBackend", "ExecResult",
    "LocalBackend", "InMemoryBackend",
    "resolve_in_sandbox",
]
