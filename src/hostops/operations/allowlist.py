from __future__ import annotations

from typing import FrozenSet, Iterable, Iterator

from hostops.operations.errors import CommandNotAllowedError, InvalidArgumentError

DEFAULT_ALLOWED_COMMANDS: FrozenSet[str] = frozenset(
    {"git", "ls", "npx", "cat", "echo", "npm", "bun"}
)


def executable_of(command: str) -> str:
    """First whitespace-delimited token of ``command``."""
    parts = command.split()
    return parts[0] if parts else ""


class CommandAllowlist:
    """Immutable set of executable names a process operation may start."""

    __slots__ = ("_names",)

    def __init__(self, names: Iterable[str] = DEFAULT_ALLOWED_COMMANDS):
        self._names: FrozenSet[str] = frozenset(n.strip() for n in names if n and n.strip())

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"CommandAllowlist({sorted(self._names)!r})"

    def check(self, command: str) -> str:
        """Return the executable token, or raise if it is not allowed."""
        executable = executable_of(command)
        if not executable:
            raise InvalidArgumentError("Process execution requires a command string.")
        if executable not in self._names:
            raise CommandNotAllowedError(executable)
        return executable
