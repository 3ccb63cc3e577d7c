"""OperationDispatcher — routes an operation request to exactly one handler.

The dispatcher holds only immutable configuration (sandbox root, allowlist,
handler table). Handler errors propagate unchanged; ``run_operation`` is the
one place that folds them into an ``OperationOutcome`` for outer surfaces.
"""

from __future__ import annotations

import time
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Union

from hostops.logging.diagnostic import log_dispatch_done, log_dispatch_start
from hostops.operations.allowlist import DEFAULT_ALLOWED_COMMANDS, CommandAllowlist
from hostops.operations.errors import InvalidArgumentError, OperationError
from hostops.operations.filesystem import FileSystemHandler
from hostops.operations.network import DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT, NetworkHandler
from hostops.operations.process import ProcessHandler
from hostops.operations.system_info import SystemInfoHandler
from hostops.operations.types import OperationOutcome, OperationRequest, OperationType
from hostops.sandbox.backend import SandboxBackend
from hostops.sandbox.local import DEFAULT_TIMEOUT_MS, LocalBackend


class OperationHandler(Protocol):
    operation_type: OperationType

    async def execute(self, details: Mapping[str, Any]) -> Any:
        ...


class OperationDispatcher:
    def __init__(
        self,
        sandbox_root: Union[str, Path],
        allowed_commands: Union[CommandAllowlist, Iterable[str]] = DEFAULT_ALLOWED_COMMANDS,
        backend: Optional[SandboxBackend] = None,
        exec_timeout_ms: Optional[int] = DEFAULT_TIMEOUT_MS,
        network_timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self._backend = backend or LocalBackend(str(sandbox_root))
        self._sandbox_root = self._backend.root
        self._allowlist = (
            allowed_commands if isinstance(allowed_commands, CommandAllowlist)
            else CommandAllowlist(allowed_commands)
        )

        handlers = [
            FileSystemHandler(self._backend),
            ProcessHandler(self._backend, self._allowlist, timeout_ms=exec_timeout_ms),
            NetworkHandler(timeout_s=network_timeout_s, user_agent=user_agent),
            SystemInfoHandler(),
        ]
        table: Dict[OperationType, OperationHandler] = {h.operation_type: h for h in handlers}
        missing = set(OperationType) - set(table)
        if missing:
            raise RuntimeError(f"No handler registered for: {sorted(m.value for m in missing)}")
        self._handlers: Mapping[OperationType, OperationHandler] = MappingProxyType(table)

    @property
    def sandbox_root(self) -> str:
        return self._sandbox_root

    @property
    def allowlist(self) -> CommandAllowlist:
        return self._allowlist

    async def dispatch(self, operation_type: Any, details: Optional[Mapping[str, Any]] = None) -> Any:
        if details is not None and not isinstance(details, Mapping):
            raise InvalidArgumentError("Operation details must be an object.")
        request = OperationRequest.parse(operation_type, details)
        log_dispatch_start(request.type.value, list(request.details.keys()))
        start = time.time()
        result = await self._handlers[request.type].execute(request.details)
        log_dispatch_done(request.type.value, (time.time() - start) * 1000)
        return result


async def run_operation(
    dispatcher: OperationDispatcher,
    operation_type: Any,
    details: Optional[Mapping[str, Any]] = None,
) -> OperationOutcome:
    try:
        result = await dispatcher.dispatch(operation_type, details)
    except OperationError as e:
        return OperationOutcome(success=False, error=e.to_dict())
    return OperationOutcome(success=True, result=result)


def create_dispatcher(config: Optional[Any] = None) -> OperationDispatcher:
    """Build a dispatcher from configuration, creating the sandbox directory."""
    from hostops.config.config import load_config, resolve_sandbox_root

    config = config or load_config()
    root = resolve_sandbox_root(config)
    root.mkdir(parents=True, exist_ok=True)
    return OperationDispatcher(
        root,
        allowed_commands=config.allowed_commands,
        exec_timeout_ms=config.exec_timeout_ms,
        network_timeout_s=config.network_timeout_s,
        user_agent=config.user_agent,
    )
