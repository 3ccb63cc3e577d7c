# Package Root
__version__ = "0.1.0"

from hostops.operations.dispatcher import OperationDispatcher, create_dispatcher, run_operation
from hostops.operations.allowlist import CommandAllowlist, DEFAULT_ALLOWED_COMMANDS
from hostops.operations.types import OperationOutcome, OperationRequest, OperationType, FileAction
from hostops.operations.errors import (
    OperationError,
    InvalidArgumentError,
    PathEscapeError,
    CommandNotAllowedError,
    UnsupportedOperationError,
    ExecutionError,
    NetworkError,
    NotFoundError,
    FileIOError,
)
