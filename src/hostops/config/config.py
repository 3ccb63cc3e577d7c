from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

from hostops import __version__
from hostops.operations.allowlist import DEFAULT_ALLOWED_COMMANDS

# Priority: ./.env > ../.env
cwd = Path.cwd()
local_env = cwd / ".env"
parent_env = cwd.parent / ".env"

env_file = None
if local_env.exists():
    env_file = local_env
elif parent_env.exists():
    env_file = parent_env

if env_file:
    load_dotenv(env_file, override=True)


class HostOpsConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOSTOPS_",
        env_file=env_file,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    sandbox_path: str = "organism_sandbox"
    allowed_commands: List[str] = sorted(DEFAULT_ALLOWED_COMMANDS)
    exec_timeout_ms: int = 30_000
    network_timeout_s: float = 30.0
    user_agent: str = f"hostops/{__version__}"
    log_level: str = "INFO"


def load_config() -> HostOpsConfig:
    return HostOpsConfig()


def resolve_sandbox_root(config: HostOpsConfig) -> Path:
    """Sandbox directory as an absolute path; relative values hang off cwd."""
    return (Path.cwd() / config.sandbox_path).absolute()
