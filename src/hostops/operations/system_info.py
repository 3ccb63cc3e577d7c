"""System info operation — read-only host telemetry."""

from __future__ import annotations

import platform
import socket
import sys
import time
from pathlib import Path
from typing import Any, Dict, Mapping

import psutil

from hostops.operations.types import OperationType

_CPUINFO_PATH = Path("/proc/cpuinfo")


def _cpu_model() -> str:
    try:
        for line in _CPUINFO_PATH.read_text("utf-8", errors="replace").splitlines():
            key, _, value = line.partition(":")
            if key.strip() in ("model name", "Hardware", "cpu model") and value.strip():
                return value.strip()
    except OSError:
        pass
    return platform.processor() or "unknown"


class SystemInfoHandler:
    operation_type = OperationType.SystemInfo

    async def execute(self, details: Mapping[str, Any]) -> Dict[str, Any]:
        return self.snapshot()

    def snapshot(self) -> Dict[str, Any]:
        cpu_cores = psutil.cpu_count(logical=True) or 0
        memory = psutil.virtual_memory()
        return {
            "platform": sys.platform,
            "arch": platform.machine(),
            "hostname": socket.gethostname(),
            "uptime_seconds": max(0.0, time.time() - psutil.boot_time()),
            "cpu_cores": cpu_cores,
            "cpu_model": _cpu_model() if cpu_cores > 0 else "unknown",
            "total_memory_bytes": int(memory.total),
            "free_memory_bytes": int(memory.available),
        }
