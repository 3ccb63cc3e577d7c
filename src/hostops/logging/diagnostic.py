import logging

logger = logging.getLogger("hostops")


class DiagnosticLogger:
    @staticmethod
    def warn(msg: str):
        logger.warning(f"[DIAG_WARN] {msg}")

    @staticmethod
    def debug(msg: str):
        logger.debug(f"[DIAG_DEBUG] {msg}")

    @staticmethod
    def error(msg: str):
        logger.error(f"[DIAG_ERROR] {msg}")

    @staticmethod
    def info(msg: str):
        logger.info(f"[DIAG_INFO] {msg}")


diagnostic_logger = DiagnosticLogger()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
    )


def log_dispatch_start(operation: str, detail_keys: list):
    diagnostic_logger.debug(f"dispatch start: type={operation} keys={sorted(detail_keys)}")


def log_dispatch_done(operation: str, duration_ms: float):
    diagnostic_logger.debug(f"dispatch done: type={operation} durationMs={int(duration_ms)}")
