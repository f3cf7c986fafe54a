import sys
from pathlib import Path
from contextvars import ContextVar
from typing import Optional
from loguru import logger
from fastapi import Request
from doccrud.config import settings

# Store current request in contextvars for async context
_current_request: ContextVar[Optional[Request]] = ContextVar("current_request", default=None)

# Bound name of the transaction service logger
TRANSACTION_LOGGER = "transaction"


def transaction_abort_filter(record) -> bool:
    """Only aborted transactions (ERROR and above from the transaction logger)."""
    return (
        record["extra"].get("name") == TRANSACTION_LOGGER
        and record["level"].no >= logger.level("ERROR").no
    )


class LogConfig:
    """Global logging configuration using Loguru."""
    @classmethod
    def setup_logging(cls):
        log_dir = Path(settings.LOG_DIR)
        log_dir.mkdir(exist_ok=True)

        logger.remove()

        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            diagnose=settings.DEBUG,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<magenta>Trace:{extra[trace_id]}</magenta> - <level>{message}</level>"
            ),
            level=settings.LOG_LEVEL,
        )

        logger.add(
            log_dir / "app_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            compression="zip",
            enqueue=True,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | Trace:{extra[trace_id]} - {message}",
            level="DEBUG",
        )

        logger.add(
            log_dir / "error_{time:YYYY-MM-DD}.log",
            level="ERROR",
            rotation="100 MB",
            enqueue=True,
            backtrace=True,
        )

        # Aborted transactions with their traceback and the request trace id
        logger.add(
            log_dir / "transactions_{time:YYYY-MM-DD}.log",
            filter=transaction_abort_filter,
            rotation="00:00",
            retention="90 days",
            compression="zip",
            enqueue=True,
            backtrace=True,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | Trace:{extra[trace_id]} - {message}",
        )

        logger.configure(extra={"trace_id": "system"})


def get_logger(name: str = None, request: Optional[Request] = None):
    """Get logger instance; optionally pass request for trace_id, else from context."""
    current_request = request or _current_request.get()

    if current_request is not None:
        trace_id = getattr(current_request.state, "trace_id", "unknown")
    else:
        trace_id = "unknown"

    if name:
        return logger.bind(name=name, trace_id=trace_id)
    else:
        return logger.bind(trace_id=trace_id)
