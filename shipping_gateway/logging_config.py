"""
Logging configuration for the Shipping Gateway.
Uses loguru for enhanced logging capabilities.
"""

import sys
import uuid
from pathlib import Path
from loguru import logger
from typing import Optional

from shipping_gateway.config import GatewayConfig


def setup_logging(config: GatewayConfig, console: bool = True) -> None:
    """
    Configure logging for the gateway.

    Args:
        config: Gateway configuration
        console: Whether to output to console
    """

    # Remove default handler
    logger.remove()

    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    simple_format = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"

    if console:
        logger.add(
            sys.stderr,
            format=log_format,
            level=config.log_level,
            colorize=True,
        )

    if not config.log_file:
        return

    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        str(log_path),
        format=simple_format,
        level=config.log_level,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
        enqueue=True,  # Thread-safe
    )

    # Errors only, kept longer
    error_log_path = log_path.parent / "error.log"
    logger.add(
        str(error_log_path),
        format=simple_format,
        level="ERROR",
        rotation="10 MB",
        retention="60 days",
        compression="zip",
        enqueue=True,
    )

    logger.info(f"Logging initialized - Level: {config.log_level}, File: {log_path}")


class WorkflowLogger:
    """Context logger for one label workflow run."""

    def __init__(self, provider: str, workflow_id: Optional[str] = None):
        self.workflow_id = workflow_id or str(uuid.uuid4())
        self.provider = provider
        self._logger = logger.bind(workflow_id=self.workflow_id, provider=provider)

    def _prefix(self, message: str) -> str:
        return f"[Label:{self.workflow_id[:8]}] {message}"

    def info(self, message: str, **kwargs):
        self._logger.info(self._prefix(message), **kwargs)

    def debug(self, message: str, **kwargs):
        self._logger.debug(self._prefix(message), **kwargs)

    def warning(self, message: str, **kwargs):
        self._logger.warning(self._prefix(message), **kwargs)

    def error(self, message: str, **kwargs):
        self._logger.error(self._prefix(message), **kwargs)
