"""Notification utilities for the league load flow.

Messages go to the Prefect run logger (shown on the flow run) and to stdout
for local runs. Pass ``source`` to tag a message with the sheet tab or team
sheet it concerns.
"""

import logging
from typing import Optional

from prefect import get_run_logger, task
from prefect.exceptions import MissingContextError


def _logger():
    try:
        return get_run_logger()
    except MissingContextError:
        return logging.getLogger(__name__)


def _format(level: str, message: str, context: Optional[dict], source: Optional[str]) -> str:
    log_msg = f"{level} [{source}]: {message}" if source else f"{level}: {message}"
    if context:
        log_msg += f" | Context: {context}"
    return log_msg


@task(name="log_warning")
def log_warning(message: str, context: Optional[dict] = None, source: Optional[str] = None):
    """Log a degraded load (failed tab, parse warnings, cap breach).

    Args:
        message: Warning message
        context: Optional context dictionary
        source: Optional tab or team sheet name
    """
    log_msg = _format("WARNING", message, context, source)
    _logger().warning(log_msg)
    print(f"⚠️  {log_msg}")


@task(name="log_error")
def log_error(message: str, context: Optional[dict] = None, source: Optional[str] = None):
    """Log error message and fail flow.

    Args:
        message: Error message
        context: Optional context dictionary
        source: Optional tab or team sheet name

    Raises:
        RuntimeError: Always raises to fail the flow
    """
    log_msg = _format("ERROR", message, context, source)
    _logger().error(log_msg)
    print(f"❌ {log_msg}")
    raise RuntimeError(log_msg)


@task(name="log_info")
def log_info(message: str, context: Optional[dict] = None, source: Optional[str] = None):
    log_msg = _format("INFO", message, context, source)
    _logger().info(log_msg)
    print(f"✓ {log_msg}")
