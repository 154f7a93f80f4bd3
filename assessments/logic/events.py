"""User notification constants and publisher.

``notify()`` is the fire-and-forget notification sink used by the session
controllers. This implementation logs the notification and keeps the most
recent ones in a bounded in-memory buffer; a UI passes its own toast
presenter to the sessions instead.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Dict, List
import logging

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"
WARNING = "warning"
INFO = "info"

SEVERITIES = (SUCCESS, ERROR, WARNING, INFO)

BUFFER_LIMIT = 100

Notifier = Callable[[str, str, str], None]

# Oldest entries drop off once the limit is reached
NOTIFICATION_BUFFER: Deque[Dict[str, str]] = deque(maxlen=BUFFER_LIMIT)


def notify(title: str, message: str, severity: str = INFO) -> None:
    """Publish a user notification."""
    if severity not in SEVERITIES:
        logger.warning("notify_unknown_severity severity=%s", severity)
    log = logger.error if severity == ERROR else logger.info
    log("notify severity=%s title=%s message=%s", severity, title, message)
    NOTIFICATION_BUFFER.append({"title": title, "message": message, "severity": severity})


def get_buffered_notifications(clear: bool = True) -> List[Dict[str, str]]:
    """Return buffered notifications, oldest first; optionally clear the buffer."""
    items = list(NOTIFICATION_BUFFER)
    if clear:
        NOTIFICATION_BUFFER.clear()
    return items


__all__ = [
    "SUCCESS",
    "ERROR",
    "WARNING",
    "INFO",
    "SEVERITIES",
    "BUFFER_LIMIT",
    "Notifier",
    "notify",
    "get_buffered_notifications",
    "NOTIFICATION_BUFFER",
]
