"""User-visible notifications emitted by the cart engine."""
from enum import Enum
from typing import Callable

from poscart.logging import get_logger

logger = get_logger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


Notifier = Callable[[NotificationKind, str], None]


def log_notifier(kind: NotificationKind, message: str) -> None:
    """Default sink: write the notification to the log."""
    if kind == NotificationKind.ERROR:
        logger.warning(message)
    else:
        logger.info(message)
