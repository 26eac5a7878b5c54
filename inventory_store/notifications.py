"""
Low-stock notifications.

Delivery (SMS, e-mail, ...) is not part of the store; anything with a
`notify(message, recipient)` method can be plugged in. Alerts are sent only
when a user asks for one; nothing here watches quantities.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from inventory_store.config import Settings, get_settings
from inventory_store.domain.errors import NotificationError
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class Notifier(Protocol):
    """Delivers a text message to a recipient; raises NotificationError on failure."""

    def notify(self, message: str, recipient: str) -> None:
        ...


class LogNotifier:
    """Notifier that writes alerts to the application log."""

    def __init__(self, logger_name: str = "inventory_store.alerts") -> None:
        self._log = get_logger(logger_name)

    def notify(self, message: str, recipient: str) -> None:
        self._log.warning(
            f"[ALERT] to {recipient}: {message}",
            extra={"recipient": recipient},
        )


def send_low_stock_alert(
    notifier: Notifier,
    message: Optional[str] = None,
    recipient: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> None:
    """
    Send the low-stock alert through `notifier`.

    Message and recipient default to `ALERT_MESSAGE` and `ALERT_RECIPIENT`.

    Raises
    ------
    NotificationError
        If no recipient is configured or the notifier fails.
    """
    settings = settings or get_settings()
    message = message or settings.alert_message
    recipient = (recipient or settings.alert_recipient).strip()
    if not recipient:
        raise NotificationError("no alert recipient configured")
    try:
        notifier.notify(message, recipient)
    except NotificationError:
        log.error(f"[ALERT FAILED] {recipient}", extra={"recipient": recipient})
        raise
    log.info(f"[ALERT SENT] {recipient}", extra={"recipient": recipient})


__all__ = ["LogNotifier", "Notifier", "send_low_stock_alert"]
