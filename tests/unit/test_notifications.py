from __future__ import annotations

import logging
from typing import List, Tuple

import pytest

from inventory_store.config import Settings
from inventory_store.domain.errors import NotificationError
from inventory_store.notifications import LogNotifier, Notifier, send_low_stock_alert


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: List[Tuple[str, str]] = []

    def notify(self, message: str, recipient: str) -> None:
        self.sent.append((message, recipient))


class FailingNotifier:
    def notify(self, message: str, recipient: str) -> None:
        raise NotificationError("gateway unavailable")


def test_alert_uses_configured_defaults(test_settings: Settings) -> None:
    notifier = RecordingNotifier()

    send_low_stock_alert(notifier, settings=test_settings)

    assert notifier.sent == [("Stock is low.", "5550100")]


def test_alert_arguments_override_defaults(test_settings: Settings) -> None:
    notifier = RecordingNotifier()

    send_low_stock_alert(notifier, message="Bolts low", recipient=" 5550199 ", settings=test_settings)

    assert notifier.sent == [("Bolts low", "5550199")]


def test_missing_recipient_raises(test_settings: Settings) -> None:
    settings = test_settings.model_copy(update={"alert_recipient": "  "})
    notifier = RecordingNotifier()

    with pytest.raises(NotificationError):
        send_low_stock_alert(notifier, settings=settings)
    assert notifier.sent == []


def test_notifier_failure_propagates(test_settings: Settings) -> None:
    with pytest.raises(NotificationError, match="gateway"):
        send_low_stock_alert(FailingNotifier(), settings=test_settings)


def test_log_notifier_writes_warning(
    test_settings: Settings, caplog: pytest.LogCaptureFixture
) -> None:
    notifier = LogNotifier()
    assert isinstance(notifier, Notifier)

    with caplog.at_level(logging.WARNING, logger="inventory_store.alerts"):
        send_low_stock_alert(notifier, settings=test_settings)

    assert "[ALERT] to 5550100: Stock is low." in caplog.text
