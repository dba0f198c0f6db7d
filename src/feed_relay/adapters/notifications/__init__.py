"""Chat destinations."""

from feed_relay.adapters.notifications.matrix_notifier import MatrixNotifier
from feed_relay.adapters.notifications.telegram_notifier import TelegramNotifier

__all__ = ["MatrixNotifier", "TelegramNotifier"]
