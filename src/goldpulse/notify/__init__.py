"""Outbound delivery of finished reports."""

from goldpulse.notify.base import Notifier
from goldpulse.notify.telegram import TelegramNotifier

__all__ = ["Notifier", "TelegramNotifier"]
