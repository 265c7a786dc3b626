"""Notification channels."""

from loadcal.notifier.channels.webhook import WebhookChannel

__all__ = ["WebhookChannel"]
