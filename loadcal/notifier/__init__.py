"""Overload notifications."""

from loadcal.notifier.channels import WebhookChannel
from loadcal.notifier.overload import OverloadAlertDispatcher

__all__ = ["OverloadAlertDispatcher", "WebhookChannel"]
