"""
OverloadAlertDispatcher - webhook alert when a person goes over capacity.

Runs detached from the request that triggered it: check_and_alert() only
queues work on the TaskManager and returns. The queued check re-reads the
person's load and capacity for the day and posts an alert when load exceeds
capacity on a strictly future date.

Delivery is best effort. Store failures, HTTP errors and timeouts are logged
and dropped; there are no retries and no de-duplication, so two concurrent
triggers for the same person and day can both alert.
"""

import logging
from collections.abc import Callable
from datetime import date

from loadcal.background_tasks import TaskManager
from loadcal.capacity.aggregator import LoadAggregator
from loadcal.capacity.resolver import CapacityResolver
from loadcal.dates import format_date, today_utc
from loadcal.errors import LoadCalError
from loadcal.models import OverloadAlert

logger = logging.getLogger(__name__)


class OverloadAlertDispatcher:
    def __init__(
        self,
        aggregator: LoadAggregator,
        resolver: CapacityResolver,
        tasks: TaskManager,
        channel=None,
        today: Callable[[], date] = today_utc,
    ):
        """
        Args:
            channel: Object with send_sync(payload) -> result dict, or None to
                disable alerts entirely
            today: Clock for the future-date check
        """
        self.aggregator = aggregator
        self.resolver = resolver
        self.tasks = tasks
        self.channel = channel
        self.today = today

    @property
    def enabled(self) -> bool:
        return self.channel is not None

    def check_and_alert(self, person_email: str, day: date) -> str | None:
        """Queue an overload check. Returns the task id, or None if nothing was queued."""
        if not self.enabled:
            return None
        return self.tasks.submit(self._check_and_send, person_email, day)

    def evaluate(self, person_email: str, day: date) -> OverloadAlert | None:
        """
        Decide whether the person is overloaded on the day.

        Returns the alert to send, or None when suppressed: no destination,
        day not strictly in the future, or load <= capacity.
        """
        if not self.enabled:
            return None
        if day <= self.today():
            return None

        load = self.aggregator.person_load_for_date(person_email, day)
        capacity = self.resolver.effective_capacity(person_email, day)
        if load <= capacity:
            return None
        return OverloadAlert(person=person_email, date=day, load=load, capacity=capacity)

    def _check_and_send(self, person_email: str, day: date) -> dict | None:
        try:
            alert = self.evaluate(person_email, day)
        except LoadCalError as e:
            logger.warning("Overload check failed for %s on %s: %s", person_email, format_date(day), e)
            return None
        if alert is None:
            return None

        result = self.channel.send_sync(alert.to_payload())
        if result.get("success"):
            logger.info("Sent overload alert for %s on %s", person_email, format_date(day))
        else:
            logger.warning(
                "Overload alert for %s on %s not delivered: %s",
                person_email,
                format_date(day),
                result.get("error", result.get("status")),
            )
        return result

    def shutdown(self, wait: bool = True) -> None:
        """Drain (wait=True) or discard (wait=False) queued checks."""
        self.tasks.shutdown(wait=wait)
