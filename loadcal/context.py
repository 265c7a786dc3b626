"""
Explicit per-request context.

A RequestContext is built once per inbound request and passed down the read
paths by value. It carries the request id for log correlation, an optional
deadline, and a cancel event the HTTP layer sets when the caller disconnects.
The store checks it while a statement runs and aborts the statement once the
context is done.
"""

import threading
import time
import uuid
from dataclasses import dataclass, field


def generate_request_id() -> str:
    return f"req-{uuid.uuid4().hex[:16]}"


@dataclass(frozen=True)
class RequestContext:
    request_id: str = field(default_factory=generate_request_id)
    deadline: float | None = None  # time.monotonic() value
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False)

    @classmethod
    def with_timeout(cls, seconds: float | None, request_id: str | None = None) -> "RequestContext":
        deadline = time.monotonic() + seconds if seconds else None
        return cls(request_id=request_id or generate_request_id(), deadline=deadline)

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def done(self) -> bool:
        """True once the caller has gone away or the deadline has passed."""
        return self.cancelled or self.expired


# Context for background work and CLI calls: never cancelled, no deadline
BACKGROUND = RequestContext(request_id="background")
