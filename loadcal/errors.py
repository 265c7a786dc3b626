"""
Error taxonomy for the load calendar.

- NotFoundError: entity/load/assignment lookups that miss
- ValidationError: malformed input, rejected before any write
- ConflictError: uniqueness violations (duplicate entity id)
- StoreError: transient data store failures, wrapped with the operation name
- QueryCancelledError: a read aborted because its caller went away
- QueryTimeoutError: a read aborted because it ran past the server read deadline

Webhook delivery failures are not exceptions; the notifier logs and drops them.
"""


class LoadCalError(Exception):
    """Base class for all load calendar errors."""

    error_code = "error"


class NotFoundError(LoadCalError):
    """A referenced entity, load, or assignment does not exist."""

    error_code = "not_found"

    def __init__(self, kind: str, key: object):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class ValidationError(LoadCalError):
    """Input rejected at the boundary."""

    error_code = "validation_failed"


class ConflictError(LoadCalError):
    """A create collided with an existing row."""

    error_code = "conflict"


class StoreError(LoadCalError):
    """The relational store failed (connection, lock timeout, I/O)."""

    error_code = "store_unavailable"

    def __init__(self, operation: str, detail: str = ""):
        self.operation = operation
        message = f"store operation failed: {operation}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class QueryCancelledError(StoreError):
    """A read was interrupted because its request context was cancelled."""

    error_code = "cancelled"

    def __init__(self, operation: str):
        super().__init__(operation, "cancelled")


class QueryTimeoutError(StoreError):
    """A read was interrupted because its request context passed its deadline."""

    error_code = "timeout"

    def __init__(self, operation: str):
        super().__init__(operation, "timed out")


class ConfigError(LoadCalError):
    """Invalid configuration value in the environment."""

    error_code = "config_invalid"
