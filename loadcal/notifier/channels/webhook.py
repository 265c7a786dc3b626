"""Generic JSON webhook notification channel."""

import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class WebhookChannel:
    """Delivers JSON payloads to a webhook URL.

    Never raises for delivery problems: transport errors, timeouts and
    non-2xx responses come back as a result dict with success=False.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        dry_run: bool = False,
        client: httpx.Client | None = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.dry_run = dry_run
        self._client = client

    def send_sync(self, payload: dict) -> dict:
        """POST the payload as JSON."""
        if self.dry_run:
            logger.info("DRY RUN - webhook payload: %s", payload)
            return {"status": "dry_run", "success": True, "payload": payload}

        try:
            if self._client is not None:
                response = self._client.post(self.webhook_url, json=payload, timeout=self.timeout)
            else:
                response = httpx.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return {"status": "sent", "success": True, "status_code": response.status_code}
        except httpx.TimeoutException as e:
            logger.warning("Webhook timed out after %.1fs: %s", self.timeout, e)
            return {"status": "timeout", "success": False, "error": str(e)}
        except httpx.HTTPStatusError as e:
            logger.error("Webhook HTTP error: %s", e)
            return {
                "status": "error",
                "success": False,
                "status_code": e.response.status_code,
                "error": str(e),
            }
        except httpx.RequestError as e:
            logger.error("Webhook request error: %s", e)
            return {"status": "error", "success": False, "error": str(e)}
