"""HTTP client for the mail-service webhook that delivers grant digests."""

from dataclasses import dataclass
from typing import Any

import httpx

from ..errors import MailError


@dataclass
class SendResult:
    """Result of posting one message to the mail service."""

    status_code: int
    message_id: str | None = None


class MailClient:
    """
    Posts messages to a mail-service webhook.

    One request per send() call. No retries: a failed send raises MailError
    and the caller decides what to do with it.
    """

    def __init__(
        self,
        webhook_url: str | None = None,
        api_key: str | None = None,
        sender: str = 'grant-discovery@localhost',
        timeout_seconds: float = 30.0,
    ):
        """
        Initialize the mail client.

        Args:
            webhook_url: Endpoint accepting JSON messages (POST)
            api_key: Bearer token for the endpoint, if it requires one
            sender: From address placed on every message
            timeout_seconds: HTTP timeout for a single send
        """
        self.webhook_url = webhook_url or ''
        self.api_key = api_key or ''
        self.sender = sender
        self.timeout_seconds = timeout_seconds

    def is_available(self) -> bool:
        """Check if a webhook endpoint is configured."""
        return bool(self.webhook_url)

    async def send(
        self,
        recipient: str,
        subject: str,
        text: str,
        data: dict[str, Any] | None = None,
    ) -> SendResult:
        """
        Send a single message.

        Args:
            recipient: Destination address
            subject: Message subject
            text: Plain-text body
            data: Optional structured payload forwarded alongside the body

        Returns:
            SendResult with the HTTP status and the service's message id, if any

        Raises:
            MailError: Endpoint not configured, unreachable, or returned non-2xx
        """
        if not self.is_available():
            raise MailError('Mail webhook URL is not configured')

        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"

        payload: dict[str, Any] = {
            'from': self.sender,
            'to': recipient,
            'subject': subject,
            'text': text,
        }
        if data is not None:
            payload['data'] = data

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(self.webhook_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MailError(
                f"Mail service returned HTTP {e.response.status_code}",
                context={'status_code': e.response.status_code},
            ) from e
        except httpx.HTTPError as e:
            raise MailError(
                f"Mail service unreachable: {type(e).__name__}: {e}",
                context={'error_type': type(e).__name__},
            ) from e

        message_id = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message_id = body.get('id') or body.get('message_id')

        return SendResult(status_code=response.status_code, message_id=message_id)
