"""
New-grant digest notifications.

The orchestrator asks should_notify() first and only calls notify() when it
holds. A notify() call makes exactly one dispatch attempt through the mail
client; any failure surfaces as NotificationError.
"""

from typing import Any

from ..clients.mail_client import MailClient
from ..errors import MailError, NotificationError
from ..log_stream import LogLevel, LogStream
from ..logging import get_logger
from ..models.grant import Grant
from ..models.search_config import SearchConfig

logger = get_logger(__name__)


def should_notify(config: SearchConfig, new_grants: list[Grant]) -> bool:
    """True iff there is something new, alerts are on, and a recipient is set."""
    return bool(new_grants) and config.notification_enabled and bool(config.email_recipient)


def build_digest(new_grants: list[Grant]) -> dict[str, Any]:
    """
    Build the digest message for a batch of new grants.

    Returns:
        Dict with 'subject', 'text' and a structured 'grants' list
    """
    count = len(new_grants)
    subject = f"{count} new grant opportunit{'ies' if count != 1 else 'y'} discovered"

    lines = [subject, '']
    for index, grant in enumerate(new_grants, 1):
        lines.append(f"{index}. {grant.program_title}")
        lines.append(f"   Agency: {grant.agency_name or 'Unknown'}")
        if grant.application_deadline:
            lines.append(f"   Deadline: {grant.application_deadline}")
        lines.append(f"   Link: {grant.official_application_link or 'n/a'}")
        lines.append('')

    return {
        'subject': subject,
        'text': '\n'.join(lines).rstrip() + '\n',
        'grants': [
            {
                'program_title': g.program_title,
                'agency_name': g.agency_name,
                'official_application_link': g.official_application_link,
            }
            for g in new_grants
        ],
    }


class NotificationDispatcher:
    """Sends one digest of newly discovered grants to a recipient."""

    def __init__(self, mail_client: MailClient, log_stream: LogStream):
        """
        Initialize the dispatcher.

        Args:
            mail_client: Transport for the digest
            log_stream: Progress log for the current run
        """
        self.mail_client = mail_client
        self.log_stream = log_stream

    async def notify(self, recipient: str, new_grants: list[Grant]) -> None:
        """
        Dispatch a digest of new_grants to recipient.

        Raises:
            NotificationError: Empty input, or the mail client failed
        """
        if not recipient or not new_grants:
            raise NotificationError(
                'Notification requires a recipient and at least one grant',
                context={'recipient': recipient, 'grant_count': len(new_grants)},
            )

        digest = build_digest(new_grants)
        self.log_stream.emit(
            f"Dispatching digest of {len(new_grants)} new grants to {recipient}..."
        )

        try:
            result = await self.mail_client.send(
                recipient=recipient,
                subject=digest['subject'],
                text=digest['text'],
                data={'grants': digest['grants']},
            )
        except MailError as e:
            raise NotificationError(
                f"Notification to {recipient} failed: {e.message}",
                context={'recipient': recipient, **e.context},
            ) from e

        self.log_stream.emit(f"Notification sent to {recipient}.", LogLevel.SUCCESS)
        logger.info(
            'notification_sent',
            grant_count=len(new_grants),
            status_code=result.status_code,
            message_id=result.message_id,
        )
