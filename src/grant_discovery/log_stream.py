"""
Ordered progress log for discovery runs.

LogStream is the user-facing audit trail of a run: every pipeline component
appends LogEntry records to it, and consumers either take a snapshot or
subscribe to receive entries as they are appended.

Ordering guarantee: entries are stored and delivered to every subscriber in
exactly the order append() was called. Since a run is a single asyncio task,
that is the causal order of the pipeline phases.

The stream has no notion of a run. Clearing it before a new run is the host's
job.
"""

import asyncio
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .logging import get_logger
from .utils import new_id

logger = get_logger(__name__)


class LogLevel(str, Enum):
    """Severity of a progress entry."""

    INFO = 'INFO'
    SUCCESS = 'SUCCESS'
    WARNING = 'WARNING'
    ERROR = 'ERROR'


class LogEntry(BaseModel):
    """One immutable progress/audit record."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id, description='Unique entry identifier')
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description='When the entry was created (UTC)',
    )
    level: LogLevel = Field(default=LogLevel.INFO)
    message: str


class LogStream:
    """
    Append-only sink of LogEntry records with fan-out to subscribers.

    Usage:
        stream = LogStream()
        queue = stream.subscribe()
        stream.emit('Search complete.', LogLevel.SUCCESS)
        entry = queue.get_nowait()
    """

    def __init__(self):
        self._entries: list[LogEntry] = []
        self._subscribers: list[asyncio.Queue[LogEntry]] = []

    def append(self, entry: LogEntry) -> None:
        """Append an entry and deliver it to every subscriber."""
        self._entries.append(entry)
        for queue in self._subscribers:
            queue.put_nowait(entry)

        logger.debug(
            'log_stream.entry',
            level=entry.level.value,
            message=entry.message,
        )

    def emit(self, message: str, level: LogLevel = LogLevel.INFO) -> LogEntry:
        """Create, append and return a new entry."""
        entry = LogEntry(level=level, message=message)
        self.append(entry)
        return entry

    def snapshot(self) -> list[LogEntry]:
        """Copy of the entries in append order."""
        return list(self._entries)

    def clear(self) -> None:
        """Drop all entries. Subscribers stay registered."""
        self._entries.clear()

    def subscribe(self) -> asyncio.Queue[LogEntry]:
        """Register a new unbounded queue that receives future entries."""
        queue: asyncio.Queue[LogEntry] = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[LogEntry]) -> None:
        """Stop delivering entries to a queue returned by subscribe()."""
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def __len__(self) -> int:
        return len(self._entries)
