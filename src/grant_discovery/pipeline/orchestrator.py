"""
Main discovery orchestrator.

Provides end-to-end processing of one discovery run:
1. Extract: grounded search request built from the SearchConfig
2. Parse: recover the JSON array and build Grant records
3. Dedup: drop grants whose title is already in the repository snapshot
4. Merge: add the unique grants to the repository (the only mutation)
5. Notify: send a digest of new grants, when enabled and addressed

Extraction and parse failures abort the run before anything is merged.
A notification failure is logged and the run still finalizes.
At most one run is in flight per orchestrator; a second start is rejected.
"""

from __future__ import annotations

from collections.abc import Set
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..clients.mail_client import MailClient
from ..clients.openai_client import OpenAIClient
from ..config import config as default_config
from ..errors import GrantDiscoveryError, NotificationError, PipelineError
from ..log_stream import LogEntry, LogLevel, LogStream
from ..logging import PipelineTimer, get_logger, logging_context
from ..models.extraction import GroundingSource
from ..models.grant import Grant
from ..models.search_config import SearchConfig
from ..repository import GrantRepository
from ..utils import new_id
from .deduplicator import filter_new
from .extractor import GrantExtractor
from .notifier import NotificationDispatcher, should_notify
from .parser import GrantResponseParser

logger = get_logger(__name__)

ABORT_MESSAGE = 'Discovery sequence aborted due to critical error.'
FINALIZED_MESSAGE = 'Sequence finalized. System idle.'


@dataclass
class DiscoveryResult:
    """Result of one completed discovery run."""

    run_id: str

    # Grant results
    new_grants: list[Grant] = field(default_factory=list)
    total_extracted: int = 0
    filtered_count: int = 0
    repeated_count: int = 0

    # Notification
    notification_sent: bool = False

    # Provenance
    grounding_sources: list[GroundingSource] = field(default_factory=list)
    logs: list[LogEntry] = field(default_factory=list)

    # Timing
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None
    processing_time_ms: int | None = None
    stage_timings: dict[str, float] = field(default_factory=dict)

    # Non-fatal errors (notification failures)
    errors: list[str] = field(default_factory=list)

    @property
    def new_count(self) -> int:
        return len(self.new_grants)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'run_id': self.run_id,
            'new_grants': [g.model_dump(mode='json') for g in self.new_grants],
            'new_count': self.new_count,
            'total_extracted': self.total_extracted,
            'filtered_count': self.filtered_count,
            'repeated_count': self.repeated_count,
            'notification_sent': self.notification_sent,
            'grounding_sources': [s.model_dump() for s in self.grounding_sources],
            'logs': [entry.model_dump(mode='json') for entry in self.logs],
            'processing_time_ms': self.processing_time_ms,
            'stage_timings': self.stage_timings,
            'errors': self.errors,
        }


class DiscoveryOrchestrator:
    """
    Sequences Extraction → Parse → Dedup → Merge → Notify for one run.

    Orchestrates:
    - GrantExtractor: grounded search request
    - GrantResponseParser: tolerant JSON recovery
    - filter_new: title-based novelty filter
    - GrantRepository: accumulated grants (merged once per successful run)
    - NotificationDispatcher: digest of new grants

    Usage:
        orchestrator = DiscoveryOrchestrator.from_env()
        result = await orchestrator.run(SearchConfig(year=2026))
    """

    def __init__(
        self,
        extractor: GrantExtractor,
        parser: GrantResponseParser,
        notifier: NotificationDispatcher,
        repository: GrantRepository,
        log_stream: LogStream,
    ):
        """
        Initialize the orchestrator with its components.

        Components should share log_stream so that their entries interleave
        in phase order.
        """
        self.extractor = extractor
        self.parser = parser
        self.notifier = notifier
        self.repository = repository
        self.log_stream = log_stream

        self._running = False

    @classmethod
    def build(
        cls,
        openai_client: OpenAIClient,
        mail_client: MailClient,
        repository: GrantRepository | None = None,
        log_stream: LogStream | None = None,
    ) -> DiscoveryOrchestrator:
        """
        Wire the default components around explicit clients.

        A caller-supplied log_stream is used as is, even when empty, so the
        host and its subscribers see every entry of the run.
        """
        if log_stream is None:
            log_stream = LogStream()

        return cls(
            extractor=GrantExtractor(openai_client, log_stream),
            parser=GrantResponseParser(log_stream),
            notifier=NotificationDispatcher(mail_client, log_stream),
            repository=repository if repository is not None else GrantRepository(),
            log_stream=log_stream,
        )

    @classmethod
    def from_env(
        cls,
        repository: GrantRepository | None = None,
        log_stream: LogStream | None = None,
    ) -> DiscoveryOrchestrator:
        """
        Create an orchestrator from environment variables.

        Expects:
            OPENAI_API_KEY: OpenAI API key (checked when a run starts)
            OPENAI_SEARCH_MODEL: Optional, defaults to gpt-4.1-mini
            MAIL_WEBHOOK_URL / MAIL_API_KEY / MAIL_SENDER: Optional digest transport
        """
        openai_client = OpenAIClient(
            api_key=default_config.OPENAI_API_KEY,
            search_model=default_config.OPENAI_SEARCH_MODEL,
        )
        mail_client = MailClient(
            webhook_url=default_config.MAIL_WEBHOOK_URL,
            api_key=default_config.MAIL_API_KEY,
            sender=default_config.MAIL_SENDER,
            timeout_seconds=default_config.MAIL_TIMEOUT_SECONDS,
        )
        return cls.build(
            openai_client,
            mail_client,
            repository=repository,
            log_stream=log_stream,
        )

    @property
    def is_running(self) -> bool:
        """True while a run is in flight."""
        return self._running

    async def run(
        self,
        config: SearchConfig,
        existing_titles: Set[str] | None = None,
    ) -> DiscoveryResult | None:
        """
        Execute one discovery run.

        Args:
            config: Run parameters (read-only during the run)
            existing_titles: Lower-cased titles to dedup against. Defaults to
                a snapshot of the repository taken after extraction and parse.

        Returns:
            DiscoveryResult, or None if a run was already in flight (in which
            case nothing is logged to the stream and no state changes)

        Raises:
            ConfigError: No extraction credentials
            ExtractionError: Provider failed or returned no text
            ParseError: No recoverable JSON array in the response
            PipelineError: Any other unexpected failure
        """
        if self._running:
            logger.warning('discovery_rejected_busy')
            return None

        self._running = True
        try:
            return await self._execute(config, existing_titles)
        finally:
            self._running = False

    async def _execute(
        self,
        config: SearchConfig,
        existing_titles: Set[str] | None,
    ) -> DiscoveryResult:
        timer = PipelineTimer()
        result = DiscoveryResult(run_id=new_id())

        with logging_context(run_id=result.run_id):
            logger.info(
                'discovery_started',
                year=config.year,
                keywords=config.keywords,
                notification_enabled=config.notification_enabled,
            )
            self.log_stream.emit('Starting new discovery sequence...')

            try:
                # Step 1: Extraction (suspends on the provider call)
                with timer.stage('extraction'):
                    extraction = await self.extractor.extract(config)
                result.grounding_sources = extraction.grounding_sources

                # Step 2: Parse
                with timer.stage('parse'):
                    candidates = self.parser.parse(extraction.raw_text)
                result.total_extracted = len(candidates)

                # Step 3: Dedup against an explicit snapshot
                with timer.stage('dedup'):
                    known = existing_titles if existing_titles is not None else self.repository.titles()
                    dedup = filter_new(candidates, known)

                result.filtered_count = dedup.filtered_count
                if dedup.filtered_count:
                    self.log_stream.emit(
                        f"Filtered {dedup.filtered_count} "
                        f"duplicate{'s' if dedup.filtered_count != 1 else ''}.",
                        LogLevel.WARNING,
                    )

                # Step 4: Merge (the run's single repository mutation)
                with timer.stage('merge'):
                    result.new_grants = self.repository.merge_unique(dedup.unique)

                # Same title listed twice in one response: only the first is kept
                result.repeated_count = len(dedup.unique) - result.new_count
                if result.repeated_count:
                    self.log_stream.emit(
                        f"Dropped {result.repeated_count} repeated "
                        f"title{'s' if result.repeated_count != 1 else ''} within this batch.",
                        LogLevel.WARNING,
                    )

                if result.new_grants:
                    self.log_stream.emit(
                        f"Added {result.new_count} new grants to the repository.",
                        LogLevel.SUCCESS,
                    )
                else:
                    self.log_stream.emit('No new grants discovered in this run.')

                logger.info(
                    'dedup_complete',
                    total_extracted=result.total_extracted,
                    filtered=result.filtered_count,
                    repeated=result.repeated_count,
                    added=result.new_count,
                )

            except GrantDiscoveryError as e:
                self._abort(e)
                raise
            except Exception as e:
                error = PipelineError(
                    f"Pipeline failed: {e}",
                    context={'error_type': type(e).__name__},
                )
                self._abort(error)
                raise error from e

            # Step 5: Notify (non-fatal)
            if should_notify(config, result.new_grants):
                with timer.stage('notification'):
                    try:
                        await self.notifier.notify(config.email_recipient, result.new_grants)
                        result.notification_sent = True
                    except NotificationError as e:
                        self.log_stream.emit(f"Notification failed: {e.message}", LogLevel.ERROR)
                        logger.error('notification_failed', error=str(e))
                        result.errors.append(f"Notification failed: {e.message}")
            elif result.new_grants:
                self.log_stream.emit('Skipping email notification (disabled or no recipient).')

            self.log_stream.emit(FINALIZED_MESSAGE)

            result.completed_at = datetime.now(timezone.utc)
            result.processing_time_ms = int(timer.total_ms)
            result.stage_timings = timer.stages.copy()
            result.logs = self.log_stream.snapshot()

            logger.info(
                'discovery_complete',
                added=result.new_count,
                filtered=result.filtered_count,
                notification_sent=result.notification_sent,
                **timer.summary(),
            )

            return result

    def _abort(self, error: GrantDiscoveryError) -> None:
        """Record a run-fatal error. Nothing has been merged at this point."""
        self.log_stream.emit(f"Error during discovery: {error.message}", LogLevel.ERROR)
        self.log_stream.emit(ABORT_MESSAGE, LogLevel.ERROR)
        logger.error(
            'discovery_aborted',
            error=str(error),
            error_type=type(error).__name__,
        )
