"""
Grant extraction service.

Builds the discovery prompt from a SearchConfig, runs it through the
search-augmented provider, and returns the raw text together with the
grounding sources the provider cited.
"""

from dataclasses import dataclass, field

from ..clients.openai_client import OpenAIClient
from ..errors import ConfigError, ExtractionError, OpenAIError
from ..log_stream import LogLevel, LogStream
from ..logging import get_logger
from ..models.extraction import GroundingSource
from ..models.search_config import SearchConfig
from ..prompts.discover_grants import DISCOVERY_INSTRUCTIONS, build_discovery_prompt

logger = get_logger(__name__)

# Fixed low temperature: factual extraction over creative variation
EXTRACTION_TEMPERATURE = 0.1

# How many grounding sources are echoed to the progress log
MAX_LOGGED_SOURCES = 3


@dataclass
class ExtractionOutput:
    """Output from the extraction call."""

    raw_text: str
    grounding_sources: list[GroundingSource] = field(default_factory=list)


class GrantExtractor:
    """
    Runs the grounded discovery request for a SearchConfig.

    Uses OpenAI with the web_search tool for extraction.
    """

    def __init__(
        self,
        openai_client: OpenAIClient,
        log_stream: LogStream,
        temperature: float = EXTRACTION_TEMPERATURE,
    ):
        """
        Initialize the extractor.

        Args:
            openai_client: OpenAI client carrying explicit credentials
            log_stream: Progress log for the current run
            temperature: Sampling temperature for the provider call
        """
        self.openai_client = openai_client
        self.log_stream = log_stream
        self.temperature = temperature

    async def extract(self, config: SearchConfig) -> ExtractionOutput:
        """
        Run one discovery request.

        Args:
            config: Keywords and year to search for

        Returns:
            ExtractionOutput with raw text and grounding sources

        Raises:
            ConfigError: No API key configured (checked before any network call)
            ExtractionError: Provider failed or returned no text
        """
        self.log_stream.emit('Initializing grant discovery protocol.')
        self.log_stream.emit(f"Target year: {config.year}")
        self.log_stream.emit(f"Keywords: [{', '.join(config.keywords)}]")

        if not self.openai_client.is_available():
            raise ConfigError(
                'OpenAI API key not found',
                context={'setting': 'OPENAI_API_KEY'},
            )

        prompt = build_discovery_prompt(keywords=config.keywords, year=config.year)

        self.log_stream.emit('Executing search query on the web index...')
        logger.info(
            'extraction_started',
            model=self.openai_client.search_model,
            keyword_count=len(config.keywords),
            year=config.year,
        )

        try:
            completion = await self.openai_client.search_completion(
                prompt=prompt,
                instructions=DISCOVERY_INSTRUCTIONS,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise ExtractionError(
                f"Extraction provider failed: {e.message}",
                context=e.context,
            ) from e

        self.log_stream.emit('Search complete. Processing results...', LogLevel.SUCCESS)
        self._log_sources(completion.sources)

        if not completion.text.strip():
            raise ExtractionError(
                'No response generated by the extraction provider',
                context={'source_count': len(completion.sources)},
            )

        logger.info(
            'extraction_complete',
            text_length=len(completion.text),
            source_count=len(completion.sources),
        )

        return ExtractionOutput(
            raw_text=completion.text,
            grounding_sources=completion.sources,
        )

    def _log_sources(self, sources: list[GroundingSource]) -> None:
        """Echo the first few cited sources. Descriptive only."""
        if not sources:
            return

        self.log_stream.emit(f"Accessed {len(sources)} unique sources for verification.")
        for source in sources[:MAX_LOGGED_SOURCES]:
            self.log_stream.emit(f"Crawled: {source.title or source.url} ({source.host})")
