"""
Grant Discovery Pipeline

Discovers funding opportunities through a search-augmented LLM, recovers
structured grant records from its free-form output, filters out grants that
are already known, and optionally emails a digest of new finds.
"""

__version__ = '0.1.0'

# Re-export key classes for convenience
from .pipeline import (
    DiscoveryOrchestrator,
    DiscoveryResult,
    GrantExtractor,
    ExtractionOutput,
    GrantResponseParser,
    NotificationDispatcher,
    DedupResult,
    filter_new,
)
from .repository import GrantRepository
from .log_stream import LogEntry, LogLevel, LogStream
from .models import Grant, GrantStatus, SearchConfig, GroundingSource
from .logging import (
    configure_logging,
    get_logger,
    logging_context,
    PipelineTimer,
)
from .errors import (
    GrantDiscoveryError,
    PipelineError,
    ConfigError,
    ExtractionError,
    ParseError,
    NotificationError,
    OpenAIError,
    MailError,
)

__all__ = [
    # Version
    '__version__',
    # Main Orchestrator
    'DiscoveryOrchestrator',
    'DiscoveryResult',
    # Components
    'GrantExtractor',
    'ExtractionOutput',
    'GrantResponseParser',
    'NotificationDispatcher',
    'DedupResult',
    'filter_new',
    # Repository and progress log
    'GrantRepository',
    'LogEntry',
    'LogLevel',
    'LogStream',
    # Models
    'Grant',
    'GrantStatus',
    'SearchConfig',
    'GroundingSource',
    # Logging
    'configure_logging',
    'get_logger',
    'logging_context',
    'PipelineTimer',
    # Errors
    'GrantDiscoveryError',
    'PipelineError',
    'ConfigError',
    'ExtractionError',
    'ParseError',
    'NotificationError',
    'OpenAIError',
    'MailError',
]
