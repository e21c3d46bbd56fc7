"""
Pipeline components for grant extraction, parsing, deduplication and notification.
"""

from .extractor import GrantExtractor, ExtractionOutput
from .parser import (
    GrantResponseParser,
    ConfidenceScorer,
    extract_json_array,
    fixed_confidence,
    random_confidence,
)
from .deduplicator import DedupResult, filter_new
from .notifier import NotificationDispatcher, build_digest, should_notify
from .orchestrator import DiscoveryOrchestrator, DiscoveryResult

__all__ = [
    # Main Orchestrator
    'DiscoveryOrchestrator',
    'DiscoveryResult',
    # Extraction
    'GrantExtractor',
    'ExtractionOutput',
    # Parsing
    'GrantResponseParser',
    'ConfidenceScorer',
    'extract_json_array',
    'fixed_confidence',
    'random_confidence',
    # Deduplication
    'DedupResult',
    'filter_new',
    # Notification
    'NotificationDispatcher',
    'build_digest',
    'should_notify',
]
