"""
Response parser: recovers a JSON array of grants from free-form provider text.

With web search active the provider cannot be held to bare JSON, so the
parser is lenient about wrapping noise (prose, markdown fences) and strict
about the payload itself:

1. Trim surrounding whitespace.
2. Strip a leading code fence (optionally language-tagged) and a trailing one.
3. Locate the first '[' and the last ']'.
4. If either is missing, fail with ParseError.
5. Parse the bracketed slice as JSON; invalid JSON or a non-array fails.
6. Coerce each element and build a Grant with a fresh id and a confidence
   score from the scoring strategy.
"""

import json
import random
import re
from typing import Any, Callable

from pydantic import ValidationError as PydanticValidationError

from ..errors import ParseError
from ..log_stream import LogLevel, LogStream
from ..logging import get_logger
from ..models.extraction import ExtractedGrant
from ..models.grant import CONFIDENCE_CEILING, CONFIDENCE_FLOOR, Grant
from ..utils import new_id

logger = get_logger(__name__)

# Maps the raw extraction element to a confidence score in [0.90, 0.99)
ConfidenceScorer = Callable[[dict[str, Any]], float]

_LEADING_FENCE = re.compile(r'^```[\w+-]*\s*')
_TRAILING_FENCE = re.compile(r'\s*```$')


def random_confidence(item: dict[str, Any]) -> float:
    """Uniform score in [0.90, 0.99). Grounded results are trusted highly."""
    return CONFIDENCE_FLOOR + random.random() * 0.09


def fixed_confidence(score: float) -> ConfidenceScorer:
    """Scorer that always returns the same value."""

    def scorer(item: dict[str, Any]) -> float:
        return score

    return scorer


def extract_json_array(raw_text: str) -> list[Any]:
    """
    Recover the JSON array embedded in raw_text.

    Raises:
        ParseError: No '[' ... ']' span, invalid JSON, or not an array
    """
    text = raw_text.strip()
    text = _LEADING_FENCE.sub('', text)
    text = _TRAILING_FENCE.sub('', text)

    start = text.find('[')
    end = text.rfind(']')
    if start == -1 or end == -1 or end < start:
        raise ParseError(
            'No JSON array found in extraction response',
            context={'response_length': len(raw_text)},
        )

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Invalid JSON in extraction response: {e.msg}",
            context={'line': e.lineno, 'column': e.colno},
        ) from e

    if not isinstance(data, list):
        raise ParseError(
            'Extraction response is not a JSON array',
            context={'type': type(data).__name__},
        )

    return data


class GrantResponseParser:
    """
    Turns raw extraction text into Grant records.

    Each element is coerced through ExtractedGrant: text fields default to
    '', optional fields keep None, unknown statuses become UNKNOWN. Elements
    that are not objects or lack a program title are skipped with a warning.
    """

    def __init__(
        self,
        log_stream: LogStream,
        scorer: ConfidenceScorer = random_confidence,
        id_factory: Callable[[], str] = new_id,
    ):
        """
        Initialize the parser.

        Args:
            log_stream: Progress log for the current run
            scorer: Confidence scoring strategy
            id_factory: Generator for fresh Grant identifiers
        """
        self.log_stream = log_stream
        self.scorer = scorer
        self.id_factory = id_factory

    def parse(self, raw_text: str) -> list[Grant]:
        """
        Parse provider output into Grants.

        Args:
            raw_text: Free text returned by the extraction provider

        Returns:
            Grants in the order the provider listed them

        Raises:
            ParseError: The payload could not be recovered, or the scorer
                produced a value outside [0.90, 0.99)
        """
        try:
            items = extract_json_array(raw_text)
        except ParseError:
            self.log_stream.emit(
                'Failed to parse structured data. Raw output received.', LogLevel.ERROR
            )
            logger.error('parse_failed', raw_output=raw_text[:2000])
            raise

        grants: list[Grant] = []
        skipped = 0
        for index, item in enumerate(items):
            grant = self._build_grant(index, item)
            if grant is None:
                skipped += 1
                continue
            grants.append(grant)

        if skipped:
            self.log_stream.emit(
                f"Skipped {skipped} malformed record{'s' if skipped != 1 else ''}.",
                LogLevel.WARNING,
            )

        self.log_stream.emit(
            f"Successfully extracted {len(grants)} opportunities.", LogLevel.SUCCESS
        )
        logger.info('parse_complete', total=len(items), parsed=len(grants), skipped=skipped)

        return grants

    def _build_grant(self, index: int, item: Any) -> Grant | None:
        if not isinstance(item, dict):
            logger.warning('parse_skipped_non_object', index=index, type=type(item).__name__)
            return None

        try:
            extracted = ExtractedGrant.model_validate(item)
        except PydanticValidationError as e:
            logger.warning('parse_skipped_invalid', index=index, errors=e.error_count())
            return None

        score = self.scorer(item)
        if not CONFIDENCE_FLOOR <= score < CONFIDENCE_CEILING:
            raise ParseError(
                f"Confidence score {score} outside [{CONFIDENCE_FLOOR}, {CONFIDENCE_CEILING})",
                context={'index': index},
            )

        return Grant(
            id=self.id_factory(),
            confidence_score=score,
            **extracted.model_dump(),
        )
