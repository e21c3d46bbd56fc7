"""
Grant repository: the accumulated set of grants discovered across runs.

Provides:
- Title snapshot for deduplication
- Single-step merge of a deduplicated batch
- JSON export of the full set

The repository is in-memory and owned by the host. The orchestrator reads a
title snapshot and proposes additions through merge_unique(); nothing in the
pipeline removes entries.
"""

import json
from typing import Any

from .logging import get_logger
from .models.grant import Grant

logger = get_logger(__name__)

EXPORT_FILENAME = 'grants_discovery_export.json'


class GrantRepository:
    """
    Ordered, title-unique collection of Grants, newest merges first.

    Invariant: no two stored grants share a dedup key.
    """

    def __init__(self, grants: list[Grant] | None = None):
        """
        Initialize the repository.

        Args:
            grants: Optional seed grants; later duplicates of a title are dropped
        """
        self._grants: list[Grant] = []
        self._titles: set[str] = set()
        if grants:
            self.merge_unique(grants)

    @property
    def grants(self) -> list[Grant]:
        """Copy of the stored grants, newest first."""
        return list(self._grants)

    def titles(self) -> frozenset[str]:
        """Snapshot of the dedup keys currently stored."""
        return frozenset(self._titles)

    def merge_unique(self, batch: list[Grant]) -> list[Grant]:
        """
        Add a batch of grants, ahead of everything already stored.

        Grants whose dedup key is already present, including earlier entries
        of the same batch, are skipped.

        Args:
            batch: Deduplicated grants from one run

        Returns:
            The grants actually added, in batch order
        """
        added: list[Grant] = []
        for grant in batch:
            key = grant.dedup_key
            if key in self._titles:
                continue
            self._titles.add(key)
            added.append(grant)

        self._grants[:0] = added

        logger.info('repository_merged', added=len(added), total=len(self._grants))
        return added

    def clear(self) -> None:
        """Drop all stored grants."""
        self._grants.clear()
        self._titles.clear()
        logger.info('repository_cleared')

    def to_export(self) -> list[dict[str, Any]]:
        """Stored grants as JSON-ready dicts."""
        return [g.model_dump(mode='json') for g in self._grants]

    def export_json(self, indent: int = 2) -> str:
        """Serialize the full repository as a JSON document."""
        return json.dumps(self.to_export(), indent=indent, ensure_ascii=False)

    def __len__(self) -> int:
        return len(self._grants)

    def __contains__(self, title: object) -> bool:
        return isinstance(title, str) and title.lower() in self._titles
