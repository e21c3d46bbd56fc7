"""
Novelty filter for freshly parsed grants.

A candidate is new iff its lower-cased program title is absent from the
existing title set. Exact, case-insensitive title equality is the only rule:
distinct grants sharing a title collide, and near-identical titles with
different wording are both kept.
"""

from collections.abc import Iterable, Set
from dataclasses import dataclass, field

from ..models.grant import Grant


@dataclass
class DedupResult:
    """Candidates that survived the filter, and how many were dropped."""

    unique: list[Grant] = field(default_factory=list)
    filtered_count: int = 0


def filter_new(
    candidates: Iterable[Grant],
    existing_titles_lowercased: Set[str],
) -> DedupResult:
    """
    Keep candidates whose dedup key is not already known.

    Pure: neither argument is modified. Input order is preserved.

    Args:
        candidates: Grants parsed in the current run
        existing_titles_lowercased: Dedup keys of the repository snapshot

    Returns:
        DedupResult with the unique grants and the filtered count
    """
    result = DedupResult()
    for grant in candidates:
        if grant.dedup_key in existing_titles_lowercased:
            result.filtered_count += 1
        else:
            result.unique.append(grant)
    return result
