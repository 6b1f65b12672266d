"""Result assembly: filter, rank and paginate scored candidates."""

from typing import Iterable, Optional

from src.models.models import DEFAULT_LIMIT, MAX_LIMIT, ResultPage, ScoredCandidate


def clamp_limit(limit: Optional[int]) -> int:
    """Missing or non-positive limits fall back to 20; anything above 100 is capped."""
    if not limit or limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def rank_candidates(candidates: Iterable[ScoredCandidate]) -> list[ScoredCandidate]:
    """Drop candidates with no match at all and sort the rest.

    Order: score descending, then rating descending (missing rating = 0), then
    the incoming retrieval order (Python's sort is stable).
    """
    kept = [c for c in candidates if c.matched_count > 0 or c.partial_count > 0]
    return sorted(kept, key=lambda c: (-c.score, -(c.recipe.rating or 0.0)))


def assemble_results(
    candidates: Iterable[ScoredCandidate],
    limit: Optional[int] = None,
    offset: int = 0,
) -> ResultPage:
    """Build one result page from scored candidates.

    Args:
        candidates: Scored candidates in retrieval order.
        limit: Page size (default 20, capped at 100).
        offset: Number of ranked candidates to skip (negative values act as 0).

    Returns:
        ResultPage with the requested slice and the pre-pagination total.
    """
    ranked = rank_candidates(candidates)
    limit = clamp_limit(limit)
    offset = max(offset or 0, 0)

    return ResultPage(
        items=ranked[offset:offset + limit],
        total=len(ranked),
        limit=limit,
        offset=offset,
    )
