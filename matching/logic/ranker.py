"""
Ranker

Orders annotated opportunities by match percentage.
"""

from typing import List, Sequence

from .contracts import AnnotatedOpportunity


def rank_by_match(items: Sequence[AnnotatedOpportunity]) -> List[AnnotatedOpportunity]:
    """
    Rank by match percentage (descending).

    ``sorted`` is stable, so equal scores keep catalog order and the same
    input always ranks the same way.
    """
    return sorted(items, key=lambda x: x.match_percentage, reverse=True)


def count_high_matches(items: Sequence[AnnotatedOpportunity], threshold: int) -> int:
    return sum(1 for item in items if item.match_percentage >= threshold)
