"""
Matching Engine

Scores a profile against the catalog through the oracle and returns the
full catalog annotated and ranked. This is the primary entry point for
generating matches.
"""

import logging
import time
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from pydantic import ValidationError as SchemaValidationError

from errors import PersistenceError, UpstreamError, ValidationError
from models.models import Opportunity
from store import MemoryStore
from ..ai.prompt_builder import build_matching_system_prompt, build_matching_user_prompt
from .constants import HIGH_MATCH_THRESHOLD
from .contracts import AnnotatedOpportunity, MatchResult, OracleMatchResponse, Profile
from .ranker import count_high_matches, rank_by_match

if TYPE_CHECKING:
    from ..ai.oracle import ReasoningOracle

logger = logging.getLogger(__name__)


class MatchingEngine:
    """
    Pipeline flow:
    1. Prompt - Combine the profile with the catalog projection
    2. Oracle - One scoring call, reply validated against OracleMatchResponse
    3. Resolve - One MatchResult per catalog entry (missing -> 0, no reasons)
    4. Rank - Stable sort by match percentage
    5. Record - Upsert results for a known user (best-effort)
    """

    def __init__(self, oracle: "ReasoningOracle", store: Optional[MemoryStore] = None):
        self.oracle = oracle
        self.store = store

    def compute_matches(
        self,
        profile: Optional[Profile],
        catalog: Sequence[Opportunity],
        user_id: Optional[int] = None,
    ) -> List[AnnotatedOpportunity]:
        """
        Score, annotate and rank every opportunity in ``catalog``.

        Args:
            profile: Profile to score; required
            catalog: Opportunities in catalog order
            user_id: When given (and a store is attached) results are recorded

        Returns:
            One AnnotatedOpportunity per catalog entry, best match first

        Raises:
            ValidationError: profile is missing
            UpstreamError: oracle failed or its reply has the wrong shape
        """
        if profile is None:
            raise ValidationError("Profile is required")
        if not catalog:
            return []

        start_time = time.perf_counter()
        logger.info(f"🎯 Scoring {len(catalog)} opportunities for user: {user_id or 'anonymous'}")

        reply = self._score(profile, catalog)
        results = self._resolve(reply, catalog)

        annotated = [
            AnnotatedOpportunity.build(opportunity, results[opportunity.id])
            for opportunity in catalog
        ]
        ranked = rank_by_match(annotated)

        if user_id is not None and self.store is not None:
            self._record(user_id, [results[opportunity.id] for opportunity in catalog])

        processing_time = (time.perf_counter() - start_time) * 1000
        logger.info(f"✨ Matching complete ({processing_time:.2f}ms), top score: {ranked[0].match_percentage}")
        return ranked

    def _score(self, profile: Profile, catalog: Sequence[Opportunity]) -> OracleMatchResponse:
        payload = self.oracle.complete_json(
            build_matching_system_prompt(),
            build_matching_user_prompt(profile, catalog),
        )
        try:
            return OracleMatchResponse.model_validate(payload)
        except SchemaValidationError as e:
            logger.debug(f"Rejected oracle scoring reply: {e}")
            raise UpstreamError(f"Oracle scoring reply has the wrong shape: {e.error_count()} error(s)") from e

    def _resolve(
        self,
        reply: OracleMatchResponse,
        catalog: Sequence[Opportunity],
    ) -> Dict[int, MatchResult]:
        """One MatchResult per catalog id; the first oracle entry for an id wins."""
        results: Dict[int, MatchResult] = {
            opportunity.id: MatchResult.unscored(opportunity.id) for opportunity in catalog
        }
        scored = set()
        for match in reply.matches:
            if match.opportunity_id not in results:
                logger.warning(f"Oracle scored unknown opportunity {match.opportunity_id}; ignoring")
                continue
            if match.opportunity_id in scored:
                logger.debug(f"Duplicate oracle entry for opportunity {match.opportunity_id}; keeping the first")
                continue
            scored.add(match.opportunity_id)
            results[match.opportunity_id] = MatchResult(
                opportunity_id=match.opportunity_id,
                match_percentage=match.match_percentage,
                reasons=list(match.reasons),
            )

        missing = len(results) - len(scored)
        if missing:
            logger.info(f"Oracle left {missing} opportunities unscored; defaulting them to 0")
        return results

    def _record(self, user_id: int, results: Sequence[MatchResult]) -> None:
        failures = 0
        for result in results:
            try:
                self.store.upsert_user_match(
                    user_id=user_id,
                    opportunity_id=result.opportunity_id,
                    match_percentage=result.match_percentage,
                    reasons=result.reasons,
                )
            except PersistenceError as e:
                failures += 1
                logger.error(f"Failed to record match for user {user_id}: {e.message}")
        if failures:
            logger.warning(f"⚠️ {failures}/{len(results)} match records not saved for user {user_id}")

    @staticmethod
    def summarize(results: Sequence[AnnotatedOpportunity]) -> Dict[str, int]:
        return {
            "total_matches": len(results),
            "high_matches": count_high_matches(results, HIGH_MATCH_THRESHOLD),
        }
