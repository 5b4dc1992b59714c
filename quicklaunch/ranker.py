"""Ranking of applications against a search query."""

import logging
from typing import Callable, Iterable, List, Optional, Tuple

from .fuzzy_matcher import fuzzy_score
from .models import WorkingApplication

logger = logging.getLogger(__name__)

# Candidates must score strictly above this to be shown
MINIMUM_MATCH_SCORE = 19
SEARCH_RESULT_LIMIT = 6

Scorer = Callable[[str, str], Optional[int]]


class Ranker:
    """Orders applications by fuzzy relevance, then by usage recency."""

    def __init__(
        self,
        min_score: int = MINIMUM_MATCH_SCORE,
        limit: int = SEARCH_RESULT_LIMIT,
        scorer: Scorer = fuzzy_score,
    ):
        """
        Initialize the ranker.

        Args:
            min_score: Relevance floor; a candidate needs a strictly greater score
            limit: Maximum number of results
            scorer: Function (choice, query) -> score or None for no match
        """
        self.min_score = min_score
        self.limit = limit
        self.scorer = scorer

    def score(self, app: WorkingApplication, query: str) -> int:
        """
        Relevance of ``app`` for ``query``.

        The discovered name and the configured alias are both matched; the
        better one counts. No match scores 0.
        """
        scores = [self.scorer(app.name, query)]
        if app.alias:
            scores.append(self.scorer(app.alias, query))
        matched = [score for score in scores if score is not None]
        return max(matched) if matched else 0

    def rank_with_scores(self, query: str, applications: Iterable[WorkingApplication]) -> List[Tuple[WorkingApplication, int]]:
        """
        Rank applications and keep their scores.

        Returns:
            (application, score) pairs, best first, at most ``limit`` long
        """
        if not query or not query.strip():
            return []

        scored = [(app, self.score(app, query)) for app in applications]
        # list.sort is stable: full ties keep their input order
        scored.sort(key=lambda pair: (pair[1], pair[0].usage_recency_score), reverse=True)
        matched = [(app, score) for app, score in scored if score > self.min_score]
        logger.debug(
            "Fuzzy search for '%s': %d of %d applications above threshold %d",
            query, len(matched), len(scored), self.min_score,
        )
        return matched[:self.limit]

    def rank(self, query: str, applications: Iterable[WorkingApplication]) -> List[WorkingApplication]:
        """
        Filter and order ``applications`` for ``query``.

        An empty query matches nothing.

        Args:
            query: User input
            applications: Candidates, in a stable order

        Returns:
            Best candidates first, at most ``limit`` entries
        """
        return [app for app, _ in self.rank_with_scores(query, applications)]
