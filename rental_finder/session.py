"""
Search state for the UI.

Each search takes a generation token; results that arrive for a token
that is no longer current are discarded instead of replacing newer ones.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from rental_finder.client import RentalSearchClient
from rental_finder.errors import RentalFinderError
from rental_finder.models.rental import RentalProperty, SearchCriteria

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "An unknown error occurred while fetching rental properties."


@dataclass
class SearchSession:
    """Results, error and loading flag of the most recent search."""

    criteria: Optional[SearchCriteria] = None
    results: List[RentalProperty] = field(default_factory=list)
    error: Optional[str] = None
    is_loading: bool = False
    generation: int = 0

    def begin(self, criteria: SearchCriteria) -> int:
        """Start a search, clearing previous results, and return its token."""
        self.generation += 1
        self.criteria = criteria
        self.results = []
        self.error = None
        self.is_loading = True
        return self.generation

    def is_current(self, token: int) -> bool:
        return token == self.generation

    def complete(self, token: int, results: List[RentalProperty]) -> bool:
        """Apply results for ``token``; returns False if they were stale."""
        if not self.is_current(token):
            logger.info("Discarding stale results for search %d (current %d)", token, self.generation)
            return False
        self.results = results
        self.is_loading = False
        return True

    def fail(self, token: int, message: str) -> bool:
        """Record an error for ``token``; returns False if it was stale."""
        if not self.is_current(token):
            logger.info("Discarding stale error for search %d: %s", token, message)
            return False
        self.error = message
        self.is_loading = False
        return True

    def run(self, client: RentalSearchClient, criteria: SearchCriteria) -> bool:
        """
        Run one search to completion through ``client``.

        Always leaves the loading flag cleared and, on failure, a
        user-visible error string.
        """
        token = self.begin(criteria)
        try:
            results = client.search(criteria)
        except RentalFinderError as e:
            logger.error("Search failed: %s", e.message)
            return self.fail(token, e.message)
        except Exception:
            logger.exception("Unexpected error during search")
            return self.fail(token, UNKNOWN_ERROR)
        return self.complete(token, results)
