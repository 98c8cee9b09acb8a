"""
Saved searches and favorites.

Every mutation is written through the PersistenceAdapter immediately.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional, Tuple

from rental_finder.models.rental import RentalProperty, SavedSearch, SearchCriteria
from rental_finder.storage import FAVORITES_KEY, SAVED_SEARCHES_KEY, PersistenceAdapter

logger = logging.getLogger(__name__)


def _clock_ms() -> int:
    return time.time_ns() // 1_000_000


def next_search_id(existing: Iterable[int], clock: Callable[[], int] = _clock_ms) -> int:
    """
    Pick an id for a new saved search.

    Millisecond timestamps keep ids roughly chronological; when the clock
    has not moved past the largest id in use, the id is bumped past it.
    """
    highest = max(existing, default=0)
    return max(clock(), highest + 1)


class RentalLibrary:
    """The user's saved searches and favorite listings."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        clock: Callable[[], int] = _clock_ms,
    ) -> None:
        self.adapter = adapter
        self._clock = clock
        self._last_removed: Optional[Tuple[str, int]] = None
        self.saved_searches: List[SavedSearch] = adapter.load(SAVED_SEARCHES_KEY, SavedSearch)
        self.favorites: List[RentalProperty] = self._dedupe(
            adapter.load(FAVORITES_KEY, RentalProperty)
        )
        logger.info(
            "Loaded %d saved searches and %d favorites",
            len(self.saved_searches),
            len(self.favorites),
        )

    @staticmethod
    def _dedupe(favorites: List[RentalProperty]) -> List[RentalProperty]:
        seen = set()
        unique = []
        for favorite in favorites:
            if favorite.url not in seen:
                seen.add(favorite.url)
                unique.append(favorite)
        return unique

    # Saved searches

    def save_search(self, criteria: SearchCriteria) -> SavedSearch:
        """Persist ``criteria`` under a fresh id and return the saved entry."""
        search_id = next_search_id((s.id for s in self.saved_searches), self._clock)
        saved = SavedSearch(id=search_id, **criteria.model_dump())
        self.saved_searches = [*self.saved_searches, saved]
        self.adapter.save(SAVED_SEARCHES_KEY, self.saved_searches)
        logger.info("Saved search %d for %s", search_id, criteria.location)
        return saved

    def delete_search(self, search_id: int) -> None:
        self.saved_searches = [s for s in self.saved_searches if s.id != search_id]
        self.adapter.save(SAVED_SEARCHES_KEY, self.saved_searches)

    def get_search(self, search_id: int) -> Optional[SavedSearch]:
        return next((s for s in self.saved_searches if s.id == search_id), None)

    def load_search(self, search_id: int) -> Optional[SearchCriteria]:
        """Return the criteria of a saved search, without its id."""
        saved = self.get_search(search_id)
        return saved.criteria() if saved else None

    # Favorites

    def is_favorite(self, prop: RentalProperty) -> bool:
        return any(f.url == prop.url for f in self.favorites)

    def toggle_favorite(self, prop: RentalProperty) -> bool:
        """
        Add ``prop`` to favorites, or remove it when its url is already there.

        Returns:
            True if the property is a favorite afterwards.
        """
        index = next((i for i, f in enumerate(self.favorites) if f.url == prop.url), None)
        if index is not None:
            self.favorites = self.favorites[:index] + self.favorites[index + 1:]
            self._last_removed = (prop.url, index)
            favorited = False
        else:
            # Undoing the previous removal puts the entry back where it was
            position = len(self.favorites)
            if self._last_removed and self._last_removed[0] == prop.url:
                position = min(self._last_removed[1], position)
            self.favorites = self.favorites[:position] + [prop] + self.favorites[position:]
            self._last_removed = None
            favorited = True
        self.adapter.save(FAVORITES_KEY, self.favorites)
        return favorited
