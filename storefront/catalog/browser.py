"""
Catalog browsing state for one shopper session.

Holds the current filters, sort order and search text, and recomputes the
visible product list from an async catalog source. When a newer refresh
starts while an older one is still waiting on the source, the older result
is discarded (last request wins).
"""
from typing import Awaitable, Callable, List, Optional, Sequence, Union
import logging
from storefront.catalog.filtering import count_active_filters, filter_products
from storefront.catalog.sorting import resolve_sort_key, sort_products
from storefront.schemas.filters import FilterCriteria, SortKey
from storefront.schemas.product import Product

logger = logging.getLogger(__name__)

CatalogSource = Callable[[], Awaitable[Sequence[Product]]]


class CatalogBrowser:

    def __init__(self, source: CatalogSource):
        self._source = source
        self._criteria = FilterCriteria()
        self._sort_key = SortKey.POPULARITY
        self._search_text = ""
        self._generation = 0
        self._results: List[Product] = []

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def sort_key(self) -> SortKey:
        return self._sort_key

    @property
    def search_text(self) -> str:
        return self._search_text

    @property
    def results(self) -> List[Product]:
        return list(self._results)

    def active_filters_count(self) -> int:
        return count_active_filters(self._criteria)

    async def update_filters(self, criteria: FilterCriteria) -> Optional[List[Product]]:
        self._criteria = criteria
        return await self.refresh()

    async def update_sort(self, key: Union[str, SortKey]) -> Optional[List[Product]]:
        self._sort_key = resolve_sort_key(key)
        return await self.refresh()

    async def update_search(self, text: str) -> Optional[List[Product]]:
        self._search_text = text
        return await self.refresh()

    async def clear_filters(self) -> Optional[List[Product]]:
        """Reset filters, search text and sort order"""
        self._criteria = FilterCriteria()
        self._search_text = ""
        self._sort_key = SortKey.POPULARITY
        return await self.refresh()

    async def refresh(self) -> Optional[List[Product]]:
        """
        Recompute the visible list.

        Returns the new list, or None when a later refresh superseded this one
        while the catalog source was being awaited.
        """
        self._generation += 1
        generation = self._generation
        criteria, search_text, sort_key = self._criteria, self._search_text, self._sort_key

        catalog = await self._source()

        if generation != self._generation:
            logger.debug(f"[CATALOG] Discarding superseded refresh #{generation}")
            return None

        self._results = sort_products(filter_products(catalog, criteria, search_text), sort_key)
        return list(self._results)
