"""Application export – PageFetcher reads one page of entries per step."""
from __future__ import annotations

import dataclasses

from entry_export.application.export.ports import EntryStore
from entry_export.domain import Entry, ExportCriteria

__all__ = ["FetchedPage", "PageFetcher"]


@dataclasses.dataclass(frozen=True)
class FetchedPage:
    entries: list[Entry]
    has_more: bool
    total: int | None = None


class PageFetcher:
    """Offset pagination over an :class:`EntryStore`.

    ``limit=0`` is count-only mode: no entries are read and ``total`` carries
    the number of matching entries.
    """

    def __init__(self, store: EntryStore) -> None:
        self._store = store

    async def count(self, criteria: ExportCriteria) -> int:
        return int(await self._store.count(criteria))

    async def fetch(self, criteria: ExportCriteria, offset: int, limit: int) -> FetchedPage:
        if offset < 0 or limit < 0:
            raise ValueError("offset and limit must be non-negative")
        if limit == 0:
            total = await self.count(criteria)
            return FetchedPage(entries=[], has_more=total > offset, total=total)

        # One extra record tells whether another page exists.
        entries = list(await self._store.fetch_page(criteria, offset, limit + 1))
        has_more = len(entries) > limit
        return FetchedPage(entries=entries[:limit], has_more=has_more)
