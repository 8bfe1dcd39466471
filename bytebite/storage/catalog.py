"""Feed catalog.

The catalog owns the ordered list of subscribed feeds. Positions in that list
are what the selection cursor points at.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple

from bytebite.errors import EmptyCatalogError, FeedInputError, SelectionError
from bytebite.models.schemas import Feed, utcnow
from bytebite.storage.record_store import RecordStore

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"


def parse_feed_line(line: str) -> Tuple[str, str, str]:
    """Split a ``category | name | url`` line into its trimmed fields.

    Raises:
        FeedInputError: If the line does not have exactly three non-empty fields
    """
    parts = [part.strip() for part in line.split(FIELD_SEPARATOR)]
    if len(parts) != 3:
        raise FeedInputError(
            f"Expected 'category | name | url', got {len(parts)} field(s): {line!r}"
        )
    if not all(parts):
        raise FeedInputError(f"Empty field in feed line: {line!r}")
    category, name, url = parts
    return category, name, url


class FeedCatalog:
    """Ordered, persistent collection of feeds."""

    def __init__(self, store: RecordStore[Feed]):
        self.store = store

    @classmethod
    def at(cls, path: Path) -> "FeedCatalog":
        return cls(RecordStore(path, "feeds", Feed.from_record, Feed.to_record))

    async def list(self) -> List[Feed]:
        return await self.store.load()

    async def get(self, position: int) -> Feed:
        """Return the feed at ``position`` in storage order.

        Raises:
            SelectionError: If no feed is at that position
        """
        feeds = await self.store.load()
        if not 0 <= position < len(feeds):
            raise SelectionError(f"No feed at position {position} ({len(feeds)} feeds)")
        return feeds[position]

    async def max_id(self) -> int:
        feeds = await self.store.load()
        if not feeds:
            raise EmptyCatalogError()
        return max(feed.id for feed in feeds)

    async def add(self, line: str, id_floor: int = 0) -> Feed:
        """Parse a feed line, assign the next id and persist the new feed.

        Args:
            line: ``category | name | url``
            id_floor: Ids up to this value are treated as taken

        Returns:
            The created Feed
        """
        category, name, url = parse_feed_line(line)

        def append(feeds: List[Feed]):
            new_id = max([feed.id for feed in feeds] + [id_floor, 0]) + 1
            feed = Feed(
                id=new_id,
                category=category,
                name=name,
                url=url,
                created_at=utcnow(),
            )
            return feeds + [feed], feed

        feed = await self.store.update(append)
        logger.info(f"Added feed {feed.id}: {feed.name} ({feed.url})")
        return feed

    async def remove(self, selected_index: Optional[int]) -> Optional[int]:
        """Remove the feed at ``selected_index`` and return the new selection.

        The selection moves up by one, or stays at 0. Nothing happens when
        there is no selection.

        Raises:
            SelectionError: If the index is out of range
        """
        if selected_index is None:
            return None
        _, new_index = await self.pop(selected_index)
        return new_index

    async def pop(self, selected_index: int) -> Tuple[Feed, int]:
        """Remove the feed at ``selected_index`` in one locked update.

        Returns:
            The removed feed and the new selection

        Raises:
            SelectionError: If the index is out of range
        """

        def drop(feeds: List[Feed]):
            if not 0 <= selected_index < len(feeds):
                raise SelectionError(
                    f"No feed at position {selected_index} ({len(feeds)} feeds)"
                )
            removed = feeds[selected_index]
            return feeds[:selected_index] + feeds[selected_index + 1:], removed

        removed = await self.store.update(drop)
        logger.info(f"Removed feed {removed.id}: {removed.name}")

        if selected_index > 0:
            return removed, selected_index - 1
        return removed, 0
