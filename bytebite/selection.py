"""Selection cursors over the feed list and the selected feed's articles."""

import logging
from typing import Optional

from bytebite.errors import SelectionError

logger = logging.getLogger(__name__)


def _step_forward(cursor: Optional[int], count: int) -> Optional[int]:
    if count <= 0:
        return cursor
    if cursor is None or cursor >= count - 1:
        return 0
    return cursor + 1


def _step_backward(cursor: Optional[int], count: int) -> Optional[int]:
    if count <= 0:
        return cursor
    if cursor is None:
        return 0
    if cursor == 0 or cursor > count - 1:
        return count - 1
    return cursor - 1


class SelectionModel:
    """Two linked cursors: one over feeds, one over the filtered article list.

    Moving the feed cursor puts the article cursor back at the top. Both lists
    wrap around at either end.
    """

    def __init__(self, feed_cursor: Optional[int] = 0, article_cursor: Optional[int] = 0):
        self.feed_cursor = feed_cursor
        self.article_cursor = article_cursor

    def __repr__(self) -> str:
        return f"SelectionModel(feed_cursor={self.feed_cursor}, article_cursor={self.article_cursor})"

    def next_feed(self, count: int) -> Optional[int]:
        self.feed_cursor = _step_forward(self.feed_cursor, count)
        self.article_cursor = 0
        return self.feed_cursor

    def previous_feed(self, count: int) -> Optional[int]:
        self.feed_cursor = _step_backward(self.feed_cursor, count)
        self.article_cursor = 0
        return self.feed_cursor

    def next_article(self, count: int) -> Optional[int]:
        self.article_cursor = _step_forward(self.article_cursor, count)
        return self.article_cursor

    def previous_article(self, count: int) -> Optional[int]:
        self.article_cursor = _step_backward(self.article_cursor, count)
        return self.article_cursor

    def select_feed(self, index: int) -> None:
        if index < 0:
            raise SelectionError(f"Feed index must not be negative, got {index}")
        self.feed_cursor = index
        self.article_cursor = 0

    def feed_removed(self, new_index: Optional[int]) -> None:
        # The article cursor is left where it was.
        self.feed_cursor = new_index
        logger.debug(f"Feed cursor re-seated at {new_index}")

    def require_feed(self) -> int:
        if self.feed_cursor is None:
            raise SelectionError("No feed is selected")
        return self.feed_cursor
