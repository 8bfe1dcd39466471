"""Storage layer for bytebite."""

from .record_store import RecordStore
from .catalog import FeedCatalog, parse_feed_line
from .archive import ArticleArchive

__all__ = [
    "RecordStore",
    "FeedCatalog",
    "parse_feed_line",
    "ArticleArchive",
]
