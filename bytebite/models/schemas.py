"""Data models for bytebite.

This module defines the core data structures for feeds and articles, and
their conversion to and from the JSON document records.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Render a timestamp as an RFC 3339 string in UTC."""
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp from a stored record.

    Raises:
        ValueError: If the value is not a string or not a valid timestamp
    """
    if not isinstance(value, str):
        raise ValueError(f"expected a timestamp string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _require(record: Dict[str, Any], key: str, kind: type) -> Any:
    value = record[key]
    # bool is an int subclass, never a valid id
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise TypeError(f"field '{key}' must be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Feed:
    """Represents a subscribed feed source."""

    id: int
    category: str
    name: str
    url: str
    created_at: datetime

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "name": self.name,
            "url": self.url,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Feed":
        return cls(
            id=_require(record, "id", int),
            category=_require(record, "category", str),
            name=_require(record, "name", str),
            url=_require(record, "url", str),
            created_at=parse_timestamp(record["created_at"]),
        )


@dataclass(frozen=True)
class Article:
    """Represents one item captured from a feed."""

    id: int
    feed_id: int
    title: str
    summary: str
    link: str
    pub_date: datetime
    created_at: datetime

    @property
    def dedup_key(self) -> Tuple[int, str, str, str, datetime]:
        """Fields that decide whether two articles are the same item."""
        return (self.feed_id, self.title, self.summary, self.link, self.pub_date)

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "feed_id": self.feed_id,
            "title": self.title,
            "summary": self.summary,
            "link": self.link,
            "pub_date": format_timestamp(self.pub_date),
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Article":
        return cls(
            id=_require(record, "id", int),
            feed_id=_require(record, "feed_id", int),
            title=_require(record, "title", str),
            summary=_require(record, "summary", str),
            link=_require(record, "link", str),
            pub_date=parse_timestamp(record["pub_date"]),
            created_at=parse_timestamp(record["created_at"]),
        )


@dataclass(frozen=True)
class ArticleDraft:
    """An item parsed from a channel that has not been given an id yet."""

    feed_id: int
    title: str
    summary: str
    link: str
    pub_date: datetime

    @property
    def dedup_key(self) -> Tuple[int, str, str, str, datetime]:
        return (self.feed_id, self.title, self.summary, self.link, self.pub_date)

    def to_article(self, article_id: int, created_at: datetime) -> Article:
        return Article(
            id=article_id,
            feed_id=self.feed_id,
            title=self.title,
            summary=self.summary,
            link=self.link,
            pub_date=self.pub_date,
            created_at=created_at,
        )
