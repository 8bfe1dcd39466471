"""Feed parser service.

This module parses RSS channel documents into items and their publication
dates.
"""

import io
import logging
import xml.sax
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List

import feedparser

from bytebite.errors import DateParseError, FeedParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelItem:
    """One ``<item>`` of an RSS channel, fields as found in the source."""

    title: str
    summary: str
    link: str
    pub_date: str


def _item_link(entry) -> str:
    # feedparser fills "link" from a permalink <guid> when <link> is missing.
    # Only a real <link> element shows up in "links" as rel="alternate".
    for link in entry.get("links", []):
        if link.get("rel") == "alternate" and link.get("href"):
            return link["href"]
    return ""


def _item_description(entry) -> str:
    # "summary" alone may be a copy of <content:encoded>
    detail = entry.get("summary_detail")
    if detail is None:
        return ""
    return detail.get("value", "")


def parse_channel(body: bytes) -> List[ChannelItem]:
    """Parse an RSS document and return its items in source order.

    Args:
        body: Raw response body

    Returns:
        List of ChannelItem objects; missing fields are empty strings

    Raises:
        FeedParseError: If the body is not well-formed XML or not an RSS channel
    """
    # Fields are kept as the source wrote them: no HTML sanitizing, no URI rewriting
    feed = feedparser.parse(io.BytesIO(body), sanitize_html=False, resolve_relative_uris=False)

    if feed.bozo and isinstance(feed.get("bozo_exception"), xml.sax.SAXException):
        raise FeedParseError(f"Malformed feed document: {feed.bozo_exception}")

    version = feed.get("version", "")
    if not version.startswith("rss"):
        raise FeedParseError(f"Not an RSS channel (detected format: {version or 'unknown'})")

    items = [
        ChannelItem(
            title=entry.get("title", ""),
            summary=_item_description(entry),
            link=_item_link(entry),
            pub_date=entry.get("published", ""),
        )
        for entry in feed.entries
    ]

    logger.debug(f"Parsed {len(items)} items from {version} channel")
    return items


def parse_pub_date(value: str) -> datetime:
    """Parse an RFC 2822 publication date into a UTC datetime.

    Raises:
        DateParseError: If the value is empty or not an RFC 2822 date
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError) as e:
        raise DateParseError(value) from e

    if parsed is None:
        raise DateParseError(value)

    # "-0000" means the zone is unknown; the source is taken to be UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
