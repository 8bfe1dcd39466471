"""Shared fixtures for bytebite tests."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from bytebite.models.schemas import Article, Feed
from bytebite.storage.archive import ArticleArchive
from bytebite.storage.catalog import FeedCatalog

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    return "asyncio"


def _write(path: Path, records) -> None:
    path.write_text(json.dumps([r.to_record() for r in records], indent=2), encoding="utf-8")


@pytest.fixture
def make_feed():
    def factory(feed_id: int, name: str = "", url: str = "", category: str = "news") -> Feed:
        return Feed(
            id=feed_id,
            category=category,
            name=name or f"Feed {feed_id}",
            url=url or f"https://example.com/{feed_id}/rss",
            created_at=T0,
        )

    return factory


@pytest.fixture
def make_article():
    def factory(article_id: int, feed_id: int = 1, title: str = "", pub_date: datetime = T0,
                created_at: datetime = T0, summary: str = "", link: str = "") -> Article:
        return Article(
            id=article_id,
            feed_id=feed_id,
            title=title or f"Article {article_id}",
            summary=summary,
            link=link or f"https://example.com/a/{article_id}",
            pub_date=pub_date,
            created_at=created_at,
        )

    return factory


@pytest.fixture
def feeds_path(tmp_path):
    return tmp_path / "rss_db.json"


@pytest.fixture
def articles_path(tmp_path):
    return tmp_path / "article_db.json"


@pytest.fixture
def seed_catalog(feeds_path):
    """Write feeds to the catalog document and return a FeedCatalog over it."""

    def factory(feeds) -> FeedCatalog:
        _write(feeds_path, feeds)
        return FeedCatalog.at(feeds_path)

    return factory


@pytest.fixture
def seed_archive(articles_path):
    """Write articles to the archive document and return an ArticleArchive over it."""

    def factory(articles) -> ArticleArchive:
        _write(articles_path, articles)
        return ArticleArchive.at(articles_path)

    return factory


@pytest.fixture
def rss():
    """Build an RSS 2.0 document from item dicts (title, description, link, pubDate)."""

    def factory(*items) -> bytes:
        parts = ['<rss version="2.0"><channel><title>Test Feed</title>',
                 "<link>https://example.com</link><description>Test</description>"]
        for item in items:
            parts.append("<item>")
            for tag in ("title", "description", "link", "pubDate"):
                if tag in item:
                    parts.append(f"<{tag}>{item[tag]}</{tag}>")
            parts.append("</item>")
        parts.append("</channel></rss>")
        return "".join(parts).encode("utf-8")

    return factory
