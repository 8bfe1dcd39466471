"""Feed synchronization.

Brings the article archive up to date for one feed: conditional fetch, parse,
dedup against what is stored, and commit the new articles in one write.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from bytebite.config import BASELINE_SCOPES
from bytebite.models.schemas import Article, ArticleDraft, Feed, utcnow
from bytebite.services.feed_fetcher import FeedFetcher
from bytebite.services.feed_parser import parse_channel, parse_pub_date
from bytebite.storage.archive import ArticleArchive
from bytebite.storage.catalog import FeedCatalog

logger = logging.getLogger(__name__)

NOT_MODIFIED = "not_modified"
UNCHANGED = "unchanged"
UPDATED = "updated"


@dataclass
class SyncResult:
    feed_id: int
    status: str
    new_articles: List[Article] = field(default_factory=list)


class SyncEngine:
    """Fetch-and-merge for a single feed.

    ``baseline_scope`` picks what the If-Modified-Since baseline is computed
    over: the feed's own articles ("feed") or the whole archive ("archive").
    """

    def __init__(
        self,
        catalog: FeedCatalog,
        archive: ArticleArchive,
        fetcher: FeedFetcher,
        baseline_scope: str = "feed",
    ):
        if baseline_scope not in BASELINE_SCOPES:
            raise ValueError(f"baseline_scope must be one of {BASELINE_SCOPES}, got {baseline_scope!r}")
        self.catalog = catalog
        self.archive = archive
        self.fetcher = fetcher
        self.baseline_scope = baseline_scope

    async def sync_position(self, position: int) -> SyncResult:
        feed = await self.catalog.get(position)
        return await self.sync(feed)

    async def sync(self, feed: Feed) -> SyncResult:
        """Fetch ``feed`` and store its new articles.

        Raises:
            NetworkError: If the fetch fails
            FeedParseError: If the body is not an RSS channel
            DateParseError: If any item has an unparseable pubDate
        """
        logger.info(f"Syncing feed {feed.id} ({feed.name}) from {feed.url}")

        scope_id = feed.id if self.baseline_scope == "feed" else None
        baseline = await self.archive.baseline(scope_id)
        logger.info(f"Baseline for feed {feed.id}: {baseline}")

        fetched = await self.fetcher.fetch(feed.url, if_modified_since=baseline)
        if fetched.not_modified:
            logger.debug(f"Feed {feed.id} not modified, nothing to write")
            return SyncResult(feed_id=feed.id, status=NOT_MODIFIED)

        items = parse_channel(fetched.body)

        # Every date is parsed before anything is committed
        drafts = [
            ArticleDraft(
                feed_id=feed.id,
                title=item.title,
                summary=item.summary,
                link=item.link,
                pub_date=parse_pub_date(item.pub_date),
            )
            for item in items
        ]

        added = await self.archive.merge(drafts, captured_at=utcnow())
        logger.info(f"Feed {feed.id}: {len(added)} new of {len(drafts)} items")

        return SyncResult(
            feed_id=feed.id,
            status=UPDATED if added else UNCHANGED,
            new_articles=added,
        )
