"""Article archive.

The archive holds every article captured from every feed. Ids are global to
the archive, not scoped per feed.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from bytebite.errors import EmptyArchiveError
from bytebite.models.schemas import Article, ArticleDraft
from bytebite.storage.record_store import RecordStore

logger = logging.getLogger(__name__)


def _next_id(articles: List[Article]) -> int:
    if not articles:
        return 1
    return max(article.id for article in articles) + 1


class ArticleArchive:
    """Persistent collection of articles across all feeds."""

    def __init__(self, store: RecordStore[Article]):
        self.store = store

    @classmethod
    def at(cls, path: Path) -> "ArticleArchive":
        return cls(RecordStore(path, "articles", Article.from_record, Article.to_record))

    async def list(self) -> List[Article]:
        return await self.store.load()

    async def list_for_feed(self, feed_id: int) -> List[Article]:
        """Articles of one feed, newest publication first.

        Ties keep storage order.
        """
        articles = [a for a in await self.store.load() if a.feed_id == feed_id]
        articles.sort(key=lambda a: a.pub_date, reverse=True)
        return articles

    async def max_id(self) -> int:
        articles = await self.store.load()
        if not articles:
            raise EmptyArchiveError()
        return max(article.id for article in articles)

    async def next_id(self) -> int:
        return _next_id(await self.store.load())

    async def max_feed_id(self) -> int:
        """Highest feed id referenced by any stored article, 0 if none."""
        articles = await self.store.load()
        return max((article.feed_id for article in articles), default=0)

    async def baseline(self, feed_id: Optional[int] = None) -> Optional[datetime]:
        """Latest capture time, for one feed or for the whole archive.

        Returns:
            max(created_at), or None when there is nothing to compare against
        """
        articles = await self.store.load()
        if feed_id is not None:
            articles = [a for a in articles if a.feed_id == feed_id]
        return max((a.created_at for a in articles), default=None)

    async def append_all(self, new_articles: Iterable[Article]) -> None:
        new_articles = list(new_articles)
        if not new_articles:
            return

        def extend(articles: List[Article]):
            return articles + new_articles, None

        await self.store.update(extend)
        logger.debug(f"Appended {len(new_articles)} articles")

    async def merge(self, drafts: Iterable[ArticleDraft], captured_at: datetime) -> List[Article]:
        """Commit the drafts that are not already stored.

        Duplicates are decided on the dedup key against both the stored
        articles and drafts accepted earlier in the same call. Accepted drafts
        get contiguous ids and a single write; nothing is written when every
        draft is a duplicate.

        Returns:
            The newly stored articles, in draft order
        """
        drafts = list(drafts)

        def accept(articles: List[Article]):
            seen = {article.dedup_key for article in articles}
            article_id = _next_id(articles)
            added = []
            for draft in drafts:
                if draft.dedup_key in seen:
                    continue
                seen.add(draft.dedup_key)
                added.append(draft.to_article(article_id, captured_at))
                article_id += 1
            if not added:
                return None, added
            return articles + added, added

        added = await self.store.update(accept)
        if added:
            logger.debug(f"Merged {len(added)} of {len(drafts)} articles")
        else:
            logger.debug("No new articles to write")
        return added
