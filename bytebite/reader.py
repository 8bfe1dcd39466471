"""Feed reader façade.

``FeedReader`` ties the catalog, the archive, the sync machinery and the
selection cursors together. Outer surfaces (tools, a terminal UI) only talk to
this class.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from bytebite.config import ServerConfig
from bytebite.models.schemas import Article, Feed
from bytebite.selection import SelectionModel
from bytebite.services.feed_fetcher import FeedFetcher
from bytebite.services.supervisor import SyncHandle, SyncSupervisor
from bytebite.services.sync import SyncEngine
from bytebite.storage.archive import ArticleArchive
from bytebite.storage.catalog import FeedCatalog

logger = logging.getLogger(__name__)


@dataclass
class ReaderView:
    """Everything a front end needs to draw one frame."""

    feeds: List[Feed] = field(default_factory=list)
    feed_cursor: Optional[int] = None
    selected_feed: Optional[Feed] = None
    articles: List[Article] = field(default_factory=list)
    article_cursor: Optional[int] = None
    selected_article: Optional[Article] = None


def _pick(items: list, cursor: Optional[int]):
    if cursor is None or not 0 <= cursor < len(items):
        return None
    return items[cursor]


class FeedReader:
    def __init__(
        self,
        catalog: FeedCatalog,
        archive: ArticleArchive,
        engine: SyncEngine,
        seed_feeds: Optional[List[str]] = None,
        bootstrap: bool = True,
    ):
        self.catalog = catalog
        self.archive = archive
        self.engine = engine
        self.supervisor = SyncSupervisor(engine)
        self.selection = SelectionModel()
        self.seed_feeds = list(seed_feeds or [])
        self.bootstrap = bootstrap

    @classmethod
    def from_config(cls, config: ServerConfig) -> "FeedReader":
        catalog = FeedCatalog.at(config.feeds_path)
        archive = ArticleArchive.at(config.articles_path)
        fetcher = FeedFetcher(timeout=config.request_timeout, user_agent=config.user_agent)
        engine = SyncEngine(catalog, archive, fetcher, baseline_scope=config.baseline_scope)
        return cls(
            catalog,
            archive,
            engine,
            seed_feeds=config.seed_feeds,
            bootstrap=config.bootstrap,
        )

    async def open(self) -> None:
        """Create missing documents and seed an empty catalog.

        Without bootstrap, missing documents surface as StorageReadError on
        first use.
        """
        if not self.bootstrap:
            return

        await self.archive.store.bootstrap()
        created = await self.catalog.store.bootstrap()

        if created and self.seed_feeds:
            for line in self.seed_feeds:
                await self.catalog.add(line)
            logger.info(f"Seeded catalog with {len(self.seed_feeds)} feeds")

    async def close(self) -> None:
        await self.supervisor.cancel_all()

    async def add_feed(self, line: str) -> Tuple[Feed, SyncHandle]:
        """Add a feed and start syncing it in the background."""
        # Ids still referenced by orphaned articles are not handed out again
        id_floor = await self.archive.max_feed_id()
        feed = await self.catalog.add(line, id_floor=id_floor)
        handle = self.supervisor.submit(feed)
        return feed, handle

    async def delete_feed(self) -> Optional[Feed]:
        """Remove the selected feed. Its articles stay in the archive."""
        if self.selection.feed_cursor is None:
            return None

        feed, new_index = await self.catalog.pop(self.selection.feed_cursor)
        self.selection.feed_removed(new_index)
        return feed

    async def select_feed(self, position: int) -> Feed:
        """Move the selection to ``position`` if a feed is there.

        Raises:
            SelectionError: If no feed is at that position; the selection is unchanged
        """
        feed = await self.catalog.get(position)
        self.selection.select_feed(position)
        return feed

    async def refresh_selected(self) -> SyncHandle:
        feed = await self.catalog.get(self.selection.require_feed())
        return self.supervisor.submit(feed)

    async def view(self) -> ReaderView:
        feeds = await self.catalog.list()
        selected_feed = _pick(feeds, self.selection.feed_cursor)

        articles: List[Article] = []
        if selected_feed is not None:
            articles = await self.archive.list_for_feed(selected_feed.id)

        return ReaderView(
            feeds=feeds,
            feed_cursor=self.selection.feed_cursor,
            selected_feed=selected_feed,
            articles=articles,
            article_cursor=self.selection.article_cursor,
            selected_article=_pick(articles, self.selection.article_cursor),
        )

    async def next_feed(self) -> Optional[int]:
        return self.selection.next_feed(len(await self.catalog.list()))

    async def previous_feed(self) -> Optional[int]:
        return self.selection.previous_feed(len(await self.catalog.list()))

    async def next_article(self) -> Optional[int]:
        view = await self.view()
        return self.selection.next_article(len(view.articles))

    async def previous_article(self) -> Optional[int]:
        view = await self.view()
        return self.selection.previous_article(len(view.articles))
