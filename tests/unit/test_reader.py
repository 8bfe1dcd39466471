"""Unit tests for the FeedReader façade."""

from datetime import datetime, timedelta, timezone

import pytest

from bytebite.config import ServerConfig
from bytebite.errors import FeedInputError, NetworkError, SelectionError, StorageReadError
from bytebite.reader import FeedReader
from bytebite.services.feed_fetcher import FeedFetcher, FetchResult
from bytebite.services.sync import SyncEngine
from bytebite.storage.archive import ArticleArchive
from bytebite.storage.catalog import FeedCatalog

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# Mark all tests as async
pytestmark = pytest.mark.anyio


class StaticFetcher:
    def __init__(self, result):
        self.result = result
        self.urls = []

    async def fetch(self, url, if_modified_since=None):
        self.urls.append(url)
        return self.result


def make_reader(catalog, archive, fetcher, **kwargs):
    return FeedReader(catalog, archive, SyncEngine(catalog, archive, fetcher), **kwargs)


class TestOpen:
    async def test_open_bootstraps_and_seeds(self, tmp_path):
        config = ServerConfig(
            data_dir=tmp_path / "data",
            seed_feeds=["news | BBC | https://bbc.example/rss", "tech | HN | https://hn.example/rss"],
        )
        reader = FeedReader.from_config(config)

        await reader.open()

        feeds = await reader.catalog.list()
        assert [(f.id, f.name) for f in feeds] == [(1, "BBC"), (2, "HN")]
        assert await reader.archive.list() == []
        assert config.feeds_path.is_file()
        assert config.articles_path.is_file()

    async def test_open_does_not_reseed_existing_catalog(self, tmp_path):
        config = ServerConfig(data_dir=tmp_path, seed_feeds=["news | BBC | https://bbc.example/rss"])
        await FeedReader.from_config(config).open()

        reader = FeedReader.from_config(config)
        await reader.open()

        assert len(await reader.catalog.list()) == 1

    async def test_without_bootstrap_missing_documents_fail(self, tmp_path):
        reader = FeedReader.from_config(ServerConfig(data_dir=tmp_path, bootstrap=False))

        await reader.open()

        with pytest.raises(StorageReadError):
            await reader.view()


class TestFeedOperations:
    async def test_add_feed_dispatches_sync(self, seed_catalog, seed_archive, make_feed, rss):
        catalog = seed_catalog([make_feed(1)])
        archive = seed_archive([])
        body = rss({"title": "Hello", "link": "https://x/1", "pubDate": "Mon, 01 Jan 2024 12:00:00 GMT"})
        fetcher = StaticFetcher(FetchResult(status_code=200, body=body))
        reader = make_reader(catalog, archive, fetcher)

        feed, handle = await reader.add_feed("tech | HN | http://x/feed")
        outcome = await handle.wait()

        assert feed.id == 2
        assert outcome.ok
        assert fetcher.urls == ["http://x/feed"]
        assert [a.title for a in await archive.list_for_feed(2)] == ["Hello"]

    async def test_add_feed_skips_ids_of_orphaned_articles(self, seed_catalog, seed_archive,
                                                           make_feed, make_article):
        catalog = seed_catalog([make_feed(1)])
        archive = seed_archive([make_article(1, feed_id=4)])
        reader = make_reader(catalog, archive, StaticFetcher(FetchResult(304, b"")))

        feed, handle = await reader.add_feed("tech | HN | http://x/feed")
        await handle.wait()

        assert feed.id == 5

    async def test_add_feed_rejects_malformed_line(self, seed_catalog, seed_archive, make_feed):
        reader = make_reader(seed_catalog([make_feed(1)]), seed_archive([]), StaticFetcher(None))

        with pytest.raises(FeedInputError):
            await reader.add_feed("no separators here")

        assert reader.supervisor.pending == 0

    async def test_delete_feed_reseats_selection(self, seed_catalog, seed_archive, make_feed):
        catalog = seed_catalog([make_feed(i) for i in range(1, 6)])
        reader = make_reader(catalog, seed_archive([]), StaticFetcher(None))
        reader.selection.select_feed(2)

        removed = await reader.delete_feed()

        assert removed.id == 3
        assert reader.selection.feed_cursor == 1
        assert len(await catalog.list()) == 4

    async def test_delete_feed_without_selection(self, seed_catalog, seed_archive, make_feed):
        reader = make_reader(seed_catalog([make_feed(1)]), seed_archive([]), StaticFetcher(None))
        reader.selection.feed_cursor = None

        assert await reader.delete_feed() is None

    async def test_unparseable_url_reports_network_error(self, seed_catalog, seed_archive, make_feed):
        reader = make_reader(seed_catalog([make_feed(1)]), seed_archive([]), FeedFetcher())

        feed, handle = await reader.add_feed("tech | Bad | http://[::1")
        outcome = await handle.wait()

        assert isinstance(outcome.error, NetworkError)
        assert outcome.error.recoverable
        assert (await reader.supervisor.outcomes.get()) is outcome
        assert await reader.archive.list() == []

    async def test_select_feed_out_of_range_keeps_selection(self, seed_catalog, seed_archive, make_feed):
        reader = make_reader(seed_catalog([make_feed(1), make_feed(2)]), seed_archive([]),
                             StaticFetcher(None))
        reader.selection.select_feed(1)

        with pytest.raises(SelectionError):
            await reader.select_feed(5)

        assert reader.selection.feed_cursor == 1
        assert (await reader.select_feed(0)).id == 1
        assert reader.selection.feed_cursor == 0

    async def test_refresh_selected(self, seed_catalog, seed_archive, make_feed):
        feeds = [make_feed(1), make_feed(2)]
        fetcher = StaticFetcher(FetchResult(304, b""))
        reader = make_reader(seed_catalog(feeds), seed_archive([]), fetcher)
        reader.selection.select_feed(1)

        outcome = await (await reader.refresh_selected()).wait()

        assert outcome.result.status == "not_modified"
        assert fetcher.urls == [feeds[1].url]

    async def test_refresh_without_selection_raises(self, seed_catalog, seed_archive, make_feed):
        reader = make_reader(seed_catalog([make_feed(1)]), seed_archive([]), StaticFetcher(None))
        reader.selection.feed_cursor = None

        with pytest.raises(SelectionError):
            await reader.refresh_selected()


class TestView:
    async def test_view_filters_and_sorts_selected_feed(self, seed_catalog, seed_archive,
                                                       make_feed, make_article):
        catalog = seed_catalog([make_feed(1), make_feed(2)])
        archive = seed_archive([
            make_article(1, feed_id=1, pub_date=T0),
            make_article(2, feed_id=2, pub_date=T0),
            make_article(3, feed_id=1, pub_date=T0 + timedelta(days=1)),
        ])
        reader = make_reader(catalog, archive, StaticFetcher(None))

        view = await reader.view()

        assert view.selected_feed.id == 1
        assert [a.id for a in view.articles] == [3, 1]
        assert view.selected_article.id == 3

    async def test_navigation_wraps_and_resets_article(self, seed_catalog, seed_archive,
                                                       make_feed, make_article):
        catalog = seed_catalog([make_feed(1), make_feed(2)])
        archive = seed_archive([
            make_article(1, feed_id=1, pub_date=T0),
            make_article(2, feed_id=1, pub_date=T0 + timedelta(days=1)),
            make_article(3, feed_id=2, pub_date=T0),
        ])
        reader = make_reader(catalog, archive, StaticFetcher(None))

        assert await reader.next_article() == 1
        assert await reader.next_article() == 0
        assert await reader.previous_article() == 1

        assert await reader.previous_feed() == 1
        assert reader.selection.article_cursor == 0
        assert (await reader.view()).selected_article.id == 3
        assert await reader.next_feed() == 0

    async def test_stale_article_cursor_selects_nothing(self, seed_catalog, seed_archive,
                                                        make_feed, make_article):
        catalog = seed_catalog([make_feed(1), make_feed(2)])
        archive = seed_archive([make_article(1, feed_id=1)])
        reader = make_reader(catalog, archive, StaticFetcher(None))
        reader.selection.article_cursor = 4

        view = await reader.view()

        assert view.selected_feed.id == 1
        assert view.selected_article is None

    async def test_empty_catalog_view(self, seed_catalog, seed_archive):
        reader = make_reader(seed_catalog([]), seed_archive([]), StaticFetcher(None))

        view = await reader.view()

        assert view.feeds == []
        assert view.selected_feed is None
        assert view.articles == []
