"""Feed reader MCP tools.

This module provides MCP tools for managing RSS feeds and browsing their
articles.

NOTE: Never use Optional parameters in MCP tools - they break MCP clients.
Use empty string "" for optional strings and -1 for "no position".
"""

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import Context

from bytebite.config import get_config
from bytebite.errors import BytebiteError
from bytebite.models.schemas import Article, Feed
from bytebite.reader import FeedReader

logger = logging.getLogger(__name__)

# Singleton reader
_reader: Optional[FeedReader] = None


async def get_reader() -> FeedReader:
    """Get or create the singleton feed reader.

    Returns:
        Opened FeedReader
    """
    global _reader

    if _reader is None:
        reader = FeedReader.from_config(get_config())
        await reader.open()
        _reader = reader

    return _reader


async def close_reader() -> None:
    """Cancel pending syncs and drop the singleton reader."""
    global _reader

    if _reader is not None:
        await _reader.close()
        _reader = None


def _feed_dict(feed: Feed) -> Dict[str, Any]:
    return {
        "id": feed.id,
        "category": feed.category,
        "name": feed.name,
        "url": feed.url,
        "created_at": feed.created_at.isoformat(),
    }


def _article_dict(article: Article) -> Dict[str, Any]:
    return {
        "id": article.id,
        "feed_id": article.feed_id,
        "title": article.title,
        "summary": article.summary,
        "link": article.link,
        "pub_date": article.pub_date.isoformat(),
        "created_at": article.created_at.isoformat(),
    }


def _error(e: BytebiteError) -> Dict[str, Any]:
    return {
        "success": False,
        "error": str(e),
        "error_type": type(e).__name__,
        "recoverable": e.recoverable,
    }


async def list_feeds(ctx: Context = None) -> Dict[str, Any]:
    """List all subscribed feeds in catalog order.

    Args:
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - count: number of feeds
        - selected: position of the selected feed
        - feeds: list of feed objects with id, category, name, url, created_at
    """
    logger.info("list_feeds called")
    reader = await get_reader()

    try:
        feeds = await reader.catalog.list()
    except BytebiteError as e:
        return _error(e)

    return {
        "success": True,
        "count": len(feeds),
        "selected": reader.selection.feed_cursor,
        "feeds": [_feed_dict(feed) for feed in feeds],
    }


async def add_feed(line: str, wait: bool = False, ctx: Context = None) -> Dict[str, Any]:
    """Subscribe to a new RSS feed and fetch its articles.

    Args:
        line: Feed description in the form "category | name | url"
        wait: Wait for the first sync to finish before returning
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - feed: the created feed
        - sync: sync outcome if wait is true
        - error: string if success is False
    """
    logger.info(f"add_feed called: line={line!r}")
    reader = await get_reader()

    try:
        feed, handle = await reader.add_feed(line)
    except BytebiteError as e:
        return _error(e)

    response: Dict[str, Any] = {"success": True, "feed": _feed_dict(feed)}
    if wait:
        response["sync"] = _outcome_dict(await handle.wait())
    return response


async def remove_feed(position: int = -1, ctx: Context = None) -> Dict[str, Any]:
    """Remove a feed from the catalog. Its stored articles are kept.

    Args:
        position: Catalog position to remove (-1 removes the selected feed)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - removed: the removed feed
        - selected: new selected position
        - error: string if success is False
    """
    logger.info(f"remove_feed called: position={position}")
    reader = await get_reader()

    try:
        if position >= 0:
            await reader.select_feed(position)
        removed = await reader.delete_feed()
    except BytebiteError as e:
        return _error(e)

    if removed is None:
        return {"success": False, "error": "No feed is selected", "error_type": "SelectionError"}

    return {
        "success": True,
        "removed": _feed_dict(removed),
        "selected": reader.selection.feed_cursor,
    }


def _outcome_dict(outcome) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "feed_id": outcome.feed_id,
        "ok": outcome.ok,
        "cancelled": outcome.cancelled,
    }
    if outcome.result is not None:
        data["status"] = outcome.result.status
        data["new_articles"] = len(outcome.result.new_articles)
    if outcome.error is not None:
        data["error"] = str(outcome.error)
        data["error_type"] = type(outcome.error).__name__
    return data


async def refresh_feed(position: int = -1, wait: bool = True, ctx: Context = None) -> Dict[str, Any]:
    """Fetch new articles for a feed using a conditional request.

    Args:
        position: Catalog position to refresh (-1 refreshes the selected feed)
        wait: Wait for the sync to finish (false dispatches it in the background)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - feed_id: id of the feed being refreshed
        - sync: outcome with status (not_modified, unchanged, updated) and new_articles count
        - error: string if the sync could not be started
    """
    logger.info(f"refresh_feed called: position={position}, wait={wait}")
    reader = await get_reader()

    try:
        if position >= 0:
            await reader.select_feed(position)
        handle = await reader.refresh_selected()
    except BytebiteError as e:
        return _error(e)

    if not wait:
        return {"success": True, "feed_id": handle.feed_id, "dispatched": True}

    outcome = await handle.wait()
    return {
        "success": outcome.ok,
        "feed_id": handle.feed_id,
        "sync": _outcome_dict(outcome),
    }


async def list_articles(position: int = -1, limit: int = 50, ctx: Context = None) -> Dict[str, Any]:
    """List a feed's articles, most recently published first.

    Args:
        position: Catalog position of the feed (-1 uses the selected feed)
        limit: Maximum number of articles to return (default: 50)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - feed: the feed the articles belong to
        - count: number of articles returned
        - selected: position of the selected article
        - articles: list of article objects
    """
    logger.info(f"list_articles called: position={position}, limit={limit}")
    reader = await get_reader()

    try:
        if position >= 0 and position != reader.selection.feed_cursor:
            await reader.select_feed(position)
        view = await reader.view()
    except BytebiteError as e:
        return _error(e)

    if view.selected_feed is None:
        return {"success": False, "error": "No feed is selected", "error_type": "SelectionError"}

    articles = view.articles[:limit] if limit > 0 else view.articles
    return {
        "success": True,
        "feed": _feed_dict(view.selected_feed),
        "count": len(articles),
        "selected": view.article_cursor,
        "articles": [_article_dict(a) for a in articles],
    }


NAVIGATION = ("next_feed", "previous_feed", "next_article", "previous_article")


async def navigate(direction: str, ctx: Context = None) -> Dict[str, Any]:
    """Move the feed or article selection, wrapping around at either end.

    Args:
        direction: One of next_feed, previous_feed, next_article, previous_article
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - feed_cursor, article_cursor: new positions
        - feed: the selected feed
        - article: the selected article, if any
    """
    logger.info(f"navigate called: direction={direction}")

    if direction not in NAVIGATION:
        return {
            "success": False,
            "error": f"Unknown direction '{direction}'. Use one of: {', '.join(NAVIGATION)}",
        }

    reader = await get_reader()

    try:
        await getattr(reader, direction)()
        view = await reader.view()
    except BytebiteError as e:
        return _error(e)

    return {
        "success": True,
        "feed_cursor": view.feed_cursor,
        "article_cursor": view.article_cursor,
        "feed": _feed_dict(view.selected_feed) if view.selected_feed else None,
        "article": _article_dict(view.selected_article) if view.selected_article else None,
    }


# List of feed tools for registration
feed_tools = [
    list_feeds,
    add_feed,
    remove_feed,
    refresh_feed,
    list_articles,
    navigate,
]
