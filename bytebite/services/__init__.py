"""Services for bytebite."""

from .feed_fetcher import FeedFetcher, FetchResult
from .feed_parser import ChannelItem, parse_channel, parse_pub_date
from .supervisor import SyncHandle, SyncOutcome, SyncSupervisor
from .sync import SyncEngine, SyncResult

__all__ = [
    "FeedFetcher",
    "FetchResult",
    "ChannelItem",
    "parse_channel",
    "parse_pub_date",
    "SyncHandle",
    "SyncOutcome",
    "SyncSupervisor",
    "SyncEngine",
    "SyncResult",
]
