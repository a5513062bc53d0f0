"""Feed status endpoint.

GET /api/feeds reports, for every poller the service runs, whether it is
polling, whether a cycle is in flight, and its success/failure counters.
"""

from fastapi import APIRouter, Request

from dexfeeds.feeds.observers import FeedStats
from dexfeeds.models import FeedStatus

router = APIRouter()


@router.get("/api/feeds")
async def get_feeds(request: Request) -> dict:
    """Get per-feed polling status.

    Returns:
        dict: network, is_slave flag and one entry per feed
    """
    adapters = getattr(request.app.state, "adapters", [])
    stats: FeedStats = getattr(request.app.state, "feed_stats", None) or FeedStats()
    settings = request.app.state.settings

    pollers = [poller for adapter in adapters for poller in adapter.pollers]
    feeds: list[FeedStatus] = stats.snapshot(pollers)

    return {
        "network": settings.network,
        "is_slave": settings.is_slave,
        "feeds": [feed.model_dump(mode="json") for feed in feeds],
    }
