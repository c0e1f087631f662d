from typing import Optional

from fastapi import APIRouter, Query, Request

router = APIRouter()


@router.post('/api/catalog/invalidate')
def invalidate_catalog(request: Request):
    """Drop cached catalog reads; every live session recalculates on its next read."""
    refreshed = request.app.state.registry.invalidate_catalog()
    return {"success": True, "sessions": refreshed}


@router.get('/api/events')
def api_events(
    request: Request,
    since: Optional[int] = Query(default=None, description="Return events with id greater than this value")
):
    """
    Return recent pricing events (updated, error, cache_cleared) for all sessions.

    Client polling strategy:
        1. First call without 'since' to load current backlog (optional).
        2. Store 'next_cursor' from response.
        3. Subsequent polls: /api/events?since=<next_cursor>
    """
    return request.app.state.registry.feed.get_events(since)
