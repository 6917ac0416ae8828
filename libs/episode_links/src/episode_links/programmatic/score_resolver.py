"""MyAnimeList score resolution at the query-layer boundary."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

RatingFetcher = Callable[[int], Awaitable[float | None]]


async def resolve_mal_score(
    media: Mapping[str, Any] | None, fetch_rating: RatingFetcher
) -> float | None:
    """Look up the MyAnimeList rating of a media entry.

    Args:
        media: AniList media record; its ``idMal`` field selects the MAL entry.
        fetch_rating: Coroutine function returning the rating for a MAL ID.

    Returns:
        The rating, or None when the media has no MAL ID or the lookup fails.
    """
    if media is None or media.get("idMal") is None:
        return None

    id_mal = media["idMal"]
    try:
        return await fetch_rating(id_mal)
    except Exception as e:
        logger.warning(f"MAL rating lookup failed for {id_mal}: {e}")
        return None
