"""
First-episode selection and Crunchyroll cross-reference extraction.
Pure functions over validated AniDB episodes - no I/O.
"""

import logging
from collections.abc import Sequence

from episode_links.models import Episode, EpisodeType

logger = logging.getLogger(__name__)


def select_first_episode(episodes: Sequence[Episode]) -> Episode | None:
    """
    Pick the canonical first episode of an anime.

    Args:
        episodes: Normalized episode list of one anime.

    Returns:
        The regular episode numbered 1, or None if there is none.

    Note:
        A payload holding a single <episode> is accepted as the first episode
        without checking its number or kind. AniDB is assumed to only send a
        lone episode when it is the right one; whether that assumption holds
        is still unconfirmed, so the behaviour is kept as-is.
    """
    if len(episodes) == 1:
        return episodes[0]

    for episode in episodes:
        number = episode.episode_number
        if number.kind == EpisodeType.EPISODE and number.value == 1:
            return episode

    logger.debug(f"No regular episode 1 among {len(episodes)} episodes")
    return None


def extract_cross_reference(episode: Episode) -> int | str | None:
    """
    Extract the Crunchyroll media key embedded in an episode's resources.

    Args:
        episode: Episode whose resources to scan

    Returns:
        Key of the first type-28 resource, or None if there is none
    """
    for resource in episode.resources:
        if resource.is_crunchyroll and resource.numeric_key is not None:
            return resource.numeric_key
    return None
