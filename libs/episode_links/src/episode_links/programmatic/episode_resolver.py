"""
Episode link resolver.

Resolves an AniList title to its Crunchyroll season listing:
AniList ID -> AniDB ID -> AniDB episodes -> first episode -> Crunchyroll
media key -> season locator. Every failure collapses to None; callers never
see an exception from a lookup.
"""

import argparse
import asyncio
import json
import logging
import sys
from types import TracebackType
from typing import Any, Protocol

from episode_links.api_helpers.anidb_client import AniDBClient
from episode_links.api_helpers.relations_helper import RelationsHelper
from episode_links.config import EpisodeLinksConfig, get_config
from episode_links.exceptions import EpisodeLinksError
from episode_links.programmatic.episode_selector import (
    extract_cross_reference,
    select_first_episode,
)

logger = logging.getLogger(__name__)


class SeasonLocator(Protocol):
    """Looks up the Crunchyroll season that contains a given episode."""

    async def fetch_season_from_episode(self, anilist_id: int, media_id: str) -> Any:
        ...


class CrunchyrollIdResolver:
    """
    Composes the relations helper, AniDB client and episode selector.
    Stateless apart from the injected collaborators; nothing is cached.
    """

    def __init__(
        self,
        *,
        relations_helper: RelationsHelper | None = None,
        anidb_client: AniDBClient | None = None,
        config: EpisodeLinksConfig | None = None,
    ):
        """
        Args:
            relations_helper: Relations service helper; created from config if omitted.
            anidb_client: AniDB client; created from config if omitted, using
                the shared rate limiter.
            config: Configuration used for helpers created here.
        """
        self.config = config or get_config()
        self._owned: list[RelationsHelper | AniDBClient] = []

        if relations_helper is None:
            relations_helper = RelationsHelper(config=self.config)
            self._owned.append(relations_helper)
        if anidb_client is None:
            anidb_client = AniDBClient(config=self.config)
            self._owned.append(anidb_client)

        self.relations_helper = relations_helper
        self.anidb_client = anidb_client

    async def resolve_crunchyroll_id(self, anilist_id: int) -> int | str | None:
        """
        Find the Crunchyroll media key of a title's first episode.

        Args:
            anilist_id: AniList media ID

        Returns:
            The media key, or None if any step finds nothing or fails
        """
        anidb_id = await self.relations_helper.resolve_sibling_id(anilist_id)
        if anidb_id is None:
            return None

        try:
            episodes = await self.anidb_client.fetch_episodes(anidb_id)
        except EpisodeLinksError as e:
            logger.warning(f"AniDB lookup failed for aid={anidb_id} (AniList {anilist_id}): {e}")
            return None

        first_episode = select_first_episode(episodes)
        if first_episode is None:
            logger.info(f"No first episode for aid={anidb_id}")
            return None

        media_id = extract_cross_reference(first_episode)
        if media_id is None:
            logger.info(f"No Crunchyroll resource on episode {first_episode.id} (aid={anidb_id})")
            return None

        logger.info(f"AniList {anilist_id} -> aid={anidb_id} -> Crunchyroll {media_id}")
        return media_id

    async def close(self) -> None:
        """Close helpers created by this resolver."""
        for helper in self._owned:
            await helper.close()

    async def __aenter__(self) -> "CrunchyrollIdResolver":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


class EpisodeLinkResolver(CrunchyrollIdResolver):
    """Hands the resolved Crunchyroll key to the season locator."""

    def __init__(
        self,
        season_locator: SeasonLocator,
        *,
        relations_helper: RelationsHelper | None = None,
        anidb_client: AniDBClient | None = None,
        config: EpisodeLinksConfig | None = None,
    ):
        super().__init__(
            relations_helper=relations_helper,
            anidb_client=anidb_client,
            config=config,
        )
        self.season_locator = season_locator

    async def resolve_episodes_for_title(self, anilist_id: int) -> Any | None:
        """
        Resolve the Crunchyroll season listing for an AniList title.

        Args:
            anilist_id: AniList media ID

        Returns:
            The season locator's result verbatim, or None on any failure
        """
        try:
            media_id = await self.resolve_crunchyroll_id(anilist_id)
        except Exception:
            logger.exception(f"Unexpected error resolving AniList {anilist_id}")
            return None
        if media_id is None:
            return None

        try:
            return await self.season_locator.fetch_season_from_episode(
                anilist_id, str(media_id)
            )
        except Exception:
            logger.exception(
                f"Season lookup failed for AniList {anilist_id} (Crunchyroll {media_id})"
            )
            return None


async def main() -> int:
    """Command-line driver for Crunchyroll media key resolution.

    Parses --anilist-id, resolves the Crunchyroll key of the title's first
    episode and prints the result as JSON.

    Returns:
        Exit code where 0 indicates a resolved key and 1 indicates no result.
    """
    parser = argparse.ArgumentParser(
        description="Resolve the Crunchyroll media key for an AniList title"
    )
    parser.add_argument(
        "--anilist-id", type=int, required=True, help="AniList ID to resolve"
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    config = get_config()
    config.log_configuration()

    async with CrunchyrollIdResolver(config=config) as resolver:
        media_id = await resolver.resolve_crunchyroll_id(args.anilist_id)

    print(
        json.dumps({"anilist_id": args.anilist_id, "crunchyroll_id": media_id})
    )
    return 0 if media_id is not None else 1


def run() -> int:
    """Console script entry point."""
    return asyncio.run(main())


if __name__ == "__main__":  # pragma: no cover
    sys.exit(run())
