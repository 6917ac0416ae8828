"""Low-level AniDB HTTP API client.

This module provides a small client responsible for:
- Scheduling every request through the shared AniDB rate limiter.
- Performing the ``request=anime`` HTTP GET with the client identity parameters.
- Detecting in-band ``<error>`` responses that arrive with HTTP 200.
- Decoding the anime document into validated episode records.
"""

import asyncio
import gzip
import logging
from types import TracebackType
from typing import Any

import aiohttp

from episode_links.api_helpers.anidb_rate_limiter import (
    AniDBRateLimiter,
    get_shared_anidb_rate_limiter,
)
from episode_links.config import EpisodeLinksConfig, get_config
from episode_links.exceptions import ApplicationError, DecodeError, TransportError
from episode_links.models import Episode, parse_anime_episodes
from episode_links.utils.xml_decoder import decode, root_tag

logger = logging.getLogger(__name__)


class AniDBClient:
    """HTTP client for the AniDB XML API.

    Args:
        session: An aiohttp-style session supporting `session.get(...)` as an
            async context manager. Created lazily when omitted.
        limiter: Optional limiter override. Defaults to the process-wide shared limiter.
        config: Optional configuration. Defaults to `get_config()`.
    """

    def __init__(
        self,
        *,
        session: Any | None = None,
        limiter: AniDBRateLimiter | Any | None = None,
        config: EpisodeLinksConfig | None = None,
    ) -> None:
        self.config = config or get_config()
        self.base_url = self.config.anidb_base_url
        self.session = session
        self._owns_session = session is None
        self._limiter = limiter or get_shared_anidb_rate_limiter()

    def _build_params(self, anidb_id: int) -> dict[str, str]:
        return {
            "client": self.config.anidb_client,
            "clientver": self.config.anidb_clientver,
            "protover": str(self.config.anidb_protover),
            "request": "anime",
            "aid": str(anidb_id),
        }

    def _ensure_session(self) -> Any:
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout_seconds),
                headers={
                    "Accept-Encoding": "gzip, deflate",
                    "User-Agent": f"{self.config.anidb_client}/{self.config.anidb_clientver}",
                    "Accept": "application/xml, text/xml",
                },
            )
            self._owns_session = True
            logger.debug("Created new AniDB session")
        return self.session

    @staticmethod
    def _decode_content(content: bytes) -> str:
        """Decode a response body, decompressing gzip payloads first.

        Raises:
            TransportError: If the body cannot be decompressed or decoded.
        """
        if content.startswith(b"\x1f\x8b"):
            logger.debug("Decompressing gzipped content")
            try:
                content = gzip.decompress(content)
            except (OSError, EOFError) as e:
                raise TransportError(f"Failed to decompress AniDB response: {e}") from e

        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TransportError(f"Failed to decode AniDB response: {e}") from e

    async def _request(self, params: dict[str, str]) -> str:
        session = self._ensure_session()
        logger.debug(f"AniDB request: {self.base_url} with params: {params}")

        try:
            async with session.get(self.base_url, params=params) as response:
                logger.debug(f"AniDB response status: {response.status}")
                if response.status != 200:
                    raise TransportError(f"AniDB API error: HTTP {response.status}")
                content = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"AniDB request failed: {e}") from e

        return self._decode_content(content)

    async def fetch_anime_xml(self, anidb_id: int) -> str:
        """Fetch the raw anime XML document for an AniDB ID.

        The request is scheduled through the rate limiter. A response is only
        successful when its status is 200 *and* its root element is not
        ``<error>``.

        Args:
            anidb_id: AniDB anime ID.

        Returns:
            The XML document text.

        Raises:
            TransportError: On network failure or a non-200 status.
            ApplicationError: When AniDB answers with an ``<error>`` document.
            DecodeError: When the body is not well-formed XML.
        """
        params = self._build_params(anidb_id)
        xml_text = await self._limiter.schedule(lambda: self._request(params))

        if root_tag(xml_text) == "error":
            raise ApplicationError(
                f"AniDB returned error response for aid={anidb_id}: {xml_text[:200]}"
            )
        return xml_text

    async def fetch_episodes(self, anidb_id: int) -> list[Episode]:
        """Fetch and decode the episode list of an AniDB anime.

        Args:
            anidb_id: AniDB anime ID.

        Returns:
            Validated episodes; empty when the anime lists none.

        Raises:
            TransportError, ApplicationError, DecodeError: As `fetch_anime_xml`,
                plus DecodeError when the document has an unexpected shape.
        """
        xml_text = await self.fetch_anime_xml(anidb_id)
        record = decode(xml_text)
        if record == "":
            raise DecodeError(f"Empty <anime> document for aid={anidb_id}")

        anime = parse_anime_episodes(record)
        logger.debug(f"AniDB aid={anidb_id}: {len(anime.episodes)} episodes")
        return anime.episodes

    async def close(self) -> None:
        """Close the internally created HTTP session, if any."""
        if self.session is not None and self._owns_session:
            try:
                await self.session.close()
                logger.debug("AniDB session closed successfully")
            finally:
                self.session = None

    async def __aenter__(self) -> "AniDBClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False
