"""ID relations service helper.

Maps an AniList ID to the IDs of the same title on AniDB, MyAnimeList and
Kitsu. Requests are unauthenticated and unthrottled.
"""

import asyncio
import json
import logging
from types import TracebackType
from typing import Any

import aiohttp
from pydantic import ValidationError

from episode_links.config import EpisodeLinksConfig, get_config
from episode_links.exceptions import (
    ApplicationError,
    DecodeError,
    EpisodeLinksError,
    TransportError,
)
from episode_links.models import Relation, RelationError

logger = logging.getLogger(__name__)


class RelationsHelper:
    """Client for the relations service ``/api/ids`` endpoint.

    Args:
        session: Optional aiohttp-style session. Created lazily when omitted.
        config: Optional configuration. Defaults to `get_config()`.
    """

    def __init__(
        self,
        *,
        session: Any | None = None,
        config: EpisodeLinksConfig | None = None,
    ) -> None:
        self.config = config or get_config()
        self.base_url = self.config.relations_base_url
        self.session = session
        self._owns_session = session is None

    def _ensure_session(self) -> Any:
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.request_timeout_seconds),
                headers={"Accept": "application/json"},
            )
            self._owns_session = True
        return self.session

    @staticmethod
    def _describe_error(status: int, payload: Any) -> str:
        if isinstance(payload, dict):
            try:
                error = RelationError.model_validate(payload)
            except ValidationError:
                pass
            else:
                return f"{error.code} {error.type}: {'; '.join(error.messages)}"
        return f"HTTP {status}"

    async def fetch_relation(self, anilist_id: int) -> Relation | None:
        """Fetch the ID relation for an AniList ID.

        Args:
            anilist_id: AniList media ID.

        Returns:
            The relation, or None when the service knows no such title.

        Raises:
            TransportError: On network failure or a body that is not UTF-8.
            ApplicationError: On an error status or an error body.
            DecodeError: When the body is not a relation object.
        """
        session = self._ensure_session()
        params = {"source": "anilist", "id": str(anilist_id)}

        try:
            async with session.get(self.base_url, params=params) as response:
                status = response.status
                content = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"Relations request failed: {e}") from e

        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TransportError(f"Failed to decode relations response: {e}") from e

        payload: Any = None
        decode_error: ValueError | None = None
        if text.strip():
            try:
                payload = json.loads(text)
            except ValueError as e:
                decode_error = e

        if status != 200 or (isinstance(payload, dict) and "messages" in payload):
            raise ApplicationError(
                f"Relations service error for anilist={anilist_id}: "
                f"{self._describe_error(status, payload)}"
            )
        if decode_error is not None:
            raise DecodeError(f"Invalid relations JSON: {decode_error}") from decode_error
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise DecodeError(f"Expected relation object, got {type(payload).__name__}")

        try:
            return Relation.model_validate(payload)
        except ValidationError as e:
            raise DecodeError(f"Unexpected relation shape: {e}") from e

    async def resolve_sibling_id(self, anilist_id: int) -> int | None:
        """Resolve the AniDB ID for an AniList ID.

        Failures are logged and reported as None; nothing is raised.

        Args:
            anilist_id: AniList media ID.

        Returns:
            The AniDB ID, or None when unknown or on any failure.
        """
        try:
            relation = await self.fetch_relation(anilist_id)
        except EpisodeLinksError as e:
            logger.warning(f"Could not resolve AniDB ID for AniList {anilist_id}: {e}")
            return None

        if relation is None or relation.anidb is None:
            logger.debug(f"No AniDB mapping for AniList {anilist_id}")
            return None
        return relation.anidb

    async def close(self) -> None:
        """Close the internally created HTTP session, if any."""
        if self.session is not None and self._owns_session:
            try:
                await self.session.close()
            finally:
                self.session = None

    async def __aenter__(self) -> "RelationsHelper":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False
