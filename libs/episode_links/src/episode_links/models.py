"""
Type models for relations-service and AniDB payloads.

AniDB models validate the record produced by ``utils.xml_decoder.decode``.
XML cannot tell a single child element apart from a one-element list, so
every repeated element (episodes, titles, resources, identifiers) is
normalized to a list here, before any consumer sees it.
"""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from episode_links.exceptions import DecodeError

CRUNCHYROLL_RESOURCE_TYPE = 28


def ensure_list(value: Any) -> list[Any]:
    """Normalize an absent, single or repeated decoded element to a list."""
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    return [value]


def _as_text(value: Any) -> Any:
    # Coercion may have turned text such as "1" or "true" into a scalar
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


# =============================================================================
# Relations service
# =============================================================================


class Relation(BaseModel):
    """IDs of the same title across databases."""

    model_config = ConfigDict(extra="ignore")

    anilist: int | None = None
    anidb: int | None = None
    myanimelist: int | None = None
    kitsu: int | None = None


class RelationError(BaseModel):
    """Error body returned by the relations service."""

    model_config = ConfigDict(extra="ignore")

    code: int
    type: str | None = None
    messages: list[str] = []


# =============================================================================
# AniDB
# =============================================================================


class EpisodeType(IntEnum):
    """AniDB ``<epno type="...">`` codes."""

    UNKNOWN = 0
    EPISODE = 1
    UNKNOWN2 = 2
    OPENING_OR_ENDING = 3


class EpisodeNumber(BaseModel):
    """Episode number with its kind.

    Regular episodes carry an integer value; specials, credits and trailers
    use text such as ``S1`` or ``C1``.
    """

    model_config = ConfigDict(populate_by_name=True)

    value: int | str = Field(alias="_")
    kind: EpisodeType = Field(default=EpisodeType.UNKNOWN, alias="type")

    @field_validator("value", mode="before")
    @classmethod
    def value_from_float(cls, v: Any) -> Any:
        if isinstance(v, float):
            return int(v) if v.is_integer() else str(v)
        return v


class EpisodeTitle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(default="", alias="_")
    language: str | None = Field(default=None, alias="lang")

    @field_validator("text", mode="before")
    @classmethod
    def text_as_str(cls, v: Any) -> Any:
        return _as_text(v)


class ExternalResource(BaseModel):
    """An episode resource pointing at another provider.

    ``identifiers`` holds the ``<identifier>`` values of the first
    ``<externalentity>``; for Crunchyroll the first one is the media key.
    """

    model_config = ConfigDict(populate_by_name=True)

    type_code: int = Field(alias="type")
    identifiers: list[int | str] = Field(default_factory=list, alias="externalentity")

    @field_validator("identifiers", mode="before")
    @classmethod
    def extract_identifiers(cls, v: Any) -> Any:
        if isinstance(v, list) and all(not isinstance(item, dict) for item in v):
            return v
        entities = ensure_list(v)
        if not entities:
            return []
        entity = entities[0]
        if not isinstance(entity, dict):
            return []
        return ensure_list(entity.get("identifier"))

    @property
    def numeric_key(self) -> int | str | None:
        return self.identifiers[0] if self.identifiers else None

    @property
    def text_key(self) -> str | None:
        if len(self.identifiers) < 2:
            return None
        return str(self.identifiers[1])

    @property
    def is_crunchyroll(self) -> bool:
        return self.type_code == CRUNCHYROLL_RESOURCE_TYPE


class Episode(BaseModel):
    """A single AniDB ``<episode>`` element."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    updated_at: str | None = Field(default=None, alias="update")
    episode_number: EpisodeNumber = Field(alias="epno")
    length_minutes: int | None = Field(default=None, alias="length")
    air_date: str | None = Field(default=None, alias="airdate")
    titles: list[EpisodeTitle] = Field(default_factory=list, alias="title")
    summary: str | None = None
    resources: list[ExternalResource] = Field(default_factory=list)

    @field_validator("episode_number", mode="before")
    @classmethod
    def wrap_bare_epno(cls, v: Any) -> Any:
        # <epno> without a type attribute decodes to a bare scalar
        if isinstance(v, (int, str)) and not isinstance(v, bool):
            return {"_": v}
        return v

    @field_validator("titles", mode="before")
    @classmethod
    def normalize_titles(cls, v: Any) -> list[Any]:
        return [
            title if isinstance(title, dict) else {"_": title}
            for title in ensure_list(v)
        ]

    @field_validator("resources", mode="before")
    @classmethod
    def normalize_resources(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return ensure_list(v.get("resource"))
        return ensure_list(v)

    @field_validator("updated_at", "air_date", "summary", mode="before")
    @classmethod
    def text_fields_as_str(cls, v: Any) -> Any:
        return _as_text(v)


class AnimeEpisodes(BaseModel):
    """Episode listing of an AniDB ``<anime>`` document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    anime_id: int | None = Field(default=None, alias="id")
    episodes: list[Episode] = Field(default_factory=list)

    @field_validator("episodes", mode="before")
    @classmethod
    def normalize_episodes(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return ensure_list(v.get("episode"))
        return ensure_list(v)


def parse_anime_episodes(record: Any) -> AnimeEpisodes:
    """Validate a decoded ``<anime>`` record.

    Args:
        record: Output of ``decode`` for an AniDB anime document.

    Returns:
        The validated episode listing with all cardinalities normalized.

    Raises:
        DecodeError: If the record does not match the expected shape.
    """
    if not isinstance(record, dict):
        raise DecodeError(
            f"Expected <anime> element content, got {type(record).__name__}"
        )
    try:
        return AnimeEpisodes.model_validate(record)
    except ValidationError as e:
        raise DecodeError(f"Unexpected AniDB anime shape: {e}") from e
