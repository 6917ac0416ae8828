"""Shared test fixtures for episode links unit tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from episode_links.config import EpisodeLinksConfig


@pytest.fixture
def test_config() -> EpisodeLinksConfig:
    """Configuration with fixed client identity and no warm-up."""
    return EpisodeLinksConfig(
        app_env="production",
        anidb_client="testclient",
        anidb_clientver="3",
        anidb_base_url="http://anidb.test/httpapi",
        relations_base_url="https://relations.test/api/ids",
        anidb_min_interval_seconds=2.25,
        anidb_warmup_seconds=2.0,
        request_timeout_seconds=5.0,
    )


@pytest.fixture
def passthrough_limiter() -> MagicMock:
    """Limiter double that runs scheduled tasks immediately."""

    async def run(task):
        return await task()

    limiter = MagicMock()
    limiter.schedule = AsyncMock(side_effect=run)
    return limiter


@pytest.fixture
def anime_xml() -> str:
    """AniDB anime document with a regular first episode linked to Crunchyroll."""
    return """<?xml version="1.0" encoding="UTF-8"?>
    <anime id="23" restricted="false">
        <type>TV Series</type>
        <episodecount>26</episodecount>
        <episodes>
            <episode id="201" update="2011-07-01">
                <epno type="1">1</epno>
                <length>25</length>
                <airdate>1998-04-03</airdate>
                <rating votes="10">8.0</rating>
                <title xml:lang="en">Asteroid Blues</title>
                <title xml:lang="x-jat">Asteroid Blues</title>
                <summary>Spike and   Jet
                    chase a bounty.</summary>
                <resources>
                    <resource type="28">
                        <externalentity>
                            <identifier>4242</identifier>
                            <identifier>abc</identifier>
                        </externalentity>
                    </resource>
                    <resource type="4">
                        <externalentity>
                            <url>http://example.test/ep1</url>
                        </externalentity>
                    </resource>
                </resources>
            </episode>
            <episode id="202" update="2011-07-01">
                <epno type="2">S1</epno>
                <length>25</length>
                <title xml:lang="en">Session XX</title>
            </episode>
            <episode id="203" update="2011-07-01">
                <epno type="1">2</epno>
                <length>25</length>
                <title xml:lang="en">Stray Dog Strut</title>
            </episode>
        </episodes>
    </anime>
    """
