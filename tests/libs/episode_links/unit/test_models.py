import pytest

from episode_links.exceptions import DecodeError
from episode_links.models import (
    EpisodeType,
    ExternalResource,
    Relation,
    ensure_list,
    parse_anime_episodes,
)
from episode_links.utils.xml_decoder import decode


@pytest.mark.parametrize(
    "value, expected",
    [(None, []), ("", []), ({"a": 1}, [{"a": 1}]), ([1, 2], [1, 2]), (0, [0])],
)
def test_ensure_list(value, expected):
    assert ensure_list(value) == expected


def test_parse_anime_episodes_normalizes_episode_list(anime_xml):
    anime = parse_anime_episodes(decode(anime_xml))

    assert anime.anime_id == 23
    assert [ep.id for ep in anime.episodes] == [201, 202, 203]

    first = anime.episodes[0]
    assert first.episode_number.value == 1
    assert first.episode_number.kind == EpisodeType.EPISODE
    assert first.length_minutes == 25
    assert first.air_date == "1998-04-03"
    assert first.updated_at == "2011-07-01"
    assert first.summary == "Spike and Jet chase a bounty."
    assert [(t.text, t.language) for t in first.titles] == [
        ("Asteroid Blues", "en"),
        ("Asteroid Blues", "x-jat"),
    ]
    assert [r.type_code for r in first.resources] == [28, 4]
    assert first.resources[0].identifiers == [4242, "abc"]
    assert first.resources[1].identifiers == []

    special = anime.episodes[1]
    assert special.episode_number.value == "S1"
    assert special.episode_number.kind == EpisodeType.UNKNOWN2
    assert special.resources == []


def test_single_episode_and_single_resource_become_lists():
    record = decode(
        """
        <anime id="5">
            <episodes>
                <episode id="9">
                    <epno type="1">1</epno>
                    <title xml:lang="en">1</title>
                    <resources>
                        <resource type="28">
                            <externalentity><identifier>G6NQ5DWZ6</identifier></externalentity>
                        </resource>
                    </resources>
                </episode>
            </episodes>
        </anime>
        """
    )

    anime = parse_anime_episodes(record)

    assert len(anime.episodes) == 1
    episode = anime.episodes[0]
    assert episode.titles[0].text == "1"
    assert len(episode.resources) == 1
    assert episode.resources[0].numeric_key == "G6NQ5DWZ6"
    assert episode.resources[0].text_key is None


def test_title_without_text_does_not_reject_the_document():
    record = decode(
        '<anime id="1"><episodes><episode id="9"><epno type="1">1</epno>'
        '<title xml:lang="en"/></episode></episodes></anime>'
    )

    anime = parse_anime_episodes(record)

    assert anime.episodes[0].titles[0].text == ""
    assert anime.episodes[0].titles[0].language == "en"


def test_anime_without_episodes_has_empty_list():
    anime = parse_anime_episodes(decode('<anime id="5"><type>Movie</type></anime>'))

    assert anime.episodes == []


def test_epno_without_type_defaults_to_unknown():
    anime = parse_anime_episodes(
        decode('<anime id="5"><episodes><episode id="1"><epno>3</epno></episode></episodes></anime>')
    )

    assert anime.episodes[0].episode_number.value == 3
    assert anime.episodes[0].episode_number.kind == EpisodeType.UNKNOWN


def test_external_resource_keys():
    resource = ExternalResource(type_code=28, identifiers=[4242, "abc"])

    assert resource.is_crunchyroll
    assert resource.numeric_key == 4242
    assert resource.text_key == "abc"


def test_episode_missing_epno_raises_decode_error():
    record = decode('<anime id="5"><episodes><episode id="1"/></episodes></anime>')

    with pytest.raises(DecodeError):
        parse_anime_episodes(record)


@pytest.mark.parametrize("record", ["", "text", 5, ["a"]])
def test_non_dict_record_raises_decode_error(record):
    with pytest.raises(DecodeError):
        parse_anime_episodes(record)


def test_relation_fields_are_nullable():
    relation = Relation.model_validate(
        {"anilist": 1, "anidb": None, "myanimelist": 1, "kitsu": None}
    )

    assert relation.anidb is None
    assert relation.myanimelist == 1
