from episode_links.models import (
    Episode,
    EpisodeNumber,
    EpisodeType,
    ExternalResource,
    parse_anime_episodes,
)
from episode_links.programmatic.episode_selector import (
    extract_cross_reference,
    select_first_episode,
)
from episode_links.utils.xml_decoder import decode


def _episode(episode_id, value, kind=EpisodeType.EPISODE, resources=None):
    return Episode(
        id=episode_id,
        episode_number=EpisodeNumber(value=value, kind=kind),
        resources=resources or [],
    )


def test_selects_regular_episode_one_and_extracts_crunchyroll_key():
    first = _episode(
        1,
        1,
        resources=[ExternalResource(type_code=28, identifiers=[4242, "abc"])],
    )
    episodes = [
        _episode(3, "S1", kind=EpisodeType.UNKNOWN2),
        _episode(2, 2),
        first,
        _episode(4, "OP1", kind=EpisodeType.OPENING_OR_ENDING),
    ]

    selected = select_first_episode(episodes)

    assert selected is first
    assert extract_cross_reference(selected) == 4242


def test_number_one_of_another_kind_is_not_first():
    episodes = [
        _episode(1, 1, kind=EpisodeType.OPENING_OR_ENDING),
        _episode(2, 2),
    ]

    assert select_first_episode(episodes) is None


def test_empty_sequence_has_no_first_episode():
    assert select_first_episode([]) is None


def test_single_episode_payload_is_accepted_without_checking_number():
    # Known inconsistency: a lone <episode> is treated as the first episode
    # even when it is not regular episode 1. Kept until product confirms.
    lone = _episode(7, "S3", kind=EpisodeType.UNKNOWN2)

    assert select_first_episode([lone]) is lone


def test_extract_returns_first_matching_resource():
    episode = _episode(
        1,
        1,
        resources=[
            ExternalResource(type_code=4, identifiers=[1]),
            ExternalResource(type_code=28, identifiers=["G6NQ5DWZ6"]),
            ExternalResource(type_code=28, identifiers=[9999]),
        ],
    )

    assert extract_cross_reference(episode) == "G6NQ5DWZ6"


def test_extract_without_resources_returns_none():
    assert extract_cross_reference(_episode(1, 1)) is None


def test_extract_without_crunchyroll_resource_returns_none():
    episode = _episode(
        1, 1, resources=[ExternalResource(type_code=4, identifiers=[1])]
    )

    assert extract_cross_reference(episode) is None


def test_single_decoded_episode_payload_is_accepted_as_first():
    # Same known inconsistency, starting from the XML payload: one <episode>
    # that is a special is still returned as the first episode.
    record = decode(
        """
        <anime id="5">
            <episodes>
                <episode id="77">
                    <epno type="2">S1</epno>
                </episode>
            </episodes>
        </anime>
        """
    )

    episodes = parse_anime_episodes(record).episodes
    selected = select_first_episode(episodes)

    assert selected is not None
    assert selected.id == 77
    assert selected.episode_number.kind == EpisodeType.UNKNOWN2
