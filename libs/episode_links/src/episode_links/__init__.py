"""Episode link resolution library.

Maps an AniList title to its Crunchyroll listing by way of AniDB:
- AniList -> AniDB ID lookup through the relations service
- Rate-limited AniDB HTTP API client and XML decoding
- First-episode selection and Crunchyroll cross-reference extraction
"""

__all__ = ["api_helpers", "programmatic", "utils"]
