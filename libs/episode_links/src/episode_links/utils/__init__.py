"""Episode link utility functions.

This package provides:
- XML decoding with namespace prefix stripping and value coercion
"""

from episode_links.utils.xml_decoder import (
    DecodeOptions,
    coerce_value,
    decode,
    root_tag,
    strip_prefix,
)

__all__ = [
    "DecodeOptions",
    "coerce_value",
    "decode",
    "root_tag",
    "strip_prefix",
]
