"""XML to record decoding.

Converts XML text into nested dicts, lists and scalars. Attribute names lose
their namespace prefixes, and attribute values and element text that look
numeric or boolean are coerced to the matching Python type.

With the default options a document such as::

    <anime id="1"><episodes><episode id="5"><epno type="1">1</epno></episode></episodes></anime>

decodes to::

    {"id": 1, "episodes": {"episode": {"id": 5, "epno": {"type": 1, "_": 1}}}}

A single child stays a scalar/dict while repeated children become a list,
so consumers must normalize cardinality before use.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml import ElementTree

from episode_links.exceptions import DecodeError

logger = logging.getLogger(__name__)

__all__ = ["DecodeOptions", "coerce_value", "decode", "root_tag", "strip_prefix"]

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")
_WHITESPACE_RUN = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class DecodeOptions:
    """Options controlling the shape of a decoded record.

    Attributes:
        normalize: Collapse whitespace runs and trim element text.
        explicit_root: Wrap the result in a dict keyed by the root tag.
        explicit_array: Always wrap child elements in lists.
        merge_attrs: Merge attributes into the element dict instead of
            nesting them under ``attr_key``.
        strip_prefix: Remove ``prefix:`` and ``{namespace}`` from attribute names.
        coerce_values: Convert numeric and boolean looking strings.
        char_key: Key holding element text when the element also has
            attributes or children.
        attr_key: Key holding attributes when ``merge_attrs`` is False.
    """

    normalize: bool = True
    explicit_root: bool = False
    explicit_array: bool = False
    merge_attrs: bool = True
    strip_prefix: bool = True
    coerce_values: bool = True
    char_key: str = "_"
    attr_key: str = "$"


def strip_prefix(name: str) -> str:
    """Remove a namespace prefix from an XML name.

    Handles both ``prefix:local`` and ElementTree's ``{uri}local`` forms,
    so ``xml:lang`` becomes ``lang``.
    """
    if name.startswith("{"):
        name = name.rsplit("}", 1)[-1]
    return name.rsplit(":", 1)[-1]


def coerce_value(value: str) -> Any:
    """Convert a string to int, float or bool when it looks like one.

    Args:
        value: Raw attribute value or element text.

    Returns:
        The coerced value, or the original string when no conversion applies.

    Example:
        >>> coerce_value("42"), coerce_value("true"), coerce_value("abc")
        (42, True, 'abc')
    """
    candidate = value.strip()
    if not candidate:
        return value
    if _INT_PATTERN.match(candidate):
        return int(candidate)
    if _FLOAT_PATTERN.match(candidate):
        return float(candidate)
    lowered = candidate.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return value


def _parse(xml_text: str) -> Element:
    try:
        return ElementTree.fromstring(xml_text)
    except (ParseError, DefusedXmlException) as e:
        raise DecodeError(f"Malformed XML: {e}") from e


def root_tag(xml_text: str) -> str:
    """Return the root element name of an XML document.

    Raises:
        DecodeError: If the document is not well-formed.
    """
    return strip_prefix(_parse(xml_text).tag)


def _element_text(element: Element, options: DecodeOptions) -> str | None:
    parts = [element.text or ""]
    parts.extend(child.tail or "" for child in element)
    text = "".join(parts)

    if not text.strip():
        return None
    if options.normalize:
        text = _WHITESPACE_RUN.sub(" ", text).strip()
    return text


def _convert(element: Element, options: DecodeOptions) -> Any:
    node: dict[str, Any] = {}

    if element.attrib:
        attrs = {
            (strip_prefix(name) if options.strip_prefix else name): (
                coerce_value(value) if options.coerce_values else value
            )
            for name, value in element.attrib.items()
        }
        if options.merge_attrs:
            node.update(attrs)
        else:
            node[options.attr_key] = attrs

    repeated: set[str] = set()
    for child in element:
        key = child.tag
        value = _convert(child, options)

        if options.explicit_array:
            node.setdefault(key, []).append(value)
        elif key in repeated:
            node[key].append(value)
        elif key in node:
            node[key] = [node[key], value]
            repeated.add(key)
        else:
            node[key] = value

    text = _element_text(element, options)
    text_value: Any = text
    if text is not None and options.coerce_values:
        text_value = coerce_value(text)

    if not node:
        return text_value if text is not None else ""

    if text is not None:
        node[options.char_key] = text_value
    return node


def decode(xml_text: str, options: DecodeOptions | None = None) -> Any:
    """Decode an XML document into nested dicts, lists and scalars.

    Args:
        xml_text: XML document text.
        options: Decoding options. Defaults to ``DecodeOptions()``.

    Returns:
        The decoded record. With ``explicit_root`` False this is the root
        element's content; an empty root decodes to ``""``.

    Raises:
        DecodeError: If the document is not well-formed.
    """
    options = options or DecodeOptions()
    root = _parse(xml_text)
    record = _convert(root, options)

    if options.explicit_root:
        return {root.tag: [record] if options.explicit_array else record}
    return record
