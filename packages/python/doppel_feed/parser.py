"""
RSS document -> typed FeedChannel.

Tag names are reduced to their local part, so a namespaced
`<letterboxd:filmTitle>` and a bare `<filmTitle>` both land on
`FeedItem.film_title`. The older attribute
form `<letterboxd rating="4.5"/>` is read as the member rating.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from pydantic import ValidationError

from doppel_feed.errors import ParseFailure, StructureFailure
from doppel_feed.schemas import FeedChannel

log = logging.getLogger(__name__)


def _local(tag: str) -> str:
    # "{https://letterboxd.com}filmTitle" -> "filmTitle"
    return tag.rsplit("}", 1)[-1]


def _text(el: ET.Element | None) -> str | None:
    if el is None:
        return None
    text = "".join(el.itertext()).strip()
    return text or None


def _flatten_item(item: ET.Element) -> dict[str, str]:
    fields: dict[str, str] = {}
    for child in item:
        name = _local(child.tag)
        if name == "letterboxd" and child.get("rating"):
            fields.setdefault("memberRating", child.get("rating").strip())
            continue
        value = _text(child)
        # first occurrence wins
        if value is not None and name not in fields:
            fields[name] = value
    return fields


def parse_feed(xml_text: str) -> FeedChannel:
    """
    Parse an RSS document into a FeedChannel.

    Raises ParseFailure for malformed markup and StructureFailure when the
    markup is well-formed but has no <rss><channel> shape.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        log.error("Failed to parse XML: %s", e)
        raise ParseFailure("Invalid XML response from Letterboxd") from e

    channel = root.find("channel") if _local(root.tag) == "rss" else None
    if channel is None:
        log.error("Invalid RSS structure: root=<%s>", _local(root.tag))
        raise StructureFailure("Invalid RSS data structure")

    raw = {
        "title": _text(channel.find("title")),
        "link": _text(channel.find("link")),
        "items": [_flatten_item(item) for item in channel.findall("item")],
    }

    try:
        return FeedChannel.model_validate(raw)
    except ValidationError as e:
        log.error("RSS channel failed schema validation: %s", e)
        raise StructureFailure("Invalid RSS data structure") from e
