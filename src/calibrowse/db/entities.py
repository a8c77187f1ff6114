# ABOUTME: Entity records and the decoder for Calibre's packed one-to-many columns.
# ABOUTME: Turns "name|id, name|id" text into name-sorted tuples of Entity.

from dataclasses import dataclass

_SEGMENT_SEPARATOR = ", "
_PART_SEPARATOR = "|"


@dataclass(frozen=True)
class Entity:
    """One related attribute value (author, tag, series, format, ...)."""

    id: int
    name: str
    url: str = ""


def _parse_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        return 0


def _segments(packed: str | None, parts: int) -> list[list[str]]:
    """Split a packed column into padded `parts`-element segments."""
    if not packed:
        return []
    result = []
    for segment in packed.split(_SEGMENT_SEPARATOR):
        if not segment:
            continue
        pieces = segment.split(_PART_SEPARATOR, parts - 1)
        pieces.extend([""] * (parts - len(pieces)))
        result.append(pieces)
    return result


def decode_entities(packed: str | None, parts: int = 2) -> tuple[Entity, ...]:
    """Decode a packed column into Entity records sorted by name.

    Each segment is `name|id` (or `name|id|extra` when parts=3, the extra
    value landing in `url`). Unparsable ids become 0; empty input gives
    an empty tuple. The sort is ascending and stable, so entities with
    equal names keep their column order.

    Args:
        packed: The raw column value, e.g. "Umberto Eco|3, Anonymous|7".
        parts: Maximum number of `|`-separated pieces per segment.

    Returns:
        Tuple of Entity records ordered by name.
    """
    entities = [
        Entity(
            id=_parse_id(pieces[1]),
            name=pieces[0],
            url=pieces[2] if parts > 2 else "",
        )
        for pieces in _segments(packed, parts)
    ]
    if len(entities) > 1:
        entities.sort(key=lambda entity: entity.name)
    return tuple(entities)


def decode_first(packed: str | None) -> Entity | None:
    """Decode only the first segment; used for publisher and series."""
    for pieces in _segments(packed, 2):
        return Entity(id=_parse_id(pieces[1]), name=pieces[0])
    return None


def decode_authors(packed: str | None) -> tuple[Entity, ...]:
    return decode_entities(packed)


def decode_formats(packed: str | None) -> tuple[Entity, ...]:
    return decode_entities(packed)


def decode_identifiers(packed: str | None) -> tuple[Entity, ...]:
    """Identifiers carry a third piece (the identifier value) in `url`."""
    return decode_entities(packed, parts=3)


def decode_languages(packed: str | None) -> tuple[Entity, ...]:
    return decode_entities(packed)


def decode_tags(packed: str | None) -> tuple[Entity, ...]:
    return decode_entities(packed)


decode_publisher = decode_first
decode_series = decode_first
