"""
Resource Identity Codec
=======================

Encodes and decodes the identifiers stored in local state.

Formats:
- Regional:  "<region>/<id>"            (exactly one separator)
- Composite: "<region>/<parent_id>/<name>" (exactly two separators)

No type tag is carried in the string; segment count alone tells the two
forms apart, so a name containing the separator is rejected.
"""

import re
from dataclasses import dataclass
from typing import Tuple

from .providers.base import MalformedIdentifier

SEPARATOR = "/"

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RegionalIdentifier:
    """Provider ID scoped to a region (or zone)."""
    partition: str
    local_id: str

    def __str__(self) -> str:
        return encode_regional(self.partition, self.local_id)


@dataclass(frozen=True)
class CompositeIdentifier:
    """Name addressed relative to a parent resource, e.g. a database in an instance."""
    partition: str
    parent_id: str
    leaf_name: str

    @property
    def parent(self) -> RegionalIdentifier:
        return RegionalIdentifier(self.partition, self.parent_id)

    def __str__(self) -> str:
        return encode_composite(self.partition, self.parent_id, self.leaf_name)


def _require_segments(*segments: str) -> None:
    for segment in segments:
        if not segment:
            raise ValueError("identifier segments must be non-empty")


def encode_regional(partition: str, local_id: str) -> str:
    """Build "<partition>/<local_id>"."""
    _require_segments(partition, local_id)
    return f"{partition}{SEPARATOR}{local_id}"


def decode_regional(identifier: str) -> RegionalIdentifier:
    """
    Parse a regional identifier.

    Raises:
        MalformedIdentifier: Unless the string holds exactly two non-empty segments
    """
    parts = identifier.split(SEPARATOR)
    if len(parts) != 2 or not all(parts):
        raise MalformedIdentifier(identifier, "<region>/<id>")
    return RegionalIdentifier(parts[0], parts[1])


def encode_composite(partition: str, parent_id: str, leaf_name: str) -> str:
    """Build "<partition>/<parent_id>/<leaf_name>"."""
    _require_segments(partition, parent_id, leaf_name)
    return SEPARATOR.join((partition, parent_id, leaf_name))


def decode_composite(identifier: str) -> CompositeIdentifier:
    """
    Parse a composite identifier.

    Raises:
        MalformedIdentifier: Unless the string holds exactly three non-empty segments
    """
    parts = identifier.split(SEPARATOR)
    if len(parts) != 3 or not all(parts):
        raise MalformedIdentifier(identifier, "<region>/<parent_id>/<name>")
    return CompositeIdentifier(parts[0], parts[1], parts[2])


def split_database_id(identifier: str) -> Tuple[str, str]:
    """
    Split a database identifier into the parent's regional ID and the name.

    "fr-par/<instance>/mydb" -> ("fr-par/<instance>", "mydb")
    """
    composite = decode_composite(identifier)
    return str(composite.parent), composite.leaf_name


def regional_id_with_fallback(identifier: str, fallback_region: str) -> RegionalIdentifier:
    """
    Normalize a user-supplied ID.

    An ID that already carries a locality keeps it; a bare ID gets the
    fallback region attached.
    """
    if SEPARATOR in identifier:
        return decode_regional(identifier)
    _require_segments(identifier, fallback_region)
    return RegionalIdentifier(fallback_region, identifier)


def is_uuid(value: str) -> bool:
    return bool(UUID_PATTERN.match(value))


def validate_uuid_or_locality_uuid(value: str) -> str:
    """
    Strict check for "<uuid>" or "<locality>/<uuid>".

    Returns:
        The value unchanged

    Raises:
        MalformedIdentifier: If the value is neither form
    """
    if is_uuid(value):
        return value
    try:
        regional = decode_regional(value)
    except MalformedIdentifier:
        raise MalformedIdentifier(value, "<uuid> or <locality>/<uuid>") from None
    if not is_uuid(regional.local_id):
        raise MalformedIdentifier(value, "<uuid> or <locality>/<uuid>")
    return value
