"""
Name-or-ID Resolution
=====================

Resolves a lookup to exactly one resource identifier. A lookup carries
either a direct identifier or a name; names are resolved through the
adapter's list capability and must match exactly one resource.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .identity import (
    CompositeIdentifier,
    RegionalIdentifier,
    decode_composite,
    regional_id_with_fallback,
    validate_uuid_or_locality_uuid,
)
from .providers.base import (
    AmbiguousResource,
    ConfigurationError,
    RemoteResourceAPI,
    ResourceNotFound,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LookupFilter:
    """Caller-supplied selection: `resource_id` and `name` are mutually exclusive."""
    resource_id: Optional[str] = None
    name: Optional[str] = None
    region: Optional[str] = None

    def __post_init__(self):
        if self.resource_id and self.name:
            raise ConfigurationError(
                "resource_id and name are mutually exclusive",
                {"resource_id": self.resource_id, "name": self.name},
            )
        if not self.resource_id and not self.name:
            raise ConfigurationError("one of resource_id or name is required")


def resolve(
    api: RemoteResourceAPI,
    lookup: LookupFilter,
    default_region: str,
) -> Union[RegionalIdentifier, CompositeIdentifier]:
    """
    Resolve a lookup to a single identifier.

    Args:
        api: Adapter for the resource type
        lookup: ID or name filter
        default_region: Region used when the lookup names none

    Returns:
        RegionalIdentifier, or CompositeIdentifier for nested resources

    Raises:
        ResourceNotFound: No resource has the name
        AmbiguousResource: Several resources share the name
        MalformedIdentifier: A supplied ID cannot be decoded
        TransportError: The list call failed
    """
    region = lookup.region or default_region

    if api.COMPOSITE_ID:
        if not lookup.resource_id:
            raise ConfigurationError(
                f"{api.RESOURCE_NAME} can only be looked up by ID"
            )
        return decode_composite(lookup.resource_id)

    if lookup.resource_id:
        # Trusted as given; only shape-checked and normalized
        if api.VALIDATE_UUID:
            validate_uuid_or_locality_uuid(lookup.resource_id)
        return regional_id_with_fallback(lookup.resource_id, region)

    matches = api.list_by_name(region, lookup.name)
    logger.debug(
        "Name lookup %r in %s returned %d match(es)", lookup.name, region, len(matches),
        extra={"resource_type": api.RESOURCE_TYPE, "region": region},
    )

    if not matches:
        raise ResourceNotFound(
            lookup.name,
            f"no {api.RESOURCE_NAME} found with the name {lookup.name}",
        )
    if len(matches) > 1:
        raise AmbiguousResource(lookup.name, len(matches))

    local_id, _ = matches[0]
    return RegionalIdentifier(region, local_id)
