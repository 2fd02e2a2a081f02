"""
Scaleway Resource Abstraction Layer
===================================

Capability interface, error taxonomy and registry shared by every
resource adapter. Concrete adapters live in `providers.scaleway` and
register themselves on import.
"""

from .base import (
    RemoteResourceAPI,
    ResourceSnapshot,
    ProviderError,
    ProviderAuthError,
    ConfigurationError,
    TransportError,
    MalformedIdentifier,
    ResourceNotFound,
    AmbiguousResource,
    ResourceFailed,
    WaitTimeout,
    WaitCancelled,
)
from .registry import ResourceRegistry, register_resource

__all__ = [
    "RemoteResourceAPI",
    "ResourceSnapshot",
    "ProviderError",
    "ProviderAuthError",
    "ConfigurationError",
    "TransportError",
    "MalformedIdentifier",
    "ResourceNotFound",
    "AmbiguousResource",
    "ResourceFailed",
    "WaitTimeout",
    "WaitCancelled",
    "ResourceRegistry",
    "register_resource",
]
