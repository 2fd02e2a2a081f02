"""
Resource Registry
=================

Central registry of resource adapters, keyed by resource type, so read
and wait helpers can be driven by a type name instead of per-resource
code.
"""

from typing import TYPE_CHECKING, Dict, List, Optional, Type

from .base import ConfigurationError, RemoteResourceAPI

if TYPE_CHECKING:
    from ..config import ProviderMeta


class ResourceRegistry:
    """Registry of available resource adapters."""

    _resources: Dict[str, Type[RemoteResourceAPI]] = {}

    @classmethod
    def register(cls, resource_class: Type[RemoteResourceAPI]) -> None:
        """
        Register a resource adapter class.

        Args:
            resource_class: Class implementing RemoteResourceAPI
        """
        cls._resources[resource_class.RESOURCE_TYPE] = resource_class

    @classmethod
    def get_resource_class(cls, resource_type: str) -> Optional[Type[RemoteResourceAPI]]:
        return cls._resources.get(resource_type)

    @classmethod
    def list_resources(cls) -> List[Dict[str, str]]:
        """
        List all registered resource types.

        Returns:
            List of resource metadata dicts
        """
        return [
            {
                "type": resource_class.RESOURCE_TYPE,
                "name": resource_class.RESOURCE_NAME,
                "composite_id": resource_class.COMPOSITE_ID,
            }
            for resource_class in cls._resources.values()
        ]

    @classmethod
    def instantiate(cls, resource_type: str, meta: "ProviderMeta") -> RemoteResourceAPI:
        """
        Create an adapter bound to a provider context.

        Raises:
            ConfigurationError: If the resource type is not registered
        """
        resource_class = cls.get_resource_class(resource_type)
        if not resource_class:
            raise ConfigurationError(
                f"Unknown resource type: {resource_type}. "
                f"Available: {sorted(cls._resources.keys())}"
            )
        return resource_class(meta)


def register_resource(resource_class: Type[RemoteResourceAPI]):
    """
    Decorator to register a resource adapter.

    Usage:
        @register_resource
        class PrivateNetworkAPI(RemoteResourceAPI):
            ...
    """
    ResourceRegistry.register(resource_class)
    return resource_class
