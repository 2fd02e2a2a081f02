"""
Scaleway Resource Base Classes and Interfaces
=============================================

Defines the error taxonomy, the resource snapshot shape and the abstract
capability that every resource adapter must implement so the resolver,
poller and read orchestrator can work with any resource type.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


PROVIDER_ID = "scaleway"


# =========================================
# ERRORS
# =========================================

class ProviderError(Exception):
    """Base exception for provider errors."""
    def __init__(self, provider: str, message: str, details: Optional[Dict] = None):
        self.provider = provider
        self.message = message
        self.details = details or {}
        super().__init__(f"[{provider}] {message}")


class ConfigurationError(ProviderError):
    """Invalid or conflicting configuration values."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(PROVIDER_ID, message, details)


class TransportError(ProviderError):
    """The remote list/fetch call itself failed (network, server error)."""
    pass


class ProviderAuthError(TransportError):
    """Authentication/authorization error."""
    pass


class MalformedIdentifier(ProviderError):
    """An identifier string has the wrong segment count or an empty segment."""
    def __init__(self, identifier: str, expected: str):
        self.identifier = identifier
        super().__init__(
            PROVIDER_ID,
            f"malformed identifier {identifier!r}: expected {expected}",
            {"identifier": identifier},
        )


class ResourceNotFound(ProviderError):
    """No remote resource matches a name or identifier."""
    def __init__(self, lookup: str, message: Optional[str] = None):
        self.lookup = lookup
        super().__init__(
            PROVIDER_ID,
            message or f"no resource found with the name {lookup}",
            {"lookup": lookup},
        )


class AmbiguousResource(ProviderError):
    """More than one remote resource matches a name."""
    def __init__(self, name: str, count: int):
        self.name = name
        self.count = count
        super().__init__(
            PROVIDER_ID,
            f"{count} resources found with the name {name}",
            {"name": name, "count": count},
        )


class WaitTimeout(ProviderError):
    """A poll exceeded its time budget before a terminal state was seen."""
    def __init__(self, target_id: str, elapsed: float, last_state: Optional[str] = None):
        self.target_id = target_id
        self.elapsed = elapsed
        self.last_state = last_state
        super().__init__(
            PROVIDER_ID,
            f"timed out after {elapsed:g}s waiting for {target_id} "
            f"(last state: {last_state or 'unknown'})",
            {"target_id": target_id, "last_state": last_state},
        )


class WaitCancelled(ProviderError):
    """The caller aborted a poll."""
    def __init__(self, target_id: str):
        self.target_id = target_id
        super().__init__(PROVIDER_ID, f"wait for {target_id} cancelled")


class ResourceFailed(ProviderError):
    """The remote resource reached a failure state."""
    def __init__(self, target_id: str, state: str):
        self.target_id = target_id
        self.state = state
        super().__init__(
            PROVIDER_ID,
            f"{target_id} reached failure state {state}",
            {"target_id": target_id, "state": state},
        )


# =========================================
# SNAPSHOTS
# =========================================

@dataclass(frozen=True)
class ResourceSnapshot:
    """Point-in-time read of a remote resource."""
    id: str
    name: str
    region: str
    state: Optional[str] = None
    attributes: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __str__(self) -> str:
        return f"{self.name} ({self.region}/{self.id}) [{self.state or 'n/a'}]"


# =========================================
# RESOURCE CAPABILITY
# =========================================

class RemoteResourceAPI(ABC):
    """
    Abstract capability consumed by the resolver and the poller.

    One adapter exists per resource type. Adapters own HTTP details;
    callers only see identifiers and snapshots.
    """

    # Resource metadata (override in subclasses)
    RESOURCE_TYPE: str = "base"
    RESOURCE_NAME: str = "resource"
    COMPOSITE_ID: bool = False
    # Direct IDs must be "<uuid>" or "<locality>/<uuid>"
    VALIDATE_UUID: bool = False

    @abstractmethod
    def list_by_name(self, region: str, name: str) -> List[Tuple[str, str]]:
        """
        List resources matching a name within a region.

        Args:
            region: Region code (e.g. 'fr-par')
            name: Human-readable resource name

        Returns:
            List of (local_id, display_name) pairs

        Raises:
            TransportError: If the remote call fails
        """
        pass

    @abstractmethod
    def fetch_state(self, resource_id: str) -> Optional[ResourceSnapshot]:
        """
        Fetch the current snapshot of a resource.

        Args:
            resource_id: Encoded identifier (regional or composite)

        Returns:
            ResourceSnapshot, or None if the resource does not exist

        Raises:
            MalformedIdentifier: If resource_id cannot be decoded
            TransportError: If the remote call fails
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} ({self.RESOURCE_TYPE})>"
