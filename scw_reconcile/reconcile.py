"""
Read Reconciliation
===================

Entry points used by a resource's read path:

- `reconcile_read` for managed resources: a resource that disappeared
  remotely is reported as NOT_FOUND so the caller clears local state.
- `read_data_source` for data sources: the resource must exist, so a
  missing one is a hard error.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple, Union

from .config import ProviderMeta
from .identity import CompositeIdentifier, RegionalIdentifier
from .poller import ANY_STATE, PollSpec, PollStatus, wait_until
from .providers.base import (
    ProviderError,
    RemoteResourceAPI,
    ResourceFailed,
    ResourceNotFound,
    WaitCancelled,
    WaitTimeout,
)
from .resolver import LookupFilter, resolve

logger = logging.getLogger(__name__)

Identifier = Union[RegionalIdentifier, CompositeIdentifier]


class ReadStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ReadResult:
    """
    Result of a read.

    NOT_FOUND keeps the underlying cause so callers can tell a resource
    deleted out-of-band from a filter that never matched.
    """
    status: ReadStatus
    identifier: Optional[Identifier] = None
    snapshot: Any = None
    cause: Optional[Exception] = None

    @property
    def found(self) -> bool:
        return self.status is ReadStatus.FOUND

    @property
    def clear_state(self) -> bool:
        return self.status is ReadStatus.NOT_FOUND


def _not_found(api: RemoteResourceAPI, identifier: Optional[Identifier], cause: Exception) -> ReadResult:
    logger.warning(
        "%s %s not found, clearing local state: %s",
        api.RESOURCE_NAME, identifier or "(unresolved)", cause,
        extra={
            "resource_type": api.RESOURCE_TYPE,
            "resource_id": str(identifier) if identifier else None,
        },
    )
    return ReadResult(ReadStatus.NOT_FOUND, identifier=identifier, cause=cause)


def reconcile_read(
    api: RemoteResourceAPI,
    lookup: LookupFilter,
    meta: ProviderMeta,
    cancel: Optional[threading.Event] = None,
) -> ReadResult:
    """
    Resolve a lookup and read the current snapshot.

    Args:
        api: Adapter for the resource type
        lookup: ID or name filter
        meta: Provider context
        cancel: Event observed by the poller

    Returns:
        ReadResult (FOUND, NOT_FOUND or ERROR); never raises ProviderError
    """
    try:
        identifier = resolve(api, lookup, meta.config.default_region)
    except ResourceNotFound as e:
        return _not_found(api, None, e)
    except ProviderError as e:
        return ReadResult(ReadStatus.ERROR, cause=e)

    # A plain read waits for no transition: any existing state is final
    interval = meta.config.retry_interval()
    spec = PollSpec(
        target_id=str(identifier),
        desired_states=frozenset({ANY_STATE}),
        interval=interval,
        timeout=interval,
    )
    try:
        outcome = wait_until(api.fetch_state, spec, cancel=cancel)
    except ProviderError as e:
        return ReadResult(ReadStatus.ERROR, identifier=identifier, cause=e)

    if outcome.status is PollStatus.READY:
        return ReadResult(ReadStatus.FOUND, identifier=identifier, snapshot=outcome.snapshot)
    if outcome.status is PollStatus.ABSENT:
        return _not_found(
            api, identifier,
            ResourceNotFound(str(identifier), f"{identifier} no longer exists"),
        )
    if outcome.status is PollStatus.TRANSPORT_ERROR:
        return ReadResult(ReadStatus.ERROR, identifier=identifier, cause=outcome.error)
    if outcome.status is PollStatus.CANCELLED:
        return ReadResult(ReadStatus.ERROR, identifier=identifier, cause=WaitCancelled(str(identifier)))

    if outcome.status is PollStatus.FAILED:
        cause = ResourceFailed(str(identifier), outcome.reason)
    else:
        cause = WaitTimeout(str(identifier), outcome.elapsed, outcome.last_state)
    return ReadResult(ReadStatus.ERROR, identifier=identifier, snapshot=outcome.snapshot, cause=cause)


def read_data_source(
    api: RemoteResourceAPI,
    lookup: LookupFilter,
    meta: ProviderMeta,
    cancel: Optional[threading.Event] = None,
) -> Tuple[Identifier, Any]:
    """
    Read a resource that must exist.

    Returns:
        (identifier, snapshot)

    Raises:
        ResourceNotFound: The name matched nothing, or the resolved resource is gone
        ProviderError: Any other failure, unchanged
    """
    result = reconcile_read(api, lookup, meta, cancel=cancel)
    if result.found:
        return result.identifier, result.snapshot
    if result.status is ReadStatus.NOT_FOUND:
        if result.identifier is None:
            raise result.cause
        raise ResourceNotFound(
            str(result.identifier),
            f"{api.RESOURCE_NAME} ({result.identifier}) not found",
        ) from result.cause
    raise result.cause
