"""
State Poller
============

Blocks until a remote resource reaches a terminal state so that
asynchronous server-side operations (create, resize, delete) look
synchronous to the caller.

The loop sleeps on a cancellation event rather than `time.sleep`, so a
caller can abort between attempts without waiting out the interval.
A fetch already in flight is allowed to complete.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, FrozenSet, Iterable, Optional, TypeVar

from .config import DEFAULT_WAIT_RETRY_INTERVAL, DEFAULT_WAIT_TIMEOUT, ProviderConfig
from .providers.base import (
    ConfigurationError,
    RemoteResourceAPI,
    ResourceFailed,
    ResourceNotFound,
    TransportError,
    WaitCancelled,
    WaitTimeout,
)

logger = logging.getLogger(__name__)

S = TypeVar("S")

# Markers usable in PollSpec.desired_states
ANY_STATE = "*"
ABSENT = "<absent>"


class PollStatus(Enum):
    """Terminal result of a poll."""
    READY = "ready"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"
    TRANSPORT_ERROR = "transport_error"
    # Resource missing while absence was not the goal
    ABSENT = "absent"


@dataclass(frozen=True)
class PollSpec:
    """What to wait for, and for how long."""
    target_id: str
    desired_states: FrozenSet[str]
    failure_states: FrozenSet[str] = frozenset()
    interval: float = DEFAULT_WAIT_RETRY_INTERVAL
    timeout: float = DEFAULT_WAIT_TIMEOUT

    def __post_init__(self):
        object.__setattr__(self, "desired_states", frozenset(self.desired_states))
        object.__setattr__(self, "failure_states", frozenset(self.failure_states))
        if self.interval <= 0:
            raise ConfigurationError("poll interval must be positive")
        if self.timeout <= 0:
            raise ConfigurationError("poll timeout must be positive")
        if not self.desired_states:
            raise ConfigurationError("at least one desired state is required")
        overlap = self.desired_states & self.failure_states
        if overlap:
            raise ConfigurationError(
                f"states cannot be both desired and failed: {sorted(overlap)}"
            )

    @property
    def accepts_absence(self) -> bool:
        return ABSENT in self.desired_states

    def is_desired(self, state: Optional[str]) -> bool:
        return ANY_STATE in self.desired_states or state in self.desired_states

    def is_failure(self, state: Optional[str]) -> bool:
        return state in self.failure_states


@dataclass(frozen=True)
class PollOutcome:
    status: PollStatus
    target_id: str
    snapshot: Any = None
    reason: Optional[str] = None
    error: Optional[Exception] = None
    attempts: int = 0
    elapsed: float = 0.0
    # State extracted from `snapshot` by the poll's state_of
    last_state: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is PollStatus.READY

    def raise_for_status(self):
        """
        Return the snapshot of a READY outcome, raise for anything else.

        Raises:
            ResourceFailed, WaitTimeout, WaitCancelled, ResourceNotFound,
            or the original TransportError
        """
        if self.status is PollStatus.READY:
            return self.snapshot
        if self.status is PollStatus.FAILED:
            raise ResourceFailed(self.target_id, self.reason)
        if self.status is PollStatus.TIMED_OUT:
            raise WaitTimeout(self.target_id, self.elapsed, self.last_state)
        if self.status is PollStatus.CANCELLED:
            raise WaitCancelled(self.target_id)
        if self.status is PollStatus.ABSENT:
            raise ResourceNotFound(self.target_id, f"{self.target_id} not found")
        raise self.error


def _state_of(snapshot: Any) -> Optional[str]:
    return getattr(snapshot, "state", None)


def wait_until(
    fetch_state: Callable[[str], Optional[S]],
    spec: PollSpec,
    cancel: Optional[threading.Event] = None,
    clock: Callable[[], float] = time.monotonic,
    state_of: Callable[[S], Optional[str]] = _state_of,
) -> PollOutcome:
    """
    Poll `fetch_state` until the spec's terminal condition is met.

    At least one fetch is always made, even when the timeout is shorter
    than one interval.

    Args:
        fetch_state: Returns a snapshot, or None if the resource is gone
        spec: Desired/failure states and timing
        cancel: Event observed between attempts
        clock: Monotonic time source
        state_of: Extracts the state tag from a snapshot

    Returns:
        PollOutcome
    """
    cancel = cancel or threading.Event()
    started = clock()
    deadline = started + spec.timeout
    attempts = 0
    last = None

    def finish(status: PollStatus, snapshot=None, **kwargs) -> PollOutcome:
        result = PollOutcome(
            status=status,
            target_id=spec.target_id,
            snapshot=snapshot,
            attempts=attempts,
            elapsed=clock() - started,
            last_state=state_of(snapshot) if snapshot is not None else None,
            **kwargs,
        )
        level = logging.INFO if result.ok else logging.WARNING
        logger.log(
            level, "Wait for %s finished: %s after %d attempt(s)",
            spec.target_id, status.value, attempts,
            extra={"resource_id": spec.target_id, "attempt": attempts},
        )
        return result

    while True:
        if cancel.is_set():
            return finish(PollStatus.CANCELLED, snapshot=last)

        attempts += 1
        try:
            snapshot = fetch_state(spec.target_id)
        except TransportError as e:
            return finish(PollStatus.TRANSPORT_ERROR, snapshot=last, error=e)

        if snapshot is None:
            if spec.accepts_absence:
                return finish(PollStatus.READY)
            return finish(PollStatus.ABSENT, snapshot=last)

        last = snapshot
        state = state_of(snapshot)
        logger.debug(
            "%s is %s (attempt %d)", spec.target_id, state, attempts,
            extra={"resource_id": spec.target_id, "attempt": attempts},
        )

        if spec.is_desired(state):
            return finish(PollStatus.READY, snapshot=snapshot)
        if spec.is_failure(state):
            return finish(PollStatus.FAILED, snapshot=snapshot, reason=state)

        remaining = deadline - clock()
        if remaining <= 0:
            return finish(PollStatus.TIMED_OUT, snapshot=snapshot)

        delay = min(spec.interval, remaining)
        if cancel.wait(delay):
            return finish(PollStatus.CANCELLED, snapshot=snapshot)
        if delay >= remaining:
            # The wait used up the budget
            return finish(PollStatus.TIMED_OUT, snapshot=snapshot)


def wait_for_states(
    api: RemoteResourceAPI,
    resource_id: str,
    desired: Iterable[str],
    config: ProviderConfig,
    failure: Iterable[str] = (),
    timeout: float = DEFAULT_WAIT_TIMEOUT,
    default_interval: float = DEFAULT_WAIT_RETRY_INTERVAL,
    interval: Optional[float] = None,
    cancel: Optional[threading.Event] = None,
) -> PollOutcome:
    """
    Wait on an adapter's resource with the configured retry interval.

    An explicit `interval` wins over the provider-wide override, which
    wins over `default_interval`.
    """
    spec = PollSpec(
        target_id=resource_id,
        desired_states=frozenset(desired),
        failure_states=frozenset(failure),
        interval=interval or config.retry_interval(default_interval),
        timeout=timeout,
    )
    return wait_until(api.fetch_state, spec, cancel=cancel)


def wait_for_deletion(
    api: RemoteResourceAPI,
    resource_id: str,
    config: ProviderConfig,
    timeout: float = DEFAULT_WAIT_TIMEOUT,
    cancel: Optional[threading.Event] = None,
) -> PollOutcome:
    """Wait until the resource is gone."""
    return wait_for_states(
        api, resource_id, {ABSENT}, config, timeout=timeout, cancel=cancel,
    )
