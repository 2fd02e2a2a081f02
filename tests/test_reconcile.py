"""
Tests for Read Reconciliation
=============================
"""

import logging

import pytest

from scw_reconcile import reconcile
from scw_reconcile.identity import RegionalIdentifier
from scw_reconcile.poller import PollOutcome, PollStatus
from scw_reconcile.providers.base import (
    AmbiguousResource,
    MalformedIdentifier,
    ResourceFailed,
    ResourceNotFound,
    TransportError,
    WaitCancelled,
    WaitTimeout,
)
from scw_reconcile.reconcile import ReadStatus, read_data_source, reconcile_read
from scw_reconcile.resolver import LookupFilter

from conftest import PN_ID, PN_ID_2, MockResourceAPI


class TestReconcileRead:
    """Managed-resource read path."""

    def test_found_by_name(self, mock_api, meta):
        result = reconcile_read(mock_api, LookupFilter(name="my-network"), meta)
        assert result.status is ReadStatus.FOUND
        assert result.identifier == RegionalIdentifier("fr-par", PN_ID)
        assert result.snapshot.id == PN_ID
        assert result.clear_state is False

    def test_plain_read_does_not_wait(self, meta):
        """A pending lifecycle state is still a successful read."""
        api = MockResourceAPI(states=["provisioning"])
        result = reconcile_read(api, LookupFilter(resource_id=PN_ID), meta)
        assert result.found
        assert result.snapshot.state == "provisioning"
        assert len(api.fetch_calls) == 1

    def test_deleted_out_of_band(self, meta, caplog):
        """A vanished resource clears state and logs why."""
        api = MockResourceAPI(states=[None])
        with caplog.at_level(logging.WARNING, logger="scw_reconcile.reconcile"):
            result = reconcile_read(api, LookupFilter(resource_id=f"fr-par/{PN_ID}"), meta)
        assert result.status is ReadStatus.NOT_FOUND
        assert result.clear_state is True
        assert result.identifier == RegionalIdentifier("fr-par", PN_ID)
        assert isinstance(result.cause, ResourceNotFound)
        assert "clearing local state" in caplog.text

    def test_name_not_found_clears_state(self, meta):
        api = MockResourceAPI(matches=[])
        result = reconcile_read(api, LookupFilter(name="gone"), meta)
        assert result.clear_state is True
        assert result.identifier is None
        assert result.cause.lookup == "gone"

    def test_ambiguous_is_error(self, meta):
        api = MockResourceAPI(matches=[(PN_ID, "performance"), (PN_ID_2, "performance")])
        result = reconcile_read(api, LookupFilter(name="performance"), meta)
        assert result.status is ReadStatus.ERROR
        assert isinstance(result.cause, AmbiguousResource)
        assert result.cause.count == 2

    def test_transport_error_is_error(self, meta):
        error = TransportError("scaleway", "500")
        api = MockResourceAPI(states=[error])
        result = reconcile_read(api, LookupFilter(resource_id=PN_ID), meta)
        assert result.status is ReadStatus.ERROR
        assert result.cause is error

    def test_malformed_stored_id_is_error(self, meta):
        result = reconcile_read(
            MockResourceAPI(), LookupFilter(resource_id=f"fr-par/{PN_ID}/extra"), meta,
        )
        assert result.status is ReadStatus.ERROR

    def test_cancelled_before_read(self, meta, cancel):
        """An already-set cancel event stops the read before any fetch."""
        api = MockResourceAPI(states=["ready"])
        cancel.set()
        result = reconcile_read(api, LookupFilter(resource_id=PN_ID), meta, cancel=cancel)
        assert result.status is ReadStatus.ERROR
        assert isinstance(result.cause, WaitCancelled)
        assert result.identifier == RegionalIdentifier("fr-par", PN_ID)
        assert api.fetch_calls == []

    def test_uuid_checked_before_fetch(self, meta):
        class StrictAPI(MockResourceAPI):
            VALIDATE_UUID = True

        api = StrictAPI()
        result = reconcile_read(api, LookupFilter(resource_id="fr-par/not-a-uuid"), meta)
        assert result.status is ReadStatus.ERROR
        assert isinstance(result.cause, MalformedIdentifier)
        assert api.fetch_calls == []


class TestNonReadyOutcomes:
    """Poll outcomes other than READY, ABSENT and TRANSPORT_ERROR."""

    @pytest.fixture
    def poll_returns(self, monkeypatch):
        def install(status, **kwargs):
            def fake_wait_until(fetch_state, spec, cancel=None):
                return PollOutcome(status, spec.target_id, **kwargs)

            monkeypatch.setattr(reconcile, "wait_until", fake_wait_until)

        return install

    def test_timed_out(self, meta, poll_returns):
        poll_returns(PollStatus.TIMED_OUT, snapshot="snap", elapsed=1.0, last_state="provisioning")
        result = reconcile_read(MockResourceAPI(), LookupFilter(resource_id=PN_ID), meta)
        assert result.status is ReadStatus.ERROR
        assert isinstance(result.cause, WaitTimeout)
        assert result.cause.elapsed == 1.0
        assert result.cause.last_state == "provisioning"
        assert result.snapshot == "snap"

    def test_failed(self, meta, poll_returns):
        poll_returns(PollStatus.FAILED, reason="error")
        result = reconcile_read(MockResourceAPI(), LookupFilter(resource_id=PN_ID), meta)
        assert result.status is ReadStatus.ERROR
        assert isinstance(result.cause, ResourceFailed)
        assert result.cause.state == "error"

    def test_data_source_raises_cause(self, meta, poll_returns):
        poll_returns(PollStatus.TIMED_OUT, elapsed=1.0)
        with pytest.raises(WaitTimeout):
            read_data_source(MockResourceAPI(), LookupFilter(resource_id=PN_ID), meta)


class TestReadDataSource:
    """Data-source read path: absence is a hard error."""

    def test_found(self, mock_api, meta):
        identifier, snapshot = read_data_source(mock_api, LookupFilter(name="my-network"), meta)
        assert str(identifier) == f"fr-par/{PN_ID}"
        assert snapshot.state == "ready"

    def test_name_not_found(self, meta):
        with pytest.raises(ResourceNotFound) as exc:
            read_data_source(MockResourceAPI(matches=[]), LookupFilter(name="nope"), meta)
        assert "no mock resource found with the name nope" in str(exc.value)

    def test_id_not_found(self, meta):
        api = MockResourceAPI(states=[None])
        with pytest.raises(ResourceNotFound) as exc:
            read_data_source(api, LookupFilter(resource_id=PN_ID), meta)
        assert f"mock resource (fr-par/{PN_ID}) not found" in str(exc.value)

    def test_ambiguous_raised(self, meta):
        api = MockResourceAPI(matches=[(PN_ID, "performance"), (PN_ID_2, "performance")])
        with pytest.raises(AmbiguousResource):
            read_data_source(api, LookupFilter(name="performance"), meta)
