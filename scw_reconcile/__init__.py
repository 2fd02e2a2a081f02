"""
Scaleway Resource Reconciliation
================================

Identity codec, name-or-ID resolution, state polling and read
reconciliation for Scaleway resources.

Usage:
    from scw_reconcile import ProviderConfig, ProviderMeta, LookupFilter, reconcile_read
    from scw_reconcile.providers.scaleway import PrivateNetworkAPI

    meta = ProviderMeta.from_config(ProviderConfig.from_env())
    result = reconcile_read(PrivateNetworkAPI(meta), LookupFilter(name="my-pn"), meta)
"""

from .config import ProviderConfig, ProviderMeta
from .identity import (
    RegionalIdentifier,
    CompositeIdentifier,
    encode_regional,
    decode_regional,
    encode_composite,
    decode_composite,
)
from .poller import ANY_STATE, ABSENT, PollSpec, PollOutcome, PollStatus, wait_until
from .resolver import LookupFilter, resolve
from .reconcile import ReadResult, ReadStatus, reconcile_read, read_data_source

# Registers the Scaleway adapters
from .providers import scaleway  # noqa: F401

__all__ = [
    "ProviderConfig",
    "ProviderMeta",
    "RegionalIdentifier",
    "CompositeIdentifier",
    "encode_regional",
    "decode_regional",
    "encode_composite",
    "decode_composite",
    "ANY_STATE",
    "ABSENT",
    "PollSpec",
    "PollOutcome",
    "PollStatus",
    "wait_until",
    "LookupFilter",
    "resolve",
    "ReadResult",
    "ReadStatus",
    "reconcile_read",
    "read_data_source",
]
