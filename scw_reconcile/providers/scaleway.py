"""
Scaleway Resource Adapters
==========================

Scaleway integration via their REST API.

Adapters:
- VPC private networks        (regional IDs, no lifecycle status)
- Document DB instances       (regional IDs, asynchronous lifecycle)
- Document DB databases       (composite IDs: region/instance_id/name)
- Web hosting offers          (regional IDs, name filtered client-side)

API Docs: https://www.scaleway.com/en/developers/api/
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..config import ProviderConfig, ProviderMeta
from ..identity import RegionalIdentifier, decode_regional, split_database_id
from ..poller import PollOutcome, wait_for_states
from .base import (
    PROVIDER_ID,
    ConfigurationError,
    ProviderAuthError,
    RemoteResourceAPI,
    ResourceSnapshot,
    TransportError,
)
from .registry import register_resource

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100

# Document DB shares the RDB timing defaults (seconds)
DEFAULT_DOCUMENT_DB_INSTANCE_TIMEOUT = 15 * 60.0
DEFAULT_WAIT_DOCUMENT_DB_RETRY_INTERVAL = 30.0

DOCUMENT_DB_READY_STATES = frozenset({"ready"})
DOCUMENT_DB_FAILURE_STATES = frozenset({"error", "locked", "disk_full"})

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
}


class ScalewayClient:
    """
    Authenticated HTTP client for the Scaleway API.

    Usage:
        client = ScalewayClient(ProviderConfig.from_env())
        data = client.get("/vpc/v2/regions/fr-par/private-networks")
    """

    def __init__(self, config: ProviderConfig, transport: Optional[httpx.BaseTransport] = None):
        if not config.is_configured:
            raise ConfigurationError("SCW_SECRET_KEY is required")

        self.config = config
        self.client = httpx.Client(
            base_url=config.api_url,
            headers={
                "X-Auth-Token": config.secret_key,
                "Content-Type": "application/json",
            },
            timeout=config.http_timeout,
            transport=transport,
        )

    def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict] = None,
        allow_missing: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Make an authenticated API request.

        Returns:
            Decoded JSON body, or None on 404 when allow_missing is set

        Raises:
            ProviderAuthError: On 401/403
            TransportError: On any other HTTP or network failure
        """
        try:
            response = self.client.request(method, endpoint, params=params, json=data)
        except httpx.HTTPError as e:
            raise TransportError(PROVIDER_ID, f"{method} {endpoint} failed: {e}") from e
        logger.debug("%s %s -> %d", method, endpoint, response.status_code)

        if response.status_code in (401, 403):
            raise ProviderAuthError(
                PROVIDER_ID, "Authentication failed", {"status_code": response.status_code},
            )
        if response.status_code == 404 and allow_missing:
            return None
        if response.is_error:
            raise TransportError(
                PROVIDER_ID,
                f"{method} {endpoint} returned {response.status_code}",
                {"status_code": response.status_code, "body": response.text[:500]},
            )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                PROVIDER_ID,
                f"{method} {endpoint} returned invalid JSON",
                {"status_code": response.status_code, "body": response.text[:500]},
            ) from e

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, allow_missing: bool = False):
        return self._make_request("GET", endpoint, params=params, allow_missing=allow_missing)

    def list_all(self, endpoint: str, key: str, params: Optional[Dict[str, Any]] = None) -> List[Dict]:
        """Fetch every page of a list endpoint."""
        params = dict(params or {})
        params.setdefault("page_size", DEFAULT_PAGE_SIZE)
        items: List[Dict] = []
        page = 1
        while True:
            params["page"] = page
            body = self.get(endpoint, params=params)
            batch = body.get(key, [])
            items.extend(batch)
            total = body.get("total_count", len(items))
            if not batch or len(items) >= total:
                return items
            page += 1

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def format_price(money: Optional[Dict[str, Any]]) -> str:
    """Render a Scaleway money object, e.g. {"currency_code": "EUR", "units": 18, "nanos": 990000000} -> "€ 18.99"."""
    if not money:
        return ""
    symbol = CURRENCY_SYMBOLS.get(money.get("currency_code", ""), money.get("currency_code", ""))
    cents = int(money.get("nanos", 0)) // 10_000_000
    return f"{symbol} {int(money.get('units', 0))}.{cents:02d}"


class _RegionalResourceAPI(RemoteResourceAPI):
    """Shared plumbing for adapters addressed by "<region>/<id>"."""

    # Key holding the items in a list response
    LIST_KEY: str = ""

    def __init__(self, meta: ProviderMeta):
        self.meta = meta
        self.client: ScalewayClient = meta.client

    def _collection(self, region: str) -> str:
        raise NotImplementedError

    def _to_snapshot(self, region: str, item: Dict[str, Any]) -> ResourceSnapshot:
        raise NotImplementedError

    def list_by_name(self, region: str, name: str) -> List[Tuple[str, str]]:
        items = self.client.list_all(self._collection(region), self.LIST_KEY, params={"name": name})
        return [(item["id"], item.get("name", "")) for item in items]

    def fetch_state(self, resource_id: str) -> Optional[ResourceSnapshot]:
        regional = decode_regional(resource_id)
        item = self.client.get(
            f"{self._collection(regional.partition)}/{regional.local_id}",
            allow_missing=True,
        )
        if item is None:
            return None
        return self._to_snapshot(regional.partition, item)


# =========================================
# VPC
# =========================================

@register_resource
class PrivateNetworkAPI(_RegionalResourceAPI):
    """VPC private networks. Created synchronously, so they carry no status."""

    RESOURCE_TYPE = "vpc_private_network"
    RESOURCE_NAME = "private network"
    LIST_KEY = "private_networks"
    VALIDATE_UUID = True

    def _collection(self, region: str) -> str:
        return f"/vpc/v2/regions/{region}/private-networks"

    def _to_snapshot(self, region: str, item: Dict[str, Any]) -> ResourceSnapshot:
        return ResourceSnapshot(
            id=item["id"],
            name=item.get("name", ""),
            region=item.get("region", region),
            state=None,
            attributes={
                "project_id": item.get("project_id"),
                "vpc_id": item.get("vpc_id"),
                "tags": item.get("tags", []),
                "subnets": item.get("subnets", []),
                "created_at": item.get("created_at"),
                "updated_at": item.get("updated_at"),
            },
        )


# =========================================
# DOCUMENT DB
# =========================================

@register_resource
class DocumentDBInstanceAPI(_RegionalResourceAPI):
    """Document DB instances; create, resize and delete complete asynchronously."""

    RESOURCE_TYPE = "document_db_instance"
    RESOURCE_NAME = "document db instance"
    LIST_KEY = "instances"
    VALIDATE_UUID = True

    def _collection(self, region: str) -> str:
        return f"/document-db/v1beta1/regions/{region}/instances"

    def _to_snapshot(self, region: str, item: Dict[str, Any]) -> ResourceSnapshot:
        return ResourceSnapshot(
            id=item["id"],
            name=item.get("name", ""),
            region=item.get("region", region),
            state=item.get("status"),
            attributes={
                "engine": item.get("engine"),
                "node_type": item.get("node_type"),
                "is_ha_cluster": item.get("is_ha_cluster"),
                "project_id": item.get("project_id"),
                "tags": item.get("tags", []),
                "volume": item.get("volume"),
            },
        )


@register_resource
class DocumentDBDatabaseAPI(RemoteResourceAPI):
    """Databases inside a Document DB instance, addressed by "<region>/<instance_id>/<name>"."""

    RESOURCE_TYPE = "document_db_database"
    RESOURCE_NAME = "document db database"
    COMPOSITE_ID = True

    def __init__(self, meta: ProviderMeta):
        self.meta = meta
        self.client: ScalewayClient = meta.client

    def list_by_name(self, region: str, name: str) -> List[Tuple[str, str]]:
        raise ConfigurationError(
            "document db databases are addressed by <region>/<instance_id>/<name>"
        )

    def fetch_state(self, resource_id: str) -> Optional[ResourceSnapshot]:
        instance_id, database_name = split_database_id(resource_id)
        instance = decode_regional(instance_id)
        body = self.client.get(
            f"/document-db/v1beta1/regions/{instance.partition}"
            f"/instances/{instance.local_id}/databases",
            params={"name": database_name},
            allow_missing=True,
        )
        if body is None:
            # Parent instance is gone
            return None
        for item in body.get("databases", []):
            if item.get("name") == database_name:
                return ResourceSnapshot(
                    id=resource_id,
                    name=database_name,
                    region=instance.partition,
                    state=None,
                    attributes={
                        "instance_id": instance_id,
                        "owner": item.get("owner"),
                        "managed": item.get("managed"),
                        "size": item.get("size"),
                    },
                )
        return None


def document_db_api_with_region(meta: ProviderMeta, region: Optional[str] = None) -> Tuple[DocumentDBInstanceAPI, str]:
    """Return a Document DB adapter and the region for a create request."""
    return DocumentDBInstanceAPI(meta), meta.region_or_default(region)


def document_db_api_with_region_and_id(meta: ProviderMeta, regional_id: str) -> Tuple[DocumentDBInstanceAPI, str, str]:
    """Return a Document DB adapter with region and ID extracted from a stored ID."""
    regional = decode_regional(regional_id)
    return DocumentDBInstanceAPI(meta), regional.partition, regional.local_id


def wait_for_document_db_instance(
    api: DocumentDBInstanceAPI,
    region: str,
    instance_id: str,
    timeout: float = DEFAULT_DOCUMENT_DB_INSTANCE_TIMEOUT,
    cancel: Optional[threading.Event] = None,
) -> PollOutcome:
    """Wait for a Document DB instance to become ready."""
    return wait_for_states(
        api,
        str(RegionalIdentifier(region, instance_id)),
        DOCUMENT_DB_READY_STATES,
        api.meta.config,
        failure=DOCUMENT_DB_FAILURE_STATES,
        timeout=timeout,
        default_interval=DEFAULT_WAIT_DOCUMENT_DB_RETRY_INTERVAL,
        cancel=cancel,
    )


# =========================================
# WEB HOSTING
# =========================================

@register_resource
class WebhostingOfferAPI(_RegionalResourceAPI):
    """
    Web hosting offers.

    The offers endpoint has no name filter, so names are matched
    client-side against the product name.
    """

    RESOURCE_TYPE = "webhosting_offer"
    RESOURCE_NAME = "offer"
    LIST_KEY = "offers"
    VALIDATE_UUID = True

    def _collection(self, region: str) -> str:
        return f"/webhosting/v1alpha1/regions/{region}/offers"

    def _offers(self, region: str) -> List[Dict[str, Any]]:
        return self.client.list_all(self._collection(region), self.LIST_KEY)

    def list_by_name(self, region: str, name: str) -> List[Tuple[str, str]]:
        return [
            (offer["id"], offer["product"]["name"])
            for offer in self._offers(region)
            if offer.get("product", {}).get("name") == name
        ]

    def fetch_state(self, resource_id: str) -> Optional[ResourceSnapshot]:
        regional = decode_regional(resource_id)
        for offer in self._offers(regional.partition):
            if offer.get("id") == regional.local_id:
                return self._to_snapshot(regional.partition, offer)
        return None

    def _to_snapshot(self, region: str, item: Dict[str, Any]) -> ResourceSnapshot:
        product = item.get("product", {})
        return ResourceSnapshot(
            id=item["id"],
            name=product.get("name", ""),
            region=region,
            state="available" if item.get("available", True) else "unavailable",
            attributes={
                "billing_operation_path": item.get("billing_operation_path"),
                "price": format_price(item.get("price")),
                "product": {
                    "option": product.get("option"),
                    "email_accounts_quota": product.get("email_accounts_quota"),
                    "email_storage_quota": product.get("email_storage_quota"),
                    "databases_quota": product.get("databases_quota"),
                    "hosting_storage_quota": product.get("hosting_storage_quota"),
                    "support_included": product.get("support_included"),
                    "v_cpu": product.get("v_cpu"),
                    "ram": product.get("ram"),
                },
            },
        )
