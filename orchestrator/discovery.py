"""
Ownership Discovery

Reconstructs the record set for a commitment from the asset-transfer
history of a holder address: every ERC-721 transfer of a collection *into*
the holder yields one record naming the address the token came from as
its rightful owner.

The history service is paginated. Pages are consumed until the response
carries no continuation key; the commitment must never be built from a
partial history.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Optional

from core.config.runtime import DiscoveryConfig
from core.crypto.hashing import normalize_address
from core.http import HttpClient, HttpError
from core.schemas.errors import DiscoveryException
from core.schemas.records import OwnershipRecord

logger = logging.getLogger(__name__)

ASSET_TRANSFERS_METHOD = "alchemy_getAssetTransfers"
ERC721_CATEGORY = "erc721"


class AssetTransfersClient:
    """
    JSON-RPC client for the asset-transfer history endpoint.

    Usage:
        with AssetTransfersClient.from_config(config.discovery) as client:
            page = client.get_asset_transfers({"toAddress": holder, ...})
            page["transfers"], page.get("pageKey")
    """

    def __init__(self, endpoint: str, http: Optional[HttpClient] = None, timeout: float = 30.0) -> None:
        self.endpoint = endpoint
        self.http = http or HttpClient(timeout=timeout)
        self._ids = itertools.count(1)

    @classmethod
    def from_config(cls, config: DiscoveryConfig, http: Optional[HttpClient] = None) -> "AssetTransfersClient":
        if not config.base_url and not config.api_key:
            raise DiscoveryException(
                "No discovery endpoint configured: set ALCHEMY_API_KEY_MAINNET or VAULT_DISCOVERY_URL",
                retryable=False,
            )
        return cls(config.endpoint, http=http, timeout=config.timeout)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "AssetTransfersClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def get_asset_transfers(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        Fetch one page of transfers.

        Raises:
            DiscoveryException: Transport failure, non-2xx status or a
                JSON-RPC error object
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": ASSET_TRANSFERS_METHOD,
            "params": [dict(params)],
        }
        try:
            response = self.http.post(
                self.endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except HttpError as e:
            if e.response is None:
                raise DiscoveryException(f"Discovery request failed: {e}") from e
            status = e.status_code
            raise DiscoveryException(
                f"Discovery service returned HTTP {status}",
                details={"status_code": status, "body": e.response.text[:500]},
                retryable=status == 429 or status >= 500,
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise DiscoveryException(f"Discovery service returned invalid JSON: {e}") from e

        if "error" in body:
            error = body["error"] or {}
            raise DiscoveryException(
                f"Discovery service error: {error.get('message', 'unknown error')}",
                details={"error": error},
            )
        return body.get("result") or {}


class RightfulOwnerFinder:
    """
    Builds ownership records from the transfers into a holder address.

    Usage:
        finder = RightfulOwnerFinder(AssetTransfersClient.from_config(cfg))
        records = finder.find_owners(collection, holder)
    """

    def __init__(self, client: AssetTransfersClient, max_pages: Optional[int] = None) -> None:
        self.client = client
        self.max_pages = max_pages

    def find_owners(self, collection: str, holder: str) -> list[OwnershipRecord]:
        """
        Collect one record per ERC-721 transfer of `collection` into `holder`.

        Raises:
            DiscoveryException: If the service fails, a transfer is
                malformed, or more than max_pages pages would be needed
        """
        params: dict[str, Any] = {
            "toAddress": normalize_address(holder),
            "contractAddresses": [normalize_address(collection)],
            "category": [ERC721_CATEGORY],
        }

        records: list[OwnershipRecord] = []
        pages = 0
        while True:
            logger.info(f"Fetching asset transfers page {pages + 1} for {params['toAddress']}")
            page = self.client.get_asset_transfers(params)
            pages += 1
            records.extend(self._records_from_page(page))

            page_key = page.get("pageKey")
            if not page_key:
                break
            if self.max_pages is not None and pages >= self.max_pages:
                raise DiscoveryException(
                    f"Transfer history exceeds {self.max_pages} pages",
                    details={"page_key": page_key, "records_so_far": len(records)},
                    retryable=False,
                )
            params["pageKey"] = page_key

        logger.info(f"Found {len(records)} transfers into {params['toAddress']} over {pages} pages")
        return records

    @staticmethod
    def _records_from_page(page: dict[str, Any]) -> list[OwnershipRecord]:
        records = []
        for transfer in page.get("transfers", []):
            try:
                records.append(OwnershipRecord(
                    collection=transfer["rawContract"]["address"],
                    owner=transfer["from"],
                    token_id=transfer["tokenId"],
                ))
            except (KeyError, TypeError, ValueError) as e:
                raise DiscoveryException(
                    f"Malformed transfer in discovery response: {e}",
                    details={"transfer": transfer},
                    retryable=False,
                ) from e
        return records


__all__ = [
    "ASSET_TRANSFERS_METHOD",
    "AssetTransfersClient",
    "RightfulOwnerFinder",
]
