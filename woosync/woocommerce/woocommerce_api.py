# woosync/woocommerce/woocommerce_api.py
# =============================
# WooCommerce REST API client (ASYNC)
# =============================

import logging
from typing import Any, Dict, List, Optional

import httpx
from httpx import HTTPStatusError, RequestError

from woosync.config import WooSettings, load_wc_settings
from woosync.errors import RemoteStoreError, ValidationError
from woosync.models import ProductRecord


def _same_sku(a: str, b: str) -> bool:
    return a.strip().casefold() == b.strip().casefold()


class WooCommerceClient:
    """
    Thin async wrapper around the wc/v3 product endpoints.

    One httpx.AsyncClient (auth, base URL, timeout) is shared by every call,
    so it is safe to fire many requests concurrently from the same instance.
    Nothing here retries: failures surface as RemoteStoreError.
    """

    def __init__(
        self,
        settings: WooSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.log = logger or logging.getLogger(__name__)
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            auth=settings.auth,
            headers={"Content-Type": "application/json"},
            timeout=settings.timeout,
            transport=transport,
            event_hooks={
                "request": [self._log_request],
                "response": [self._log_response],
            },
        )

    @classmethod
    def from_env(cls, **kwargs) -> "WooCommerceClient":
        # raises ConfigError before any socket is opened
        return cls(load_wc_settings(), **kwargs)

    async def __aenter__(self) -> "WooCommerceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---------------------- request/response logging ----------------------

    async def _log_request(self, request: httpx.Request) -> None:
        self.log.info("%s %s", request.method, request.url)

    async def _log_response(self, response: httpx.Response) -> None:
        self.log.info("%s %s", response.status_code, response.reason_phrase)

    # ---------------------- core request ----------------------

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Any:
        try:
            r = await self._client.request(method, path, params=params, json=json)
            r.raise_for_status()
        except HTTPStatusError as e:
            err = RemoteStoreError.from_response(e.response)
            self.log.error("Response error %s: %s", err.status_code, err.message)
            raise err from e
        except RequestError as e:
            err = RemoteStoreError.from_transport(e)
            self.log.error("Request error: %s", err.message)
            raise err from e
        try:
            return r.json()
        except ValueError as e:
            # wrong base URL / permalinks: WordPress answers 200 with its HTML
            err = RemoteStoreError(
                f"Invalid JSON from store: {r.text[:200]}",
                status_code=r.status_code,
                payload=r.text,
            )
            self.log.error("Response error %s: %s", err.status_code, err.message)
            raise err from e

    def _decode(self, data: Any) -> ProductRecord:
        # a malformed product coming back from the store is the store's fault
        try:
            return ProductRecord.from_payload(data)
        except ValidationError as e:
            raise RemoteStoreError(f"Unexpected product data from store: {e}", payload=data) from e

    async def _product(self, method: str, path: str, **kwargs) -> ProductRecord:
        return self._decode(await self._request(method, path, **kwargs))

    # ---------------------- products ----------------------

    async def find_product_by_sku(self, sku: str) -> Optional[ProductRecord]:
        """
        Look up a product by SKU. Woo does not enforce SKU uniqueness across
        statuses, so only the first hit is considered; a hit carrying a different
        SKU (older stores fuzzy-match) counts as not found. Woo's own SKU
        lookup ignores case, so the comparison does too.
        """
        self.log.info("Searching for product with SKU: %s", sku)
        hits = await self._request("GET", "products", params={"sku": sku, "per_page": 1})

        if hits:
            found = self._decode(hits[0])
            if found.sku is None or _same_sku(found.sku, sku):
                self.log.info("Found product: %s (ID: %s)", found.name, found.id)
                return found
            self.log.warning(
                "SKU mismatch: searched '%s', got '%s'. Ignoring fuzzy result.",
                sku, found.sku,
            )

        self.log.info("No product found with SKU: %s", sku)
        return None

    async def get_product(self, product_id: int) -> ProductRecord:
        return await self._product("GET", f"products/{product_id}")

    async def create_product(self, record: ProductRecord) -> ProductRecord:
        self.log.info("Creating new product with SKU: %s", record.sku)
        created = await self._product("POST", "products", json=record.to_payload())
        self.log.info("Product created: %s (ID: %s)", created.name, created.id)
        return created

    async def update_product(self, product_id: int, record: ProductRecord) -> ProductRecord:
        self.log.info("Updating product ID: %s with SKU: %s", product_id, record.sku)
        updated = await self._product(
            "PUT", f"products/{product_id}", json=record.to_payload()
        )
        self.log.info("Product updated: %s (ID: %s)", updated.name, updated.id)
        return updated

    async def delete_product(self, product_id: int, force: bool = False) -> ProductRecord:
        """force=False moves the product to trash; force=True deletes it for good."""
        self.log.info("Deleting product ID: %s (force: %s)", product_id, force)
        deleted = await self._product(
            "DELETE", f"products/{product_id}", params={"force": force}
        )
        self.log.info("Product deleted: %s (ID: %s)", deleted.name, deleted.id)
        return deleted

    async def get_all_products(self, per_page: int = 100, page: int = 1) -> List[ProductRecord]:
        # single page only; callers walk pages themselves if they need to
        self.log.info("Fetching products (page %s, %s per page)", page, per_page)
        rows = await self._request(
            "GET", "products", params={"per_page": per_page, "page": page}
        )
        self.log.info("Retrieved %s products", len(rows))
        return [self._decode(p) for p in rows]

    # ---------------------- diagnostics ----------------------

    async def system_status(self) -> Dict[str, Any]:
        return await self._request("GET", "system_status")

    async def system_status_tools(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "system_status/tools")
