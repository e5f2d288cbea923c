import asyncio
import json

import httpx
import pytest

from woosync.config import WooSettings
from woosync.woocommerce.woocommerce_api import WooCommerceClient

BASE_URL = "https://shop.test/wp-json/wc/v3"
SETTINGS = WooSettings(base_url=BASE_URL, consumer_key="ck_test", consumer_secret="cs_test")


class FakeStore:
    """
    In-memory stand-in for the wc/v3 product endpoints, served through
    httpx.MockTransport. Records every call as (method, path, params, body).
    """

    def __init__(self):
        self.products = {}
        self.calls = []
        self.next_id = 100
        self.fail_skus = {}     # sku -> (status, body) answered on lookup
        self.latency = {}       # sku -> seconds spent on lookup
        self.completed = []     # skus in the order their lookup finished
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, **product):
        if "id" not in product:
            product["id"] = self._new_id()
        self.products[product["id"]] = product
        return product

    def calls_to(self, method, path=None):
        return [c for c in self.calls if c[0] == method and (path is None or c[1] == path)]

    def _new_id(self):
        self.next_id += 1
        return self.next_id

    def _find_sku(self, sku):
        # Woo matches SKUs case-insensitively
        key = (sku or "").casefold()
        return [p for p in self.products.values() if (p.get("sku") or "").casefold() == key]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.split("/wc/v3/", 1)[1]
        params = dict(request.url.params)
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, params, body))

        if path == "system_status/tools":
            return httpx.Response(200, json=[{"id": "clear_transients", "name": "WooCommerce transients"}])
        if path == "system_status":
            return httpx.Response(200, json={"environment": {"version": "9.1.0", "site_url": "https://shop.test"}})

        if path == "products" and request.method == "GET":
            if "sku" in params:
                return await self._lookup(params["sku"], int(params.get("per_page", 10)))
            per_page = int(params.get("per_page", 10))
            page = int(params.get("page", 1))
            rows = list(self.products.values())[(page - 1) * per_page:page * per_page]
            return httpx.Response(200, json=rows)

        if path == "products" and request.method == "POST":
            if self._find_sku(body.get("sku")):
                return httpx.Response(400, json={
                    "code": "product_invalid_sku",
                    "message": "Invalid or duplicated SKU.",
                    "data": {"status": 400},
                })
            created = self.add(**{**body, "price": body.get("regular_price", "")})
            return httpx.Response(201, json=created)

        product_id = int(path.split("/")[1])
        product = self.products.get(product_id)
        if product is None:
            return httpx.Response(404, json={
                "code": "woocommerce_rest_product_invalid_id",
                "message": "Invalid ID.",
                "data": {"status": 404},
            })

        if request.method == "GET":
            return httpx.Response(200, json=product)
        if request.method == "PUT":
            product.update(body)
            product["price"] = product.get("regular_price", "")
            return httpx.Response(200, json=product)
        if request.method == "DELETE":
            if params.get("force") == "true":
                del self.products[product_id]
            else:
                product["status"] = "trash"
            return httpx.Response(200, json=product)

        return httpx.Response(405, json={"code": "rest_no_route", "message": "No route."})

    async def _lookup(self, sku, per_page):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency.get(sku, 0))
        finally:
            self.in_flight -= 1
        self.completed.append(sku)

        if sku in self.fail_skus:
            status, payload = self.fail_skus[sku]
            return httpx.Response(status, json=payload)
        return httpx.Response(200, json=self._find_sku(sku)[:per_page])


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def wc_client(store):
    client = WooCommerceClient(SETTINGS, transport=httpx.MockTransport(store.handle))
    yield client
    asyncio.run(client.aclose())
