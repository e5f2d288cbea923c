import asyncio
import base64
import logging

import httpx
import pytest

from woosync.config import WooSettings
from woosync.errors import RemoteStoreError
from woosync.models import ProductRecord
from woosync.woocommerce.woocommerce_api import WooCommerceClient

SETTINGS = WooSettings(
    base_url="https://shop.test/wp-json/wc/v3", consumer_key="ck_test", consumer_secret="cs_test"
)


def _client_with(handler):
    return WooCommerceClient(SETTINGS, transport=httpx.MockTransport(handler))


def _run(coro):
    return asyncio.run(coro)


def test_requests_use_basic_auth_and_api_root():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[])

    async def go():
        async with _client_with(handler) as client:
            return await client.find_product_by_sku("S1")

    assert _run(go()) is None
    req = seen[0]
    expected = base64.b64encode(b"ck_test:cs_test").decode()
    assert req.headers["authorization"] == f"Basic {expected}"
    assert req.url.path == "/wp-json/wc/v3/products"
    assert dict(req.url.params) == {"sku": "S1", "per_page": "1"}


def test_find_returns_first_match(wc_client, store):
    store.add(id=7, name="Mug", sku="MUG-1", regular_price="4.50")
    found = _run(wc_client.find_product_by_sku("MUG-1"))
    assert found.id == 7
    assert found.regular_price == "4.50"


def test_find_ignores_fuzzy_sku_match():
    def handler(request):
        return httpx.Response(200, json=[{"id": 3, "name": "Other", "sku": "S1-BIG"}])

    async def go():
        async with _client_with(handler) as client:
            return await client.find_product_by_sku("S1")

    assert _run(go()) is None


def test_get_and_delete(wc_client, store):
    store.add(id=5, name="Lamp", sku="L-1")

    assert _run(wc_client.get_product(5)).name == "Lamp"

    trashed = _run(wc_client.delete_product(5))
    assert trashed.status == "trash"
    assert store.calls_to("DELETE")[0][2] == {"force": "false"}
    assert 5 in store.products

    _run(wc_client.delete_product(5, force=True))
    assert store.calls_to("DELETE")[1][2] == {"force": "true"}
    assert 5 not in store.products


def test_get_all_products_single_page(wc_client, store):
    for i in range(5):
        store.add(name=f"P{i}", sku=f"P{i}")

    page = _run(wc_client.get_all_products(per_page=2, page=2))

    assert [p.sku for p in page] == ["P2", "P3"]
    assert len(store.calls) == 1


def test_status_error_carries_store_message(wc_client, store):
    with pytest.raises(RemoteStoreError) as exc:
        _run(wc_client.update_product(404404, ProductRecord(name="X", sku="S1")))

    err = exc.value
    assert err.status_code == 404
    assert err.code == "woocommerce_rest_product_invalid_id"
    assert err.message == "Invalid ID."
    assert str(err) == "404: Invalid ID."
    assert isinstance(err.__cause__, httpx.HTTPStatusError)


def test_non_json_error_body():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway from proxy")

    async def go():
        async with _client_with(handler) as client:
            await client.system_status()

    with pytest.raises(RemoteStoreError) as exc:
        _run(go())
    assert exc.value.status_code == 502
    assert exc.value.message == "Bad Gateway from proxy"


def test_timeout_becomes_remote_store_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    async def go():
        async with _client_with(handler) as client:
            await client.find_product_by_sku("S1")

    with pytest.raises(RemoteStoreError) as exc:
        _run(go())
    assert exc.value.status_code is None
    assert "timed out" in exc.value.message


def test_requests_and_responses_are_logged(wc_client, store, caplog):
    caplog.set_level(logging.INFO)
    store.fail_skus["BAD"] = (401, {"code": "woocommerce_rest_cannot_view", "message": "Sorry, you cannot list resources."})

    _run(wc_client.find_product_by_sku("OK"))
    with pytest.raises(RemoteStoreError):
        _run(wc_client.find_product_by_sku("BAD"))

    assert "GET https://shop.test/wp-json/wc/v3/products?sku=OK&per_page=1" in caplog.text
    assert "200 OK" in caplog.text
    assert "Response error 401: Sorry, you cannot list resources." in caplog.text


def test_system_status(wc_client, store):
    status = _run(wc_client.system_status())
    assert status["environment"]["version"] == "9.1.0"


def test_system_status_tools(wc_client, store):
    tools = _run(wc_client.system_status_tools())
    assert tools[0]["id"] == "clear_transients"
    assert store.calls[0][1] == "system_status/tools"


def test_find_matches_sku_regardless_of_case():
    def handler(request):
        return httpx.Response(200, json=[{"id": 42, "name": "Widget", "sku": "abc-1"}])

    async def go():
        async with _client_with(handler) as client:
            return await client.find_product_by_sku("ABC-1")

    found = _run(go())
    assert found is not None
    assert found.id == 42


def test_html_instead_of_json_becomes_remote_store_error():
    # what WordPress sends back when the base URL or permalinks are wrong
    def handler(request):
        return httpx.Response(200, text="<html>Welcome to my shop</html>")

    async def go():
        async with _client_with(handler) as client:
            await client.find_product_by_sku("S1")

    with pytest.raises(RemoteStoreError) as exc:
        _run(go())
    assert exc.value.status_code == 200
    assert exc.value.message.startswith("Invalid JSON from store")
    assert exc.value.payload == "<html>Welcome to my shop</html>"


def test_malformed_product_from_store_is_a_store_error():
    def handler(request):
        return httpx.Response(200, json={"id": "not-a-number", "name": "Broken", "sku": "B-1"})

    async def go():
        async with _client_with(handler) as client:
            await client.get_product(5)

    with pytest.raises(RemoteStoreError) as exc:
        _run(go())
    assert "Unexpected product data from store" in exc.value.message
    assert exc.value.payload["id"] == "not-a-number"
