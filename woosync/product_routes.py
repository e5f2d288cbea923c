# woosync/product_routes.py
# =============================
# Product API Routes
# =============================

import logging
from functools import lru_cache
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from woosync.config import DEFAULT_CONCURRENCY, DEFAULT_DELAY_MS
from woosync.errors import RemoteStoreError, ValidationError
from woosync.sync.product_sync import sync_product_by_sku
from woosync.sync.sync_core import summarize_outcomes, sync_multiple_products
from woosync.woocommerce.woocommerce_api import WooCommerceClient

logger = logging.getLogger("uvicorn.error")
product_router = APIRouter()


@lru_cache(maxsize=1)
def get_wc_client() -> WooCommerceClient:
    """One shared client per process (raises ConfigError without credentials)."""
    return WooCommerceClient.from_env()


class BulkSyncRequest(BaseModel):
    products: List[Dict[str, Any]]
    concurrency: int = Field(DEFAULT_CONCURRENCY, ge=1)
    delay: int = Field(DEFAULT_DELAY_MS, ge=0, description="pause between batches, ms")


def _store_error(e: RemoteStoreError) -> HTTPException:
    return HTTPException(
        status_code=502,
        detail={"status_code": e.status_code, "code": e.code, "message": e.message},
    )


# -----------------------------
# ✅ Connectivity check
# -----------------------------
@product_router.get("/status")
async def store_status(client: WooCommerceClient = Depends(get_wc_client)):
    try:
        status = await client.system_status()
    except RemoteStoreError as e:
        logger.error(f"[Status] WooCommerce unreachable: {e}")
        raise _store_error(e)
    env = status.get("environment") or {}
    return {"status": "ok", "wc_version": env.get("version"), "site_url": env.get("site_url")}


# -----------------------------
# ✅ Product lookups
# -----------------------------
@product_router.get("/products")
async def list_products(
    per_page: int = Query(100, ge=1, le=100),
    page: int = Query(1, ge=1),
    client: WooCommerceClient = Depends(get_wc_client),
):
    try:
        products = await client.get_all_products(per_page=per_page, page=page)
    except RemoteStoreError as e:
        raise _store_error(e)
    return [p.to_payload(include_id=True) for p in products]


@product_router.get("/products/sku/{sku}")
async def get_product_by_sku(sku: str, client: WooCommerceClient = Depends(get_wc_client)):
    try:
        product = await client.find_product_by_sku(sku)
    except RemoteStoreError as e:
        raise _store_error(e)
    if product is None:
        raise HTTPException(status_code=404, detail=f"No product found with SKU: {sku}")
    return product.to_payload(include_id=True)


@product_router.delete("/products/{product_id}")
async def delete_product(
    product_id: int,
    force: bool = False,
    client: WooCommerceClient = Depends(get_wc_client),
):
    try:
        deleted = await client.delete_product(product_id, force=force)
    except RemoteStoreError as e:
        logger.error(f"[Delete] {product_id} failed: {e}")
        raise _store_error(e)
    return deleted.to_payload(include_id=True)


# =============================
# 🔁 Sync Endpoints
# =============================
@product_router.post("/products/sync")
async def sync_one(
    payload: Dict[str, Any] = Body(...),
    client: WooCommerceClient = Depends(get_wc_client),
):
    try:
        product = await sync_product_by_sku(client, payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"field": e.field, "message": str(e)})
    except RemoteStoreError as e:
        raise _store_error(e)
    return product.to_payload(include_id=True)


@product_router.post("/products/bulk-sync")
async def bulk_sync(req: BulkSyncRequest, client: WooCommerceClient = Depends(get_wc_client)):
    outcomes = await sync_multiple_products(
        client, req.products, concurrency=req.concurrency, delay=req.delay
    )
    summary = summarize_outcomes(outcomes)
    return {
        "results": [o.to_dict() for o in outcomes],
        "summary": {
            "total": summary.total,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
            "failed_skus": summary.failed_skus,
        },
    }
