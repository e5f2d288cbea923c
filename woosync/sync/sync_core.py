# woosync/sync/sync_core.py
# =============================
# Bulk Sync Core
# - Fixed-size batches, each batch upserted concurrently
# - Pause between batches (never after the last one)
# - Per-item failures come back as data, never abort the run
# =============================

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence

from woosync.config import DEFAULT_CONCURRENCY, DEFAULT_DELAY_MS
from woosync.models import ProductRecord, SyncOutcome, SyncSummary
from woosync.sync.product_sync import ProductInput, sync_product_by_sku
from woosync.woocommerce.woocommerce_api import WooCommerceClient

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]


class SyncCancelled(Exception):
    """Recorded for items that never started because the run was cancelled."""


def plan_batches(items: Sequence, size: int) -> List[list]:
    """Consecutive slices of `size`; the last one may be shorter."""
    if size < 1:
        raise ValueError("batch size must be a positive integer")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def _sku_of(product: ProductInput) -> str:
    if isinstance(product, ProductRecord):
        sku = product.sku
    elif isinstance(product, Mapping):
        sku = product.get("sku")
    else:
        sku = None
    return "" if sku is None else str(sku)


async def _sync_one(
    client: WooCommerceClient,
    product: ProductInput,
    position: int,
    total: int,
    log: logging.Logger,
) -> SyncOutcome:
    sku = _sku_of(product)
    log.info("Processing product %s/%s (SKU: %s)", position + 1, total, sku)
    try:
        synced = await sync_product_by_sku(client, product, log=log)
    except Exception as e:
        log.error("Sync failed for SKU %s: %s", sku, e)
        return SyncOutcome.failed(sku, e)
    return SyncOutcome.succeeded(sku, synced)


async def sync_multiple_products(
    client: WooCommerceClient,
    products: Sequence[ProductInput],
    concurrency: int = DEFAULT_CONCURRENCY,
    delay: int = DEFAULT_DELAY_MS,
    *,
    sleep: Sleeper = asyncio.sleep,
    cancel_event: Optional[asyncio.Event] = None,
    log: Optional[logging.Logger] = None,
) -> List[SyncOutcome]:
    """
    Upsert many products, `concurrency` at a time, waiting `delay` ms between
    batches. Returns one SyncOutcome per input, in input order.

    If `cancel_event` is set, no new batch is started; the items that never ran
    come back as failed outcomes (error_type "SyncCancelled").
    """
    log = log or logger
    if concurrency < 1:
        raise ValueError("concurrency must be a positive integer")
    if delay < 0:
        raise ValueError("delay must be >= 0 milliseconds")

    products = list(products)
    total = len(products)
    batches = plan_batches(products, concurrency)
    results: List[SyncOutcome] = []

    log.info(
        "Starting bulk sync of %s products with concurrency: %s", total, concurrency
    )

    for n, batch in enumerate(batches):
        if cancel_event is not None and cancel_event.is_set():
            log.warning("Bulk sync cancelled with %s products left", total - len(results))
            stop = SyncCancelled("sync cancelled before this product was processed")
            results.extend(SyncOutcome.failed(_sku_of(p), stop) for p in products[len(results):])
            break

        offset = len(results)
        # gather keeps argument order, whatever order the calls finish in
        outcomes = await asyncio.gather(*[
            _sync_one(client, p, offset + i, total, log) for i, p in enumerate(batch)
        ])
        results.extend(outcomes)

        if n < len(batches) - 1:
            log.info("Waiting %sms before next batch...", delay)
            await sleep(delay / 1000)

    summary = summarize_outcomes(results)
    log.info("Bulk sync completed. Success: %s/%s", summary.succeeded, summary.total)
    if summary.failed_skus:
        log.warning("Failed items: %s", summary.failed_skus)

    return results


def summarize_outcomes(outcomes: Sequence[SyncOutcome]) -> SyncSummary:
    return SyncSummary(
        total=len(outcomes),
        succeeded=sum(1 for o in outcomes if o.success),
        failed_skus=[o.sku for o in outcomes if not o.success],
    )
