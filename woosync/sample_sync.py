# woosync/sample_sync.py
# Example run: one single upsert, then a small bulk sync (price + stock only).
#   python -m woosync.sample_sync
import asyncio
import json
import logging
import sys

from woosync.errors import ConfigError
from woosync.sync.product_sync import sync_product_by_sku
from woosync.sync.sync_core import sync_multiple_products
from woosync.woocommerce.woocommerce_api import WooCommerceClient

logger = logging.getLogger("woosync.sample")

SAMPLE_PRODUCT = {
    "name": "Sample Product",
    "sku": "SAMPLE-001",
    "regular_price": "29.99",
    "stock_quantity": 100,
    "manage_stock": True,
}

SAMPLE_BATCH = [
    {
        "name": "Product A",
        "sku": "PROD-A-001",
        "regular_price": "19.99",
        "stock_quantity": 50,
        "manage_stock": True,
    },
    {
        "name": "Product B",
        "sku": "PROD-B-002",
        "regular_price": "24.99",
        "stock_quantity": 75,
        "manage_stock": True,
    },
]


async def main() -> int:
    try:
        client = WooCommerceClient.from_env()
    except ConfigError as e:
        logger.error("%s", e)
        return 1

    async with client:
        try:
            logger.info("Syncing sample product...")
            result = await sync_product_by_sku(client, SAMPLE_PRODUCT)
            logger.info("Sync result: %s", json.dumps(result.to_payload(include_id=True), indent=2))

            logger.info("Syncing multiple products...")
            outcomes = await sync_multiple_products(client, SAMPLE_BATCH, concurrency=2, delay=1500)
            logger.info("Bulk sync results: %s", json.dumps([o.to_dict() for o in outcomes], indent=2))
        except Exception as e:
            logger.error("Main execution error: %s", e)
            return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sys.exit(asyncio.run(main()))
