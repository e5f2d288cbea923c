# woosync/sync/product_sync.py
# =============================
# Product Sync Module
# - Validates product data locally
# - Upserts one product keyed by SKU (update if found, else create)
# =============================

import logging
from typing import Any, Mapping, Optional, Union

from woosync.errors import ValidationError
from woosync.models import ProductRecord
from woosync.utils.prices import PRICE_FIELDS, blank, is_price_string
from woosync.woocommerce.woocommerce_api import WooCommerceClient

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "sku")

ProductInput = Union[ProductRecord, Mapping[str, Any]]


def validate_product_data(product: ProductInput) -> ProductRecord:
    """
    Check a product before anything goes over the wire.
    Raises ValidationError for a missing name/sku or a malformed price.
    """
    record = ProductRecord.from_payload(product)

    for field in REQUIRED_FIELDS:
        if blank(getattr(record, field)):
            raise ValidationError(f"Required field '{field}' is missing", field=field)

    # what gets checked is what gets sent: padded prices go out stripped,
    # whitespace-only becomes "" (Woo's way of clearing a price)
    prices = {}
    for field in PRICE_FIELDS:
        value = getattr(record, field)
        if value is None:
            continue
        value = value.strip()
        if value and not is_price_string(value):
            raise ValidationError(
                f"{field} must be a decimal string like '19.99', got {value!r}",
                field=field,
            )
        prices[field] = value

    return record.model_copy(update=prices) if prices else record


async def sync_product_by_sku(
    client: WooCommerceClient,
    product: ProductInput,
    log: Optional[logging.Logger] = None,
) -> ProductRecord:
    """
    Create or update one product, keyed by SKU.
    Returns the product as Woo stored it (id, computed price, timestamps...).
    Errors propagate: ValidationError before any request, RemoteStoreError after.
    """
    log = log or logger
    record = validate_product_data(product)

    try:
        existing = await client.find_product_by_sku(record.sku)
        if existing and existing.id:
            return await client.update_product(existing.id, record)
        return await client.create_product(record)
    except Exception as e:
        log.error("Error syncing product with SKU %s: %s", record.sku, e)
        raise
