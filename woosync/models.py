# woosync/models.py
# =============================
# Product + sync result models
# =============================

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from woosync.errors import ValidationError


class ProductRecord(BaseModel):
    """
    A WooCommerce product as we send/receive it.

    Known fields are typed; anything else Woo sends (or the caller wants to pass
    through, e.g. `dimensions`, `tags`, `date_created`) lives in `extra` and is
    written back unmodified.
    """

    model_config = ConfigDict(extra="forbid")

    id: Optional[int] = None
    name: Optional[str] = None
    sku: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None

    # prices are text-encoded decimals on the Woo side
    regular_price: Optional[str] = None
    sale_price: Optional[str] = None
    price: Optional[str] = None

    description: Optional[str] = None
    short_description: Optional[str] = None

    manage_stock: Optional[bool] = None
    stock_quantity: Optional[int] = None
    stock_status: Optional[str] = None
    in_stock: Optional[bool] = None
    weight: Optional[str] = None

    categories: Optional[List[Dict[str, Any]]] = None
    images: Optional[List[Dict[str, Any]]] = None
    meta_data: Optional[List[Dict[str, Any]]] = None

    extra: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ProductRecord":
        """Split a raw Woo/JSON dict into declared fields + `extra`."""
        if isinstance(data, ProductRecord):
            return data
        if not isinstance(data, Mapping):
            raise ValidationError(
                f"Product data must be an object, got {type(data).__name__}"
            )

        declared = set(cls.model_fields) - {"extra"}
        known = {k: v for k, v in data.items() if k in declared}
        extra = {k: v for k, v in data.items() if k not in declared}
        try:
            return cls(**known, extra=extra)
        except PydanticValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(p) for p in err.get("loc", ())) or None
            raise ValidationError(
                f"Invalid value for '{field}': {err.get('msg')}", field=field
            ) from e

    def to_payload(self, include_id: bool = False) -> Dict[str, Any]:
        """
        Flatten back into a Woo JSON body. Declared fields win over `extra`.
        `id` is left out of write bodies: Woo addresses updates by URL and
        refuses to create a product that already carries one.
        """
        body = dict(self.extra)
        exclude = {"extra"} if include_id else {"extra", "id"}
        body.update(self.model_dump(exclude=exclude, exclude_none=True))
        return body


class SyncOutcome(BaseModel):
    """Result of one record's sync attempt. Never mutated once built."""

    model_config = ConfigDict(frozen=True)

    success: bool
    sku: str
    product: Optional[ProductRecord] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def succeeded(cls, sku: str, product: ProductRecord) -> "SyncOutcome":
        return cls(success=True, sku=sku, product=product)

    @classmethod
    def failed(cls, sku: str, exc: BaseException) -> "SyncOutcome":
        # batch item failure: the exception becomes data
        return cls(
            success=False,
            sku=sku,
            error=str(exc) or exc.__class__.__name__,
            error_type=exc.__class__.__name__,
            status_code=getattr(exc, "status_code", None),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success, "sku": self.sku}
        if self.product is not None:
            out["product"] = self.product.to_payload(include_id=True)
        if self.error is not None:
            out["error"] = self.error
            out["error_type"] = self.error_type
        if self.status_code is not None:
            out["status_code"] = self.status_code
        return out


class SyncSummary(BaseModel):
    total: int
    succeeded: int
    failed_skus: List[str] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded
