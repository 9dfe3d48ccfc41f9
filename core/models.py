# core/models.py
import datetime
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

# Catalog timestamps can carry 7 fractional digits (100 ns ticks);
# fromisoformat on 3.10 only takes exactly 3 or 6.
_FRACTION_RE = re.compile(r"\.(\d+)")


@dataclass
class Owner:
    """
    Local record (a supplier) referencing zero or more catalog item ids.
    `items` keeps the order it was given in; None means "never set".
    """
    owner_id: int
    name: str = ""
    items: Optional[List[str]] = field(default_factory=list)


def _parse_timestamp(value: Any) -> Optional[datetime.datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value
    candidate = str(value).strip().replace("Z", "+00:00")
    candidate = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), candidate, count=1)
    try:
        return datetime.datetime.fromisoformat(candidate)
    except ValueError:
        raise ValueError(f"Invalid updatedAt timestamp: {value!r}") from None


def _parse_price(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, bool):
        raise ValueError(f"Invalid price: {value!r}")
    try:
        # str() first so floats keep their printed form (19.99, not 19.989999...)
        price = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid price: {value!r}") from None
    if not price.is_finite():
        raise ValueError(f"Invalid price: {value!r}")
    return price


def _parse_stock(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"Invalid stockQuantity: {value!r}")
    try:
        quantity = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid stockQuantity: {value!r}") from None
    if not quantity.is_finite() or quantity != quantity.to_integral_value():
        raise ValueError(f"Invalid stockQuantity: {value!r}")
    return int(quantity)


@dataclass(frozen=True)
class ItemSummary:
    """
    Snapshot of a catalog item as returned by the catalog service.
    Only ever built from a catalog payload.
    """
    id: str
    name: str
    price: Decimal = Decimal("0")
    stock_quantity: int = 0
    updated_at: Optional[datetime.datetime] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ItemSummary":
        item_id = payload.get("id")
        if item_id is None or str(item_id).strip() == "":
            raise ValueError(f"Catalog item without id: {payload!r}")

        return cls(
            id=str(item_id),
            name=str(payload.get("name") or ""),
            price=_parse_price(payload.get("price")),
            stock_quantity=_parse_stock(payload.get("stockQuantity")),
            updated_at=_parse_timestamp(payload.get("updatedAt")),
        )
