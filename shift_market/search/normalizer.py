"""
Normalize raw catalog rows into SearchResultItem objects.

PostgREST embeds come back as a list (one-to-many), a single object, or
null depending on the join. Rows are flattened here so nothing downstream
has to branch on the join shape. normalize() is total: it substitutes
defaults instead of raising.
"""
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from shift_market.utils.logger import get_logger

logger = get_logger("search.normalizer")


@dataclass
class AdSummary:
    id: str = ""
    is_promoted: bool = False
    views: int = 0


@dataclass
class SellerSummary:
    name: str = ""
    location: str = ""


@dataclass
class SearchResultItem:
    id: str
    name: str = ""
    description: str = ""
    price: float = 0.0
    price_currency: str = ""
    rating: float = 0.0
    images: List[str] = field(default_factory=list)
    category: str = ""
    shop_id: str = ""
    ads: AdSummary = field(default_factory=AdSummary)
    shop: SellerSummary = field(default_factory=SellerSummary)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def first_record(value: Any) -> Optional[Dict[str, Any]]:
    """Return the embedded record whether it arrived as a list or an object."""
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, dict) else None


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_number(value: Any, cast=float):
    if isinstance(value, bool):
        return cast(0)
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return cast(0)
    if not math.isfinite(number):
        return cast(0)
    return cast(number)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _ad_summary(row: Dict[str, Any]) -> AdSummary:
    ad = first_record(row.get("ads"))
    if not ad:
        return AdSummary()
    promoted = ad.get("ispromoted", ad.get("isPromoted", False))
    return AdSummary(
        id=_as_str(ad.get("advert_id") or ad.get("id")),
        is_promoted=bool(promoted),
        views=_as_number(ad.get("views"), int),
    )


def seller_location(shop: Optional[Dict[str, Any]]) -> str:
    """Seller location from either `other.location` or a flattened `location` projection."""
    if not shop:
        return ""
    location = _as_dict(shop.get("other")).get("location")
    if location is None:
        location = shop.get("location")
    return _as_str(location)


def _seller_summary(row: Dict[str, Any]) -> SellerSummary:
    shop = first_record(row.get("shops", row.get("shop")))
    if not shop:
        return SellerSummary()
    return SellerSummary(name=_as_str(shop.get("name")), location=seller_location(shop))


def normalize_row(row: Dict[str, Any]) -> SearchResultItem:
    other = _as_dict(row.get("other"))
    images = other.get("images")
    return SearchResultItem(
        id=_as_str(row.get("product_id") or row.get("id")),
        name=_as_str(row.get("name")),
        description=_as_str(row.get("description")),
        price=_as_number(row.get("price")),
        price_currency=_as_str(row.get("price_currency")),
        rating=_as_number(row.get("rating")),
        images=[_as_str(i) for i in images if i] if isinstance(images, list) else [],
        category=_as_str(other.get("category")),
        shop_id=_as_str(row.get("shop_id")),
        ads=_ad_summary(row),
        shop=_seller_summary(row),
    )


def normalize(rows: Optional[Iterable[Any]]) -> List[SearchResultItem]:
    """Shape raw rows for rendering. Rows that are not objects are skipped."""
    items: List[SearchResultItem] = []
    for row in rows or []:
        if not isinstance(row, dict):
            logger.debug(f"Skipping non-object row: {row!r}")
            continue
        items.append(normalize_row(row))
    return items
