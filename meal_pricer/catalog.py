"""Canonical catalog product model and the catalog search capability."""

import hashlib
import json
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .queries import singularize


class CatalogError(Exception):
    """Exception raised when a catalog search cannot be completed."""

    pass


@dataclass(frozen=True)
class PriceOffer:
    """One purchasable offer of a product (a Kroger "item")."""

    regular_price: float | None = None
    promo_price: float | None = None

    @property
    def best_price(self) -> float | None:
        """Promo price when present, otherwise the regular price."""
        for price in (self.promo_price, self.regular_price):
            if price is not None and price > 0:
                return price
        return None


@dataclass(frozen=True)
class CatalogProduct:
    """A grocery product as returned by the catalog, normalized."""

    product_id: str | None
    description: str
    brand: str | None = None
    categories: tuple[str, ...] = ()
    size_label: str | None = None
    price_offers: tuple[PriceOffer, ...] = ()
    upc: str | None = None
    stock_level: str | None = None
    image_url: str | None = None

    @property
    def price(self) -> float | None:
        """First resolvable price across offers, preferring promo prices."""
        for offer in self.price_offers:
            price = offer.best_price
            if price is not None:
                return price
        return None

    @property
    def has_price(self) -> bool:
        return self.price is not None

    @property
    def has_promo(self) -> bool:
        return any(
            offer.promo_price is not None and offer.promo_price > 0 for offer in self.price_offers
        )

    @property
    def in_stock(self) -> bool | None:
        """True/False when the stock level is known, None otherwise."""
        if not self.stock_level:
            return None
        return "out" not in self.stock_level.lower()

    def fingerprint(self) -> str:
        """Structural hash of the product, used when it has no id or UPC."""
        payload = json.dumps(asdict(self), sort_keys=True, default=str)
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "product_id": self.product_id,
            "upc": self.upc,
            "description": self.description,
            "brand": self.brand,
            "categories": list(self.categories),
            "size": self.size_label,
            "price": self.price,
            "stock_level": self.stock_level,
        }


@runtime_checkable
class CatalogSearch(Protocol):
    """Anything that can search a product catalog."""

    def search(
        self, term: str, location_id: str | None = None, limit: int = 20
    ) -> list[CatalogProduct]:
        """Return up to `limit` products for `term`; raise CatalogError on failure."""
        ...


@runtime_checkable
class ProductLookup(Protocol):
    """A catalog that can also fetch a single product by id."""

    def get_product(self, product_id: str, location_id: str | None = None) -> CatalogProduct | None:
        ...


def _to_price(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if price != price or price <= 0:  # NaN or non-positive
        return None
    return price


def _parse_price(price_data: Any) -> PriceOffer | None:
    if not isinstance(price_data, dict):
        # Bare number at the root ("price": 2.49)
        regular = _to_price(price_data)
        return PriceOffer(regular_price=regular) if regular is not None else None

    regular = _to_price(price_data.get("regular", price_data.get("regularPrice")))
    promo = _to_price(
        price_data.get("promo", price_data.get("promoPrice", price_data.get("sale")))
    )
    if regular is None and promo is None:
        return None
    return PriceOffer(regular_price=regular, promo_price=promo)


def normalize_product(payload: dict[str, Any]) -> CatalogProduct:
    """
    Normalize a catalog payload into a CatalogProduct.

    Handles the shapes the product API returns:
    - v1/v2 products with nested items[] carrying price, size and inventory
    - products with the price (and size) at the root
    - already-flattened mock products with "name"/"id"

    Args:
        payload: Product dict from the API

    Returns:
        CatalogProduct with prices folded into price_offers
    """
    items = payload.get("items")
    if not isinstance(items, list):
        items = []

    offers: list[PriceOffer] = []
    size_label: str | None = None
    stock_level: str | None = None

    for item in items:
        if not isinstance(item, dict):
            continue
        offer = _parse_price(item.get("price"))
        if offer is not None:
            offers.append(offer)
        if size_label is None and item.get("size"):
            size_label = str(item["size"])
        inventory = item.get("inventory")
        if stock_level is None and isinstance(inventory, dict) and inventory.get("stockLevel"):
            stock_level = str(inventory["stockLevel"])

    # Some payloads put price at root
    if "price" in payload:
        offer = _parse_price(payload.get("price"))
        if offer is not None:
            offers.append(offer)

    if size_label is None and payload.get("size"):
        size_label = str(payload["size"])

    if stock_level is None:
        availability = payload.get("availability") or payload.get("stockLevel")
        if isinstance(availability, dict):
            availability = availability.get("stockLevel")
        if availability:
            stock_level = str(availability)

    description = (
        payload.get("description")
        or payload.get("name")
        or next(
            (item.get("description") for item in items if isinstance(item, dict) and item.get("description")),
            "",
        )
    )

    image_url = None
    images = payload.get("images")
    if isinstance(images, list) and images:
        first = images[0] if isinstance(images[0], dict) else {}
        sizes = first.get("sizes")
        if isinstance(sizes, list) and sizes and isinstance(sizes[0], dict):
            image_url = sizes[0].get("url")
        image_url = image_url or first.get("url")

    product_id = payload.get("productId", payload.get("id"))
    categories = payload.get("categories") or []
    if isinstance(categories, str):
        categories = [categories]

    return CatalogProduct(
        product_id=str(product_id) if product_id not in (None, "") else None,
        description=str(description),
        brand=payload.get("brand") or None,
        categories=tuple(str(c) for c in categories),
        size_label=size_label,
        price_offers=tuple(offers),
        upc=str(payload["upc"]) if payload.get("upc") else None,
        stock_level=stock_level,
        image_url=image_url,
    )


def _tokens(text: str) -> set[str]:
    return {singularize(t) for t in re.findall(r"[a-z0-9]+", text.lower()) if len(t) > 1}


@dataclass
class InMemoryCatalog:
    """
    A fixed product list that behaves like a catalog.

    Search returns products sharing at least one word with the term, best
    overlap first. Used for offline pricing and in tests.
    """

    products: list[CatalogProduct] = field(default_factory=list)

    def search(
        self, term: str, location_id: str | None = None, limit: int = 20
    ) -> list[CatalogProduct]:
        term_tokens = _tokens(term)
        if not term_tokens:
            return []

        hits: list[tuple[int, int, CatalogProduct]] = []
        for position, product in enumerate(self.products):
            overlap = len(term_tokens & _tokens(product.description))
            if overlap:
                hits.append((-overlap, position, product))

        hits.sort(key=lambda hit: (hit[0], hit[1]))
        return [product for _, _, product in hits[:limit]]

    def get_product(self, product_id: str, location_id: str | None = None) -> CatalogProduct | None:
        for product in self.products:
            if product.product_id == product_id:
                return product
        return None

    @classmethod
    def from_payloads(cls, payloads: list[dict[str, Any]]) -> "InMemoryCatalog":
        return cls([normalize_product(p) for p in payloads])

    @classmethod
    def from_file(cls, filepath: str | Path) -> "InMemoryCatalog":
        """Load a catalog snapshot: a JSON list of product payloads or {"data": [...]}."""
        path = Path(filepath)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CatalogError(f"Could not load catalog from {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("data", [])
        if not isinstance(data, list):
            raise CatalogError(f"{path} must contain a list of products")
        return cls.from_payloads([p for p in data if isinstance(p, dict)])
