"""Shared fixtures for meal-pricer tests."""

import pytest
import respx

from meal_pricer.api import KrogerAPI
from meal_pricer.catalog import CatalogProduct, InMemoryCatalog, PriceOffer
from meal_pricer.config import Settings

API_BASE_URL = "https://api.test-kroger.example/v1"
LOCATION_ID = "01400943"


def make_product(
    product_id: str | None,
    description: str,
    price: float | None = None,
    size: str | None = None,
    categories: tuple[str, ...] = (),
    promo: float | None = None,
    stock_level: str | None = None,
    upc: str | None = None,
    brand: str | None = None,
) -> CatalogProduct:
    """Create a CatalogProduct for testing."""
    offers = (PriceOffer(regular_price=price, promo_price=promo),) if price or promo else ()
    return CatalogProduct(
        product_id=product_id,
        description=description,
        brand=brand,
        categories=categories,
        size_label=size,
        price_offers=offers,
        stock_level=stock_level,
        upc=upc,
    )


@pytest.fixture
def mock_httpx():
    """Activate respx mock for HTTP requests."""
    with respx.mock(assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
def settings():
    """Settings pointing at a fake API."""
    return Settings(
        api_base_url=API_BASE_URL,
        access_token="test-token-12345",
        location_id=LOCATION_ID,
        timeout=5.0,
        max_workers=3,
    )


@pytest.fixture
def api_client(settings):
    """Create a fresh KrogerAPI client instance."""
    client = KrogerAPI(settings)
    yield client
    client.close()


@pytest.fixture
def kroger_product_payload():
    """Single product as returned by the /products endpoint."""
    return {
        "productId": "0001111041700",
        "upc": "0001111041700",
        "brand": "Kroger",
        "description": "Kroger® 2% Reduced Fat Milk",
        "categories": ["Dairy"],
        "images": [
            {
                "perspective": "front",
                "sizes": [{"size": "large", "url": "https://example.com/milk.jpg"}],
            }
        ],
        "items": [
            {
                "itemId": "0001111041700",
                "price": {"regular": 3.49, "promo": 2.99},
                "size": "1/2 gal",
                "inventory": {"stockLevel": "HIGH"},
            }
        ],
    }


@pytest.fixture
def kroger_search_response(kroger_product_payload):
    """Standard product search response."""
    return {
        "data": [
            kroger_product_payload,
            {
                "productId": "0001111060903",
                "description": "Kroger® Whole Milk",
                "categories": ["Dairy"],
                "items": [{"price": {"regular": 3.79, "promo": 0}, "size": "1 gal"}],
            },
        ],
        "meta": {"pagination": {"start": 0, "limit": 2, "total": 2}},
    }


@pytest.fixture
def kroger_locations_response():
    """Standard /locations response."""
    return {
        "data": [
            {
                "locationId": LOCATION_ID,
                "chain": "KROGER",
                "name": "Kroger Mt. Washington",
                "address": {
                    "addressLine1": "2217 Beechmont Ave",
                    "city": "Cincinnati",
                    "state": "OH",
                    "zipCode": "45230",
                },
            }
        ]
    }


@pytest.fixture
def sample_products():
    """A small grocery catalog."""
    return [
        make_product("milk-1", "Whole Milk", 4.00, "1 l", ("Dairy",), stock_level="HIGH"),
        make_product("eggs-12", "Grade A Large Eggs", 3.00, "12 ct", ("Dairy",), promo=2.40),
        make_product("beef-1", "Ground Beef 80% Lean", 5.99, "1 lb", ("Meat & Seafood",)),
        make_product("cilantro-1", "Fresh Cilantro", 0.99, "1 bunch", ("Produce",)),
        make_product("onion-3", "Yellow Onions", 2.99, "3 lb", ("Produce",)),
        make_product("soup-1", "Tomato Soup", 1.25, "10.75 oz", ("Canned & Packaged",)),
        make_product("tomato-1", "Roma Tomatoes", 1.49, "1 lb", ("Produce",)),
        make_product("bread-1", "Whole Wheat Bread", None, "20 oz", ("Bakery",)),
    ]


@pytest.fixture
def catalog(sample_products):
    """In-memory catalog over the sample products."""
    return InMemoryCatalog(sample_products)


@pytest.fixture
def product_factory():
    """Factory for CatalogProduct instances."""
    return make_product
