"""Kroger product API client for product search, product lookup and store locations."""

import logging
from typing import Any

import httpx

from .catalog import CatalogError, CatalogProduct, normalize_product
from .config import Settings, load_settings

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 50


class CatalogAPIError(CatalogError):
    """Exception raised for product API errors (HTTP status, transport, timeouts)."""

    pass


class KrogerAPI:
    """Client for the Kroger public product and location API."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or load_settings()
        headers = {"Accept": "application/json"}
        if self.settings.access_token:
            headers["Authorization"] = f"Bearer {self.settings.access_token}"
        self.client = httpx.Client(
            base_url=self.settings.api_base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(self.settings.timeout),
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "KrogerAPI":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def has_token(self) -> bool:
        """Check if an access token is configured."""
        return bool(self.settings.access_token)

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """GET a JSON document, turning every failure into CatalogAPIError."""
        params = {k: v for k, v in params.items() if v not in (None, "")}
        try:
            response = self.client.get(path, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise CatalogAPIError(f"Request to {path} timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise CatalogAPIError(
                f"Request to {path} failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise CatalogAPIError(f"Request to {path} failed: {e}") from e
        except ValueError as e:
            raise CatalogAPIError(f"Invalid JSON from {path}: {e}") from e

        if not isinstance(data, dict):
            raise CatalogAPIError(f"Unexpected response shape from {path}")
        return data

    def search_products(
        self,
        term: str,
        location_id: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[CatalogProduct]:
        """
        Search for products by term.

        Args:
            term: Search term
            location_id: Store to price against; prices are omitted without one
            limit: Maximum number of results
            offset: Index of the first result (for paging)

        Returns:
            List of normalized products in the order the API returned them

        Raises:
            CatalogAPIError: On HTTP errors, timeouts or malformed responses
        """
        params = {
            "filter.term": term,
            "filter.locationId": location_id or self.settings.location_id,
            "filter.limit": max(1, min(limit, MAX_PAGE_SIZE)),
            "filter.start": offset or None,
        }
        logger.debug(f"Searching products for '{term}' (location={params['filter.locationId']})")
        data = self._get("/products", params)

        products = data.get("data") or []
        if not isinstance(products, list):
            return []
        return [normalize_product(p) for p in products[:limit] if isinstance(p, dict)]

    def search(
        self, term: str, location_id: str | None = None, limit: int = 20
    ) -> list[CatalogProduct]:
        return self.search_products(term, location_id=location_id, limit=limit)

    def get_product(self, product_id: str, location_id: str | None = None) -> CatalogProduct | None:
        """
        Fetch a single product by id.

        Returns:
            The product, or None when the API does not know it
        """
        params = {
            "filter.productId": product_id,
            "filter.locationId": location_id or self.settings.location_id,
            "filter.limit": 1,
        }
        data = self._get("/products", params)
        products = data.get("data") or []
        if isinstance(products, dict):
            products = [products]
        for payload in products:
            if isinstance(payload, dict):
                return normalize_product(payload)
        return None

    def find_locations(self, zip_code: str, radius_miles: int = 10, limit: int = 5) -> list[dict[str, Any]]:
        """
        Find stores near a ZIP code.

        Returns:
            List of dicts with location_id, name, chain and address
        """
        params = {
            "filter.zipCode.near": zip_code,
            "filter.radiusInMiles": radius_miles,
            "filter.limit": limit,
        }
        data = self._get("/locations", params)

        locations = []
        for item in data.get("data") or []:
            if not isinstance(item, dict) or not item.get("locationId"):
                continue
            address = item.get("address") or {}
            parts = [
                address.get("addressLine1"),
                address.get("city"),
                address.get("state"),
                address.get("zipCode"),
            ]
            locations.append(
                {
                    "location_id": str(item["locationId"]),
                    "name": item.get("name", ""),
                    "chain": item.get("chain", ""),
                    "address": ", ".join(p for p in parts if p),
                }
            )
        return locations

    def find_location(self, zip_code: str) -> str | None:
        """Resolve the nearest store id for a ZIP code, or None if there is none."""
        locations = self.find_locations(zip_code, limit=1)
        if not locations:
            logger.info(f"No store found near {zip_code}")
            return None
        return locations[0]["location_id"]
