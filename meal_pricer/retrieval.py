"""Candidate retrieval across search terms, with deduplication."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .catalog import CatalogError, CatalogProduct, CatalogSearch

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 20


class RetrievalError(Exception):
    """Raised when every search term for an ingredient failed."""

    pass


class PricingCancelled(Exception):
    """Raised when a pricing run is cancelled before the next catalog call."""

    pass


@dataclass
class RetrievalResult:
    """Unique candidates in first-seen order plus bookkeeping about the terms."""

    candidates: list[CatalogProduct] = field(default_factory=list)
    queried_terms: list[str] = field(default_factory=list)
    failed_terms: list[str] = field(default_factory=list)


def candidate_key(product: CatalogProduct) -> str:
    """Identity of a product for deduplication: id, else UPC, else payload hash."""
    if product.product_id:
        return f"id:{product.product_id}"
    if product.upc:
        return f"upc:{product.upc}"
    return f"hash:{product.fingerprint()}"


def retrieve_candidates(
    catalog: CatalogSearch,
    terms: list[str],
    location_id: str | None = None,
    limit: int = MAX_CANDIDATES,
    should_stop: Callable[[], bool] | None = None,
) -> RetrievalResult:
    """
    Query the catalog term by term and collect unique candidates.

    Terms are tried in order; collection stops once `limit` unique products
    have been seen. A term whose search fails is skipped.

    Args:
        catalog: Catalog to search
        terms: Search terms, most specific first
        location_id: Store to price against
        limit: Maximum number of unique candidates
        should_stop: Checked before every catalog call

    Returns:
        RetrievalResult with candidates in first-seen order

    Raises:
        RetrievalError: If every term failed
        PricingCancelled: If should_stop returned True
    """
    result = RetrievalResult()
    seen: set[str] = set()

    for term in terms:
        if len(result.candidates) >= limit:
            break
        if should_stop is not None and should_stop():
            raise PricingCancelled(f"Cancelled before searching '{term}'")

        result.queried_terms.append(term)
        try:
            products = catalog.search(term, location_id=location_id, limit=limit)
        except CatalogError as e:
            logger.warning(f"Search for '{term}' failed: {e}")
            result.failed_terms.append(term)
            continue

        for product in products:
            key = candidate_key(product)
            if key in seen:
                continue
            seen.add(key)
            result.candidates.append(product)
            if len(result.candidates) >= limit:
                break

    if result.queried_terms and len(result.failed_terms) == len(result.queried_terms):
        raise RetrievalError(f"All {len(result.failed_terms)} search terms failed")

    logger.debug(
        f"Retrieved {len(result.candidates)} candidates from {len(result.queried_terms)} terms"
    )
    return result
