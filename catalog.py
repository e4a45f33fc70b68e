"""
catalog.py
==========

Client for the marketplace product-listing endpoint.

The mixed listing needs a large pool to draw from, so the whole pool is
requested in one call (``/api/products?page=1&limit=500``) and handed to
``listing.mix_products``. The endpoint answers with::

    {"products": [...], "pagination": {"total": ..., "totalPages": ...}}

Transient network errors are retried with exponential backoff.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from listing import ProductRecord

logger = logging.getLogger(__name__)

HEADERS = {
    "Accept": "application/json",
    "User-Agent": "product-mix-api/1.0",
}


class CatalogError(Exception):
    """Raised when the product pool cannot be fetched or understood."""


def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    *,
    timeout: float = 15,
    max_retries: int = 3,
    delay: float = 1.0,
) -> Any:
    """GET ``url`` and decode the JSON body.

    Args:
        url: The absolute URL to request.
        params: Query string parameters.
        timeout: Per-attempt timeout in seconds.
        max_retries: How many attempts to make in total.
        delay: Base delay in seconds between retries.

    Returns:
        The decoded JSON document.

    Raises:
        CatalogError: If the final attempt fails or the body is not JSON.
    """
    for attempt in range(max_retries):
        try:
            response = requests.get(url, params=params, headers=HEADERS, timeout=timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            if attempt == max_retries - 1:
                logger.error(f"Failed to fetch {url} after {max_retries} attempts: {exc}")
                raise CatalogError(f"Failed to fetch products: {exc}") from exc
            wait = delay * (2 ** attempt)
            logger.warning(f"Fetching {url} failed ({exc}), retrying in {wait:.1f}s")
            time.sleep(wait)
    raise CatalogError(f"No attempts made to fetch {url}")


def parse_products(payload: Any) -> List[ProductRecord]:
    """Turn a listing response into product records.

    Entries without a usable ``id`` are skipped.

    Raises:
        CatalogError: If ``payload`` has no ``products`` list.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("products"), list):
        raise CatalogError("Unexpected response from product listing: missing 'products' list")

    products: List[ProductRecord] = []
    for entry in payload["products"]:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping non-object product entry: {entry!r}")
            continue
        try:
            products.append(ProductRecord.from_dict(entry))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Skipping malformed product {entry.get('id')!r}: {exc}")
            continue
    return products


def fetch_product_pool(
    base_url: str,
    pool_size: int = 500,
    seller_id: Optional[str] = None,
    *,
    timeout: float = 15,
    max_retries: int = 3,
    delay: float = 1.0,
) -> List[ProductRecord]:
    """Fetch the first ``pool_size`` products, optionally for one seller."""
    url = base_url.rstrip("/") + "/api/products"
    params: Dict[str, Any] = {"page": 1, "limit": pool_size}
    if seller_id:
        params["sellerId"] = seller_id

    start_time = time.time()
    payload = fetch_json(url, params, timeout=timeout, max_retries=max_retries, delay=delay)
    products = parse_products(payload)
    logger.info(
        f"Fetched {len(products)} products from {url} "
        f"(seller={seller_id or 'all'}) in {time.time() - start_time:.2f}s"
    )
    return products
