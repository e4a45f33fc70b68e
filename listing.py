"""
listing.py
==========

Category-diversified product listing for the "All Products" page.

The upstream catalog hands us a flat pool of products. Shown in that order,
a page tends to be a wall of a single category, so the pool is mixed before
it is paginated:

1. ``categorize`` buckets the pool by a normalised category key.
2. ``interleave`` draws one product from each bucket per round, in a fixed
   category priority order, until enough products have been placed.
3. ``paginate`` slices the mixed sequence into the requested page.

``mix_products`` chains the three. Everything here is a pure function of
its arguments; nothing is cached between calls.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Homepage category order, used as the round-robin priority.
CANONICAL_CATEGORIES: Tuple[str, ...] = (
    "Electronics",
    "Fashion",
    "Home",
    "Appliances",
    "Mobiles",
    "Beauty",
    "Toys",
    "Grocery",
)

OTHERS_KEY = "Others"

PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/300x300?text=Product"

class InvalidArgument(ValueError):
    """Raised when a caller asks for an impossible page."""


@dataclass(frozen=True)
class ProductRecord:
    """A product as served by the catalog, read-only to the listing code.

    ``price`` and ``stock`` are kept exactly as the catalog sent them.
    ``payload`` holds the whole upstream object and wins over the fields
    above when serialising, so ``to_dict`` round-trips it untouched.
    """
    id: int
    name: str
    category: Optional[str] = None
    price: Any = None
    stock: Any = None
    image_url: str = PLACEHOLDER_IMAGE_URL
    payload: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductRecord":
        """Build a record from an upstream product object.

        Only ``id`` is interpreted; everything else is carried as given.

        Raises:
            KeyError: If ``id`` is missing.
            TypeError, ValueError: If ``id`` is not an integer.
        """
        category = data.get("category")
        return cls(
            id=int(data["id"]),
            name=str(data.get("name") or ""),
            category=str(category) if category is not None else None,
            price=data.get("price"),
            stock=data.get("stock"),
            image_url=resolve_image_url(data),
            payload=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise for the JSON API: the upstream object plus ``imageUrl``"""
        data = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "price": self.price,
            "stock": self.stock,
        }
        data.update(self.payload)
        data["imageUrl"] = self.image_url
        return data


def resolve_image_url(data: Mapping[str, Any]) -> str:
    """Pick the display image for an upstream product.

    Tries ``imageUrl``, then ``image_url``, then the first entry of
    ``images`` (either a list or a JSON-encoded list). Falls back to a
    placeholder image.
    """
    if data.get("imageUrl"):
        return data["imageUrl"]
    if data.get("image_url"):
        return data["image_url"]

    images = data.get("images")
    if isinstance(images, str) and images:
        try:
            images = json.loads(images)
        except ValueError as exc:
            logger.warning(f"Failed to parse images for product {data.get('id')}: {exc}")
            images = None
    if isinstance(images, list) and images and isinstance(images[0], str):
        return images[0]

    return PLACEHOLDER_IMAGE_URL


def resolve_category_key(category: Optional[str], canonical_categories: Sequence[str] = CANONICAL_CATEGORIES) -> str:
    """Map a free-text category onto its group key.

    A case-insensitive match against ``canonical_categories`` returns the
    canonical spelling. Otherwise the trimmed category is its own key, and
    an empty or missing category becomes ``"Others"``.
    """
    raw = category or ""
    lowered = raw.lower()
    for canonical in canonical_categories:
        if canonical.lower() == lowered:
            return canonical

    trimmed = raw.strip()
    return trimmed if trimmed else OTHERS_KEY


def categorize(
    products: Iterable[ProductRecord],
    canonical_categories: Sequence[str] = CANONICAL_CATEGORIES,
) -> Tuple[List[str], Dict[str, List[ProductRecord]]]:
    """Group products by category key.

    Returns:
        ``(ordered_keys, groups)``. ``ordered_keys`` is the canonical list
        followed by any other keys in order of first appearance. ``groups``
        maps each key that has products to those products in input order.
    """
    ordered_keys: List[str] = list(canonical_categories)
    seen = set(ordered_keys)
    groups: Dict[str, List[ProductRecord]] = {}

    for product in products:
        key = resolve_category_key(product.category, canonical_categories)
        if key not in seen:
            seen.add(key)
            ordered_keys.append(key)
        groups.setdefault(key, []).append(product)

    return ordered_keys, groups


def interleave(
    ordered_keys: Sequence[str],
    groups: Mapping[str, Sequence[ProductRecord]],
    target_length: int,
    products: Optional[Sequence[ProductRecord]] = None,
) -> List[ProductRecord]:
    """Round-robin the groups into one sequence of at most ``target_length``.

    Each round walks ``ordered_keys`` and takes the next product from every
    group that still has one. Rounds stop once ``target_length`` products
    are placed or a round places nothing. Any shortfall is then topped up
    from ``products`` (or from every group, if ``products`` is not given)
    in original order, skipping what is already placed.

    Growing ``target_length`` only appends to the result; it never reorders
    the products already placed.
    """
    mixed: List[ProductRecord] = []
    if target_length <= 0:
        return mixed

    cursors = {key: 0 for key in ordered_keys}
    placed = set()

    while len(mixed) < target_length:
        added_this_round = False
        for key in ordered_keys:
            items = groups.get(key, ())
            cursor = cursors[key]
            if cursor < len(items):
                mixed.append(items[cursor])
                placed.add(id(items[cursor]))
                cursors[key] = cursor + 1
                added_this_round = True
                if len(mixed) >= target_length:
                    break
        if not added_this_round:
            break

    if len(mixed) < target_length:
        if products is None:
            products = [p for items in groups.values() for p in items]
        for product in products:
            if len(mixed) >= target_length:
                break
            if id(product) not in placed:
                mixed.append(product)
                placed.add(id(product))

    return mixed


def validate_paging(page_number: int, page_size: int) -> None:
    """Raise InvalidArgument unless both are integers, page >= 1 and size > 0."""
    # bool is an int subclass but never a page number
    for name, value in (("page_number", page_number), ("page_size", page_size)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if page_number < 1:
        raise InvalidArgument(f"page_number must be at least 1, got {page_number}")
    if page_size <= 0:
        raise InvalidArgument(f"page_size must be positive, got {page_size}")


def paginate(sequence: Sequence[ProductRecord], page_number: int, page_size: int) -> List[ProductRecord]:
    """Return page ``page_number`` (1-based) of ``sequence``.

    Pages past the end are empty.

    Raises:
        InvalidArgument: If ``page_number < 1`` or ``page_size <= 0``.
    """
    validate_paging(page_number, page_size)
    start = (page_number - 1) * page_size
    return list(sequence[start:start + page_size])


def mix_products(
    products: Sequence[ProductRecord],
    page_number: int,
    page_size: int,
    canonical_categories: Sequence[str] = CANONICAL_CATEGORIES,
) -> List[ProductRecord]:
    """Categorize, interleave and paginate ``products`` in one go.

    The interleaved pool is rebuilt up to ``page_number * page_size`` on
    every call so earlier pages keep their order as later ones are asked for.
    """
    validate_paging(page_number, page_size)
    ordered_keys, groups = categorize(products, canonical_categories)
    mixed = interleave(ordered_keys, groups, page_number * page_size, products)
    return paginate(mixed, page_number, page_size)


def total_pages(total: int, page_size: int) -> int:
    """Number of pages for ``total`` products; an empty pool still has one."""
    if page_size <= 0:
        raise InvalidArgument(f"page_size must be positive, got {page_size}")
    return math.ceil(max(total, 1) / page_size)


def showing_range(page_number: int, page_size: int, total: int) -> Tuple[int, int]:
    """1-based ``(first, last)`` positions shown on a page, ``(0, 0)`` if none."""
    validate_paging(page_number, page_size)
    first = (page_number - 1) * page_size + 1
    last = min(page_number * page_size, total)
    if first > last:
        return 0, 0
    return first, last
