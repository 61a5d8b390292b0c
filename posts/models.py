"""
posts/models.py -- Domain dataclasses for marketplace listings.

Post is the stored record plus the per-viewer is_owner flag. PostDraft and
PostPatch are what callers are allowed to supply: neither carries an owner,
so ownership can only ever come from the authenticated identity.

SortParams and FilterParams are request-scoped query parameters; they are
never persisted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional

SORT_FIELDS = ("price", "created_at")
SORT_DIRECTIONS = ("asc", "desc")


def _parse_price(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    return value if math.isfinite(value) else None


@dataclass
class Post:
    """A marketplace listing.

    id and created_at are assigned by the store on insert. is_owner is derived
    per request from the viewer and is never written to the database.
    """

    title: str
    description: str
    price: float
    image_url: str
    owner: str = ""
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    is_owner: bool = False


@dataclass
class PostDraft:
    """Client-supplied content for a new post."""

    title: str = ""
    description: str = ""
    price: float = 0.0
    image_url: str = ""


@dataclass
class PostPatch:
    """Partial update. None means "leave this field as it is"."""

    title: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    image_url: Optional[str] = None

    def apply_to(self, post: Post) -> Post:
        """Return a copy of post with every non-None patch field merged in."""
        changes = {
            name: value
            for name, value in (
                ("title", self.title),
                ("description", self.description),
                ("price", self.price),
                ("image_url", self.image_url),
            )
            if value is not None
        }
        return replace(post, **changes)


@dataclass(frozen=True)
class SortParams:
    field: str = "created_at"  # "price" | "created_at"
    direction: str = "desc"  # "asc" | "desc"

    @classmethod
    def parse(cls, sort_by: Optional[str] = None, order: Optional[str] = None) -> "SortParams":
        """Build SortParams from raw query strings, falling back to defaults.

        Anything other than "price" sorts by created_at; anything other than
        "asc" sorts descending. Matching is case-insensitive.
        """
        field = "price" if (sort_by or "").strip().lower() == "price" else "created_at"
        direction = "asc" if (order or "").strip().lower() == "asc" else "desc"
        return cls(field=field, direction=direction)


@dataclass(frozen=True)
class FilterParams:
    """Price range and owner restriction for listings.

    max_price None means unbounded. owner, when set, is an exact-match filter.
    """

    min_price: Optional[float] = None
    max_price: Optional[float] = None
    owner: Optional[str] = None

    @classmethod
    def parse(
        cls,
        min_price: Optional[str] = None,
        max_price: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> "FilterParams":
        """Build FilterParams from raw query strings.

        A bound that is not a finite number is treated as absent, so
        normalized() gives it its default instead of the request failing.
        """
        return cls(min_price=_parse_price(min_price), max_price=_parse_price(max_price), owner=owner)

    def normalized(self) -> "FilterParams":
        """Return an equivalent, always well-formed filter.

        Absent or negative min_price becomes 0. Absent or negative max_price
        becomes unbounded. An inverted range is swapped rather than rejected.
        An empty owner string means no owner restriction.
        """
        min_price = self.min_price if self.min_price is not None and self.min_price >= 0 else 0.0
        max_price = self.max_price if self.max_price is not None and self.max_price >= 0 else None
        if max_price is not None and min_price > max_price:
            min_price, max_price = max_price, min_price
        return FilterParams(min_price=min_price, max_price=max_price, owner=self.owner or None)
