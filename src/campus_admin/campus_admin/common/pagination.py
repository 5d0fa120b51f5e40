from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, Mapping, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort: Optional[str] = None
    descending: bool = False

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    request: PageRequest = field(default_factory=PageRequest)

    def meta(self) -> dict:
        """Pagination block with ``next``/``prev`` links when they exist."""
        req = self.request
        meta: dict = {"page": req.page, "limit": req.limit, "total": self.total}
        if req.offset + req.limit < self.total:
            meta["next"] = {"page": req.page + 1, "limit": req.limit}
        if req.offset > 0:
            meta["prev"] = {"page": req.page - 1, "limit": req.limit}
        return meta


def parse_page_request(args: Mapping[str, str], *, allowed_sort: Iterable[str]) -> PageRequest:
    """Build a page request from query args (``page``, ``limit``, ``sort``).

    ``sort`` accepts one field name, prefixed with ``-`` for descending order.
    """
    try:
        page = int(args.get("page", 1))
        limit = int(args.get("limit", DEFAULT_PAGE_SIZE))
    except (TypeError, ValueError):
        raise ValidationError("page and limit must be integers")
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")
    limit = min(limit, MAX_PAGE_SIZE)

    sort = (args.get("sort") or "").strip() or None
    descending = False
    if sort:
        if sort.startswith("-"):
            descending = True
            sort = sort[1:]
        if sort not in set(allowed_sort):
            raise ValidationError(f"Cannot sort by '{sort}'")
    return PageRequest(page=page, limit=limit, sort=sort, descending=descending)


def paginate(items: Sequence[T], request: PageRequest) -> Page[T]:
    """Slice an already filtered and sorted sequence."""
    return Page(items=list(items[request.offset : request.offset + request.limit]), total=len(items), request=request)
