"""Async repository pattern for database access.

Provides a generic base repository with get/add/delete, pagination, and
FastAPI dependency injection. Verticals subclass this to add domain-specific
queries.

Example: BookRepository extending BaseRepository.
"""

from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.models.base import Base

# ---------------------------------------------------------------------------
# Type variables
# ---------------------------------------------------------------------------

ModelT = TypeVar("ModelT", bound=Base)
ItemT = TypeVar("ItemT")


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageRequest:
    """A 1-based page number and a page size."""

    page: int = 1
    size: int = 10

    def __post_init__(self):
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.size < 1:
            raise ValueError(f"size must be >= 1, got {self.size}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


@dataclass
class Page(Generic[ItemT]):
    """One page of results plus the total number of matches."""

    items: list[ItemT]
    request: PageRequest
    total: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.request.size - 1) // self.request.size

    def to_dict(self, serialize=None) -> dict[str, Any]:
        """Render as the standard paged response body.

        `serialize` maps each item to a dict; defaults to `item.to_dict()`.
        """
        serialize = serialize or (lambda item: item.to_dict())
        return {
            "data": [serialize(item) for item in self.items],
            "pagination": {
                "page": self.request.page,
                "size": self.request.size,
                "total": self.total,
                "total_pages": self.total_pages,
            },
        }


# ---------------------------------------------------------------------------
# Base repository
# ---------------------------------------------------------------------------

class BaseRepository(Generic[ModelT]):
    """Generic async repository with get/add/delete + pagination.

    Subclass and set `model` to your SQLAlchemy model::

        class BookRepository(BaseRepository[Book]):
            model = Book

            async def find_by_title(self, title: str, page: PageRequest):
                stmt = select(self.model).where(self.model.title.ilike(f"%{title}%"))
                return await self.paginate(stmt, page)
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession):
        self.session = session

    # -- Get by ID --

    async def get(self, item_id: UUID) -> ModelT | None:
        """Get a single item by ID."""
        return await self.session.get(self.model, item_id)

    # -- Add --

    async def add(self, item: ModelT) -> ModelT:
        """Insert a new item and flush so constraint violations surface here."""
        self.session.add(item)
        await self.session.flush()
        return item

    # -- Save --

    async def save(self, item: ModelT) -> ModelT:
        """Flush pending changes of an already persisted item."""
        await self.session.flush()
        return item

    # -- Delete --

    async def delete(self, item: ModelT) -> None:
        await self.session.delete(item)
        await self.session.flush()

    # -- Pagination --

    async def paginate(self, stmt: Select, page: PageRequest) -> Page[ModelT]:
        """Run `stmt` for one page and count the full result set.

        Returns a Page with the items and the total number of matches.
        """
        count_stmt = select(func.count()).select_from(
            stmt.order_by(None).subquery()
        )
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        result = await self.session.execute(
            stmt.offset(page.offset).limit(page.size)
        )
        items: Sequence[ModelT] = result.scalars().all()
        return Page(items=list(items), request=page, total=total)
