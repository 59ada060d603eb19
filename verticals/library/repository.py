"""Library repositories: async database access for books and loans.

Extends BaseRepository with library-specific queries: filter-by-example
for books, isbn-or-customer search and overdue lookups for loans.
"""

from datetime import date
from uuid import UUID

from fastapi import Depends
from sqlalchemy import exists, false, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from patterns.repository import BaseRepository, Page, PageRequest
from patterns.workflow_states import LoanState
from verticals.library.models.db_models import Book, Loan
from verticals.library.models.schemas import BookFilter, LoanFilter


def _contains(value: str) -> str:
    """Build a LIKE pattern matching `value` anywhere, with wildcards escaped."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


# ---------------------------------------------------------------------------
# Book repository
# ---------------------------------------------------------------------------

class BookRepository(BaseRepository[Book]):
    """Repository for book CRUD and search operations."""

    model = Book

    async def get_by_isbn(self, isbn: str) -> Book | None:
        result = await self.session.execute(select(Book).where(Book.isbn == isbn))
        return result.scalar_one_or_none()

    async def exists_by_isbn(self, isbn: str) -> bool:
        result = await self.session.execute(select(exists().where(Book.isbn == isbn)))
        return bool(result.scalar())

    async def find(self, filters: BookFilter, page: PageRequest) -> Page[Book]:
        """Filter-by-example search.

        Each field set on `filters` adds a case-insensitive substring match;
        the matches are ANDed. Unset fields do not constrain the result.
        """
        stmt = select(Book)
        for column_name, value in filters.model_dump(exclude_none=True).items():
            column = getattr(Book, column_name)
            stmt = stmt.where(column.ilike(_contains(value), escape="\\"))

        stmt = stmt.order_by(Book.title, Book.id)
        return await self.paginate(stmt, page)


# ---------------------------------------------------------------------------
# Loan repository
# ---------------------------------------------------------------------------

class LoanRepository(BaseRepository[Loan]):
    """Repository for loans."""

    model = Loan

    async def exists_outstanding_for_book(self, book_id: UUID) -> bool:
        """True when the book has a loan that has not been returned."""
        stmt = select(
            exists().where(
                Loan.book_id == book_id,
                Loan.status == LoanState.OUTSTANDING,
            )
        )
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def find_by_isbn_or_customer(
        self, filters: LoanFilter, page: PageRequest
    ) -> Page[Loan]:
        """Loans whose book has the given isbn OR whose customer matches.

        Both sides are optional. A side that is not given matches nothing,
        so an empty filter yields an empty page.
        """
        conditions = []
        if filters.isbn is not None:
            conditions.append(Book.isbn == filters.isbn)
        if filters.customer is not None:
            conditions.append(Loan.customer == filters.customer)

        stmt = (
            select(Loan)
            .join(Loan.book)
            .where(or_(*conditions) if conditions else false())
            .order_by(Loan.loan_date.desc(), Loan.id)
        )
        return await self.paginate(stmt, page)

    async def find_by_book(self, book_id: UUID, page: PageRequest) -> Page[Loan]:
        stmt = (
            select(Loan)
            .where(Loan.book_id == book_id)
            .order_by(Loan.loan_date.desc(), Loan.id)
        )
        return await self.paginate(stmt, page)

    async def find_overdue(self, cutoff: date) -> list[Loan]:
        """Outstanding loans taken out on or before `cutoff`."""
        stmt = (
            select(Loan)
            .where(
                Loan.loan_date <= cutoff,
                Loan.status == LoanState.OUTSTANDING,
            )
            .order_by(Loan.loan_date, Loan.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------

def get_book_repository(
    session: AsyncSession = Depends(get_session),
) -> BookRepository:
    """FastAPI dependency for BookRepository."""
    return BookRepository(session)


def get_loan_repository(
    session: AsyncSession = Depends(get_session),
) -> LoanRepository:
    """FastAPI dependency for LoanRepository."""
    return LoanRepository(session)
