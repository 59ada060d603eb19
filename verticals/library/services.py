"""Library services: book catalog and loan lifecycle.

Services own the business rules and translate storage constraint
violations into domain errors. They work on ORM entities and leave
serialisation to the router.
"""

import logging
from datetime import date
from uuid import UUID

from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from patterns.domain_config import LibraryConfig
from patterns.repository import Page, PageRequest
from patterns.workflow_states import LoanState
from verticals.library.config import get_config
from verticals.library.errors import (
    BookAlreadyLoanedError,
    BookNotFoundError,
    DuplicateIsbnError,
    InvalidArgumentError,
    LoanNotFoundError,
)
from verticals.library.models.db_models import Book, Loan
from verticals.library.models.schemas import BookFilter, LoanFilter
from verticals.library.repository import (
    BookRepository,
    LoanRepository,
    get_book_repository,
    get_loan_repository,
)
from verticals.library.rules import check_book_available, evaluate_rules, overdue_cutoff

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Book service
# ---------------------------------------------------------------------------

class BookService:
    """Catalog operations with isbn uniqueness."""

    def __init__(self, books: BookRepository):
        self.books = books

    async def save(self, book: Book) -> Book:
        """Insert a new book.

        Raises DuplicateIsbnError if the isbn is taken. The existence check
        gives the usual error; the unique column catches concurrent inserts.
        """
        if await self.books.exists_by_isbn(book.isbn):
            raise DuplicateIsbnError()
        try:
            saved = await self.books.add(book)
        except IntegrityError as exc:
            await self.books.session.rollback()
            raise DuplicateIsbnError() from exc
        logger.info("Created book id=%s isbn=%s", saved.id, saved.isbn)
        return saved

    async def get_by_id(self, book_id: UUID) -> Book | None:
        return await self.books.get(book_id)

    async def get_by_isbn(self, isbn: str) -> Book | None:
        return await self.books.get_by_isbn(isbn)

    async def delete(self, book: Book | None) -> None:
        if book is None or book.id is None:
            raise InvalidArgumentError("Can't delete an unsaved book")
        await self.books.delete(book)
        logger.info("Deleted book id=%s", book.id)

    async def update(self, book: Book | None) -> Book:
        if book is None or book.id is None:
            raise InvalidArgumentError("Can't update an unsaved book")
        return await self.books.save(book)

    async def find(self, filters: BookFilter, page: PageRequest) -> Page[Book]:
        return await self.books.find(filters, page)


# ---------------------------------------------------------------------------
# Loan service
# ---------------------------------------------------------------------------

class LoanService:
    """Loan lifecycle: lend, return, search, and overdue detection.

    Invariant: a book has at most one outstanding loan. It is checked
    before insert and backed by the `uq_loans_book_outstanding` index, whose
    violation is reported as BookAlreadyLoanedError.
    """

    def __init__(
        self,
        loans: LoanRepository,
        books: BookRepository,
        config: LibraryConfig | None = None,
    ):
        self.loans = loans
        self.books = books
        self.config = config or LibraryConfig.default()

    async def create_loan(
        self,
        customer: str,
        customer_email: str,
        isbn: str,
        loan_date: date | None = None,
    ) -> Loan:
        book = await self.books.get_by_isbn(isbn)
        if book is None:
            raise BookNotFoundError()

        has_active_loan = await self.loans.exists_outstanding_for_book(book.id)
        rules = evaluate_rules(check_book_available(isbn, has_active_loan))
        if not rules.all_passed:
            raise BookAlreadyLoanedError(rules.failed[0].message)

        loan = Loan(
            customer=customer,
            customer_email=customer_email,
            book=book,
            loan_date=loan_date or date.today(),
            status=LoanState.OUTSTANDING,
        )
        try:
            loan = await self.loans.add(loan)
        except IntegrityError as exc:
            await self.loans.session.rollback()
            raise BookAlreadyLoanedError() from exc

        logger.info(
            "Created loan id=%s isbn=%s customer=%s", loan.id, isbn, customer
        )
        return loan

    async def return_loan(self, loan_id: UUID) -> Loan:
        """Mark a loan returned. Returning it again keeps it returned."""
        loan = await self.loans.get(loan_id)
        if loan is None:
            raise LoanNotFoundError()
        loan.mark_returned()
        loan = await self.loans.save(loan)
        logger.info("Returned loan id=%s", loan.id)
        return loan

    async def get_by_id(self, loan_id: UUID) -> Loan | None:
        return await self.loans.get(loan_id)

    async def find(self, filters: LoanFilter, page: PageRequest) -> Page[Loan]:
        return await self.loans.find_by_isbn_or_customer(filters, page)

    async def get_loans_by_book(self, book: Book, page: PageRequest) -> Page[Loan]:
        return await self.loans.find_by_book(book.id, page)

    def overdue_cutoff(self, today: date | None = None) -> date:
        return overdue_cutoff(
            today or date.today(), self.config.loans.grace_period_days
        )

    async def get_all_late_loans(self, today: date | None = None) -> list[Loan]:
        """Outstanding loans dated on or before today minus the grace period."""
        return await self.loans.find_overdue(self.overdue_cutoff(today))


# ---------------------------------------------------------------------------
# FastAPI dependency factories
# ---------------------------------------------------------------------------

def get_book_service(
    books: BookRepository = Depends(get_book_repository),
) -> BookService:
    """FastAPI dependency for BookService."""
    return BookService(books)


def get_loan_service(
    loans: LoanRepository = Depends(get_loan_repository),
    books: BookRepository = Depends(get_book_repository),
    config: LibraryConfig = Depends(get_config),
) -> LoanService:
    """FastAPI dependency for LoanService."""
    return LoanService(loans, books, config)
