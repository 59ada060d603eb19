"""Library API router: books and loans.

Demonstrates the standard router pattern:
- Full CRUD for books (with filter-by-example and pagination)
- Loan creation, return, and search
- Service injection via FastAPI Depends
- Domain errors raised here, translated to HTTP by api.errors
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from patterns.repository import PageRequest
from verticals.library.errors import BookIdNotFoundError
from verticals.library.models.db_models import Book
from verticals.library.models.schemas import (
    BookCreate,
    BookFilter,
    BookResponse,
    BookUpdate,
    LoanCreate,
    LoanCreated,
    LoanFilter,
    PaginatedResponse,
    ReturnedLoan,
)
from verticals.library.services import (
    BookService,
    LoanService,
    get_book_service,
    get_loan_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def page_request(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
) -> PageRequest:
    return PageRequest(page=page, size=size)


async def _get_book_or_404(book_id: UUID, service: BookService) -> Book:
    book = await service.get_by_id(book_id)
    if book is None:
        raise BookIdNotFoundError()
    return book


# ============================================================================
# Book Endpoints
# ============================================================================

@router.post("/books", status_code=201, response_model=BookResponse, tags=["Books"])
async def create_book(
    request: BookCreate,
    service: BookService = Depends(get_book_service),
):
    """Add a new book to the catalog."""
    logger.info("Creating a book for isbn %s", request.isbn)
    book = await service.save(Book(**request.model_dump()))
    return book.to_dict()


@router.get("/books/{book_id}", response_model=BookResponse, tags=["Books"])
async def get_book(
    book_id: UUID,
    service: BookService = Depends(get_book_service),
):
    """Get details of a book by id."""
    book = await _get_book_or_404(book_id, service)
    return book.to_dict()


@router.put("/books/{book_id}", response_model=BookResponse, tags=["Books"])
async def update_book(
    book_id: UUID,
    request: BookUpdate,
    service: BookService = Depends(get_book_service),
):
    """Update a book's title and author."""
    book = await _get_book_or_404(book_id, service)
    book.title = request.title
    book.author = request.author
    book = await service.update(book)
    return book.to_dict()


@router.delete("/books/{book_id}", status_code=204, tags=["Books"])
async def delete_book(
    book_id: UUID,
    service: BookService = Depends(get_book_service),
):
    """Remove a book (and its loans) from the catalog."""
    book = await _get_book_or_404(book_id, service)
    await service.delete(book)


@router.get("/books", response_model=PaginatedResponse, tags=["Books"])
async def list_books(
    title: Optional[str] = None,
    author: Optional[str] = None,
    isbn: Optional[str] = None,
    page: PageRequest = Depends(page_request),
    service: BookService = Depends(get_book_service),
):
    """Find books by any combination of title, author, and isbn fragments."""
    filters = BookFilter(title=title, author=author, isbn=isbn)
    result = await service.find(filters, page)
    return result.to_dict()


@router.get("/books/{book_id}/loans", response_model=PaginatedResponse, tags=["Books"])
async def list_book_loans(
    book_id: UUID,
    page: PageRequest = Depends(page_request),
    books: BookService = Depends(get_book_service),
    loans: LoanService = Depends(get_loan_service),
):
    """Get the loan history of a book."""
    book = await _get_book_or_404(book_id, books)
    result = await loans.get_loans_by_book(book, page)
    return result.to_dict()


# ============================================================================
# Loan Endpoints
# ============================================================================

@router.post("/loans", status_code=201, response_model=LoanCreated, tags=["Loans"])
async def create_loan(
    request: LoanCreate,
    service: LoanService = Depends(get_loan_service),
):
    """Borrow a book by isbn."""
    loan = await service.create_loan(
        customer=request.customer,
        customer_email=str(request.customer_email),
        isbn=request.isbn,
    )
    return {"id": str(loan.id)}


@router.patch("/loans/{loan_id}", response_model=ReturnedLoan, tags=["Loans"])
async def return_loan(
    loan_id: UUID,
    service: LoanService = Depends(get_loan_service),
):
    """Return a borrowed book."""
    loan = await service.return_loan(loan_id)
    return {"returned": loan.returned}


@router.get("/loans", response_model=PaginatedResponse, tags=["Loans"])
async def list_loans(
    isbn: Optional[str] = None,
    customer: Optional[str] = None,
    page: PageRequest = Depends(page_request),
    service: LoanService = Depends(get_loan_service),
):
    """Find loans by book isbn or customer name."""
    result = await service.find(LoanFilter(isbn=isbn, customer=customer), page)
    return result.to_dict()
