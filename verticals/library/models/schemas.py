"""Pydantic schemas for API request/response validation."""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints


# Required text: surrounding whitespace is stripped, so blank values are rejected.
Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Isbn = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=32)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class BookCreate(BaseModel):
    title: Title
    author: Name
    isbn: Isbn


class BookUpdate(BaseModel):
    """Only title and author can change; isbn is fixed at creation."""

    title: Title
    author: Name


class BookFilter(BaseModel):
    """Filter-by-example: every field that is set must match (contains, any case)."""

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None


class LoanCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    isbn: Isbn
    customer: Name
    customer_email: EmailStr = Field(..., alias="customerEmail")


class LoanFilter(BaseModel):
    """Matches loans whose book has `isbn` OR whose customer is `customer`."""

    isbn: Optional[str] = None
    customer: Optional[str] = None


class ReturnedLoan(BaseModel):
    returned: bool


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class BookResponse(BaseModel):
    id: str
    title: str
    author: str
    isbn: str


class LoanCreated(BaseModel):
    id: str


class PaginatedResponse(BaseModel):
    data: list
    pagination: dict
