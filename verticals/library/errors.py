"""Library error taxonomy.

BusinessError subclasses are rule violations the caller can fix and are
reported as 400 with a single message. NotFoundError subclasses become a
bare 404. InvalidArgumentError marks a programming error and is not
translated at the HTTP boundary.
"""


class LibraryError(Exception):
    """Base class for library errors."""

    message = "Library error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class BusinessError(LibraryError):
    message = "Business rule violated"


class DuplicateIsbnError(BusinessError):
    message = "Isbn already registered"


class BookNotFoundError(BusinessError):
    """Raised when a loan references an isbn that is not in the catalog."""

    message = "Book not found for passed isbn"


class BookAlreadyLoanedError(BusinessError):
    message = "Book already loaned"


class NotFoundError(LibraryError):
    message = "Not found"


class LoanNotFoundError(NotFoundError):
    message = "Loan not found"


class InvalidArgumentError(LibraryError, ValueError):
    message = "Invalid argument"


class BookIdNotFoundError(NotFoundError):
    """Raised when a book id in the URL does not exist."""

    message = "Book not found"
