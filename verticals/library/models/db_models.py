"""SQLAlchemy models for the library vertical.

Each model inherits from Base and uses IdentityMixin for its UUID key and
audit columns. The to_dict() method provides a standard serialisation
interface used by routers.
"""

import uuid
from datetime import date

from sqlalchemy import Date, Enum, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.models.base import Base, IdentityMixin
from patterns.workflow_states import LoanState, is_active, transition


class Book(IdentityMixin, Base):
    """A book in the catalog."""

    __tablename__ = "books"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    author: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    isbn: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
        }


class Loan(IdentityMixin, Base):
    """A book lent to a customer.

    At most one outstanding loan may exist per book. The partial unique
    index below is the storage-level guarantee; the service layer checks
    first so the common case gets a readable error.
    """

    __tablename__ = "loans"
    __table_args__ = (
        Index(
            "uq_loans_book_outstanding",
            "book_id",
            unique=True,
            postgresql_where=text("status = 'outstanding'"),
            sqlite_where=text("status = 'outstanding'"),
        ),
    )

    book_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    customer_email: Mapped[str] = mapped_column(String(320), nullable=False)
    loan_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    status: Mapped[LoanState] = mapped_column(
        Enum(
            LoanState,
            name="loan_state",
            native_enum=False,
            length=16,
            values_callable=lambda states: [s.value for s in states],
        ),
        nullable=False,
        default=LoanState.OUTSTANDING,
    )

    book: Mapped["Book"] = relationship(lazy="joined")

    @property
    def returned(self) -> bool:
        return not is_active(self.status)

    def mark_returned(self) -> None:
        self.status = transition(self.status, LoanState.RETURNED)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "customer": self.customer,
            "customer_email": self.customer_email,
            "loan_date": self.loan_date.isoformat(),
            "returned": self.returned,
            "book": self.book.to_dict() if self.book else None,
        }
