"""Shared fixtures: an in-memory SQLite database per test."""
import os

# Must be set before core.database is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LIBRARY_NOTIFIER_ENABLED", "false")

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from core.database import build_engine, build_session_factory, init_db
from patterns.domain_config import LibraryConfig, LoanConfig
from patterns.workflow_states import LoanState
from verticals.library.models.db_models import Book, Loan
from verticals.library.repository import BookRepository, LoanRepository
from verticals.library.services import BookService, LoanService


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def config():
    return LibraryConfig(loans=LoanConfig(grace_period_days=3))


@pytest.fixture
def book_repo(session):
    return BookRepository(session)


@pytest.fixture
def loan_repo(session):
    return LoanRepository(session)


@pytest.fixture
def book_service(book_repo):
    return BookService(book_repo)


@pytest.fixture
def loan_service(loan_repo, book_repo, config):
    return LoanService(loan_repo, book_repo, config)


def make_book(title="As aventuras", author="Arthur", isbn="123") -> Book:
    return Book(title=title, author=author, isbn=isbn)


async def persist_loan(
    session,
    book: Book,
    customer="Fulano",
    customer_email="fulano@example.com",
    loan_date: date | None = None,
) -> Loan:
    loan = Loan(
        book=book,
        customer=customer,
        customer_email=customer_email,
        loan_date=loan_date or date.today(),
        status=LoanState.OUTSTANDING,
    )
    session.add(loan)
    await session.flush()
    return loan
