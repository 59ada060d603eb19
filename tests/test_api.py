"""Test the HTTP contract of the library API."""
import pytest
import pytest_asyncio
import uuid
from httpx import ASGITransport, AsyncClient

from api.main import app
from core.database import get_session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


BOOK = {"title": "As aventuras", "author": "Arthur", "isbn": "123"}


async def create_book(client, **overrides):
    response = await client.post("/api/books", json={**BOOK, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


async def create_loan(client, isbn="123", customer="Fulano", email="fulano@example.com"):
    return await client.post(
        "/api/loans",
        json={"isbn": isbn, "customer": customer, "customerEmail": email},
    )


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_book(client):
    body = await create_book(client)
    assert body["id"]
    assert body["title"] == "As aventuras"
    assert body["isbn"] == "123"


@pytest.mark.asyncio
async def test_create_book_validation_errors(client):
    response = await client.post("/api/books", json={"title": ""})
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert len(errors) == 3
    assert any(e.startswith("title:") for e in errors)
    assert any(e.startswith("author:") for e in errors)
    assert any(e.startswith("isbn:") for e in errors)


@pytest.mark.asyncio
async def test_create_book_rejects_blank_fields(client):
    response = await client.post("/api/books", json={"title": "   ", "author": "  ", "isbn": " "})
    assert response.status_code == 400
    errors = response.json()["errors"]
    assert len(errors) == 3
    assert [e.split(":")[0] for e in errors] == ["title", "author", "isbn"]


@pytest.mark.asyncio
async def test_create_book_strips_whitespace(client):
    body = await create_book(client, title="  As aventuras ", isbn=" 123 ")
    assert (body["title"], body["isbn"]) == ("As aventuras", "123")


@pytest.mark.asyncio
async def test_create_book_duplicate_isbn(client):
    await create_book(client)
    response = await client.post("/api/books", json=BOOK)
    assert response.status_code == 400
    assert response.json() == {"errors": ["Isbn already registered"]}


@pytest.mark.asyncio
async def test_get_book(client):
    created = await create_book(client)
    response = await client.get(f"/api/books/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


@pytest.mark.asyncio
async def test_get_missing_book(client):
    response = await client.get(f"/api/books/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.content == b""


@pytest.mark.asyncio
async def test_get_book_malformed_id(client):
    response = await client.get("/api/books/42")
    assert response.status_code == 404
    assert response.content == b""


@pytest.mark.asyncio
async def test_update_book_keeps_isbn(client):
    created = await create_book(client)
    response = await client.put(
        f"/api/books/{created['id']}",
        json={"title": "Novo", "author": "Outro", "isbn": "999"},
    )
    assert response.status_code == 200
    body = response.json()
    assert (body["title"], body["author"], body["isbn"]) == ("Novo", "Outro", "123")


@pytest.mark.asyncio
async def test_update_missing_book(client):
    response = await client.put(f"/api/books/{uuid.uuid4()}", json={"title": "a", "author": "b"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_book(client):
    created = await create_book(client)
    response = await client.delete(f"/api/books/{created['id']}")
    assert response.status_code == 204
    assert (await client.get(f"/api/books/{created['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_missing_book(client):
    response = await client.delete(f"/api/books/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_filter_books(client):
    await create_book(client)
    await create_book(client, title="Dom Casmurro", author="Machado", isbn="456")

    response = await client.get("/api/books", params={"title": "aven", "page": 1, "size": 10})
    assert response.status_code == 200
    body = response.json()
    assert [b["isbn"] for b in body["data"]] == ["123"]
    assert body["pagination"] == {"page": 1, "size": 10, "total": 1, "total_pages": 1}


@pytest.mark.asyncio
async def test_invalid_page_size(client):
    response = await client.get("/api/books", params={"size": 0})
    assert response.status_code == 400
    assert response.json()["errors"][0].startswith("size:")


@pytest.mark.asyncio
async def test_loans_of_book(client):
    book = await create_book(client)
    await create_loan(client)
    response = await client.get(f"/api/books/{book['id']}/loans")
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 1
    assert body["data"][0]["book"]["isbn"] == "123"


@pytest.mark.asyncio
async def test_loans_of_missing_book(client):
    response = await client.get(f"/api/books/{uuid.uuid4()}/loans")
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Loans
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_loan(client):
    await create_book(client)
    response = await create_loan(client)
    assert response.status_code == 201
    assert uuid.UUID(response.json()["id"])


@pytest.mark.asyncio
async def test_create_loan_unknown_isbn(client):
    response = await create_loan(client, isbn="404")
    assert response.status_code == 400
    assert response.json() == {"errors": ["Book not found for passed isbn"]}


@pytest.mark.asyncio
async def test_create_loan_already_loaned(client):
    await create_book(client)
    await create_loan(client)
    response = await create_loan(client, customer="Outro", email="outro@example.com")
    assert response.status_code == 400
    assert response.json() == {"errors": ["Book already loaned"]}


@pytest.mark.asyncio
async def test_create_loan_invalid_email(client):
    await create_book(client)
    response = await create_loan(client, email="not-an-email")
    assert response.status_code == 400
    assert response.json()["errors"][0].startswith("customerEmail:")


@pytest.mark.asyncio
async def test_create_loan_accepts_camel_case_email(client):
    await create_book(client)
    response = await client.post(
        "/api/loans",
        json={"isbn": "123", "customer": "Fulano", "customerEmail": "f@x.com"},
    )
    assert response.status_code == 201

    loans = (await client.get("/api/loans", params={"isbn": "123"})).json()["data"]
    assert loans[0]["customer_email"] == "f@x.com"


@pytest.mark.asyncio
async def test_create_loan_rejects_blank_customer(client):
    await create_book(client)
    response = await create_loan(client, customer="   ")
    assert response.status_code == 400
    assert response.json()["errors"][0].startswith("customer:")


@pytest.mark.asyncio
async def test_return_loan(client):
    await create_book(client)
    loan_id = (await create_loan(client)).json()["id"]

    response = await client.patch(f"/api/loans/{loan_id}")
    assert response.status_code == 200
    assert response.json() == {"returned": True}

    again = await client.patch(f"/api/loans/{loan_id}")
    assert again.json() == {"returned": True}

    assert (await create_loan(client, customer="Terceiro")).status_code == 201


@pytest.mark.asyncio
async def test_return_missing_loan(client):
    response = await client.patch(f"/api/loans/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_return_loan_malformed_id(client):
    response = await client.patch("/api/loans/abc")
    assert response.status_code == 404
    assert response.content == b""


@pytest.mark.asyncio
async def test_find_loans(client):
    await create_book(client)
    await create_book(client, isbn="456")
    await create_loan(client, isbn="123", customer="Fulano")
    await create_loan(client, isbn="456", customer="Ciclano")

    response = await client.get("/api/loans", params={"isbn": "123", "customer": "Ciclano"})
    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["total"] == 2
    assert {loan["book"]["isbn"] for loan in body["data"]} == {"123", "456"}
    assert all(loan["returned"] is False for loan in body["data"])


@pytest.mark.asyncio
async def test_request_id_header(client):
    response = await client.get("/health", headers={"X-Request-ID": "abc"})
    assert response.status_code == 200
    assert response.headers["X-Request-ID"] == "abc"
