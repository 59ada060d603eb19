"""Library vertical: books, loans, and overdue reminders.

Demonstrates the service patterns working together in one domain:
- SQLAlchemy models with IdentityMixin
- Async repositories with filter-by-example and pagination
- Services enforcing the one-outstanding-loan-per-book rule
- FastAPI router with error translation
- Pure-function rules and an enum state machine
- A daily notifier bound to the app lifespan
- Dataclass configuration
"""
