"""Dataclass-based domain configuration pattern.

Each vertical defines its thresholds, limits, and feature flags as a
frozen dataclass. This gives you:
- Type safety (IDE autocompletion, mypy checking)
- Default values (sensible out-of-the-box)
- Immutability (frozen=True prevents accidental mutation)
- Easy overrides (from env vars, config files)

Example domain: a lending library with loan, notifier, and mail config.
"""

import os
from dataclasses import dataclass, field
from datetime import time
from typing import Any


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def parse_time_of_day(value: str) -> time:
    """Parse `HH:MM` (or `HH:MM:SS`) into a time."""
    try:
        return time.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Not a time of day (expected HH:MM): {value!r}") from None


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LoanConfig:
    """Loan lifecycle thresholds."""

    grace_period_days: int = 3  # days a loan may stay out before it is late

    def __post_init__(self):
        if self.grace_period_days < 0:
            raise ValueError("grace_period_days must be >= 0")


DEFAULT_LATE_LOAN_MESSAGE = (
    "Hello, your loan is overdue. Please return the book as soon as possible."
)


@dataclass(frozen=True)
class NotifierConfig:
    """Overdue notification schedule and message."""

    enabled: bool = True
    run_at: time = time(0, 0)
    subject: str = "Late loan"
    message: str = DEFAULT_LATE_LOAN_MESSAGE


@dataclass(frozen=True)
class MailConfig:
    """Outbound SMTP settings."""

    host: str = "localhost"
    port: int = 25
    username: str | None = None
    password: str | None = None
    starttls: bool = False
    sender: str = "library@localhost"
    timeout: float = 30.0


# ---------------------------------------------------------------------------
# Top-level domain config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LibraryConfig:
    """Complete configuration for the library vertical.

    Usage::

        config = LibraryConfig.from_env()
        cutoff = today - timedelta(days=config.loans.grace_period_days)
    """

    loans: LoanConfig = field(default_factory=LoanConfig)
    notifier: NotifierConfig = field(default_factory=NotifierConfig)
    mail: MailConfig = field(default_factory=MailConfig)

    @classmethod
    def default(cls) -> "LibraryConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "LIBRARY_", environ=None) -> "LibraryConfig":
        """Create config from environment variables.

        Example: LIBRARY_LOAN_GRACE_PERIOD_DAYS=7
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(f"{prefix}{name}")
            return value if value not in (None, "") else None

        def collect(fields: dict[str, tuple[str, Any]]) -> dict[str, Any]:
            overrides = {}
            for attr, (name, parse) in fields.items():
                raw = get(name)
                if raw is not None:
                    overrides[attr] = parse(raw)
            return overrides

        loans = collect({
            "grace_period_days": ("LOAN_GRACE_PERIOD_DAYS", int),
        })
        notifier = collect({
            "enabled": ("NOTIFIER_ENABLED", parse_bool),
            "run_at": ("NOTIFIER_RUN_AT", parse_time_of_day),
            "subject": ("NOTIFIER_SUBJECT", str),
            "message": ("NOTIFIER_MESSAGE", str),
        })
        mail = collect({
            "host": ("SMTP_HOST", str),
            "port": ("SMTP_PORT", int),
            "username": ("SMTP_USERNAME", str),
            "password": ("SMTP_PASSWORD", str),
            "starttls": ("SMTP_STARTTLS", parse_bool),
            "sender": ("MAIL_FROM", str),
        })

        return cls(
            loans=LoanConfig(**loans),
            notifier=NotifierConfig(**notifier),
            mail=MailConfig(**mail),
        )
