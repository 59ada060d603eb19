"""Overdue loan notifier.

Once a day, collect every late loan and send the configured reminder to
each customer. Wiring:

    lifespan -> DailyJob(run_at) -> OverdueNotifier.run_once()
             -> LoanService.get_all_late_loans() -> Mailer.send()

A mail failure is logged and the run ends normally; the next scheduled run
is the only retry.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.database import get_session_context
from core.notifications.mailer import Mailer, SmtpMailer, SmtpSettings
from core.scheduling.daily import DailyJob
from patterns.domain_config import LibraryConfig
from verticals.library.models.db_models import Loan
from verticals.library.repository import BookRepository, LoanRepository
from verticals.library.services import LoanService

logger = logging.getLogger(__name__)


@dataclass
class NotificationReport:
    """Outcome of one notifier run."""

    cutoff: date
    late_loans: int = 0
    recipients: list[str] = field(default_factory=list)
    sent: bool = False
    error: str | None = None


def collect_recipients(loans: list[Loan]) -> list[str]:
    """Customer e-mails of `loans`, blanks dropped, first occurrence kept."""
    seen: set[str] = set()
    recipients = []
    for loan in loans:
        email = (loan.customer_email or "").strip()
        if email and email.lower() not in seen:
            seen.add(email.lower())
            recipients.append(email)
    return recipients


class OverdueNotifier:
    """Send the late-loan reminder to every customer with an overdue loan."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None,
        mailer: Mailer,
        config: LibraryConfig | None = None,
    ):
        self.session_factory = session_factory
        self.mailer = mailer
        self.config = config or LibraryConfig.default()

    async def run_once(self, today: date | None = None) -> NotificationReport:
        async with get_session_context(self.session_factory) as session:
            service = LoanService(
                LoanRepository(session), BookRepository(session), self.config
            )
            report = NotificationReport(cutoff=service.overdue_cutoff(today))
            late_loans = await service.get_all_late_loans(today)

        report.late_loans = len(late_loans)
        report.recipients = collect_recipients(late_loans)
        if not report.recipients:
            logger.info("No late loans on or before %s", report.cutoff)
            return report

        settings = self.config.notifier
        try:
            await self.mailer.send(settings.subject, settings.message, report.recipients)
        except Exception as exc:
            report.error = str(exc)
            logger.exception(
                "Failed to send late loan reminders to %d recipient(s)",
                len(report.recipients),
            )
            return report

        report.sent = True
        logger.info(
            "Sent late loan reminders for %d loan(s) to %d recipient(s)",
            report.late_loans,
            len(report.recipients),
        )
        return report


def build_overdue_job(
    config: LibraryConfig,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    mailer: Mailer | None = None,
) -> DailyJob:
    """Create the daily job that runs the notifier at `config.notifier.run_at`."""
    mailer = mailer or SmtpMailer(SmtpSettings(**asdict(config.mail)))
    notifier = OverdueNotifier(session_factory, mailer, config)
    return DailyJob("late-loans", config.notifier.run_at, notifier.run_once)
