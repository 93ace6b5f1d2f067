"""
Report Jobs Module

Entry points run by a scheduler or by hand. Each job builds its services for
the single run, and logs and re-raises any failure so the caller sees it.
"""

import functools
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, TypeVar

from contacts_report.auth.oauth import get_credentials
from contacts_report.cache.property_store import PropertyStore
from contacts_report.cache.ttl_cache import Cache
from contacts_report.contacts import analytics
from contacts_report.contacts.labels import LabelManager
from contacts_report.contacts.manager import ContactManager
from contacts_report.contacts.models import Contact
from contacts_report.email.reports import EmailManager
from contacts_report.email.sender import EmailSender
from contacts_report.types import ReportSentResponse
from contacts_report.utils.config import get_config
from contacts_report.utils.logger import get_logger
from contacts_report.utils.services import get_gmail_service, get_people_service

logger = get_logger(__name__)

T = TypeVar("T")


class NotAuthenticatedError(RuntimeError):
    """Raised when no usable OAuth credentials are stored."""


@dataclass
class ReportContext:
    """Services and managers for one report run."""
    label_manager: LabelManager
    contact_manager: ContactManager
    email_manager: EmailManager
    use_cache: bool = True

    def fetch_contacts(self, label_filter: Optional[List[str]] = None) -> List[Contact]:
        return self.contact_manager.fetch_contacts(label_filter, use_cache=self.use_cache)


def build_report_context(use_cache: bool = True) -> ReportContext:
    """
    Wire up services for a run from the stored credentials and configuration.

    Raises:
        NotAuthenticatedError: If there are no valid credentials.
    """
    credentials = get_credentials()
    if not credentials:
        raise NotAuthenticatedError("Not authenticated. Run the authenticate command first.")

    config = get_config()
    people_service = get_people_service(credentials)
    gmail_service = get_gmail_service(credentials)

    cache = Cache(
        PropertyStore(config.get("property_store_path")),
        default_ttl=config.get("cache_default_ttl", 3600),
    )
    label_manager = LabelManager(people_service).load()
    contact_manager = ContactManager(
        people_service,
        label_manager,
        cache=cache,
        page_size=config.get("page_size", 100),
        max_retries=config.get("max_retries", 3),
        cache_ttl=config.get("contacts_cache_ttl", 30 * 60),
    )
    sender = EmailSender(
        gmail_service,
        sender_name=config.get("sender_name", "Contacts Report"),
        recipient=config.get("report_recipient", ""),
    )
    return ReportContext(label_manager, contact_manager, EmailManager(sender), use_cache)


def report_job(func: Callable[..., T]) -> Callable[..., T]:
    """Log the start and failure of a job; failures are re-raised."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        logger.info(f"Running {func.__name__}")
        try:
            return func(*args, **kwargs)
        except Exception as e:
            logger.error(f"{func.__name__} failed: {e}")
            raise
    return wrapper


def _context(context: Optional[ReportContext]) -> ReportContext:
    return context if context is not None else build_report_context()


def _summary(sent: Dict[str, Any], count: int, message: str) -> ReportSentResponse:
    logger.info(message)
    return {"success": True, "message": message, "count": count, "email_id": sent.get("id", "")}


@report_job
def send_unlabeled_contacts_report(context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email all contacts that have no labels."""
    ctx = _context(context)
    contacts = analytics.find_contacts_without_labels(ctx.fetch_contacts())
    sent = ctx.email_manager.send_unlabeled_contacts_email(contacts)
    return _summary(sent, len(contacts), f"Sent unlabeled contacts report ({len(contacts)} contacts found)")


@report_job
def send_contacts_without_birthday_report(context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email all contacts without a birthday."""
    ctx = _context(context)
    contacts = analytics.find_contacts_without_birthday(ctx.fetch_contacts())
    sent = ctx.email_manager.send_contacts_without_birthday_email(contacts)
    return _summary(sent, len(contacts), f"Sent contacts without birthday report ({len(contacts)} contacts found)")


@report_job
def send_contacts_with_label_report(label: str, context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email all contacts carrying a label."""
    if not label:
        raise ValueError("Label parameter is required")
    ctx = _context(context)
    contacts = analytics.find_contacts_with_label(ctx.fetch_contacts([label]), label)
    sent = ctx.email_manager.send_contacts_with_label_email(label, contacts)
    return _summary(sent, len(contacts), f'Sent contacts with label "{label}" report ({len(contacts)} contacts found)')


@report_job
def send_contacts_missing_field_report(field: str, context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email all contacts with an empty field."""
    ctx = _context(context)
    contacts = analytics.find_contacts_missing_field(ctx.fetch_contacts(), field)
    sent = ctx.email_manager.send_contacts_missing_field_email(field, contacts)
    return _summary(sent, len(contacts), f"Sent contacts missing {field} report ({len(contacts)} contacts found)")


@report_job
def send_upcoming_birthdays_report(
    days: Optional[int] = None,
    context: Optional[ReportContext] = None,
    today: Optional[date] = None,
) -> ReportSentResponse:
    """Email contacts whose birthday is within the next ``days`` days."""
    if days is None:
        days = get_config().get("birthday_window_days", 7)
    ctx = _context(context)
    upcoming = analytics.upcoming_birthdays_with_dates(ctx.fetch_contacts(), days, today)
    sent = ctx.email_manager.send_upcoming_birthdays_email(upcoming, days, today)
    return _summary(sent, len(upcoming), f"Sent upcoming birthdays report ({len(upcoming)} contacts found)")


@report_job
def send_invalid_phones_report(context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email contacts whose phone number looks malformed."""
    ctx = _context(context)
    contacts = analytics.find_contacts_with_invalid_phones(ctx.fetch_contacts())
    sent = ctx.email_manager.send_invalid_phones_email(contacts)
    return _summary(sent, len(contacts), f"Sent invalid phone numbers report ({len(contacts)} contacts found)")


@report_job
def send_duplicate_contacts_report(context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email groups of contacts that look like duplicates."""
    ctx = _context(context)
    groups = analytics.find_duplicate_contacts(ctx.fetch_contacts())
    sent = ctx.email_manager.send_duplicate_contacts_email(groups)
    return _summary(sent, len(groups), f"Sent duplicate contacts report ({len(groups)} groups found)")


@report_job
def send_contact_stats_report(context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email field coverage statistics."""
    ctx = _context(context)
    stats = analytics.generate_contact_stats(ctx.fetch_contacts())
    sent = ctx.email_manager.send_contact_stats_email(stats)
    return _summary(sent, stats["total_contacts"], "Sent contact statistics report")


@report_job
def send_label_stats_report(context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email label usage, including labels no contact carries."""
    ctx = _context(context)
    stats = analytics.generate_contact_stats(ctx.fetch_contacts())
    labels = ctx.label_manager.all_labels()
    sent = ctx.email_manager.send_label_stats_email(stats, labels)
    return _summary(sent, len(labels), "Sent label statistics report")


@report_job
def send_contacts_by_city_report(context: Optional[ReportContext] = None) -> ReportSentResponse:
    """Email contacts grouped by city."""
    ctx = _context(context)
    cities = analytics.group_contacts_by_city(ctx.fetch_contacts())
    sent = ctx.email_manager.send_contacts_by_city_email(cities)
    return _summary(sent, len(cities), f"Sent contacts by city report ({len(cities)} cities)")


JOBS: Dict[str, Callable[..., ReportSentResponse]] = {
    "unlabeled": send_unlabeled_contacts_report,
    "without-birthday": send_contacts_without_birthday_report,
    "with-label": send_contacts_with_label_report,
    "missing-field": send_contacts_missing_field_report,
    "upcoming-birthdays": send_upcoming_birthdays_report,
    "invalid-phones": send_invalid_phones_report,
    "duplicates": send_duplicate_contacts_report,
    "stats": send_contact_stats_report,
    "label-stats": send_label_stats_report,
    "cities": send_contacts_by_city_report,
}
