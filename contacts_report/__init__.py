"""
Contacts Report - reporting over Google Contacts.

Fetches contacts and their labels through the People API, derives simple
analytics (missing fields, duplicates, upcoming birthdays, label usage) and
emails the results through Gmail.

Example:
    from contacts_report.jobs import send_upcoming_birthdays_report
    send_upcoming_birthdays_report(days=14)
"""

__version__ = "1.0.0"
__author__ = "Contacts Report Contributors"

from contacts_report.types import (
    ErrorResponse,
    ContactStats,
    ContactSummary,
    UpcomingBirthday,
    ReportSentResponse,
    BulkLabelResponse,
)

__all__ = [
    "__version__",
    "__author__",
    "ErrorResponse",
    "ContactStats",
    "ContactSummary",
    "UpcomingBirthday",
    "ReportSentResponse",
    "BulkLabelResponse",
]
