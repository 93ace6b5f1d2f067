"""
Report Emails Module

One method per report: render the HTML and plain-text bodies and send them.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from contacts_report.contacts.models import Contact, Label
from contacts_report.email import text
from contacts_report.email.sender import EmailSender
from contacts_report.email.templates import EmailTemplates
from contacts_report.types import ContactStats


class EmailManager:
    """Renders and sends report emails through an EmailSender."""

    def __init__(self, sender: EmailSender) -> None:
        self.sender = sender
        self.templates = EmailTemplates

    def _send(self, subject: str, title: str, subtitle: str, body_html: str, text_body: str) -> Dict[str, Any]:
        content = (
            self.templates.header(title, subtitle)
            + body_html
            + self.templates.footer(self.sender.sender_name)
        )
        return self.sender.send(subject, text_body, self.templates.wrap_email(content))

    def send_unlabeled_contacts_email(self, contacts: List[Contact]) -> Dict[str, Any]:
        title = "Contacts Without Labels Report"
        return self._send(
            "Contacts Without Labels",
            title,
            "These contacts don't have any labels assigned",
            self.templates.contact_list(contacts, "Contacts Without Labels"),
            text.contact_list_text(title, contacts),
        )

    def send_contacts_without_birthday_email(self, contacts: List[Contact]) -> Dict[str, Any]:
        title = "Contacts Without Birthday Report"
        return self._send(
            "Contacts Without Birthday",
            title,
            "These contacts don't have a birthday set",
            self.templates.contact_list(contacts, "Contacts Without Birthday"),
            text.contact_list_text(title, contacts),
        )

    def send_contacts_with_label_email(self, label: str, contacts: List[Contact]) -> Dict[str, Any]:
        title = f'Contacts With Label "{label}"'
        return self._send(
            title,
            title,
            f'These contacts have the label "{label}" assigned',
            self.templates.contact_list(contacts, title),
            text.contact_list_text(f"{title} Report", contacts),
        )

    def send_contacts_missing_field_email(self, field: str, contacts: List[Contact]) -> Dict[str, Any]:
        readable = field.replace("_", " ")
        title = f"Contacts Without {readable.title()}"
        return self._send(
            title,
            f"{title} Report",
            f"These contacts have no {readable} set",
            self.templates.contact_list(contacts, title),
            text.contact_list_text(f"{title} Report", contacts),
        )

    def send_upcoming_birthdays_email(
        self,
        upcoming: List[Tuple[Contact, date]],
        days: int,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        return self._send(
            f"Upcoming Birthdays (Next {days} Days)",
            "Upcoming Birthdays Report",
            f"Birthdays in the next {days} days",
            self.templates.birthday_list(upcoming, today),
            text.birthday_list_text(f"Upcoming Birthdays Report (Next {days} Days)", upcoming, today),
        )

    def send_invalid_phones_email(self, contacts: List[Contact]) -> Dict[str, Any]:
        title = "Invalid Phone Numbers Report"
        return self._send(
            "Invalid Phone Numbers",
            title,
            "These contacts have potentially invalid or malformed phone numbers",
            self.templates.contact_list(contacts, "Suspicious Phone Numbers"),
            text.contact_list_text(title, contacts),
        )

    def send_duplicate_contacts_email(self, groups: List[List[Contact]]) -> Dict[str, Any]:
        title = "Duplicate Contacts Report"
        return self._send(
            "Possible Duplicate Contacts",
            title,
            "These contacts share a name, email address or phone number",
            self.templates.duplicate_groups(groups),
            text.duplicate_groups_text(title, groups),
        )

    def send_contact_stats_email(self, stats: ContactStats) -> Dict[str, Any]:
        title = "Contact Statistics Report"
        return self._send(
            "Contact Statistics",
            title,
            "Overview of your contacts",
            self.templates.stats_report(stats),
            text.stats_text(title, stats),
        )

    def send_label_stats_email(self, stats: ContactStats, labels: List[Label]) -> Dict[str, Any]:
        title = "Label Statistics Report"
        distribution = stats["label_distribution"]
        return self._send(
            "Label Statistics",
            title,
            "How your labels are used",
            self.templates.label_stats(distribution, labels),
            text.label_stats_text(title, distribution, labels),
        )

    def send_contacts_by_city_email(self, cities: Dict[str, List[Contact]]) -> Dict[str, Any]:
        title = "Contacts By City Report"
        return self._send(
            "Contacts By City",
            title,
            f"Your contacts across {len(cities)} cities",
            self.templates.city_groups(cities),
            text.city_groups_text(title, cities),
        )
