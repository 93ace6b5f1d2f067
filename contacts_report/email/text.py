"""
Plain-text bodies for report emails.
"""

from datetime import date
from typing import Dict, List, Optional, Tuple

from contacts_report.contacts.models import Contact, Label
from contacts_report.types import ContactStats


def contact_block(contact: Contact, extra: Optional[List[str]] = None) -> str:
    details = list(extra or [])
    if contact.email:
        details.append(f"Email: {contact.email}")
    if contact.phone_number:
        details.append(f"Phone: {contact.phone_number}")
    if contact.city:
        details.append(f"City: {contact.city}")
    return "\n".join([contact.name] + details)


def contact_list_text(title: str, contacts: List[Contact]) -> str:
    if not contacts:
        return f"{title}\n\nNo contacts found."
    return f"{title}\n\n" + "\n\n".join(contact_block(c) for c in contacts)


def birthday_list_text(
    title: str,
    upcoming: List[Tuple[Contact, date]],
    today: Optional[date] = None,
) -> str:
    if not upcoming:
        return f"{title}\n\nNo upcoming birthdays."
    blocks = []
    for contact, next_date in upcoming:
        extra = [f"Birthday: {next_date.strftime('%d.%m.')}"]
        if contact.has_known_birth_year(today):
            extra.append(f"Turns: {next_date.year - contact.birthday.year}")
        blocks.append(contact_block(contact, extra))
    return f"{title}\n\n" + "\n\n".join(blocks)


def duplicate_groups_text(title: str, groups: List[List[Contact]]) -> str:
    if not groups:
        return f"{title}\n\nNo duplicate contacts found."
    sections = []
    for number, group in enumerate(groups, start=1):
        sections.append(f"Group {number}:\n" + "\n".join(contact_block(c) for c in group))
    return f"{title}\n\n" + "\n\n".join(sections)


def stats_text(title: str, stats: ContactStats) -> str:
    lines = [
        title,
        "",
        f'Total Contacts: {stats["total_contacts"]}',
        f'With Birthday: {stats["with_birthday"]} ({stats["birthday_percentage"]}%)',
        f'With Email: {stats["with_email"]} ({stats["email_percentage"]}%)',
        f'With Phone: {stats["with_phone"]} ({stats["phone_percentage"]}%)',
        f'With City: {stats["with_city"]} ({stats["city_percentage"]}%)',
        f'With Labels: {stats["with_labels"]} ({stats["label_percentage"]}%)',
        f'With Instagram: {stats["with_instagram"]} ({stats["instagram_percentage"]}%)',
        "",
        "Label Distribution:",
    ]
    lines.extend(f"{label}: {count} contacts" for label, count in stats["label_distribution"].items())
    return "\n".join(lines)


def label_stats_text(title: str, distribution: Dict[str, int], labels: List[Label]) -> str:
    lines = [title, ""]
    lines.extend(f"{label.name}: {distribution.get(label.name, 0)} contacts" for label in labels)
    return "\n".join(lines)


def city_groups_text(title: str, cities: Dict[str, List[Contact]]) -> str:
    if not cities:
        return f"{title}\n\nNo contacts with a city."
    sections = [
        f"{city} ({len(contacts)}):\n" + "\n".join(f"- {c.name}" for c in contacts)
        for city, contacts in cities.items()
    ]
    return f"{title}\n\n" + "\n\n".join(sections)
