"""
Contact Analytics Module

Pure filters and aggregations over a list of contacts.
"""

import re
from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from contacts_report.contacts.manager import contact_matches_label_filter
from contacts_report.contacts.models import Contact
from contacts_report.types import ContactStats

# Digits with an optional leading "+" and bracketed prefix, then separators.
# A mismatch only marks the number as suspicious.
PHONE_PATTERN = re.compile(r"^[+]?[(]?[0-9]{1,4}[)]?[-\s./0-9]*$")

# Fields that find_contacts_missing_field understands
CHECKABLE_FIELDS = ("birthday", "labels", "email", "city", "phone_number", "instagram_names")


def find_contacts_without_labels(contacts: List[Contact]) -> List[Contact]:
    return [c for c in contacts if not c.labels]


def find_contacts_without_birthday(contacts: List[Contact]) -> List[Contact]:
    return [c for c in contacts if not c.birthday]


def find_contacts_missing_field(contacts: List[Contact], field: str) -> List[Contact]:
    """
    Contacts whose given field is empty.

    Raises:
        ValueError: If the field is not one of CHECKABLE_FIELDS.
    """
    if field not in CHECKABLE_FIELDS:
        raise ValueError(
            f"Unknown contact field '{field}'. Expected one of: {', '.join(CHECKABLE_FIELDS)}"
        )
    return [c for c in contacts if not getattr(c, field)]


def find_contacts_with_label(contacts: List[Contact], label: str) -> List[Contact]:
    """
    Contacts carrying exactly this label (case-sensitive).

    Raises:
        ValueError: If no label is given.
    """
    if not label:
        raise ValueError("Label parameter is required")
    return [c for c in contacts if label in c.labels]


def filter_contacts_by_labels(contacts: List[Contact], label_filter: List[str]) -> List[Contact]:
    return [c for c in contacts if contact_matches_label_filter(label_filter, c.labels)]


def next_birthday(birthday: date, today: date) -> date:
    """
    Project a birthday onto this year, or next year if it already passed.

    February 29 falls on March 1 in non-leap years.
    """
    def project(year: int) -> date:
        try:
            return date(year, birthday.month, birthday.day)
        except ValueError:
            return date(year, 3, 1)

    projected = project(today.year)
    if projected < today:
        projected = project(today.year + 1)
    return projected


def upcoming_birthdays_with_dates(
    contacts: List[Contact],
    days: int = 7,
    today: Optional[date] = None,
) -> List[Tuple[Contact, date]]:
    """
    Contacts whose next birthday falls in [today, today + days], with that date.

    Returns:
        List[Tuple[Contact, date]]: Sorted ascending by next birthday.
    """
    if days < 0:
        raise ValueError("Days must not be negative")
    today = today or date.today()
    window_end = today + timedelta(days=days)

    upcoming = []
    for contact in contacts:
        if not contact.birthday:
            continue
        projected = next_birthday(contact.birthday, today)
        if today <= projected <= window_end:
            upcoming.append((contact, projected))

    upcoming.sort(key=lambda item: item[1])
    return upcoming


def find_upcoming_birthdays(
    contacts: List[Contact],
    days: int = 7,
    today: Optional[date] = None,
) -> List[Contact]:
    return [contact for contact, _ in upcoming_birthdays_with_dates(contacts, days, today)]


def find_contacts_with_invalid_phones(contacts: List[Contact]) -> List[Contact]:
    return [c for c in contacts if c.phone_number and not PHONE_PATTERN.match(c.phone_number)]


def find_duplicate_contacts(contacts: List[Contact]) -> List[List[Contact]]:
    """
    Group contacts sharing a name (case-insensitive), an email or a phone number.

    Greedy single pass: each contact not yet grouped anchors a group of every
    later ungrouped contact matching it. The result depends on input order.
    Empty emails and phone numbers never match.

    Returns:
        List[List[Contact]]: Groups of two or more contacts, anchor first.
    """
    grouped = [False] * len(contacts)
    groups = []

    for i, anchor in enumerate(contacts):
        if grouped[i]:
            continue
        grouped[i] = True
        group = [anchor]
        anchor_name = anchor.name.strip().lower()

        for j in range(i + 1, len(contacts)):
            if grouped[j]:
                continue
            other = contacts[j]
            if (
                other.name.strip().lower() == anchor_name
                or (anchor.email and other.email == anchor.email)
                or (anchor.phone_number and other.phone_number == anchor.phone_number)
            ):
                grouped[j] = True
                group.append(other)

        if len(group) > 1:
            groups.append(group)

    return groups


def _percentage(part: int, total: int) -> str:
    if total == 0:
        return "0.0"
    return f"{part / total * 100:.1f}"


def label_distribution(contacts: List[Contact]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for contact in contacts:
        for label in contact.labels:
            counts[label] = counts.get(label, 0) + 1
    return counts


def generate_contact_stats(contacts: List[Contact]) -> ContactStats:
    """Counts and percentages of contacts having each field, plus the label histogram."""
    total = len(contacts)
    with_birthday = sum(1 for c in contacts if c.birthday)
    with_email = sum(1 for c in contacts if c.email)
    with_phone = sum(1 for c in contacts if c.phone_number)
    with_city = sum(1 for c in contacts if c.city)
    with_labels = sum(1 for c in contacts if c.labels)
    with_instagram = sum(1 for c in contacts if c.instagram_names)

    return {
        "total_contacts": total,
        "with_birthday": with_birthday,
        "with_email": with_email,
        "with_phone": with_phone,
        "with_city": with_city,
        "with_labels": with_labels,
        "with_instagram": with_instagram,
        "birthday_percentage": _percentage(with_birthday, total),
        "email_percentage": _percentage(with_email, total),
        "phone_percentage": _percentage(with_phone, total),
        "city_percentage": _percentage(with_city, total),
        "label_percentage": _percentage(with_labels, total),
        "instagram_percentage": _percentage(with_instagram, total),
        "label_distribution": label_distribution(contacts),
    }


def group_contacts_by_city(contacts: List[Contact]) -> Dict[str, List[Contact]]:
    """
    Contacts per city, cities sorted by name.

    A contact with several addresses appears under each of its cities.
    """
    cities: Dict[str, List[Contact]] = {}
    for contact in contacts:
        for city in contact.city.split(","):
            city = city.strip()
            if city:
                cities.setdefault(city, []).append(contact)
    return OrderedDict(sorted(cities.items(), key=lambda item: item[0].lower()))
