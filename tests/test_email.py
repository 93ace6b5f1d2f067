"""
Tests for email/ - Message building, templates and report emails
"""

import base64
from datetime import date
from email import message_from_bytes
from email.header import decode_header, make_header
from email.message import Message

import pytest
from unittest.mock import MagicMock

from contacts_report.contacts.analytics import generate_contact_stats
from contacts_report.contacts.models import Contact, Label
from contacts_report.email.reports import EmailManager
from contacts_report.email.sender import EmailSender, build_raw_message
from contacts_report.email.templates import EmailTemplates


def parse_raw(raw: str) -> Message:
    return message_from_bytes(base64.urlsafe_b64decode(raw))


def parts_by_type(message: Message) -> dict:
    return {
        part.get_content_type(): part.get_payload(decode=True).decode("utf-8")
        for part in message.walk()
        if not part.is_multipart()
    }


@pytest.fixture
def gmail_service():
    service = MagicMock()
    service.users.return_value.getProfile.return_value.execute.return_value = {
        "emailAddress": "me@example.com",
    }
    service.users.return_value.messages.return_value.send.return_value.execute.return_value = {
        "id": "msg123",
    }
    return service


def sent_message(gmail_service) -> Message:
    send = gmail_service.users.return_value.messages.return_value.send
    return parse_raw(send.call_args.kwargs["body"]["raw"])


class TestBuildRawMessage:
    """Tests for MIME construction."""

    def test_multipart_alternative(self):
        raw = build_raw_message("to@example.com", "me@example.com", "Contacts Report",
                                "Grüße", "plain body", "<p>html body</p>")

        message = parse_raw(raw)

        assert message.get_content_type() == "multipart/alternative"
        assert message["To"] == "to@example.com"
        assert "me@example.com" in message["From"]
        assert str(make_header(decode_header(message["Subject"]))) == "Grüße"
        parts = parts_by_type(message)
        assert parts["text/plain"] == "plain body"
        assert parts["text/html"] == "<p>html body</p>"


class TestEmailSender:
    """Tests for sending through the Gmail API."""

    def test_defaults_to_account_address(self, gmail_service):
        sender = EmailSender(gmail_service)

        result = sender.send("Subject", "text", "<p>html</p>")

        assert result["id"] == "msg123"
        assert sent_message(gmail_service)["To"] == "me@example.com"
        send = gmail_service.users.return_value.messages.return_value.send
        assert send.call_args.kwargs["userId"] == "me"

    def test_configured_recipient(self, gmail_service):
        EmailSender(gmail_service, recipient="boss@example.com").send("S", "t", "<p>h</p>")

        assert sent_message(gmail_service)["To"] == "boss@example.com"

    def test_profile_fetched_once(self, gmail_service):
        sender = EmailSender(gmail_service)
        sender.send("One", "t", "h")
        sender.send("Two", "t", "h")

        assert gmail_service.users.return_value.getProfile.return_value.execute.call_count == 1


class TestTemplates:
    """Tests for HTML fragments."""

    def test_values_are_escaped(self):
        contact = Contact(name="<script>alert(1)</script>", email="a&b@example.com")

        html = EmailTemplates.contact_item(contact)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "a&amp;b@example.com" in html

    def test_empty_contact_list(self):
        assert EmailTemplates.contact_list([]) == "<p>No contacts found.</p>"

    def test_contact_list_counts(self):
        html = EmailTemplates.contact_list([Contact(name="A"), Contact(name="B")], "People")
        assert "People (2)" in html

    def test_social_buttons(self):
        contact = Contact(name="A", phone_number="+49 170 1", instagram_names=["@a"])

        html = EmailTemplates.contact_item(contact)

        assert "https://wa.me/491701" in html
        assert "https://www.instagram.com/a/" in html

    def test_birthday_list_shows_age(self):
        contact = Contact(name="A", birthday=date(1990, 6, 12))

        html = EmailTemplates.birthday_list([(contact, date(2024, 6, 12))], today=date(2024, 6, 10))

        assert "12.06." in html
        assert "Turns 34" in html

    def test_label_stats_lists_unused(self):
        labels = [Label(id="contactGroups/1", name="Used"), Label(id="contactGroups/2", name="Idle")]

        html = EmailTemplates.label_stats({"Used": 3}, labels)

        assert "Unused Labels" in html
        assert "Idle" in html

    def test_wrap_email(self):
        html = EmailTemplates.wrap_email("<p>x</p>")
        assert html.startswith("<!DOCTYPE html>")
        assert '<div class="email-container"><p>x</p></div>' in html


class TestEmailManager:
    """Tests for report emails."""

    def test_unlabeled_contacts_email(self, gmail_service):
        manager = EmailManager(EmailSender(gmail_service))

        manager.send_unlabeled_contacts_email([Contact(name="Lonely", email="l@example.com")])

        message = sent_message(gmail_service)
        assert str(make_header(decode_header(message["Subject"]))) == "Contacts Without Labels"
        parts = parts_by_type(message)
        assert "Lonely" in parts["text/html"]
        assert "Lonely" in parts["text/plain"]
        assert "Email: l@example.com" in parts["text/plain"]

    def test_upcoming_birthdays_subject(self, gmail_service):
        manager = EmailManager(EmailSender(gmail_service))

        manager.send_upcoming_birthdays_email([], 7, today=date(2024, 6, 10))

        message = sent_message(gmail_service)
        assert str(make_header(decode_header(message["Subject"]))) == "Upcoming Birthdays (Next 7 Days)"
        assert "No upcoming birthdays." in parts_by_type(message)["text/plain"]

    def test_stats_email(self, gmail_service):
        manager = EmailManager(EmailSender(gmail_service))
        stats = generate_contact_stats([Contact(name="A", labels=["Work"]), Contact(name="B")])

        manager.send_contact_stats_email(stats)

        html = parts_by_type(sent_message(gmail_service))["text/html"]
        assert "Total contacts" in html
        assert "50.0%" in html
        assert "Label Distribution" in html

    def test_sender_name_in_footer(self, gmail_service):
        manager = EmailManager(EmailSender(gmail_service, sender_name="My Reports"))

        manager.send_contacts_by_city_email({})

        message = sent_message(gmail_service)
        assert "My Reports" in message["From"]
        assert "Sent by My Reports" in parts_by_type(message)["text/html"]
