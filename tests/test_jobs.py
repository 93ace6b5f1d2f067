"""
Tests for jobs.py - Report jobs and per-run wiring
"""

from datetime import date

import pytest
from unittest.mock import MagicMock, Mock, patch

from contacts_report.contacts.labels import LabelManager
from contacts_report.contacts.manager import ContactFetchError, ContactManager
from contacts_report.email.reports import EmailManager
from contacts_report.email.sender import EmailSender
from contacts_report.jobs import (
    JOBS,
    NotAuthenticatedError,
    ReportContext,
    build_report_context,
    send_contact_stats_report,
    send_contacts_by_city_report,
    send_contacts_missing_field_report,
    send_contacts_with_label_report,
    send_contacts_without_birthday_report,
    send_duplicate_contacts_report,
    send_invalid_phones_report,
    send_label_stats_report,
    send_unlabeled_contacts_report,
    send_upcoming_birthdays_report,
)

from conftest import create_mock_people_service, make_person


@pytest.fixture
def gmail_service():
    service = MagicMock()
    service.users.return_value.getProfile.return_value.execute.return_value = {
        "emailAddress": "me@example.com",
    }
    service.users.return_value.messages.return_value.send.return_value.execute.return_value = {
        "id": "sent-1",
    }
    return service


@pytest.fixture
def context(people_service, label_manager, gmail_service):
    contact_manager = ContactManager(people_service, label_manager, sleep=Mock())
    email_manager = EmailManager(EmailSender(gmail_service))
    return ReportContext(label_manager, contact_manager, email_manager, use_cache=False)


def send_mock(gmail_service):
    return gmail_service.users.return_value.messages.return_value.send


class TestReportJobs:
    """Tests for each job's fetch, filter and send."""

    def test_unlabeled_contacts(self, context, gmail_service):
        result = send_unlabeled_contacts_report(context)

        assert result["success"] is True
        assert result["count"] == 1
        assert result["email_id"] == "sent-1"
        assert "1 contacts found" in result["message"]
        send_mock(gmail_service).assert_called_once()

    def test_without_birthday(self, context):
        assert send_contacts_without_birthday_report(context)["count"] == 2

    def test_with_label(self, context):
        assert send_contacts_with_label_report("Friends", context)["count"] == 1

    def test_with_label_requires_label(self, context, gmail_service):
        with pytest.raises(ValueError):
            send_contacts_with_label_report("", context)
        send_mock(gmail_service).assert_not_called()

    def test_missing_field(self, context):
        assert send_contacts_missing_field_report("city", context)["count"] == 2

    def test_missing_field_unknown(self, context):
        with pytest.raises(ValueError):
            send_contacts_missing_field_report("nickname", context)

    def test_upcoming_birthdays(self, context):
        result = send_upcoming_birthdays_report(7, context, today=date(2023, 12, 28))

        assert result["count"] == 1

    def test_invalid_phones(self, context):
        assert send_invalid_phones_report(context)["count"] == 0

    def test_duplicates(self, context):
        assert send_duplicate_contacts_report(context)["count"] == 0

    def test_stats(self, context):
        assert send_contact_stats_report(context)["count"] == 3

    def test_label_stats_counts_user_labels(self, context):
        assert send_label_stats_report(context)["count"] == 3

    def test_cities(self, context):
        assert send_contacts_by_city_report(context)["count"] == 1

    def test_fetch_failure_is_reraised(self, label_manager, gmail_service):
        service = create_mock_people_service([ConnectionError("down")] * 4)
        context = ReportContext(
            label_manager,
            ContactManager(service, label_manager, sleep=Mock()),
            EmailManager(EmailSender(gmail_service)),
            use_cache=False,
        )

        with pytest.raises(ContactFetchError):
            send_unlabeled_contacts_report(context)
        send_mock(gmail_service).assert_not_called()

    def test_empty_result_still_sends(self, label_manager, gmail_service):
        service = create_mock_people_service([
            {"connections": [make_person("Labelled", groups=["123"])]},
        ])
        context = ReportContext(
            label_manager,
            ContactManager(service, label_manager, sleep=Mock()),
            EmailManager(EmailSender(gmail_service)),
            use_cache=False,
        )

        result = send_unlabeled_contacts_report(context)

        assert result["count"] == 0
        send_mock(gmail_service).assert_called_once()

    def test_job_registry(self):
        assert JOBS["unlabeled"] is send_unlabeled_contacts_report
        assert len(JOBS) == 10


class TestBuildReportContext:
    """Tests for wiring services from stored credentials."""

    @patch("contacts_report.jobs.get_credentials")
    def test_not_authenticated(self, mock_get_credentials):
        mock_get_credentials.return_value = None

        with pytest.raises(NotAuthenticatedError):
            build_report_context()

    @patch("contacts_report.jobs.get_gmail_service")
    @patch("contacts_report.jobs.get_people_service")
    @patch("contacts_report.jobs.get_credentials")
    def test_builds_from_services(self, mock_get_credentials, mock_people, mock_gmail, people_service, tmp_path):
        mock_get_credentials.return_value = Mock()
        mock_people.return_value = people_service
        mock_gmail.return_value = MagicMock()

        with patch("contacts_report.jobs.get_config") as mock_get_config:
            mock_get_config.return_value = {
                "property_store_path": str(tmp_path / "props.json"),
                "page_size": 50,
                "max_retries": 2,
                "report_recipient": "boss@example.com",
            }
            ctx = build_report_context(use_cache=False)

        assert isinstance(ctx.label_manager, LabelManager)
        assert ctx.label_manager.label_exists_by_name("Friends")
        assert ctx.contact_manager.page_size == 50
        assert ctx.contact_manager.max_retries == 2
        assert ctx.email_manager.sender.recipient == "boss@example.com"
        assert ctx.use_cache is False

    @patch("contacts_report.jobs.build_report_context")
    def test_job_builds_context_when_missing(self, mock_build, context):
        mock_build.return_value = context

        result = send_contact_stats_report()

        assert result["success"] is True
        mock_build.assert_called_once_with()
