"""
Pytest configuration and fixtures for Contacts Report tests.

IMPORTANT: Patches must target functions WHERE THEY ARE USED (imported), not
where they are defined:

    For report jobs:
        @patch("contacts_report.jobs.get_credentials")
        @patch("contacts_report.jobs.get_people_service")
        @patch("contacts_report.jobs.get_gmail_service")

    For contact tools:
        @patch("contacts_report.mcp.tools.contacts.build_report_context")

People API services are MagicMocks; canned responses are set on
``service.people.return_value.connections.return_value.list.return_value.execute``
so that keyword arguments of each call can be inspected afterwards.
"""

from datetime import date
from typing import Any, Dict, List, Optional

import pytest
from unittest.mock import MagicMock


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch):
    """Provide an encryption key and reset cached config, token manager and services."""
    monkeypatch.setenv("TOKEN_ENCRYPTION_KEY", "test_encryption_key_for_pytest")

    import contacts_report.auth.token_manager as tm_module
    from contacts_report.utils.config import reset_config_cache
    from contacts_report.utils.services import clear_service_cache

    reset_config_cache()
    tm_module._instance = None
    clear_service_cache()

    yield

    reset_config_cache()
    tm_module._instance = None
    clear_service_cache()


def make_person(
    name: Optional[str],
    resource_name: str = "people/c1",
    email: Optional[str] = None,
    phone: Optional[str] = None,
    birthday: Optional[Dict[str, int]] = None,
    groups: Optional[List[str]] = None,
    cities: Optional[List[str]] = None,
    notes: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Build a People API person resource."""
    person: Dict[str, Any] = {"resourceName": resource_name}
    if name is not None:
        person["names"] = [{"displayName": name}]
    if email:
        person["emailAddresses"] = [{"value": email}]
    if phone:
        person["phoneNumbers"] = [{"value": phone}]
    if birthday is not None:
        person["birthdays"] = [{"date": birthday}]
    if groups:
        person["memberships"] = [
            {"contactGroupMembership": {"contactGroupId": group_id}} for group_id in groups
        ]
    if cities:
        person["addresses"] = [{"city": city} for city in cities]
    if notes:
        person["biographies"] = [{"value": note} for note in notes]
    return person


SAMPLE_GROUPS = [
    {"resourceName": "contactGroups/myContacts", "name": "myContacts"},
    {"resourceName": "contactGroups/starred", "name": "starred"},
    {"resourceName": "contactGroups/123", "name": "Friends"},
    {"resourceName": "contactGroups/456", "name": "Work"},
    {"resourceName": "contactGroups/789", "name": "Family"},
]


def create_mock_people_service(pages: Optional[List[Dict[str, Any]]] = None, groups=SAMPLE_GROUPS) -> MagicMock:
    """Create a mock People API service returning the given connection pages."""
    service = MagicMock()

    service.contactGroups.return_value.list.return_value.execute.return_value = {
        "contactGroups": groups,
    }
    service.contactGroups.return_value.batchGet.return_value.execute.return_value = {
        "responses": [{"contactGroup": group} for group in groups],
    }

    if pages is not None:
        connections_list = service.people.return_value.connections.return_value.list
        connections_list.return_value.execute.side_effect = pages

    return service


def connections_list_mock(service: MagicMock) -> MagicMock:
    return service.people.return_value.connections.return_value.list


@pytest.fixture
def people_service():
    """A People service with two pages of contacts."""
    return create_mock_people_service([
        {
            "connections": [
                make_person("John Doe", "people/c1", email="john@example.com",
                            groups=["myContacts", "123"], birthday={"year": 1990, "month": 1, "day": 1}),
                make_person("Jane Roe", "people/c2", phone="+49 170 1234567", groups=["456"]),
            ],
            "nextPageToken": "page-2",
        },
        {
            "connections": [
                make_person("Max Mustermann", "people/c3", groups=["starred"], cities=["Berlin"]),
            ],
        },
    ])


@pytest.fixture
def label_manager(people_service):
    from contacts_report.contacts.labels import LabelManager
    return LabelManager(people_service).load()


@pytest.fixture
def today():
    return date(2024, 6, 10)
