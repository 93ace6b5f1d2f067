"""
Contact Retrieval Module

Pages through the account's connections, resolves their labels and builds
normalised Contact records. Transient page failures are retried with
exponential backoff; complete results are cached in the property store.
"""

import calendar
import random
import time
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from contacts_report.cache.ttl_cache import Cache
from contacts_report.contacts.labels import LabelManager
from contacts_report.contacts.models import Contact
from contacts_report.types import BulkLabelResponse
from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)

PERSON_FIELDS = "names,birthdays,memberships,emailAddresses,phoneNumbers,addresses,biographies"
CACHE_KEY_PREFIX = "contacts_"

# Contacts change more often than labels; cache them for 30 minutes
CONTACTS_CACHE_TTL = 30 * 60

# contactGroups.members.modify accepts at most 1000 resource names per request
MODIFY_MEMBERS_LIMIT = 1000

INSTAGRAM_PREFIX = "@"


class ContactFetchError(Exception):
    """Raised when a page of contacts keeps failing after all retries."""


def validate_label_filter(label_filter: Any) -> None:
    """
    Validate a label filter.

    Raises:
        TypeError: If the filter is not a list of strings.
    """
    if not isinstance(label_filter, (list, tuple)):
        raise TypeError("Label filter must be a list")
    if any(not isinstance(label, str) for label in label_filter):
        raise TypeError("All labels must be strings")


def contact_matches_label_filter(label_filter: List[str], contact_labels: List[str]) -> bool:
    """An empty filter matches everything; otherwise any shared label matches."""
    if not label_filter:
        return True
    return any(label.strip() in label_filter for label in contact_labels)


def extract_instagram_names(notes: str) -> List[str]:
    """
    Extract Instagram handles from biography notes.

    Notes from several biographies are joined with ". ". Every entry that
    starts with "@" holds a comma-separated list of handles.

    Returns:
        List[str]: Handles with a leading "@", in order, without duplicates.
    """
    if not notes:
        return []

    names: List[str] = []
    for entry in notes.split(". "):
        entry = entry.strip()
        if not entry.startswith(INSTAGRAM_PREFIX):
            continue
        for username in entry.split(","):
            username = username.strip().rstrip(".")
            if not username or username == INSTAGRAM_PREFIX:
                continue
            if not username.startswith(INSTAGRAM_PREFIX):
                username = INSTAGRAM_PREFIX + username
            if username not in names:
                names.append(username)
    return names


def cache_key_for(label_filter: List[str]) -> str:
    return CACHE_KEY_PREFIX + ",".join(sorted(label_filter))


def current_year() -> int:
    """Year stored for birthdays whose year is unknown."""
    return date.today().year


class ContactManager:
    """
    Fetches contacts for a single report run.

    Args:
        people_service: A People API service resource.
        label_manager: A loaded LabelManager.
        cache: Optional Cache for complete fetch results.
        page_size: Connections requested per page.
        max_retries: Retries allowed per page before the fetch is abandoned.
        sleep: Sleep function used between retries.
        cache_ttl: Time to live in seconds for cached contact lists.
    """

    def __init__(
        self,
        people_service: Any,
        label_manager: LabelManager,
        cache: Optional[Cache] = None,
        page_size: int = 100,
        max_retries: int = 3,
        sleep: Callable[[float], None] = time.sleep,
        cache_ttl: int = CONTACTS_CACHE_TTL,
    ) -> None:
        self.service = people_service
        self.label_manager = label_manager
        self.cache = cache
        self.page_size = page_size
        self.max_retries = max_retries
        self.cache_ttl = cache_ttl
        self._sleep = sleep

    def fetch_contacts(
        self,
        label_filter: Optional[List[str]] = None,
        use_cache: bool = True,
    ) -> List[Contact]:
        """
        Fetch all contacts, optionally limited to those carrying any of the given labels.

        Args:
            label_filter (List[str], optional): Label names; empty or None means no filtering.
            use_cache (bool): Read and write the property store cache. Defaults to True.

        Returns:
            List[Contact]: The matching contacts.

        Raises:
            TypeError: If the label filter is malformed.
            ContactFetchError: If a page still fails after max_retries retries.
        """
        label_filter = list(label_filter or [])
        validate_label_filter(label_filter)
        key = cache_key_for(label_filter)

        if use_cache and self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                contacts = self._deserialize(cached)
                logger.info(f"Loaded {len(contacts)} contacts from cache")
                return contacts

        if label_filter:
            logger.info(f"Fetching contacts with any label of {label_filter}")
        else:
            logger.info("Fetching all contacts")

        contacts: List[Contact] = []
        page_token: Optional[str] = None
        while True:
            response = self._fetch_page(page_token)
            for person in response.get("connections", []):
                labels = self.get_contact_labels(person)
                if not contact_matches_label_filter(label_filter, labels):
                    continue
                contact = self.create_contact(person, labels)
                if contact is not None:
                    contacts.append(contact)

            page_token = response.get("nextPageToken")
            if not page_token:
                break

        logger.info(f"Fetched {len(contacts)} contacts")

        if use_cache and self.cache is not None:
            self.cache.set(key, [contact.to_dict() for contact in contacts], ttl=self.cache_ttl)

        return contacts

    def _fetch_page(self, page_token: Optional[str]) -> Dict[str, Any]:
        """Request one page, retrying with exponential backoff and jitter."""
        attempt = 0
        while True:
            try:
                return self.service.people().connections().list(
                    resourceName="people/me",
                    pageSize=self.page_size,
                    personFields=PERSON_FIELDS,
                    pageToken=page_token,
                ).execute()
            except Exception as e:
                attempt += 1
                if attempt > self.max_retries:
                    logger.error(f"Maximum retries exceeded fetching contacts: {e}")
                    raise ContactFetchError(
                        f"Failed to fetch contacts after {self.max_retries} retries: {e}"
                    ) from e

                delay = 2 ** attempt + random.uniform(0, 1)
                logger.warning(
                    f"API error (attempt {attempt}/{self.max_retries}): {e}. "
                    f"Retrying in {delay:.1f} seconds"
                )
                self._sleep(delay)

    def _deserialize(self, cached: List[Dict[str, Any]]) -> List[Contact]:
        contacts = []
        for data in cached:
            try:
                contacts.append(Contact.from_dict(data))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable cached contact: {e}")
        return contacts

    def get_contact_labels(self, person: Dict[str, Any]) -> List[str]:
        """Resolve a person's group memberships to label names."""
        label_ids = []
        for membership in person.get("memberships", []):
            group = membership.get("contactGroupMembership")
            if not group:
                continue
            label_id = group.get("contactGroupResourceName") or group.get("contactGroupId")
            if label_id:
                label_ids.append(label_id)
        return self.label_manager.get_label_names_by_ids(label_ids)

    def create_contact(self, person: Dict[str, Any], label_names: List[str]) -> Optional[Contact]:
        """
        Build a Contact from a People API person.

        Returns:
            Optional[Contact]: The contact, or None if the record is unusable.
        """
        resource_name = person.get("resourceName", "")
        try:
            names = person.get("names") or [{}]
            phones = person.get("phoneNumbers") or [{}]
            emails = person.get("emailAddresses") or [{}]
            cities = [a.get("city") for a in person.get("addresses", []) if a.get("city")]
            notes = ". ".join(b.get("value", "") for b in person.get("biographies", []))

            return Contact(
                name=names[0].get("displayName"),
                birthday=self._parse_birthday(person, resource_name),
                labels=label_names,
                email=emails[0].get("value", ""),
                city=", ".join(cities),
                phone_number=phones[0].get("value", ""),
                instagram_names=extract_instagram_names(notes),
                resource_name=resource_name,
            )
        except (ValidationError, AttributeError, IndexError, TypeError) as e:
            logger.warning(f"Skipping contact {resource_name or '<unknown>'}: {e}")
            return None

    @staticmethod
    def _parse_birthday(person: Dict[str, Any], resource_name: str) -> Optional[date]:
        """
        Birthday from the first entry; a missing year becomes the current year.

        Without a year, February 29 falls on March 1 when the current year is
        not a leap year.
        """
        birthdays = person.get("birthdays") or []
        if not birthdays:
            return None
        data = birthdays[0].get("date") or {}
        month, day = data.get("month"), data.get("day")
        if not month or not day:
            logger.warning(f"Ignoring incomplete birthday for {resource_name}")
            return None
        year = data.get("year")
        try:
            if not year:
                year = current_year()
                if (month, day) == (2, 29) and not calendar.isleap(year):
                    return date(year, 3, 1)
            return date(year, month, day)
        except (ValueError, TypeError):
            logger.warning(f"Ignoring invalid birthday for {resource_name}: {data}")
            return None

    def invalidate_cache(self) -> None:
        """Drop every cached contact list."""
        if self.cache is not None:
            self.cache.delete_prefix(CACHE_KEY_PREFIX)

    def add_label_to_contacts(self, contacts: List[Contact], label_name: str) -> BulkLabelResponse:
        """
        Assign a label to several contacts, creating the label when missing.

        Each contact's label list is updated in place once the API accepts the change.
        Cached contact lists are dropped as soon as any membership changed.
        """
        response: BulkLabelResponse = {
            "success": False,
            "message": "",
            "label": label_name,
            "processed": 0,
            "skipped": 0,
            "total": len(contacts),
        }

        label_id = self.label_manager.get_label_id_by_name(label_name)
        if label_id is None:
            label = self.label_manager.add_label(label_name)
            if label is None:
                response["message"] = f"Could not create label '{label_name}'"
                return response
            label_id = label.id

        targets = [c for c in contacts if c.resource_name and label_name not in c.labels]
        response["skipped"] = len(contacts) - len(targets)

        for start in range(0, len(targets), MODIFY_MEMBERS_LIMIT):
            chunk = targets[start:start + MODIFY_MEMBERS_LIMIT]
            try:
                self.service.contactGroups().members().modify(
                    resourceName=label_id,
                    body={"resourceNamesToAdd": [c.resource_name for c in chunk]},
                ).execute()
            except Exception as e:
                logger.error(f"Failed to add contacts to label '{label_name}': {e}")
                response["message"] = f"Added {response['processed']} contacts before failing: {e}"
                if response["processed"]:
                    self.invalidate_cache()
                return response

            for contact in chunk:
                contact.add_label(label_name)
            response["processed"] += len(chunk)

        if response["processed"]:
            self.invalidate_cache()

        response["success"] = True
        response["message"] = f"Added {response['processed']} contacts to label '{label_name}'"
        logger.info(response["message"])
        return response
