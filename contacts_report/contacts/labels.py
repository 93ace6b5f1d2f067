"""
Label Lookup Module

Resolves contact group ids to display names from a single listing per run.
"""

from typing import Any, Dict, List, Optional

from contacts_report.contacts.models import Label
from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)

GROUP_PREFIX = "contactGroups/"

# System groups every contact is a member of; never reported as labels
RESERVED_LABEL_IDS = {"myContacts", "starred"}

# batchGet accepts at most 200 resource names per request
BATCH_GET_LIMIT = 200


def _bare_id(label_id: str) -> str:
    if label_id.startswith(GROUP_PREFIX):
        return label_id[len(GROUP_PREFIX):]
    return label_id


class LabelManager:
    """
    In-memory id to name map of the account's contact groups.

    Args:
        people_service: A People API service resource.
    """

    def __init__(self, people_service: Any) -> None:
        self.service = people_service
        self.labels: Dict[str, str] = {}
        self.load_error: Optional[str] = None

    def load(self) -> "LabelManager":
        """
        List every contact group and resolve it through batchGet.

        Failures are logged and recorded on ``load_error``; the map stays empty.

        Returns:
            LabelManager: self, for chaining.
        """
        try:
            resource_names = []
            page_token = None
            while True:
                request_params = {"pageSize": 1000}
                if page_token:
                    request_params["pageToken"] = page_token
                result = self.service.contactGroups().list(**request_params).execute()
                resource_names.extend(
                    group["resourceName"] for group in result.get("contactGroups", [])
                )
                page_token = result.get("nextPageToken")
                if not page_token:
                    break

            labels = {}
            for start in range(0, len(resource_names), BATCH_GET_LIMIT):
                chunk = resource_names[start:start + BATCH_GET_LIMIT]
                response = self.service.contactGroups().batchGet(
                    resourceNames=chunk
                ).execute()
                for item in response.get("responses", []):
                    group = item.get("contactGroup") or {}
                    if group.get("resourceName") and group.get("name"):
                        labels[group["resourceName"]] = group["name"]

            self.labels = labels
            self.load_error = None
            logger.info(f"Loaded {len(labels)} contact labels")
        except Exception as e:
            logger.error(f"Error fetching contact labels: {e}")
            self.labels = {}
            self.load_error = str(e)

        return self

    def get_label_name_by_id(self, label_id: str) -> Optional[str]:
        """
        Resolve a label id (bare or ``contactGroups/``-prefixed) to its name.

        Returns:
            Optional[str]: The label name, or None for reserved and unknown ids.
        """
        if not isinstance(label_id, str) or not label_id:
            return None
        bare = _bare_id(label_id)
        if bare in RESERVED_LABEL_IDS:
            return None
        return self.labels.get(GROUP_PREFIX + bare)

    def get_label_names_by_ids(self, label_ids: List[str]) -> List[str]:
        """Resolve several ids, silently dropping reserved and unknown ones."""
        names = []
        for label_id in label_ids:
            name = self.get_label_name_by_id(label_id)
            if name is not None:
                names.append(name)
        return names

    def label_exists_by_id(self, label_id: str) -> bool:
        return self.get_label_name_by_id(label_id) is not None

    def label_exists_by_name(self, label_name: str) -> bool:
        return self.get_label_id_by_name(label_name) is not None

    def get_label_id_by_name(self, label_name: str) -> Optional[str]:
        """Id of a user label by exact name; reserved system groups never match."""
        for label_id, name in self.labels.items():
            if name == label_name and _bare_id(label_id) not in RESERVED_LABEL_IDS:
                return label_id
        return None

    def all_labels(self) -> List[Label]:
        """User-visible labels, reserved system groups excluded."""
        return [
            Label(id=label_id, name=name)
            for label_id, name in self.labels.items()
            if _bare_id(label_id) not in RESERVED_LABEL_IDS
        ]

    def add_label(self, name: str) -> Optional[Label]:
        """
        Create a new contact group and add it to the in-memory map.

        Returns:
            Optional[Label]: The created label, or None if creation failed.
        """
        try:
            created = self.service.contactGroups().create(
                body={"contactGroup": {"name": name}}
            ).execute()
        except Exception as e:
            logger.error(f"Error adding contact label '{name}': {e}")
            return None

        label = Label(id=created["resourceName"], name=created.get("name", name))
        self.labels[label.id] = label.name
        logger.info(f"Created contact label '{label.name}' ({label.id})")
        return label

    def log_all_labels(self) -> None:
        for label in self.all_labels():
            logger.info(label.name)
