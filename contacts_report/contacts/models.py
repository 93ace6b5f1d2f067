"""
Contact Models Module

Normalised contact and label records built from People API responses.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from dateutil import parser
from pydantic import BaseModel, field_validator

from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)

WHATSAPP_BASE_URL = "https://wa.me/"
INSTAGRAM_BASE_URL = "https://www.instagram.com/"

# Full dates only; partial input such as "12" or "May" is rejected
ISO_DATE_EXAMPLE = "YYYY-MM-DD"
BIRTHDAY_FORMATS = ("%d.%m.%Y", "%d/%m/%Y")


class Label(BaseModel):
    """A contact group: resource name plus display name."""
    id: str
    name: str


class Contact(BaseModel):
    """
    A contact as used by the reports.

    A birthday whose year equals the current year means the year is unknown;
    the People API omits the year in that case and it is filled in on import.
    """
    name: str
    birthday: Optional[date] = None
    labels: List[str] = []
    email: str = ""
    city: str = ""
    phone_number: str = ""
    instagram_names: List[str] = []
    resource_name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _require_name(cls, value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()

    @field_validator("birthday", mode="before")
    @classmethod
    def _coerce_birthday(cls, value: Any) -> Optional[date]:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            text = value.strip()
            if len(text) >= len(ISO_DATE_EXAMPLE):
                try:
                    return parser.isoparse(text).date()
                except (ValueError, OverflowError):
                    pass
            for fmt in BIRTHDAY_FORMATS:
                try:
                    return datetime.strptime(text, fmt).date()
                except ValueError:
                    continue
            return None
        return None

    @field_validator("labels", mode="before")
    @classmethod
    def _coerce_labels(cls, value: Any) -> List[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [label for label in value if isinstance(label, str)]

    @field_validator("email", "city", "phone_number", "resource_name", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("instagram_names", mode="before")
    @classmethod
    def _coerce_instagram(cls, value: Any) -> List[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        names = []
        for name in value:
            if not isinstance(name, str) or not name.strip():
                continue
            name = name.strip()
            names.append(name if name.startswith("@") else "@" + name)
        return names

    # =========================================================================
    # Birthday helpers
    # =========================================================================

    def has_known_birth_year(self, today: Optional[date] = None) -> bool:
        """Return True if the birthday carries a real year."""
        if not self.birthday:
            return False
        today = today or date.today()
        return self.birthday.year != today.year

    def birthday_short_format(self) -> str:
        """Birthday as ``dd.mm.``, or an empty string when missing."""
        if not self.birthday:
            logger.debug(f"Birthday is missing for '{self.name}'")
            return ""
        return self.birthday.strftime("%d.%m.")

    def birthday_long_format(self, today: Optional[date] = None) -> str:
        """Birthday as ``dd.mm.yyyy``, or ``dd.mm.`` when the year is unknown."""
        if not self.birthday:
            logger.debug(f"Birthday is missing for '{self.name}'")
            return ""
        if not self.has_known_birth_year(today):
            return self.birthday_short_format()
        return self.birthday.strftime("%d.%m.%Y")

    def calculate_age(self, today: Optional[date] = None) -> int:
        """
        Age in whole years.

        Returns:
            int: The age, or 0 when there is no birthday or the year is unknown.
        """
        today = today or date.today()
        if not self.has_known_birth_year(today):
            logger.debug(f"Birth year is missing for '{self.name}'")
            return 0

        age = today.year - self.birthday.year
        if (today.month, today.day) < (self.birthday.month, self.birthday.day):
            age -= 1
        return age

    # =========================================================================
    # Links
    # =========================================================================

    def whatsapp_link(self) -> str:
        digits = "".join(ch for ch in self.phone_number if ch.isdigit())
        return f"{WHATSAPP_BASE_URL}{digits}" if digits else ""

    @staticmethod
    def instagram_link(username: str) -> str:
        if not username:
            return ""
        return f"{INSTAGRAM_BASE_URL}{username.lstrip('@')}/"

    def all_instagram_links(self) -> List[str]:
        return [self.instagram_link(name) for name in self.instagram_names]

    # =========================================================================
    # Mutation and serialisation
    # =========================================================================

    def add_label(self, label_name: str) -> None:
        """Append a label in place unless it is already present."""
        if isinstance(label_name, str) and label_name not in self.labels:
            self.labels.append(label_name)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contact":
        return cls.model_validate(data)

    def log_details(self) -> None:
        """Log everything known about the contact."""
        logger.info(f"Name: {self.name}")
        if self.birthday:
            logger.info(f"Birthday: {self.birthday_long_format()}")
        if self.phone_number:
            logger.info(f"Phone: {self.phone_number}")
            logger.info(f"WhatsApp: {self.whatsapp_link()}")
        if self.email:
            logger.info(f"Email: {self.email}")
        if self.city:
            logger.info(f"City: {self.city}")
        if self.has_known_birth_year():
            logger.info(f"Age: {self.calculate_age()}")
        for link in self.all_instagram_links():
            logger.info(f"Instagram: {link}")
        if self.labels:
            logger.info(f"Labels: {', '.join(self.labels)}")
