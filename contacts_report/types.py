"""
Contacts Report Type Definitions

TypedDict definitions for analytics results and tool return types.
"""

from typing import Dict, List, NotRequired, Optional, TypedDict


# =============================================================================
# Common Types
# =============================================================================

class ErrorResponse(TypedDict):
    """Standard error response from tools."""
    success: bool
    error: str


# =============================================================================
# Analytics Types
# =============================================================================

class ContactStats(TypedDict):
    """Field coverage and label histogram for a contact list."""
    total_contacts: int
    with_birthday: int
    with_email: int
    with_phone: int
    with_city: int
    with_labels: int
    with_instagram: int
    birthday_percentage: str
    email_percentage: str
    phone_percentage: str
    city_percentage: str
    label_percentage: str
    instagram_percentage: str
    label_distribution: Dict[str, int]


class ContactSummary(TypedDict):
    """Contact fields exposed through tools."""
    name: str
    email: str
    phone_number: str
    city: str
    birthday: Optional[str]
    labels: List[str]


class UpcomingBirthday(TypedDict):
    """A contact together with its next birthday."""
    contact: ContactSummary
    next_birthday: str
    turning: NotRequired[int]


# =============================================================================
# Tool Response Types
# =============================================================================

class ReportSentResponse(TypedDict):
    """Response when a report email is sent."""
    success: bool
    message: str
    count: int
    email_id: str


class BulkLabelResponse(TypedDict):
    """Response from bulk label assignment."""
    success: bool
    message: str
    label: str
    processed: int
    skipped: int
    total: int
