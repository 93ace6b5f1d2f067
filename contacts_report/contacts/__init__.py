"""
Contact retrieval, label lookup and analytics.
"""

from contacts_report.contacts.models import Contact, Label
from contacts_report.contacts.labels import LabelManager
from contacts_report.contacts.manager import ContactManager, ContactFetchError

__all__ = ["Contact", "Label", "LabelManager", "ContactManager", "ContactFetchError"]
