"""
Report email rendering and dispatch.
"""

from contacts_report.email.reports import EmailManager
from contacts_report.email.sender import EmailSender, build_raw_message
from contacts_report.email.templates import EmailTemplates

__all__ = ["EmailManager", "EmailSender", "EmailTemplates", "build_raw_message"]
