"""
Email Sender Module

Builds multipart/alternative messages and sends them through the Gmail API.
"""

import base64
from email.header import Header
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any, Dict, Optional

from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)


def build_raw_message(
    to_email: str,
    from_email: str,
    sender_name: str,
    subject: str,
    text_body: str,
    html_body: str,
) -> str:
    """
    Build a multipart/alternative message with a plain-text and an HTML part.

    Returns:
        str: The message as URL-safe base64, ready for the Gmail ``raw`` field.
    """
    message = MIMEMultipart("alternative")
    message["To"] = to_email
    message["From"] = formataddr((sender_name, from_email))
    message["Subject"] = Header(subject, "utf-8")

    message.attach(MIMEText(text_body, "plain", "utf-8"))
    # utf-8 MIMEText parts are base64 encoded
    message.attach(MIMEText(html_body, "html", "utf-8"))

    return base64.urlsafe_b64encode(message.as_bytes()).decode()


class EmailSender:
    """
    Sends report emails from the authenticated Gmail account.

    Args:
        gmail_service: A Gmail API service resource.
        sender_name: Display name used in the From header.
        recipient: Report recipient; defaults to the account's own address.
    """

    def __init__(self, gmail_service: Any, sender_name: str = "Contacts Report", recipient: str = "") -> None:
        self.service = gmail_service
        self.sender_name = sender_name
        self.recipient = recipient
        self._account_email: Optional[str] = None

    @property
    def account_email(self) -> str:
        if self._account_email is None:
            profile = self.service.users().getProfile(userId="me").execute()
            self._account_email = profile.get("emailAddress", "")
        return self._account_email

    def send(self, subject: str, text_body: str, html_body: str) -> Dict[str, Any]:
        """
        Send one report email.

        Returns:
            Dict[str, Any]: The Gmail API message resource.
        """
        from_email = self.account_email
        to_email = self.recipient or from_email

        raw = build_raw_message(to_email, from_email, self.sender_name, subject, text_body, html_body)
        sent = self.service.users().messages().send(userId="me", body={"raw": raw}).execute()

        logger.info(f"Sent '{subject}' to {to_email} (id {sent.get('id', '')})")
        return sent
