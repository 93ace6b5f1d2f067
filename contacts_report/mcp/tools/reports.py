"""
Report Tools Module

Exposes the report jobs as MCP tools. Tools never raise; failures come back
as ``{"success": False, "error": ...}``.
"""

from typing import Any, Callable, Dict, Optional

from mcp.server.fastmcp import FastMCP

from contacts_report import jobs
from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)


def _run(job: Callable[..., Dict[str, Any]], *args: Any) -> Dict[str, Any]:
    try:
        return job(*args)
    except jobs.NotAuthenticatedError as e:
        return {"success": False, "error": str(e)}
    except Exception as e:
        return {"success": False, "error": f"Failed to send report: {e}"}


def setup_report_tools(mcp: FastMCP) -> None:
    """Set up report email tools on the FastMCP application."""

    @mcp.tool()
    def send_unlabeled_contacts_report() -> Dict[str, Any]:
        """
        Email a report of all contacts that have no labels.

        Returns:
            Dict[str, Any]: success, message, count of contacts and the sent email id
        """
        return _run(jobs.send_unlabeled_contacts_report)

    @mcp.tool()
    def send_contacts_without_birthday_report() -> Dict[str, Any]:
        """Email a report of all contacts without a birthday."""
        return _run(jobs.send_contacts_without_birthday_report)

    @mcp.tool()
    def send_contacts_with_label_report(label: str) -> Dict[str, Any]:
        """
        Email a report of all contacts carrying a label.

        Args:
            label (str): Exact (case-sensitive) label name
        """
        return _run(jobs.send_contacts_with_label_report, label)

    @mcp.tool()
    def send_contacts_missing_field_report(field: str) -> Dict[str, Any]:
        """
        Email a report of contacts with an empty field.

        Args:
            field (str): One of birthday, labels, email, city, phone_number, instagram_names
        """
        return _run(jobs.send_contacts_missing_field_report, field)

    @mcp.tool()
    def send_upcoming_birthdays_report(days: Optional[int] = None) -> Dict[str, Any]:
        """
        Email a report of birthdays coming up.

        Args:
            days (int, optional): Days to look ahead, inclusive. Defaults to the configured window.
        """
        return _run(jobs.send_upcoming_birthdays_report, days)

    @mcp.tool()
    def send_invalid_phones_report() -> Dict[str, Any]:
        """Email a report of contacts whose phone number looks malformed."""
        return _run(jobs.send_invalid_phones_report)

    @mcp.tool()
    def send_duplicate_contacts_report() -> Dict[str, Any]:
        """Email a report of contacts sharing a name, email or phone number."""
        return _run(jobs.send_duplicate_contacts_report)

    @mcp.tool()
    def send_contact_stats_report() -> Dict[str, Any]:
        """Email field coverage statistics and the label distribution."""
        return _run(jobs.send_contact_stats_report)

    @mcp.tool()
    def send_label_stats_report() -> Dict[str, Any]:
        """Email label usage, including unused labels."""
        return _run(jobs.send_label_stats_report)

    @mcp.tool()
    def send_contacts_by_city_report() -> Dict[str, Any]:
        """Email contacts grouped by city."""
        return _run(jobs.send_contacts_by_city_report)
