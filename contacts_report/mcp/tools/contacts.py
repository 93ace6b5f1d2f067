"""
Contact Tools Module

Read-only analytics over the account's contacts, plus label management.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from mcp.server.fastmcp import FastMCP

from contacts_report.contacts import analytics
from contacts_report.contacts.models import Contact
from contacts_report.jobs import NotAuthenticatedError, ReportContext, build_report_context
from contacts_report.types import ContactSummary, ErrorResponse, UpcomingBirthday
from contacts_report.utils.config import get_config
from contacts_report.utils.logger import get_logger

logger = get_logger(__name__)


def summarize_contact(contact: Contact) -> ContactSummary:
    """Contact fields as returned by tools."""
    return {
        "name": contact.name,
        "email": contact.email,
        "phone_number": contact.phone_number,
        "city": contact.city,
        "birthday": contact.birthday_long_format() or None,
        "labels": list(contact.labels),
    }


def setup_contact_tools(mcp: FastMCP) -> None:
    """Set up contact analytics and label tools on the FastMCP application."""

    def _context(use_cache: bool = True) -> Tuple[Optional[ReportContext], Optional[ErrorResponse]]:
        try:
            return build_report_context(use_cache=use_cache), None
        except NotAuthenticatedError as e:
            return None, {"success": False, "error": str(e)}

    @mcp.tool()
    def get_contact_stats(label_filter: Optional[List[str]] = None, refresh: bool = False) -> Dict[str, Any]:
        """
        Field coverage statistics and the label distribution.

        Args:
            label_filter (List[str], optional): Only count contacts with any of these labels
            refresh (bool): Bypass the contacts cache (default: False)

        Returns:
            Dict[str, Any]: success and stats
        """
        ctx, error = _context(not refresh)
        if error:
            return error

        try:
            contacts = ctx.fetch_contacts(label_filter)
            return {"success": True, "stats": analytics.generate_contact_stats(contacts)}
        except Exception as e:
            logger.error(f"Failed to generate contact stats: {e}")
            return {"success": False, "error": f"Failed to generate contact stats: {e}"}

    @mcp.tool()
    def get_upcoming_birthdays(days: Optional[int] = None) -> Dict[str, Any]:
        """
        Contacts whose next birthday falls within the coming days, soonest first.

        Args:
            days (int, optional): Days to look ahead, inclusive. Defaults to the configured window.

        Returns:
            Dict[str, Any]: success, days and birthdays (contact, next_birthday, turning)
        """
        if days is None:
            days = get_config().get("birthday_window_days", 7)

        ctx, error = _context()
        if error:
            return error

        try:
            today = date.today()
            upcoming = analytics.upcoming_birthdays_with_dates(ctx.fetch_contacts(), days, today)
            birthdays: List[UpcomingBirthday] = []
            for contact, next_date in upcoming:
                entry: UpcomingBirthday = {"contact": summarize_contact(contact), "next_birthday": next_date.isoformat()}
                if contact.has_known_birth_year(today):
                    entry["turning"] = next_date.year - contact.birthday.year
                birthdays.append(entry)
            return {"success": True, "days": days, "birthdays": birthdays}
        except Exception as e:
            logger.error(f"Failed to find upcoming birthdays: {e}")
            return {"success": False, "error": f"Failed to find upcoming birthdays: {e}"}

    @mcp.tool()
    def find_duplicate_contacts() -> Dict[str, Any]:
        """
        Find contacts sharing a name (case-insensitive), email or phone number.

        Returns:
            Dict[str, Any]: success, total_contacts_scanned, total_groups, duplicate_groups
        """
        ctx, error = _context()
        if error:
            return error

        try:
            contacts = ctx.fetch_contacts()
            groups = analytics.find_duplicate_contacts(contacts)
            return {
                "success": True,
                "total_contacts_scanned": len(contacts),
                "total_groups": len(groups),
                "duplicate_groups": [[summarize_contact(c) for c in group] for group in groups],
            }
        except Exception as e:
            logger.error(f"Failed to find duplicates: {e}")
            return {"success": False, "error": f"Failed to find duplicates: {e}"}

    @mcp.tool()
    def list_labels() -> Dict[str, Any]:
        """
        List the account's contact labels, system groups excluded.

        Returns:
            Dict[str, Any]: success and labels (id, name)
        """
        ctx, error = _context()
        if error:
            return error

        if ctx.label_manager.load_error:
            return {"success": False, "error": f"Failed to list labels: {ctx.label_manager.load_error}"}

        return {
            "success": True,
            "labels": [label.model_dump() for label in ctx.label_manager.all_labels()],
        }

    @mcp.tool()
    def create_label(name: str) -> Dict[str, Any]:
        """
        Create a contact label.

        Args:
            name (str): Name for the new label

        Returns:
            Dict[str, Any]: success and the created label
        """
        ctx, error = _context()
        if error:
            return error

        if ctx.label_manager.label_exists_by_name(name):
            return {"success": False, "error": f"Label '{name}' already exists"}

        label = ctx.label_manager.add_label(name)
        if label is None:
            return {"success": False, "error": f"Failed to create label '{name}'"}
        return {"success": True, "label": label.model_dump()}

    @mcp.tool()
    def add_label_to_contacts(label: str, source_label: Optional[str] = None) -> Dict[str, Any]:
        """
        Assign a label to many contacts at once.

        Args:
            label (str): Label to assign; created if missing
            source_label (str, optional): Only contacts carrying this label. Defaults to
                contacts without any label.

        Returns:
            Dict[str, Any]: success, processed, skipped and total counts
        """
        ctx, error = _context(use_cache=False)
        if error:
            return error

        try:
            contacts = ctx.fetch_contacts()
            if source_label:
                targets = analytics.find_contacts_with_label(contacts, source_label)
            else:
                targets = analytics.find_contacts_without_labels(contacts)
            return ctx.contact_manager.add_label_to_contacts(targets, label)
        except Exception as e:
            logger.error(f"Failed to assign label '{label}': {e}")
            return {"success": False, "error": f"Failed to assign label: {e}"}
