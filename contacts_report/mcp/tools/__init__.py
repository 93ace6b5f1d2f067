"""
MCP Tools Package

Tools are organized into the following modules:
- auth: Authentication (authenticate, logout, check_auth_status)
- contacts: Contact analytics and labels (stats, upcoming birthdays, duplicates, labels)
- reports: Report emails (one tool per report)
"""

from mcp.server.fastmcp import FastMCP

from contacts_report.mcp.tools.auth import setup_auth_tools
from contacts_report.mcp.tools.contacts import setup_contact_tools
from contacts_report.mcp.tools.reports import setup_report_tools


def setup_tools(mcp: FastMCP) -> None:
    """
    Set up all MCP tools on the FastMCP application.

    Args:
        mcp (FastMCP): The FastMCP application.
    """
    setup_auth_tools(mcp)
    setup_contact_tools(mcp)
    setup_report_tools(mcp)


__all__ = [
    "setup_tools",
    "setup_auth_tools",
    "setup_contact_tools",
    "setup_report_tools",
]
