#!/usr/bin/env python3
"""
Contacts Report

Main entry point. Without arguments it serves the MCP tools; ``run <report>``
sends one report (for cron or other schedulers) and ``authenticate`` runs the
OAuth flow.
"""

import argparse
import os
import sys
import traceback
from typing import List, Optional

from mcp.server.fastmcp import FastMCP

from contacts_report.auth.oauth import start_oauth_process
from contacts_report.jobs import JOBS
from contacts_report.utils.logger import get_logger, setup_logger

setup_logger("contacts_report")
logger = get_logger("contacts_report")

# Reports that take one argument, and how to convert it
JOB_ARGUMENTS = {
    "with-label": str,
    "missing-field": str,
    "upcoming-birthdays": int,
}


def create_mcp() -> FastMCP:
    """Create the FastMCP application with all tools registered."""
    from contacts_report.mcp.tools import setup_tools

    mcp = FastMCP(name=os.getenv("MCP_SERVER_NAME", "Contacts Report"))
    setup_tools(mcp)
    return mcp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="contacts-report", description=__doc__)
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("serve", help="Serve the MCP tools over stdio (default)")
    subparsers.add_parser("authenticate", help="Run the OAuth flow in a browser")

    run_parser = subparsers.add_parser("run", help="Send one report")
    run_parser.add_argument("report", choices=sorted(JOBS))
    run_parser.add_argument("argument", nargs="?", help="Label, field name or number of days")

    return parser


def run_report(report: str, argument: Optional[str]) -> None:
    job = JOBS[report]
    if report in JOB_ARGUMENTS:
        if argument is None and report != "upcoming-birthdays":
            raise SystemExit(f"Report '{report}' needs an argument")
        args = [] if argument is None else [JOB_ARGUMENTS[report](argument)]
    else:
        args = []
    result = job(*args)
    print(result["message"])


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for Contacts Report.
    """
    args = build_parser().parse_args(argv)

    try:
        if args.command == "authenticate":
            if not start_oauth_process():
                sys.exit(1)
        elif args.command == "run":
            run_report(args.report, args.argument)
        else:
            logger.info("Starting Contacts Report MCP server")
            create_mcp().run()
    except SystemExit:
        raise
    except Exception as e:
        logger.error(f"Error running contacts report: {e}")
        logger.error(traceback.format_exc())
        sys.exit(1)


if __name__ == "__main__":
    main()
