# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains ALL project-management logic: the Asana client, its
# rate limiter, the record types, and the query functions behind every tool.
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports Google ADK or FastMCP.  Query functions
#   take an AsanaClient and plain parameters and return envelope dicts, so
#   they can be driven from tests with a fake client and a fixed "now".
# =============================================================================
