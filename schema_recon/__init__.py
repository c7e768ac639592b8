"""
Schema reconciliation for feed namespaces.

Each namespace holds the relational tables of one feed snapshot. This package
compares those tables against the expected GTFS layout, reports what is
missing or mistyped and optionally applies the DDL that fixes it.
"""

from .cli import run_cli

__all__ = ["run_cli"]
