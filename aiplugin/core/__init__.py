"""
Core logic for the plugin toolkit.

This subpackage provides the plugin registry with parameter validation
and dispatch, schema derivation for provider dialects, the line-change
data model and diff engine, and the router that turns model tool calls
into registry invocations.
"""

__all__ = [
    "registry",
    "schema",
    "line_change",
    "diff",
    "router",
]
