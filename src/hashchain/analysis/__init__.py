"""Diagnostics for the bucketed hash map."""

from .chain import format_trace_lines, trace_chain_get, trace_chain_set

__all__ = ["trace_chain_get", "trace_chain_set", "format_trace_lines"]
