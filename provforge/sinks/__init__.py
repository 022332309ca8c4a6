"""Audit sinks: destinations that event bus handlers write to."""

from provforge.sinks.jsonl_audit import JsonlAuditSink

__all__ = ["JsonlAuditSink"]
