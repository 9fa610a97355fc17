# Pulse Services Package
"""
Backend services for the Pulse launcher core.

Services handle usage persistence and notify listeners through GObject
signals. The execution sink lives in pulse.services.execution.
"""

from .usage import UsageRecord, UsageStore

__all__ = ["UsageRecord", "UsageStore"]
