"""Exception hierarchy for the reporting client.

Send operations never raise these to application code; they surface only at
bootstrap (bad configuration) or from a transport to the Reporter, which
catches and logs them.
"""

from __future__ import annotations


class ReportingError(Exception):
    """Base class for errors raised by the reporting client."""


class TransportError(ReportingError):
    """A transport could not accept or persist an event."""


class ConfigurationError(ReportingError, ValueError):
    """Configuration is missing or malformed."""
