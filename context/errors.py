# context/errors.py
"""
Context error taxonomy.

None of these are fatal. The service layer catches them and degrades to
cached, persisted or bundled data.
"""

from __future__ import annotations

from typing import Optional


class ContextError(Exception):
    """Base class for context ingestion failures."""

    pass


class UpstreamUnavailableError(ContextError):
    """Network failure or non-200 response from an upstream provider."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedPayloadError(ContextError):
    """Payload could not be parsed or yielded zero usable records."""

    pass


class SourceNotConfiguredError(ContextError):
    """No external source is configured for a refreshable dataset."""

    pass
