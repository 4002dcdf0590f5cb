"""Error taxonomy for the ingestion pipeline.

Nothing raised here is fatal to the process. The orchestrator turns these
into an ``ErrorDescriptor`` and keeps the previous dataset active.
"""
from typing import Optional


class ConsentTheaterError(Exception):
    """Base class for every ingestion failure."""

    kind = "error"


class ParseError(ConsentTheaterError):
    """Payload is not valid JSON."""

    kind = "parse_error"


class FormatError(ConsentTheaterError):
    """Payload is valid JSON but matches no recognized shape."""

    kind = "format_error"


class FetchError(ConsentTheaterError):
    """Single-endpoint request failed (network, non-2xx or non-JSON body)."""

    kind = "fetch_error"

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class NoScanDataError(ConsentTheaterError):
    """Auto-discovery finished but no source produced usable scan data."""

    kind = "no_scan_data"
