"""Scanner HTTP client.

This module provides a small interface to the companion phone scanner's
local HTTP server and handles:
- Single-endpoint fetches that surface failures as ``FetchError``
- Best-effort fetches used by auto-discovery, where any failure degrades
  the source to "absent"
- The concurrent auto-discovery join over the scanner's known endpoints

Scanner endpoints (relative to its base URL):
    /scan          full scan, pre-shaped or raw app list
    /scan/raw      raw app list (single-endpoint mode only)
    /pcap/json     network log as JSON
    /contacts      contact records
    /              combined export or scan fallback
"""
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .config import Config
from .errors import FetchError

logger = logging.getLogger(__name__)

KNOWN_ENDPOINTS = ('/scan', '/scan/raw', '/pcap', '/pcap/json', '/contacts', '/export')

# name -> path relative to the base URL, in merge priority order
DISCOVERY_PATHS = (
    ('scan', '/scan'),
    ('network_log', '/pcap/json'),
    ('contacts', '/contacts'),
    ('base', ''),
)


@dataclass(frozen=True)
class DiscoveryResult:
    """Outcome of the auto-discovery join. A value is None when that source failed."""

    scan: Any = None
    network_log: Any = None
    contacts: Any = None
    base: Any = None


def normalize_base_url(url: str) -> str:
    return url.strip().rstrip('/')


def is_specific_endpoint(url: str) -> bool:
    """True when ``url`` already points at one of the scanner's known endpoints."""
    url = normalize_base_url(url)
    return any(url.endswith(endpoint) for endpoint in KNOWN_ENDPOINTS)


class ScannerClient:
    """Client for the phone scanner's JSON endpoints."""

    def __init__(
        self,
        timeout: Optional[int] = None,
        max_workers: Optional[int] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize scanner client.

        Args:
            timeout: Request timeout in seconds (default: from SCANNER_TIMEOUT env var)
            max_workers: Parallel fetches during auto-discovery (default: from DISCOVERY_WORKERS)
            session: Optional requests session, mainly for tests
        """
        self.timeout = timeout or Config.SCANNER_TIMEOUT
        self.max_workers = max_workers or Config.DISCOVERY_WORKERS
        self.session = session or requests.Session()

    def get_json(self, url: str) -> Any:
        """Fetch ``url`` and decode its JSON body.

        Raises:
            FetchError: network failure, non-2xx status or a non-JSON body
        """
        logger.info("Fetching scanner data from %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchError(f"Network error: {e}", url=url) from e

        if not 200 <= response.status_code < 300:
            raise FetchError(f"HTTP {response.status_code}", status_code=response.status_code, url=url)

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON response: {e}", status_code=response.status_code, url=url) from e

    def try_get_json(self, url: str) -> Any:
        """Like ``get_json`` but returns None instead of raising."""
        try:
            return self.get_json(url)
        except FetchError as e:
            logger.info("Source %s unavailable: %s", url, e)
            return None

    def discover(self, base_url: str) -> DiscoveryResult:
        """Fetch every discovery path concurrently and wait for all of them.

        Each fetch degrades independently; the result is only assembled
        after all futures have settled.
        """
        base_url = normalize_base_url(base_url)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                name: executor.submit(self.try_get_json, f"{base_url}{path}")
                for name, path in DISCOVERY_PATHS
            }
            wait(list(futures.values()))

        return DiscoveryResult(**{name: future.result() for name, future in futures.items()})
