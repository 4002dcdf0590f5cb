"""Ingestion orchestrator.

Three ingestion modes share one output contract: on success the store's
snapshot is replaced in a single step; on failure the previous snapshot
stays active.

- File mode (``ingest_file``): best effort. Malformed JSON or an
  unrecognized shape is logged and ignored, no error is surfaced.
- Single-endpoint URL mode: one fetch, failures surfaced as an error.
- Base-URL auto-discovery: four concurrent fetches, merged after all settle.
"""
import json
import logging
import os
from typing import Any, Optional, Tuple

from .config import Config
from .errors import ConsentTheaterError, FormatError, NoScanDataError, ParseError
from .models import ContactRecord, Dataset, ErrorDescriptor, IngestionOutcome, NetworkLogEntry, ScanResult
from .normalizer import (
    CombinedPayload,
    PreShapedScan,
    RawPhoneScan,
    decode_combined,
    detect_shape,
    looks_like_network_log,
    network_log_items,
    normalize,
    parse_contacts,
    parse_network_log,
)
from .rules import RuleSet
from .scanner_client import ScannerClient, is_specific_endpoint, normalize_base_url
from .store import DatasetStore

logger = logging.getLogger(__name__)


def _read_json(path: str) -> Any:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def load_placeholder_contacts(data_dir: Optional[str] = None) -> Tuple[ContactRecord, ...]:
    """Bundled contact set used whenever a source carries no contacts."""
    return parse_contacts(_read_json(os.path.join(data_dir or Config.SAMPLE_DATA_DIR, 'mock-contacts.json')))


def parse_json_bytes(raw: bytes) -> Any:
    try:
        text = raw.decode('utf-8-sig') if isinstance(raw, (bytes, bytearray)) else raw
        return json.loads(text)
    except (UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"Malformed JSON: {e}") from e


class IngestionOrchestrator:
    """Fetches, parses and normalizes sources, then swaps the dataset snapshot."""

    def __init__(
        self,
        store: Optional[DatasetStore] = None,
        client: Optional[ScannerClient] = None,
        rules: Optional[RuleSet] = None,
        placeholder_contacts: Optional[Tuple[ContactRecord, ...]] = None,
        data_dir: Optional[str] = None,
    ):
        self.store = store or DatasetStore()
        self.client = client or ScannerClient()
        self.rules = rules
        self.data_dir = data_dir or Config.SAMPLE_DATA_DIR
        if placeholder_contacts is None:
            placeholder_contacts = load_placeholder_contacts(self.data_dir)
        self.placeholder_contacts = tuple(placeholder_contacts)

    @property
    def dataset(self) -> Dataset:
        return self.store.snapshot

    # ========================
    # File mode
    # ========================

    def ingest_file(self, raw: bytes, filename: str = 'upload') -> IngestionOutcome:
        """Load an uploaded JSON file.

        Recognized: combined export, pre-shaped scan, raw phone scan, a bare
        network-log array, or ``{"entries": [...]}``. Anything else leaves
        the dataset unchanged without surfacing an error.
        """
        try:
            value = parse_json_bytes(raw)
            dataset = self._dataset_from_file_value(value, source=f"file:{filename}")
        except ConsentTheaterError as e:
            # TODO: surface a warning to the uploader instead of only logging it
            logger.warning("Ignoring uploaded file %s: %s", filename, e)
            return IngestionOutcome(applied=False, generation=self.store.generation)

        if dataset is None:
            logger.warning("Ignoring uploaded file %s: unrecognized shape", filename)
            return IngestionOutcome(applied=False, generation=self.store.generation)
        return IngestionOutcome(applied=True, generation=self.store.replace(dataset))

    def _dataset_from_file_value(self, value: Any, source: str) -> Optional[Dataset]:
        current = self.store.snapshot
        shape = detect_shape(value)

        if isinstance(shape, CombinedPayload):
            return self._dataset_from_combined(shape, source)
        if isinstance(shape, (PreShapedScan, RawPhoneScan)):
            return self._with_scan(current, normalize(value, self.rules), source)
        if looks_like_network_log(value):
            return current.evolve(vpn_log=parse_network_log(value), source=source)
        return None

    # ========================
    # URL modes
    # ========================

    def ingest_url(self, url: str) -> IngestionOutcome:
        """Load from a scanner URL, either one known endpoint or a base URL to auto-discover."""
        url = normalize_base_url(url)
        try:
            if is_specific_endpoint(url):
                dataset = self._dataset_from_endpoint(url)
            else:
                dataset = self._dataset_from_discovery(url)
        except ConsentTheaterError as e:
            logger.warning("Loading from %s failed: %s", url, e)
            return IngestionOutcome(
                applied=False,
                generation=self.store.generation,
                error=ErrorDescriptor(kind=e.kind, message=str(e)),
            )
        return IngestionOutcome(applied=True, generation=self.store.replace(dataset))

    def _dataset_from_endpoint(self, url: str) -> Dataset:
        value = self.client.get_json(url)
        current = self.store.snapshot
        source = f"url:{url}"
        shape = detect_shape(value)

        if isinstance(shape, CombinedPayload):
            return self._dataset_from_combined(shape, source)
        if isinstance(shape, (PreShapedScan, RawPhoneScan)):
            return self._with_scan(current, normalize(value, self.rules), source)
        if url.endswith('/pcap/json') or url.endswith('/pcap'):
            return current.evolve(vpn_log=parse_network_log(value), source=source)
        if url.endswith('/contacts'):
            contacts = parse_contacts(value)
            return current.evolve(mock_contacts=contacts or self.placeholder_contacts, source=source)
        # Raises FormatError for anything the normalizer does not recognize.
        return self._with_scan(current, normalize(value, self.rules), source)

    def _dataset_from_discovery(self, base_url: str) -> Dataset:
        found = self.client.discover(base_url)
        source = f"discovery:{base_url}"

        for value in (found.scan, found.base, found.network_log, found.contacts):
            shape = detect_shape(value)
            if isinstance(shape, CombinedPayload):
                try:
                    return self._dataset_from_combined(shape, source)
                except FormatError as e:
                    logger.info("Combined payload from %s unusable: %s", base_url, e)

        scan_result = self._scan_or_none(found.scan) or self._scan_or_none(found.base)
        if scan_result is None:
            raise NoScanDataError("Could not load scan data from /scan or base URL")

        return Dataset(
            scan_result=scan_result,
            vpn_log=self._log_or_empty(found.network_log),
            mock_contacts=self._contacts_or_placeholder(found.contacts),
            is_loaded=True,
            source=source,
        )

    def _scan_or_none(self, value: Any) -> Optional[ScanResult]:
        if not isinstance(detect_shape(value), (PreShapedScan, RawPhoneScan)):
            return None
        try:
            return normalize(value, self.rules)
        except FormatError as e:
            logger.info("Discarding unusable scan data: %s", e)
            return None

    def _log_or_empty(self, value: Any) -> Tuple[NetworkLogEntry, ...]:
        if network_log_items(value) is None:
            return ()
        return parse_network_log(value)

    def _contacts_or_placeholder(self, value: Any) -> Tuple[ContactRecord, ...]:
        if isinstance(value, list) and value:
            contacts = parse_contacts(value)
            if contacts:
                return contacts
        return self.placeholder_contacts

    # ========================
    # Shared helpers
    # ========================

    def _dataset_from_combined(self, shape: CombinedPayload, source: str) -> Dataset:
        combined = decode_combined(shape, self.rules)
        return Dataset(
            scan_result=combined.scan_result,
            vpn_log=combined.vpn_log,
            mock_contacts=combined.contacts or self.placeholder_contacts,
            is_loaded=True,
            source=source,
        )

    @staticmethod
    def _with_scan(current: Dataset, scan_result: ScanResult, source: str) -> Dataset:
        return current.evolve(scan_result=scan_result, is_loaded=True, source=source)

    def load_sample_data(self) -> IngestionOutcome:
        """Replace the dataset with the bundled sample scan, log and contacts."""
        scan_result = normalize(_read_json(os.path.join(self.data_dir, 'sample-scan.json')), self.rules)
        vpn_log = parse_network_log(_read_json(os.path.join(self.data_dir, 'sample-vpn-log.json')))
        dataset = Dataset(
            scan_result=scan_result,
            vpn_log=vpn_log,
            mock_contacts=self.placeholder_contacts,
            is_loaded=True,
            source='sample',
        )
        return IngestionOutcome(applied=True, generation=self.store.replace(dataset))
