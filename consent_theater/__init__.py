"""Privacy-awareness dashboard core: ingestion, normalization and exposure metrics."""

from .errors import ConsentTheaterError, FetchError, FormatError, NoScanDataError, ParseError
from .ingestion import IngestionOrchestrator
from .models import AppRecord, ContactRecord, Dataset, NetworkLogEntry, ScanResult, TrackerInfo
from .normalizer import detect_shape, normalize
from .store import DatasetStore

__all__ = [
    "ConsentTheaterError",
    "FetchError",
    "FormatError",
    "NoScanDataError",
    "ParseError",
    "IngestionOrchestrator",
    "AppRecord",
    "ContactRecord",
    "Dataset",
    "NetworkLogEntry",
    "ScanResult",
    "TrackerInfo",
    "detect_shape",
    "normalize",
    "DatasetStore",
]
