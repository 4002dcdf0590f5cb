"""Canonical data model shared by the normalizer, orchestrator and metrics.

All records are frozen. Derived counters (``tracker_count``,
``dangerous_permission_count`` and the scan totals) are properties computed
from the underlying sequences, so they cannot drift from them.
"""
import datetime
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Optional, Tuple


def _dedupe(items: Iterable[str]) -> Tuple[str, ...]:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return tuple(out)


@dataclass(frozen=True)
class TrackerInfo:
    name: str
    company: str

    def to_dict(self) -> Dict[str, str]:
        return {'name': self.name, 'company': self.company}


def dedupe_trackers(trackers: Iterable[TrackerInfo]) -> Tuple[TrackerInfo, ...]:
    """Keep the first tracker for each name, preserving order."""
    seen = set()
    out = []
    for tracker in trackers:
        if tracker.name in seen:
            continue
        seen.add(tracker.name)
        out.append(tracker)
    return tuple(out)


@dataclass(frozen=True)
class AppRecord:
    package_name: str
    app_name: str
    permissions: Tuple[str, ...] = ()
    dangerous_permissions: Tuple[str, ...] = ()
    trackers: Tuple[TrackerInfo, ...] = ()
    risk_score: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'permissions', _dedupe(self.permissions))
        object.__setattr__(self, 'dangerous_permissions', _dedupe(self.dangerous_permissions))
        object.__setattr__(self, 'trackers', dedupe_trackers(self.trackers))
        if not 0 <= self.risk_score <= 100:
            raise ValueError(f"risk_score out of range: {self.risk_score}")

    @property
    def tracker_count(self) -> int:
        return len(self.trackers)

    @property
    def dangerous_permission_count(self) -> int:
        return len(self.dangerous_permissions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'package_name': self.package_name,
            'app_name': self.app_name,
            'permissions': list(self.permissions),
            'dangerous_permissions': list(self.dangerous_permissions),
            'trackers': [t.to_dict() for t in self.trackers],
            'tracker_count': self.tracker_count,
            'dangerous_permission_count': self.dangerous_permission_count,
            'risk_score': self.risk_score,
        }


@dataclass(frozen=True)
class ScanResult:
    scan_id: str
    apps: Tuple[AppRecord, ...] = ()
    device_model: str = 'Unknown'
    android_version: str = 'Unknown'
    scan_timestamp: str = ''

    @property
    def total_apps(self) -> int:
        return len(self.apps)

    @property
    def total_trackers(self) -> int:
        return sum(app.tracker_count for app in self.apps)

    @property
    def total_dangerous_permissions(self) -> int:
        return sum(app.dangerous_permission_count for app in self.apps)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scan_id': self.scan_id,
            'device_model': self.device_model,
            'android_version': self.android_version,
            'scan_timestamp': self.scan_timestamp,
            'total_apps': self.total_apps,
            'total_trackers': self.total_trackers,
            'total_dangerous_permissions': self.total_dangerous_permissions,
            'apps': [app.to_dict() for app in self.apps],
        }


@dataclass(frozen=True)
class NetworkLogEntry:
    """One observed outbound connection."""

    timestamp: str
    source_app: str
    source_app_name: str
    destination_host: str
    destination_ip: str = ''
    destination_company: str = 'Unknown'
    destination_purpose: str = ''
    destination_country: str = ''
    destination_city: str = ''
    destination_lat: float = 0.0
    destination_lng: float = 0.0
    bytes_transferred: int = 0
    is_tracker: bool = False
    hour_of_day: int = 0
    user_was_active: bool = False

    def __post_init__(self):
        if self.bytes_transferred < 0:
            raise ValueError(f"bytes_transferred must be non-negative: {self.bytes_transferred}")
        if not 0 <= self.hour_of_day <= 23:
            raise ValueError(f"hour_of_day out of range: {self.hour_of_day}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NetworkLogEntry':
        if not isinstance(data, dict):
            raise ValueError("network log entry must be an object")
        timestamp = str(data.get('timestamp', ''))
        hour = data.get('hour_of_day')
        if hour is None:
            hour = _hour_from_timestamp(timestamp)
        return cls(
            timestamp=timestamp,
            source_app=str(data.get('source_app', '')),
            source_app_name=str(data.get('source_app_name') or data.get('source_app', '')),
            destination_host=str(data.get('destination_host', '')),
            destination_ip=str(data.get('destination_ip', '')),
            destination_company=str(data.get('destination_company') or 'Unknown'),
            destination_purpose=str(data.get('destination_purpose', '')),
            destination_country=str(data.get('destination_country', '')),
            destination_city=str(data.get('destination_city', '')),
            destination_lat=float(data.get('destination_lat') or 0.0),
            destination_lng=float(data.get('destination_lng') or 0.0),
            bytes_transferred=int(data.get('bytes_transferred') or 0),
            is_tracker=bool(data.get('is_tracker', False)),
            hour_of_day=int(hour),
            user_was_active=bool(data.get('user_was_active', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'source_app': self.source_app,
            'source_app_name': self.source_app_name,
            'destination_host': self.destination_host,
            'destination_ip': self.destination_ip,
            'destination_company': self.destination_company,
            'destination_purpose': self.destination_purpose,
            'destination_country': self.destination_country,
            'destination_city': self.destination_city,
            'destination_lat': self.destination_lat,
            'destination_lng': self.destination_lng,
            'bytes_transferred': self.bytes_transferred,
            'is_tracker': self.is_tracker,
            'hour_of_day': self.hour_of_day,
            'user_was_active': self.user_was_active,
        }


def _hour_from_timestamp(timestamp: str) -> int:
    try:
        return datetime.datetime.fromisoformat(timestamp.replace('Z', '+00:00')).hour
    except ValueError:
        return 0


def _string_list(raw: Any) -> Tuple[str, ...]:
    """Only JSON arrays count; any other value is treated as empty."""
    if not isinstance(raw, list):
        return ()
    return tuple(str(item) for item in raw)


@dataclass(frozen=True)
class ContactRecord:
    name: str
    is_ghost: bool = False
    digital_footprint_score: int = 0
    exposed_to: Tuple[str, ...] = ()
    exposed_by_apps: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'exposed_to', _dedupe(self.exposed_to))
        object.__setattr__(self, 'exposed_by_apps', _dedupe(self.exposed_by_apps))
        if not 0 <= self.digital_footprint_score <= 100:
            raise ValueError(f"digital_footprint_score out of range: {self.digital_footprint_score}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContactRecord':
        if not isinstance(data, dict) or not data.get('name'):
            raise ValueError("contact must be an object with a name")
        return cls(
            name=str(data['name']),
            is_ghost=bool(data.get('is_ghost', False)),
            digital_footprint_score=int(data.get('digital_footprint_score') or 0),
            exposed_to=_string_list(data.get('exposed_to')),
            exposed_by_apps=_string_list(data.get('exposed_by_apps')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'is_ghost': self.is_ghost,
            'digital_footprint_score': self.digital_footprint_score,
            'exposed_to': list(self.exposed_to),
            'exposed_by_apps': list(self.exposed_by_apps),
        }


@dataclass(frozen=True)
class Dataset:
    """The current dataset snapshot, replaced wholesale on every load."""

    scan_result: Optional[ScanResult] = None
    vpn_log: Tuple[NetworkLogEntry, ...] = ()
    mock_contacts: Tuple[ContactRecord, ...] = ()
    is_loaded: bool = False
    source: str = ''

    @property
    def apps(self) -> Tuple[AppRecord, ...]:
        return self.scan_result.apps if self.scan_result else ()

    def evolve(self, **changes) -> 'Dataset':
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scanResult': self.scan_result.to_dict() if self.scan_result else None,
            'vpnLog': [entry.to_dict() for entry in self.vpn_log],
            'mockContacts': [contact.to_dict() for contact in self.mock_contacts],
            'isLoaded': self.is_loaded,
            'source': self.source,
        }


@dataclass(frozen=True)
class ErrorDescriptor:
    kind: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {'error': self.kind, 'detail': self.message}


@dataclass(frozen=True)
class IngestionOutcome:
    applied: bool
    generation: int
    error: Optional[ErrorDescriptor] = None
