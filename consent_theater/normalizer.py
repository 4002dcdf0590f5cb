"""Format normalizer.

Decodes an arbitrary JSON value into the canonical ``ScanResult``.
``detect_shape`` is the tagged decode step: it applies the shape predicates
in a fixed order (first match wins) and returns one of ``CombinedPayload``,
``PreShapedScan``, ``RawPhoneScan`` or ``Unrecognized``. Conversion then
dispatches on that tag.

Supported input shapes:
- combined export: ``{"format": "consent-theater-combined", "scan_result": ..., "vpn_log": [...], "contacts": [...]}``
- pre-shaped scan (scanner server format): ``{"scan_id": ..., "apps": [...]}``
  where each app's ``permissions`` is either a flat list or
  ``{"dangerous": [...], "normal": [...]}``
- raw phone scan (PackageManager dump): ``[{"packageName", "appName", "permissions"}, ...]``
"""
import datetime
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from .errors import FormatError
from .models import AppRecord, ContactRecord, NetworkLogEntry, ScanResult, TrackerInfo, dedupe_trackers
from .permission_analyzer import extract_dangerous_permissions, strip_permission_prefix
from .permission_scoring import calculate_risk_score
from .rules import RuleSet, default_rules
from .tracker_detector import detect_trackers

logger = logging.getLogger(__name__)

COMBINED_FORMAT = 'consent-theater-combined'
NETWORK_LOG_KEYS = ('entries', 'connections')

# Value-type problems inside an otherwise recognized entry. The entry is skipped.
ENTRY_ERRORS = (TypeError, ValueError, OverflowError)


@dataclass(frozen=True)
class CombinedPayload:
    scan_result: Any
    vpn_log: Any = None
    contacts: Any = None


@dataclass(frozen=True)
class PreShapedScan:
    payload: Dict[str, Any]


@dataclass(frozen=True)
class RawPhoneScan:
    apps: List[Dict[str, Any]]


@dataclass(frozen=True)
class Unrecognized:
    value: Any


Shape = Union[CombinedPayload, PreShapedScan, RawPhoneScan, Unrecognized]


@dataclass(frozen=True)
class CombinedData:
    """Decoded combined export. ``contacts`` is None when the payload had none."""

    scan_result: ScanResult
    vpn_log: Tuple[NetworkLogEntry, ...]
    contacts: Optional[Tuple[ContactRecord, ...]]


def is_combined_payload(value: Any) -> bool:
    return isinstance(value, dict) and value.get('format') == COMBINED_FORMAT


def is_pre_shaped_scan(value: Any) -> bool:
    return isinstance(value, dict) and 'scan_id' in value and 'apps' in value


def is_raw_phone_scan(value: Any) -> bool:
    if not isinstance(value, list) or not value:
        return False
    return all(isinstance(item, dict) and 'packageName' in item and 'permissions' in item for item in value)


def detect_shape(value: Any) -> Shape:
    if is_combined_payload(value):
        return CombinedPayload(
            scan_result=value.get('scan_result'),
            vpn_log=value.get('vpn_log'),
            contacts=value.get('contacts'),
        )
    if is_pre_shaped_scan(value):
        return PreShapedScan(payload=value)
    if is_raw_phone_scan(value):
        return RawPhoneScan(apps=value)
    return Unrecognized(value=value)


def normalize(value: Any, rules: Optional[RuleSet] = None) -> ScanResult:
    """Convert any recognized scan shape to a ``ScanResult``.

    Raises:
        FormatError: the value matches no recognized shape
    """
    shape = detect_shape(value)
    if isinstance(shape, CombinedPayload):
        return decode_combined(shape, rules).scan_result
    if isinstance(shape, PreShapedScan):
        return normalize_pre_shaped(shape.payload, rules)
    if isinstance(shape, RawPhoneScan):
        return transform_raw_scan(shape.apps, rules)
    raise FormatError(f"Unrecognized payload shape: {_describe(value)}")


def decode_combined(shape: CombinedPayload, rules: Optional[RuleSet] = None) -> CombinedData:
    nested = shape.scan_result
    if nested is None or is_combined_payload(nested):
        raise FormatError("Combined payload has no usable scan_result")
    scan_result = normalize(nested, rules)

    vpn_log: Tuple[NetworkLogEntry, ...] = ()
    if shape.vpn_log is not None:
        try:
            vpn_log = parse_network_log(shape.vpn_log)
        except FormatError as e:
            logger.warning("Ignoring combined vpn_log: %s", e)

    contacts: Tuple[ContactRecord, ...] = ()
    if shape.contacts:
        try:
            contacts = parse_contacts(shape.contacts)
        except FormatError as e:
            logger.warning("Ignoring combined contacts: %s", e)

    return CombinedData(scan_result=scan_result, vpn_log=vpn_log, contacts=contacts or None)


def _flatten_permissions(raw: Any) -> List[str]:
    if isinstance(raw, list):
        return [str(p) for p in raw]
    if isinstance(raw, dict):
        dangerous = raw.get('dangerous') if isinstance(raw.get('dangerous'), list) else []
        normal = raw.get('normal') if isinstance(raw.get('normal'), list) else []
        return [str(p) for p in dangerous + normal]
    return []


def _parse_trackers(raw: Any) -> List[TrackerInfo]:
    trackers = []
    for item in raw if isinstance(raw, list) else []:
        if isinstance(item, dict) and item.get('name'):
            trackers.append(TrackerInfo(name=str(item['name']), company=str(item.get('company') or 'Unknown')))
    return trackers


def _coerce_score(raw: Any) -> Optional[int]:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if not math.isfinite(raw):
        return None
    return max(0, min(100, int(round(raw))))


def normalize_app(app: Dict[str, Any], rules: Optional[RuleSet] = None) -> AppRecord:
    """Reconcile one pre-shaped app entry.

    Explicit ``trackers`` and ``dangerous_permissions`` lists are trusted;
    otherwise they are derived from the permissions. Counts are always
    recomputed from the final lists.
    """
    rules = rules or default_rules()
    raw_permissions = _flatten_permissions(app.get('permissions'))
    permissions = [strip_permission_prefix(p, rules) for p in raw_permissions]

    if isinstance(app.get('dangerous_permissions'), list):
        supplied = [strip_permission_prefix(str(p), rules) for p in app['dangerous_permissions']]
        dangerous = [p for p in supplied if p in rules.dangerous_permissions]
        if len(dangerous) != len(supplied):
            logger.debug("Dropped non-taxonomy dangerous permissions for %s", app.get('package_name'))
    else:
        dangerous = extract_dangerous_permissions(permissions, rules)

    if isinstance(app.get('trackers'), list):
        trackers = dedupe_trackers(_parse_trackers(app['trackers']))
    else:
        trackers = tuple(detect_trackers(raw_permissions, rules))
    dangerous = list(dict.fromkeys(dangerous))

    score = _coerce_score(app.get('risk_score'))
    if score is None:
        score = calculate_risk_score(len(dangerous), len(trackers))

    return AppRecord(
        package_name=str(app.get('package_name', '')),
        app_name=str(app.get('app_name') or app.get('package_name', '')),
        permissions=tuple(permissions),
        dangerous_permissions=tuple(dangerous),
        trackers=trackers,
        risk_score=score,
    )


def normalize_pre_shaped(payload: Dict[str, Any], rules: Optional[RuleSet] = None) -> ScanResult:
    apps_raw = payload.get('apps')
    if not isinstance(apps_raw, list):
        raise FormatError("Scan result 'apps' must be an array")

    apps = []
    seen = set()
    for item in apps_raw:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object app entry in scan %s", payload.get('scan_id'))
            continue
        try:
            record = normalize_app(item, rules)
        except ENTRY_ERRORS as e:
            logger.warning("Skipping malformed app entry %s: %s", item.get('package_name'), e)
            continue
        if record.package_name in seen:
            logger.warning("Duplicate package %s in scan %s, keeping first", record.package_name, payload.get('scan_id'))
            continue
        seen.add(record.package_name)
        apps.append(record)

    return ScanResult(
        scan_id=str(payload.get('scan_id')),
        apps=tuple(apps),
        device_model=str(payload.get('device_model') or 'Unknown'),
        android_version=str(payload.get('android_version') or 'Unknown'),
        scan_timestamp=str(payload.get('scan_timestamp') or ''),
    )


def transform_raw_app(raw: Dict[str, Any], rules: Optional[RuleSet] = None) -> AppRecord:
    """Build a full AppRecord from a PackageManager entry: classify, detect, score."""
    rules = rules or default_rules()
    raw_permissions = _flatten_permissions(raw.get('permissions'))
    dangerous = extract_dangerous_permissions(raw_permissions, rules)
    trackers = detect_trackers(raw_permissions, rules)
    return AppRecord(
        package_name=str(raw['packageName']),
        app_name=str(raw.get('appName') or raw['packageName']),
        permissions=tuple(strip_permission_prefix(p, rules) for p in raw_permissions),
        dangerous_permissions=tuple(dangerous),
        trackers=tuple(trackers),
        risk_score=calculate_risk_score(len(dangerous), len(trackers)),
    )


def transform_raw_scan(raw_apps: List[Dict[str, Any]], rules: Optional[RuleSet] = None,
                       now: Optional[datetime.datetime] = None) -> ScanResult:
    now = now or datetime.datetime.now(datetime.timezone.utc)
    apps = []
    seen = set()
    for raw in raw_apps:
        try:
            record = transform_raw_app(raw, rules)
        except ENTRY_ERRORS as e:
            logger.warning("Skipping malformed app entry %s: %s", raw.get('packageName'), e)
            continue
        if record.package_name in seen:
            continue
        seen.add(record.package_name)
        apps.append(record)
    return ScanResult(
        scan_id=f"live-scan-{int(now.timestamp() * 1000)}",
        apps=tuple(apps),
        device_model='Live Device',
        android_version='Unknown',
        scan_timestamp=now.isoformat(timespec='seconds'),
    )


def network_log_items(value: Any) -> Optional[List[Any]]:
    """Return the raw entry list if ``value`` looks like a network log, else None.

    Accepts a bare array or an object wrapping the array under ``entries``
    or ``connections``.
    """
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        for key in NETWORK_LOG_KEYS:
            if isinstance(value.get(key), list):
                return value[key]
    return None


def looks_like_network_log(value: Any) -> bool:
    if isinstance(value, list):
        return bool(value) and isinstance(value[0], dict) and 'destination_host' in value[0]
    return isinstance(value, dict) and isinstance(value.get('entries'), list)


def parse_network_log(value: Any) -> Tuple[NetworkLogEntry, ...]:
    items = network_log_items(value)
    if items is None:
        raise FormatError(f"Unrecognized network log shape: {_describe(value)}")
    entries = []
    for item in items:
        try:
            entries.append(NetworkLogEntry.from_dict(item))
        except ENTRY_ERRORS as e:
            logger.warning("Skipping malformed network log entry: %s", e)
    return tuple(entries)


def parse_contacts(value: Any) -> Tuple[ContactRecord, ...]:
    if not isinstance(value, list):
        raise FormatError(f"Contacts must be an array, got {_describe(value)}")
    contacts = []
    seen = set()
    for item in value:
        try:
            contact = ContactRecord.from_dict(item)
        except ENTRY_ERRORS as e:
            logger.warning("Skipping malformed contact: %s", e)
            continue
        if contact.name in seen:
            continue
        seen.add(contact.name)
        contacts.append(contact)
    return tuple(contacts)


def _describe(value: Any) -> str:
    if isinstance(value, dict):
        keys = ', '.join(sorted(str(k) for k in value)[:6])
        return f"object with keys [{keys}]"
    if isinstance(value, list):
        return f"array of {len(value)} items"
    return type(value).__name__
