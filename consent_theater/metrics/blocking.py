"""Tracker-blocking simulation over the network log.

Each category blocks every connection whose destination purpose contains
one of its keywords. With Advertising enabled, every connection flagged
``is_tracker`` is blocked as well.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from ..models import NetworkLogEntry
from .common import round_half_up

ADVERTISING = 'Advertising'


@dataclass(frozen=True)
class BlockingCategory:
    name: str
    purposes: Tuple[str, ...]
    enabled_by_default: bool = True


BLOCKING_CATEGORIES = (
    BlockingCategory(ADVERTISING, ('advertising', 'ads', 'ad network')),
    BlockingCategory('Analytics', ('analytics', 'measurement', 'telemetry')),
    BlockingCategory('Social', ('social', 'social graph', 'behavioral')),
    BlockingCategory('Crash Reporting', ('crash', 'error', 'debugging'), enabled_by_default=False),
    BlockingCategory('Location', ('location', 'geolocation', 'geofencing')),
)


def default_enabled_categories() -> Tuple[str, ...]:
    return tuple(c.name for c in BLOCKING_CATEGORIES if c.enabled_by_default)


def is_blocked(entry: NetworkLogEntry, purposes: Sequence[str], block_trackers: bool) -> bool:
    purpose = entry.destination_purpose.lower()
    return any(p in purpose for p in purposes) or (block_trackers and entry.is_tracker)


def simulate_blocking(vpn_log: Sequence[NetworkLogEntry],
                      enabled: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """What the log would have looked like with the ``enabled`` categories blocked.

    Args:
        vpn_log: Observed connections
        enabled: Category names to block (default: every category enabled by default).
            Unknown names are ignored.

    Returns:
        Dict with before/after connection counts, blocked bytes and companies,
        and the rounded reduction percentage
    """
    enabled_names = set(default_enabled_categories() if enabled is None else enabled)
    purposes = [p for c in BLOCKING_CATEGORIES if c.name in enabled_names for p in c.purposes]
    block_trackers = ADVERTISING in enabled_names

    blocked = [e for e in vpn_log if is_blocked(e, purposes, block_trackers)]
    total = len(vpn_log)

    return {
        'total': total,
        'blocked': len(blocked),
        'remaining': max(total - len(blocked), 0),
        'blockedBytes': sum(e.bytes_transferred for e in blocked),
        'blockedCompanies': len({e.destination_company for e in blocked}),
        'reductionPercent': round_half_up(len(blocked) / total * 100) if total else 0,
        'categories': [
            {'name': c.name, 'enabled': c.name in enabled_names} for c in BLOCKING_CATEGORIES
        ],
    }
