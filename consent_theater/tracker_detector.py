"""Heuristic tracker detection from permission fingerprints.

Only used when a payload carries no explicit tracker list for an app.
"""
from typing import Iterable, List, Optional

from .models import TrackerInfo
from .rules import RuleSet, default_rules


def detect_trackers(permissions: Iterable[str], rules: Optional[RuleSet] = None) -> List[TrackerInfo]:
    """Infer tracking SDKs from an app's raw permission list.

    Each permission is tested against every indicator pattern (substring
    match). Several patterns can name the same tracker; the first hit for a
    name wins and discovery order is preserved.
    """
    rules = rules or default_rules()
    trackers: List[TrackerInfo] = []
    seen = set()
    for permission in permissions:
        for indicator in rules.tracker_indicators:
            if indicator.pattern in permission and indicator.name not in seen:
                trackers.append(TrackerInfo(name=indicator.name, company=indicator.company))
                seen.add(indicator.name)
    return trackers
