"""Tracker company aggregation across installed apps."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from ..models import AppRecord
from ..rules import RuleSet, default_rules


@dataclass
class CompanyExposure:
    company: str
    tracker_count: int = 0
    apps: List[str] = field(default_factory=list)
    trackers: List[str] = field(default_factory=list)


def aggregate_companies(apps: Sequence[AppRecord]) -> Dict[str, CompanyExposure]:
    """Group every tracker occurrence by company, in first-seen order."""
    companies: Dict[str, CompanyExposure] = {}
    for app in apps:
        for tracker in app.trackers:
            company = tracker.company or 'Unknown'
            entry = companies.setdefault(company, CompanyExposure(company=company))
            entry.tracker_count += 1
            if app.app_name not in entry.apps:
                entry.apps.append(app.app_name)
            if tracker.name not in entry.trackers:
                entry.trackers.append(tracker.name)
    return companies


def company_color(company: str, rules: Optional[RuleSet] = None) -> str:
    rules = rules or default_rules()
    return rules.company_colors.get(company, rules.default_color)


def tracker_treemap(apps: Sequence[AppRecord], rules: Optional[RuleSet] = None) -> List[Dict]:
    """Per-company tiles sized by tracker count, largest first."""
    rules = rules or default_rules()
    tiles = [
        {
            'name': entry.company,
            'size': entry.tracker_count,
            'apps': list(entry.apps),
            'trackers': list(entry.trackers),
            'color': company_color(entry.company, rules),
        }
        for entry in aggregate_companies(apps).values()
    ]
    return sorted(tiles, key=lambda tile: tile['size'], reverse=True)
