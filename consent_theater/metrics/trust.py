"""Digital trust score: a 0-100 blend where lower means a less trustworthy ecosystem."""
from typing import Any, Dict, Sequence

from ..models import AppRecord, ContactRecord
from .common import denominator, round_half_up

RISK_WEIGHT = 0.3
GHOST_WEIGHT = 0.2
TRACKER_WEIGHT = 0.3
PERMISSION_WEIGHT = 0.2

TRUST_GRADES = (
    (80, 'A', '#22C55E', 'Excellent'),
    (60, 'B', '#84CC16', 'Good'),
    (40, 'C', '#F59E0B', 'Concerning'),
    (20, 'D', '#F97316', 'Poor'),
)


def trust_grade(score: int) -> Dict[str, str]:
    for lower, grade, color, label in TRUST_GRADES:
        if score >= lower:
            return {'grade': grade, 'color': color, 'label': label}
    return {'grade': 'F', 'color': '#EF4444', 'label': 'Critical'}


def calculate_trust_score(apps: Sequence[AppRecord], contacts: Sequence[ContactRecord]) -> Dict[str, Any]:
    avg_risk = sum(a.risk_score for a in apps) / denominator(apps)
    ghost_ratio = sum(1 for c in contacts if c.is_ghost) / denominator(contacts)
    tracker_density = sum(a.tracker_count for a in apps) / denominator(apps)
    permission_density = sum(a.dangerous_permission_count for a in apps) / denominator(apps)

    components = {
        'risk': max(0.0, 100 - avg_risk),
        'ghosts': max(0.0, 100 - ghost_ratio * 200),
        'trackers': max(0.0, 100 - tracker_density * 15),
        'permissions': max(0.0, 100 - permission_density * 10),
    }
    score = round_half_up(
        components['risk'] * RISK_WEIGHT
        + components['ghosts'] * GHOST_WEIGHT
        + components['trackers'] * TRACKER_WEIGHT
        + components['permissions'] * PERMISSION_WEIGHT
    )

    return {
        'score': score,
        **trust_grade(score),
        'components': {name: round(value, 2) for name, value in components.items()},
    }
