"""App report cards."""
from typing import Any, Dict, Sequence

from ..models import AppRecord
from ..permission_scoring import grade_details, risk_color, risk_label

GRADES = ('A', 'B', 'C', 'D', 'F')


def grade_app(app: AppRecord) -> Dict[str, Any]:
    return {
        **app.to_dict(),
        **grade_details(app.risk_score),
        'riskLabel': risk_label(app.risk_score),
        'riskColor': risk_color(app.risk_score),
    }


def grade_apps(apps: Sequence[AppRecord]) -> Dict[str, Any]:
    graded = sorted((grade_app(app) for app in apps), key=lambda a: a['risk_score'], reverse=True)
    counts = {grade: 0 for grade in GRADES}
    for app in graded:
        counts[app['grade']] += 1
    return {'apps': graded, 'gradeCounts': counts}
