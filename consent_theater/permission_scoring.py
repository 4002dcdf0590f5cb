"""Risk scoring utilities.

This module provides the single implementation of per-app risk scoring so
the logic isn't duplicated between the normalizer and the metrics.

Scoring approach (simple, explainable):
- Each dangerous permission adds 8 points, capped at 60
- Each tracker adds 10 points, capped at 40
- The two sub-scores are capped independently and summed (max 100)

Two vocabularies are derived from the score and both are kept as-is:
- Grade (A..F) with boundaries at 15/30/45/65, used for app report cards
- Risk label (Low..Critical) with boundaries at 20/40/60/80
"""
from typing import Dict, Any

DANGEROUS_PERMISSION_WEIGHT = 8
DANGEROUS_PERMISSION_CAP = 60
TRACKER_WEIGHT = 10
TRACKER_CAP = 40

# (upper bound inclusive, grade, color, recommendation)
GRADE_THRESHOLDS = (
    (15, 'A', '#22C55E', 'Safe - minimal data collection detected'),
    (30, 'B', '#4ADE80', 'Acceptable - limited tracking, standard permissions'),
    (45, 'C', '#F59E0B', 'Moderate concern - review permissions and consider alternatives'),
    (65, 'D', '#F97316', 'High risk - excessive tracking. Consider replacing with a privacy-respecting alternative'),
)
FAIL_GRADE = ('F', '#EF4444', 'Uninstall recommended - severe privacy violation')

RISK_LABELS = (
    (20, 'Low'),
    (40, 'Moderate'),
    (60, 'High'),
    (80, 'Very High'),
)


def calculate_risk_score(dangerous_permission_count: int, tracker_count: int) -> int:
    """Return the 0-100 risk score for an app."""
    dangerous_score = min(max(dangerous_permission_count, 0) * DANGEROUS_PERMISSION_WEIGHT, DANGEROUS_PERMISSION_CAP)
    tracker_score = min(max(tracker_count, 0) * TRACKER_WEIGHT, TRACKER_CAP)
    return min(dangerous_score + tracker_score, 100)


def grade_for_score(score: float) -> str:
    return grade_details(score)['grade']


def grade_details(score: float) -> Dict[str, Any]:
    for upper, grade, color, recommendation in GRADE_THRESHOLDS:
        if score <= upper:
            return {'grade': grade, 'gradeColor': color, 'recommendation': recommendation}
    grade, color, recommendation = FAIL_GRADE
    return {'grade': grade, 'gradeColor': color, 'recommendation': recommendation}


def risk_label(score: float) -> str:
    for upper, label in RISK_LABELS:
        if score <= upper:
            return label
    return 'Critical'


def risk_color(score: float) -> str:
    if score <= 30:
        return '#22C55E'
    if score <= 60:
        return '#F59E0B'
    return '#EF4444'
