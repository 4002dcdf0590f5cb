"""Demographic inference from the installed-app inventory.

Ad networks guess a user's age, gender, income and interests from which apps
are installed. This reproduces that inference with a fixed signal table:
- each recognized package adds its age weight and a gender lean
- income is the average of the matched apps' income brackets
- interests come from matched apps, dangerous permissions and the
  presence of commerce-focused tracker companies
"""
from typing import Any, Dict, List, Optional, Sequence

from ..models import AppRecord
from ..rules import RuleSet, default_rules
from .common import round_half_up

MAX_INTERESTS = 8
MAX_CONFIDENCE = 95
FULL_CONFIDENCE_APPS = 20
INFERRED_LOCATION = 'India (inferred from app selection)'


def age_range_for(adjusted_age: int) -> str:
    if adjusted_age < 20:
        return '16-22'
    if adjusted_age < 25:
        return '18-25'
    if adjusted_age < 30:
        return '22-30'
    if adjusted_age < 35:
        return '25-34'
    return '30-45'


def gender_for(male_signals: int, female_signals: int) -> str:
    if male_signals > female_signals + 1:
        return 'Likely Male'
    if female_signals > male_signals + 1:
        return 'Likely Female'
    return 'Undetermined'


def income_level_for(average: float) -> str:
    if average < 2:
        return '₹2-4 LPA'
    if average < 3:
        return '₹4-8 LPA'
    if average < 4:
        return '₹8-15 LPA'
    return '₹15-30 LPA'


def inference_confidence(app_count: int) -> int:
    return min(round_half_up(app_count / FULL_CONFIDENCE_APPS * 100), MAX_CONFIDENCE)


def infer_demographics(apps: Sequence[AppRecord], rules: Optional[RuleSet] = None) -> Dict[str, Any]:
    rules = rules or default_rules()
    age_weight = 0
    male_signals = 0
    female_signals = 0
    income_signals: List[str] = []
    interests: List[str] = []

    def add_interest(interest: str) -> None:
        if interest and interest not in interests:
            interests.append(interest)

    for app in apps:
        signal = rules.app_signals.get(app.package_name)
        if signal:
            age_weight += signal.age_weight
            if signal.gender == 'male-lean':
                male_signals += 1
            elif signal.gender == 'female-lean':
                female_signals += 1
            income_signals.append(signal.income)
            add_interest(signal.interest)

        for permission in app.dangerous_permissions:
            add_interest(rules.permission_interests.get(permission, ''))

        if any(t.company in rules.commerce_tracker_companies for t in app.trackers):
            add_interest('Mobile Commerce')

    average_income = (
        sum(rules.income_levels.get(i, 3) for i in income_signals) / (len(income_signals) or 1)
    )

    return {
        'inferredGender': gender_for(male_signals, female_signals),
        'ageRange': age_range_for(rules.base_age + age_weight),
        'incomeLevel': income_level_for(average_income),
        'interests': interests[:MAX_INTERESTS],
        'location': INFERRED_LOCATION,
        'confidence': inference_confidence(len(apps)),
    }
