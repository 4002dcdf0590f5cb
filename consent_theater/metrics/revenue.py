"""Revenue estimation: what the observed tracking companies earn from this user."""
from typing import Any, Dict, Optional, Sequence

from ..models import AppRecord
from ..rules import RuleSet, default_rules
from .common import round_half_up
from .trackers import aggregate_companies


def company_arpu(company: str, rules: Optional[RuleSet] = None) -> int:
    rules = rules or default_rules()
    return rules.company_arpu_inr.get(company, rules.default_arpu_inr)


def calculate_revenue(apps: Sequence[AppRecord], rules: Optional[RuleSet] = None) -> Dict[str, Any]:
    """Estimate annual revenue (INR) generated from this user's data.

    Each distinct tracker company counts once, at its annual ARPU
    (default for unknown companies). Per-day and per-hour figures divide
    the annual total by 365 and 8760.
    """
    rules = rules or default_rules()
    per_company = sorted(
        (
            {
                'company': entry.company,
                'annualInr': company_arpu(entry.company, rules),
                'trackerCount': entry.tracker_count,
                'apps': list(entry.apps),
            }
            for entry in aggregate_companies(apps).values()
        ),
        key=lambda item: item['annualInr'],
        reverse=True,
    )

    total_annual_inr = sum(item['annualInr'] for item in per_company)
    return {
        'totalAnnualInr': total_annual_inr,
        'totalAnnualUsd': round_half_up(total_annual_inr / rules.inr_per_usd),
        'perCompany': per_company,
        'perDay': round_half_up(total_annual_inr / 365),
        'perHour': round_half_up(total_annual_inr / 8760, 2),
    }
