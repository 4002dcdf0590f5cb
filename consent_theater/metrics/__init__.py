"""Derived-metrics engines.

Pure functions over the canonical model. None of them mutate their input
and all accept empty collections.
"""
from typing import Any, Callable, Dict, Optional

from ..models import Dataset
from ..rules import RuleSet
from .blocking import simulate_blocking
from .contagion import build_contagion_graph, exposure_severity
from .demographics import infer_demographics
from .grades import grade_apps
from .indictment import build_indictment, ghost_exposure
from .network_activity import hourly_timeline, scoreboard, worst_offenders
from .permission_matrix import permission_matrix
from .revenue import calculate_revenue
from .trackers import tracker_treemap
from .trust import calculate_trust_score

METRICS: Dict[str, Callable[[Dataset, Optional[RuleSet]], Any]] = {
    'demographics': lambda d, r: infer_demographics(d.apps, r),
    'revenue': lambda d, r: calculate_revenue(d.apps, r),
    'trust': lambda d, r: calculate_trust_score(d.apps, d.mock_contacts),
    'contagion': lambda d, r: build_contagion_graph(d.apps, d.mock_contacts),
    'grades': lambda d, r: grade_apps(d.apps),
    'treemap': lambda d, r: tracker_treemap(d.apps, r),
    'scoreboard': lambda d, r: scoreboard(d.vpn_log),
    'timeline': lambda d, r: hourly_timeline(d.vpn_log),
    'offenders': lambda d, r: worst_offenders(d.vpn_log),
    'blocking': lambda d, r: simulate_blocking(d.vpn_log),
    'indictment': lambda d, r: build_indictment(d.apps, d.mock_contacts),
    'ghosts': lambda d, r: ghost_exposure(d.apps, d.mock_contacts),
    'permissions': lambda d, r: permission_matrix(d.apps, r),
}


def compute_metric(name: str, dataset: Dataset, rules: Optional[RuleSet] = None) -> Any:
    """Compute one named metric over ``dataset``. Raises KeyError for unknown names."""
    return METRICS[name](dataset, rules)


__all__ = [
    'METRICS',
    'compute_metric',
    'build_contagion_graph',
    'exposure_severity',
    'infer_demographics',
    'grade_apps',
    'hourly_timeline',
    'scoreboard',
    'worst_offenders',
    'calculate_revenue',
    'tracker_treemap',
    'calculate_trust_score',
    'simulate_blocking',
    'build_indictment',
    'ghost_exposure',
    'permission_matrix',
]
