"""Taxonomy tables loaded from the YAML files under ``rules/``.

Every table is read once per rules directory and cached. Callers that need
substituted tables (tests, experiments) pass their own directory to
``load_rules`` and hand the resulting ``RuleSet`` to the analyzers.
"""
import os
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional, Tuple, Any

import yaml

from .config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrackerIndicator:
    pattern: str
    name: str
    company: str


@dataclass(frozen=True)
class AppSignal:
    age_weight: int
    gender: str
    income: str
    interest: str


@dataclass(frozen=True)
class RuleSet:
    dangerous_permissions: Tuple[str, ...]
    permission_prefixes: Tuple[str, ...]
    tracker_indicators: Tuple[TrackerIndicator, ...]
    app_signals: Dict[str, AppSignal]
    base_age: int
    permission_interests: Dict[str, str]
    commerce_tracker_companies: Tuple[str, ...]
    income_levels: Dict[str, int]
    company_arpu_inr: Dict[str, int]
    default_arpu_inr: int
    inr_per_usd: int
    company_colors: Dict[str, str]
    default_color: str
    versions: Dict[str, int] = field(default_factory=dict)


def _read_yaml(rules_dir: str, filename: str) -> Dict[str, Any]:
    path = os.path.join(rules_dir, filename)
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Unexpected format in {path}, expecting mapping")
    logger.debug("Loaded %s (version %s)", path, data.get('version'))
    return data


@lru_cache(maxsize=None)
def _load_rules_cached(rules_dir: str) -> RuleSet:
    dangerous = _read_yaml(rules_dir, 'dangerous_permissions.yaml')
    trackers = _read_yaml(rules_dir, 'tracker_indicators.yaml')
    signals = _read_yaml(rules_dir, 'app_signals.yaml')
    arpu = _read_yaml(rules_dir, 'company_arpu.yaml')
    colors = _read_yaml(rules_dir, 'company_colors.yaml')

    indicators = tuple(
        TrackerIndicator(pattern=str(item['pattern']), name=str(item['name']), company=str(item['company']))
        for item in trackers.get('indicators', [])
    )
    app_signals = {
        str(package): AppSignal(
            age_weight=int(info.get('age_weight', 0)),
            gender=str(info.get('gender', 'neutral')),
            income=str(info.get('income', 'medium')),
            interest=str(info.get('interest', '')),
        )
        for package, info in (signals.get('apps') or {}).items()
    }

    return RuleSet(
        dangerous_permissions=tuple(str(p) for p in dangerous.get('permissions', [])),
        permission_prefixes=tuple(str(p) for p in dangerous.get('prefixes', ['android.permission.'])),
        tracker_indicators=indicators,
        app_signals=app_signals,
        base_age=int(signals.get('base_age', 28)),
        permission_interests={str(k): str(v) for k, v in (signals.get('permission_interests') or {}).items()},
        commerce_tracker_companies=tuple(signals.get('commerce_tracker_companies') or ()),
        income_levels={str(k): int(v) for k, v in (signals.get('income_levels') or {}).items()},
        company_arpu_inr={str(k): int(v) for k, v in (arpu.get('companies') or {}).items()},
        default_arpu_inr=int(arpu.get('default_inr', 100)),
        inr_per_usd=int(arpu.get('inr_per_usd', 83)),
        company_colors={str(k): str(v) for k, v in (colors.get('companies') or {}).items()},
        default_color=str(colors.get('default', '#8B5CF6')),
        versions={
            'dangerous_permissions': dangerous.get('version'),
            'tracker_indicators': trackers.get('version'),
            'app_signals': signals.get('version'),
            'company_arpu': arpu.get('version'),
            'company_colors': colors.get('version'),
        },
    )


def load_rules(rules_dir: Optional[str] = None) -> RuleSet:
    """Return the rule set for ``rules_dir`` (default: ``Config.RULES_DIR``)."""
    return _load_rules_cached(os.path.abspath(rules_dir or Config.RULES_DIR))


def default_rules() -> RuleSet:
    return load_rules()


def dangerous_permission_names(rules: Optional[RuleSet] = None) -> List[str]:
    return list((rules or default_rules()).dangerous_permissions)
