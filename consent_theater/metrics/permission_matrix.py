"""App x dangerous-permission matrix."""
from typing import Any, Dict, Optional, Sequence

from ..models import AppRecord
from ..rules import RuleSet, default_rules


def permission_matrix(apps: Sequence[AppRecord], rules: Optional[RuleSet] = None) -> Dict[str, Any]:
    """Apps with the most dangerous permissions first, and how many apps hold each permission."""
    rules = rules or default_rules()
    ordered = sorted(apps, key=lambda a: a.dangerous_permission_count, reverse=True)
    return {
        'permissionCounts': {
            permission: sum(1 for a in apps if permission in a.dangerous_permissions)
            for permission in rules.dangerous_permissions
        },
        'apps': [
            {
                'app_name': a.app_name,
                'package_name': a.package_name,
                'dangerous_permissions': list(a.dangerous_permissions),
            }
            for a in ordered
        ],
    }
