"""Permission classifier for installed-app inventories.

Maps raw OS permission strings onto the fixed dangerous-permission taxonomy.
Namespace prefixes such as ``android.permission.`` are stripped
case-insensitively before the membership test, so classifying a short name
and its prefixed form gives the same answer.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .rules import RuleSet, default_rules


@dataclass(frozen=True)
class PermissionClass:
    short_name: str
    is_dangerous: bool


def strip_permission_prefix(permission: str, rules: Optional[RuleSet] = None) -> str:
    """Remove a known namespace prefix from ``permission``.

    Args:
        permission: Raw permission identifier, e.g. ``android.permission.CAMERA``
        rules: Optional substitute rule set

    Returns:
        The short name (``CAMERA``), or the input unchanged when no known
        prefix applies.
    """
    rules = rules or default_rules()
    lowered = permission.lower()
    for prefix in rules.permission_prefixes:
        if lowered.startswith(prefix.lower()):
            return permission[len(prefix):]
    return permission


def classify_permission(permission: str, rules: Optional[RuleSet] = None) -> PermissionClass:
    rules = rules or default_rules()
    short_name = strip_permission_prefix(permission, rules)
    return PermissionClass(
        short_name=short_name,
        is_dangerous=short_name in rules.dangerous_permissions,
    )


def extract_dangerous_permissions(permissions: Iterable[str], rules: Optional[RuleSet] = None) -> List[str]:
    """Return the dangerous short names found in ``permissions``, in input order, without duplicates."""
    rules = rules or default_rules()
    found = []
    for permission in permissions:
        result = classify_permission(permission, rules)
        if result.is_dangerous and result.short_name not in found:
            found.append(result.short_name)
    return found
