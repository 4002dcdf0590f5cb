"""Who reads the contact list, and who gets exposed because of it."""
from typing import Any, Dict, List, Sequence

from ..models import AppRecord, ContactRecord

HIGH_RISK_THRESHOLD = 60
WORST_APPS_LIMIT = 5
CONTACT_PERMISSIONS = ('READ_CONTACTS', 'WRITE_CONTACTS')


def _app_summary(app: AppRecord) -> Dict[str, Any]:
    return {
        'app_name': app.app_name,
        'package_name': app.package_name,
        'tracker_count': app.tracker_count,
        'risk_score': app.risk_score,
    }


def build_indictment(apps: Sequence[AppRecord], contacts: Sequence[ContactRecord]) -> Dict[str, Any]:
    """Headline charges against the installed apps.

    High risk means a score strictly above 60. Worst apps are the five with
    the most trackers; ties keep scan order.
    """
    contact_reading = [a for a in apps if 'READ_CONTACTS' in a.dangerous_permissions]
    companies = {t.company for a in apps for t in a.trackers}
    worst = sorted(apps, key=lambda a: a.tracker_count, reverse=True)[:WORST_APPS_LIMIT]

    return {
        'contactReadingApps': [_app_summary(a) for a in contact_reading],
        'ghostContacts': [c.name for c in contacts if c.is_ghost],
        'highRiskApps': [_app_summary(a) for a in apps if a.risk_score > HIGH_RISK_THRESHOLD],
        'totalTrackers': sum(a.tracker_count for a in apps),
        'uniqueCompanies': len(companies),
        'worstApps': [_app_summary(a) for a in worst],
        'totalContacts': len(contacts),
    }


def ghost_exposure(apps: Sequence[AppRecord], contacts: Sequence[ContactRecord]) -> Dict[str, Any]:
    ghosts: List[Dict[str, Any]] = [c.to_dict() for c in contacts if c.is_ghost]
    access_apps = [
        a.app_name for a in apps
        if any(perm in p for p in a.dangerous_permissions for perm in CONTACT_PERMISSIONS)
    ]
    return {'ghostContacts': ghosts, 'contactAccessApps': access_apps}
