"""Contagion graph: how the user's installed apps expose their contacts."""
from typing import Any, Dict, List, Sequence

from ..models import AppRecord, ContactRecord

USER_NODE_ID = 'user'


def exposure_severity(footprint_score: int) -> str:
    if footprint_score > 70:
        return 'high'
    if footprint_score > 40:
        return 'medium'
    return 'low'


def build_contagion_graph(apps: Sequence[AppRecord], contacts: Sequence[ContactRecord]) -> Dict[str, Any]:
    """Star graph with the user at the centre and one link per contact.

    Ghost flags come from the contact data as-is; severity is derived from
    each contact's digital footprint score.
    """
    user_exposed_to: List[str] = []
    for app in apps:
        for tracker in app.trackers:
            if tracker.company not in user_exposed_to:
                user_exposed_to.append(tracker.company)

    nodes: List[Dict[str, Any]] = [{
        'id': USER_NODE_ID,
        'name': 'You',
        'type': 'user',
        'footprintScore': 100,
        'exposedTo': user_exposed_to,
        'severity': 'high',
        'val': 12,
    }]
    links: List[Dict[str, Any]] = []

    for contact in contacts:
        node_id = f"contact-{contact.name}"
        node_type = 'ghost' if contact.is_ghost else 'contact'
        nodes.append({
            'id': node_id,
            'name': contact.name,
            'type': node_type,
            'footprintScore': contact.digital_footprint_score,
            'exposedTo': list(contact.exposed_to),
            'severity': exposure_severity(contact.digital_footprint_score),
            'val': 5 if contact.is_ghost else 7,
        })
        links.append({
            'source': USER_NODE_ID,
            'target': node_id,
            'sharedApps': list(contact.exposed_by_apps),
        })

    severities = [exposure_severity(c.digital_footprint_score) for c in contacts]
    return {
        'nodes': nodes,
        'links': links,
        'summary': {
            'totalContacts': len(contacts),
            'ghostContacts': sum(1 for c in contacts if c.is_ghost),
            'highExposure': severities.count('high'),
            'mediumExposure': severities.count('medium'),
            'lowExposure': severities.count('low'),
            'companiesReached': len({company for c in contacts for company in c.exposed_to}),
        },
    }
