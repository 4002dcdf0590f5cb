"""Aggregates over the 24-hour network log."""
from typing import Any, Dict, List, Sequence

from ..models import NetworkLogEntry
from .common import most_common, round_half_up

SLEEP_HOURS = range(0, 7)


def is_sleeping_hour(hour: int) -> bool:
    return hour in SLEEP_HOURS


def scoreboard(vpn_log: Sequence[NetworkLogEntry]) -> Dict[str, Any]:
    sleeping = [e for e in vpn_log if is_sleeping_hour(e.hour_of_day)]
    return {
        'totalConnections': len(vpn_log),
        'uniqueCompanies': len({e.destination_company for e in vpn_log}),
        'uniqueCountries': len({e.destination_country for e in vpn_log}),
        'sleepingConnections': len(sleeping),
        'sleepingApps': len({e.source_app_name for e in sleeping}),
        'totalDataKB': round_half_up(sum(e.bytes_transferred for e in vpn_log) / 1024),
        'inactiveConnections': sum(1 for e in vpn_log if not e.user_was_active),
        'topCompany': most_common(e.destination_company for e in vpn_log),
        'topApp': most_common(e.source_app_name for e in vpn_log),
    }


def hourly_timeline(vpn_log: Sequence[NetworkLogEntry]) -> List[Dict[str, Any]]:
    buckets = [
        {'hour': hour, 'connections': 0, 'totalBytes': 0, 'isSleeping': is_sleeping_hour(hour)}
        for hour in range(24)
    ]
    for entry in vpn_log:
        bucket = buckets[entry.hour_of_day]
        bucket['connections'] += 1
        bucket['totalBytes'] += entry.bytes_transferred
    return buckets


def worst_offenders(vpn_log: Sequence[NetworkLogEntry]) -> List[Dict[str, Any]]:
    """Per-app connection stats, most connections first."""
    offenders: Dict[str, Dict[str, Any]] = {}
    for entry in vpn_log:
        app = offenders.setdefault(entry.source_app_name, {
            'appName': entry.source_app_name,
            'packageName': entry.source_app,
            'connectionCount': 0,
            'companies': set(),
            'sleepingConnections': 0,
            'bytesTransferred': 0,
        })
        app['connectionCount'] += 1
        app['companies'].add(entry.destination_company)
        if is_sleeping_hour(entry.hour_of_day):
            app['sleepingConnections'] += 1
        app['bytesTransferred'] += entry.bytes_transferred

    results = []
    for app in offenders.values():
        companies = app.pop('companies')
        results.append({**app, 'uniqueCompanies': len(companies)})
    return sorted(results, key=lambda a: a['connectionCount'], reverse=True)
