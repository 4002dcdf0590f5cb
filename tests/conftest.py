import json
from unittest.mock import MagicMock

import pytest
import requests

from consent_theater.ingestion import IngestionOrchestrator, load_placeholder_contacts
from consent_theater.rules import load_rules
from consent_theater.scanner_client import ScannerClient
from consent_theater.store import DatasetStore


def make_response(status_code=200, payload=None, body_error=False):
    response = MagicMock()
    response.status_code = status_code
    if body_error:
        response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    else:
        response.json.return_value = payload
    return response


def make_session(routes):
    """Fake requests session. ``routes`` maps URL -> response mock or exception instance."""
    session = MagicMock()

    def fake_get(url, timeout=None):
        outcome = routes.get(url)
        if outcome is None:
            raise requests.ConnectionError(f"connection refused: {url}")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    session.get.side_effect = fake_get
    return session


@pytest.fixture
def rules():
    return load_rules()


@pytest.fixture
def placeholder_contacts():
    return load_placeholder_contacts()


@pytest.fixture
def orchestrator_factory(placeholder_contacts):
    def factory(routes=None):
        client = ScannerClient(timeout=1, session=make_session(routes or {}))
        return IngestionOrchestrator(
            store=DatasetStore(),
            client=client,
            placeholder_contacts=placeholder_contacts,
        )
    return factory


@pytest.fixture
def raw_phone_scan():
    return [
        {
            "packageName": "com.example.camera",
            "appName": "Example Camera",
            "versionName": "1.2.0",
            "permissions": ["android.permission.CAMERA", "android.permission.READ_CONTACTS"],
        },
        {
            "packageName": "com.example.ads",
            "appName": "Ad Heavy Game",
            "permissions": [
                "android.permission.INTERNET",
                "com.google.android.gms.permission.AD_ID",
                "android.permission.ACCESS_ADSERVICES_ATTRIBUTION",
                "android.permission.ACCESS_FINE_LOCATION",
            ],
        },
    ]


@pytest.fixture
def pre_shaped_scan():
    return {
        "scan_id": "scan-42",
        "device_model": "Pixel 8",
        "android_version": "14",
        "scan_timestamp": "2025-02-01T08:00:00Z",
        "total_apps": 99,
        "total_trackers": 99,
        "apps": [
            {
                "package_name": "com.instagram.android",
                "app_name": "Instagram",
                "permissions": {
                    "dangerous": ["android.permission.CAMERA", "android.permission.RECORD_AUDIO"],
                    "normal": ["android.permission.INTERNET"],
                },
                "dangerous_permissions": ["android.permission.CAMERA", "android.permission.RECORD_AUDIO"],
                "trackers": [
                    {"name": "Facebook Analytics", "company": "Meta Platforms", "category": "analytics", "website": "x"},
                    {"name": "Facebook Analytics", "company": "Meta Platforms"},
                ],
                "tracker_count": 7,
                "dangerous_permission_count": 9,
                "risk_score": 36,
            },
            {
                "package_name": "com.whatsapp",
                "app_name": "WhatsApp",
                "permissions": ["android.permission.READ_CONTACTS", "android.permission.INTERNET"],
            },
        ],
    }


@pytest.fixture
def network_log():
    return [
        {
            "timestamp": "2025-01-15T02:14:09Z",
            "source_app": "com.instagram.android",
            "source_app_name": "Instagram",
            "destination_host": "graph.facebook.com",
            "destination_company": "Meta Platforms",
            "destination_country": "United States",
            "bytes_transferred": 2048,
            "is_tracker": True,
            "hour_of_day": 2,
            "user_was_active": False,
        },
        {
            "timestamp": "2025-01-15T14:00:00Z",
            "source_app": "com.instagram.android",
            "source_app_name": "Instagram",
            "destination_host": "app-measurement.com",
            "destination_company": "Alphabet Inc.",
            "destination_country": "United States",
            "bytes_transferred": 1024,
            "is_tracker": True,
            "hour_of_day": 14,
            "user_was_active": True,
        },
        {
            "timestamp": "2025-01-15T05:30:00Z",
            "source_app": "com.truecaller",
            "source_app_name": "Truecaller",
            "destination_host": "api4.truecaller.com",
            "destination_company": "True Software Scandinavia AB",
            "destination_country": "Sweden",
            "bytes_transferred": 4096,
            "is_tracker": True,
            "hour_of_day": 5,
            "user_was_active": False,
        },
    ]


@pytest.fixture
def as_bytes():
    def encode(value):
        return json.dumps(value).encode("utf-8")
    return encode
