import json

import pytest
from conftest import make_response

from consent_theater.models import Dataset
from consent_theater.store import DatasetStore

BASE = "http://192.168.1.5:8080"


def combined(scan, **extra):
    return {"format": "consent-theater-combined", "scan_result": scan, **extra}


# ========================
# File mode
# ========================

def test_file_mode_raw_scan(orchestrator_factory, raw_phone_scan, as_bytes):
    orchestrator = orchestrator_factory()
    outcome = orchestrator.ingest_file(as_bytes(raw_phone_scan), "scan.json")

    assert outcome.applied
    assert outcome.error is None
    assert orchestrator.dataset.is_loaded
    assert orchestrator.dataset.scan_result.total_apps == 2


def test_file_mode_malformed_json_keeps_prior_dataset(orchestrator_factory, raw_phone_scan, as_bytes):
    orchestrator = orchestrator_factory()
    orchestrator.ingest_file(as_bytes(raw_phone_scan))
    before = orchestrator.dataset

    outcome = orchestrator.ingest_file(b"{not json", "broken.json")

    assert not outcome.applied
    assert outcome.error is None
    assert orchestrator.dataset is before


def test_file_mode_unrecognized_shape_is_silent(orchestrator_factory, as_bytes):
    orchestrator = orchestrator_factory()
    outcome = orchestrator.ingest_file(as_bytes({"something": "else"}))
    assert not outcome.applied
    assert outcome.error is None
    assert orchestrator.dataset == Dataset()


def test_file_mode_network_log_keeps_scan(orchestrator_factory, raw_phone_scan, network_log, as_bytes):
    orchestrator = orchestrator_factory()
    orchestrator.ingest_file(as_bytes(raw_phone_scan))
    scan = orchestrator.dataset.scan_result

    orchestrator.ingest_file(as_bytes(network_log))
    assert len(orchestrator.dataset.vpn_log) == 3
    assert orchestrator.dataset.scan_result is scan

    orchestrator.ingest_file(as_bytes({"entries": network_log[:1]}))
    assert len(orchestrator.dataset.vpn_log) == 1


def test_combined_without_contacts_uses_placeholder(orchestrator_factory, pre_shaped_scan, placeholder_contacts, as_bytes):
    orchestrator = orchestrator_factory()
    orchestrator.ingest_file(as_bytes(combined(pre_shaped_scan)))

    dataset = orchestrator.dataset
    assert dataset.mock_contacts == placeholder_contacts
    assert len(dataset.mock_contacts) > 0
    assert dataset.vpn_log == ()


def test_combined_with_contacts(orchestrator_factory, pre_shaped_scan, as_bytes):
    orchestrator = orchestrator_factory()
    contacts = [{"name": "Asha", "is_ghost": True, "digital_footprint_score": 50, "exposed_to": [], "exposed_by_apps": []}]
    orchestrator.ingest_file(as_bytes(combined(pre_shaped_scan, contacts=contacts)))
    assert [c.name for c in orchestrator.dataset.mock_contacts] == ["Asha"]


# ========================
# Single-endpoint URL mode
# ========================

def test_single_endpoint_success(orchestrator_factory, raw_phone_scan):
    orchestrator = orchestrator_factory({f"{BASE}/scan/raw": make_response(payload=raw_phone_scan)})
    outcome = orchestrator.ingest_url(f"{BASE}/scan/raw")
    assert outcome.applied
    assert orchestrator.dataset.scan_result.total_apps == 2


def test_single_endpoint_http_error_is_surfaced(orchestrator_factory, raw_phone_scan, as_bytes):
    orchestrator = orchestrator_factory({f"{BASE}/scan": make_response(status_code=500)})
    orchestrator.ingest_file(as_bytes(raw_phone_scan))
    before = orchestrator.dataset

    outcome = orchestrator.ingest_url(f"{BASE}/scan")

    assert not outcome.applied
    assert outcome.error.kind == "fetch_error"
    assert outcome.error.message == "HTTP 500"
    assert orchestrator.dataset is before


def test_single_endpoint_unrecognized_shape(orchestrator_factory):
    orchestrator = orchestrator_factory({f"{BASE}/scan": make_response(payload={"status": "idle"})})
    outcome = orchestrator.ingest_url(f"{BASE}/scan")
    assert outcome.error.kind == "format_error"


def test_single_endpoint_network_log(orchestrator_factory, network_log):
    orchestrator = orchestrator_factory({f"{BASE}/pcap/json": make_response(payload={"connections": network_log})})
    outcome = orchestrator.ingest_url(f"{BASE}/pcap/json")
    assert outcome.applied
    assert len(orchestrator.dataset.vpn_log) == 3


# ========================
# Base-URL auto-discovery
# ========================

def test_discovery_merges_sources(orchestrator_factory, raw_phone_scan, network_log, placeholder_contacts):
    orchestrator = orchestrator_factory({
        f"{BASE}/scan": make_response(payload=raw_phone_scan),
        f"{BASE}/pcap/json": make_response(payload={"connections": network_log}),
        # /contacts and base path are unreachable
    })
    outcome = orchestrator.ingest_url(BASE)

    dataset = orchestrator.dataset
    assert outcome.applied
    assert dataset.scan_result.total_apps == 2
    assert len(dataset.vpn_log) == 3
    assert dataset.mock_contacts == placeholder_contacts
    assert dataset.to_dict()["vpnLog"][0]["destination_host"] == "graph.facebook.com"


def test_discovery_adopts_combined_payload(orchestrator_factory, pre_shaped_scan, raw_phone_scan, network_log):
    orchestrator = orchestrator_factory({
        f"{BASE}/scan": make_response(payload=raw_phone_scan),
        BASE: make_response(payload=combined(pre_shaped_scan, vpn_log=network_log[:1])),
        f"{BASE}/pcap/json": make_response(payload=network_log),
    })
    orchestrator.ingest_url(BASE)

    dataset = orchestrator.dataset
    assert dataset.scan_result.scan_id == "scan-42"
    assert len(dataset.vpn_log) == 1


def test_discovery_falls_back_to_base_scan(orchestrator_factory, pre_shaped_scan):
    orchestrator = orchestrator_factory({
        f"{BASE}/scan": make_response(payload={"status": "scanning"}),
        BASE: make_response(payload=pre_shaped_scan),
    })
    outcome = orchestrator.ingest_url(BASE)
    assert outcome.applied
    assert orchestrator.dataset.scan_result.scan_id == "scan-42"


def test_discovery_without_scan_data_fails(orchestrator_factory, network_log):
    orchestrator = orchestrator_factory({f"{BASE}/pcap/json": make_response(payload=network_log)})
    outcome = orchestrator.ingest_url(BASE)

    assert not outcome.applied
    assert outcome.error.kind == "no_scan_data"
    assert orchestrator.dataset == Dataset()


def test_discovery_uses_supplied_contacts(orchestrator_factory, raw_phone_scan):
    contacts = [{"name": "Dev", "is_ghost": False, "digital_footprint_score": 80, "exposed_to": ["Meta Platforms"], "exposed_by_apps": ["WhatsApp"]}]
    orchestrator = orchestrator_factory({
        f"{BASE}/scan": make_response(payload=raw_phone_scan),
        f"{BASE}/contacts": make_response(payload=contacts),
    })
    orchestrator.ingest_url(BASE)
    assert [c.name for c in orchestrator.dataset.mock_contacts] == ["Dev"]


# ========================
# Store and sample data
# ========================

def test_store_last_replace_wins():
    store = DatasetStore()
    first = Dataset(source="first")
    second = Dataset(source="second")
    assert store.replace(first) == 1
    assert store.replace(second) == 2
    assert store.snapshot is second


def test_load_sample_data(orchestrator_factory):
    orchestrator = orchestrator_factory()
    outcome = orchestrator.load_sample_data()
    dataset = orchestrator.dataset
    assert outcome.applied
    assert dataset.source == "sample"
    assert dataset.scan_result.total_trackers == 7
    assert dataset.scan_result.total_dangerous_permissions == 13
    assert len(dataset.vpn_log) == 5


# ========================
# Wrong value types inside recognized shapes
# ========================

BAD_VALUE_PAYLOADS = [
    (b'[{"packageName": "a", "appName": "A", "permissions": 5}]', 0),
    (b'{"scan_id": "s", "apps": [{"package_name": "a", "permissions": [], "risk_score": NaN}]}', 0),
    (b'{"scan_id": "s", "apps": [{"package_name": "a", '
     b'"permissions": ["android.permission.CAMERA"], "risk_score": Infinity}]}', 8),
]


@pytest.mark.parametrize("raw,risk_score", BAD_VALUE_PAYLOADS)
def test_file_mode_tolerates_bad_value_types(orchestrator_factory, raw, risk_score):
    orchestrator = orchestrator_factory()
    outcome = orchestrator.ingest_file(raw, "odd.json")

    assert outcome.applied
    assert orchestrator.dataset.apps[0].risk_score == risk_score


@pytest.mark.parametrize("raw,risk_score", BAD_VALUE_PAYLOADS)
def test_single_endpoint_tolerates_bad_value_types(orchestrator_factory, raw, risk_score):
    payload = json.loads(raw)
    orchestrator = orchestrator_factory({f"{BASE}/scan": make_response(payload=payload)})
    outcome = orchestrator.ingest_url(f"{BASE}/scan")

    assert outcome.error is None
    assert outcome.applied
    assert orchestrator.dataset.apps[0].risk_score == risk_score


def test_file_mode_network_log_with_overflowing_bytes(orchestrator_factory):
    raw = (b'[{"destination_host": "x", "bytes_transferred": Infinity},'
           b' {"destination_host": "y", "bytes_transferred": 10}]')
    orchestrator = orchestrator_factory()
    outcome = orchestrator.ingest_file(raw)

    assert outcome.applied
    assert [e.destination_host for e in orchestrator.dataset.vpn_log] == ["y"]
