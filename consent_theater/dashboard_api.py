"""Dashboard JSON endpoints consumed by the presentation layer."""
import logging

from flask import Blueprint, current_app, jsonify, request

from .config import Config
from .deletion import generate_deletion_request
from .ingestion import IngestionOrchestrator
from .metrics import METRICS, compute_metric, simulate_blocking

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)

ERROR_STATUS = {
    'fetch_error': 502,
    'no_scan_data': 502,
    'format_error': 400,
    'parse_error': 400,
}


def get_orchestrator() -> IngestionOrchestrator:
    return current_app.extensions['consent_theater']


def outcome_response(outcome):
    dataset, current_generation = get_orchestrator().store.read()
    body = {
        'applied': outcome.applied,
        'generation': outcome.generation,
        'currentGeneration': current_generation,
        'isLoaded': dataset.is_loaded,
    }
    if outcome.error:
        body.update(outcome.error.to_dict())
        return jsonify(body), ERROR_STATUS.get(outcome.error.kind, 500)
    return jsonify(body)


@dashboard_bp.route('/health')
def health():
    dataset = get_orchestrator().dataset
    return jsonify({'status': 'ok', 'is_loaded': dataset.is_loaded, 'source': dataset.source})


@dashboard_bp.route('/upload', methods=['POST'])
def upload():
    """File mode: unrecognized or malformed uploads leave the dataset as it was."""
    upload_file = request.files.get('file')
    if upload_file is not None:
        raw, filename = upload_file.read(), upload_file.filename or 'upload'
    else:
        raw, filename = request.get_data(), 'body'

    if not raw:
        return jsonify({'error': "Missing 'file' upload"}), 400
    return outcome_response(get_orchestrator().ingest_file(raw, filename=filename))


@dashboard_bp.route('/load', methods=['POST'])
def load_from_url():
    payload = request.get_json(silent=True) or {}
    url = str(payload.get('url') or request.args.get('url') or Config.SCANNER_URL).strip()
    if not url:
        return jsonify({'error': "Missing 'url' parameter"}), 400
    return outcome_response(get_orchestrator().ingest_url(url))


@dashboard_bp.route('/sample', methods=['POST'])
def load_sample():
    return outcome_response(get_orchestrator().load_sample_data())


@dashboard_bp.route('/dataset')
def dataset():
    return jsonify(get_orchestrator().dataset.to_dict())


@dashboard_bp.route('/metrics/<name>')
def metric(name):
    if name not in METRICS:
        return jsonify({'error': f"Unknown metric '{name}'", 'available': sorted(METRICS)}), 404
    orchestrator = get_orchestrator()
    return jsonify(compute_metric(name, orchestrator.dataset, orchestrator.rules))


@dashboard_bp.route('/blocking-simulation')
def blocking_simulation():
    """``?categories=Advertising,Analytics`` picks what to block; omitted means the defaults."""
    raw = request.args.get('categories')
    enabled = None if raw is None else [c.strip() for c in raw.split(',') if c.strip()]
    return jsonify(simulate_blocking(get_orchestrator().dataset.vpn_log, enabled))


@dashboard_bp.route('/deletion-request', methods=['POST'])
def deletion_request():
    payload = request.get_json(silent=True) or {}
    try:
        letter = generate_deletion_request(
            regime=str(payload.get('regime', 'dpdpa')),
            user_name=str(payload.get('user_name', '')).strip(),
            user_email=str(payload.get('user_email', '')).strip(),
            company=str(payload.get('company', '')).strip(),
            data_types=payload.get('data_types'),
        )
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify(letter)
