"""Flask application serving the normalized dataset and its derived metrics."""
import logging
from typing import Optional

from flask import Flask

from .config import Config
from .dashboard_api import dashboard_bp
from .ingestion import IngestionOrchestrator

logger = logging.getLogger(__name__)


def create_app(orchestrator: Optional[IngestionOrchestrator] = None) -> Flask:
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = Config.MAX_UPLOAD_BYTES
    app.json.sort_keys = False

    app.extensions['consent_theater'] = orchestrator or IngestionOrchestrator()
    app.register_blueprint(dashboard_bp)
    logger.info("Dashboard API ready (scanner default: %s)", Config.SCANNER_URL or 'none')
    return app
