import os

class Config:
    # Scanner Configuration
    SCANNER_URL = os.getenv('SCANNER_URL', '')
    SCANNER_TIMEOUT = int(os.getenv('SCANNER_TIMEOUT', '10'))
    DISCOVERY_WORKERS = int(os.getenv('DISCOVERY_WORKERS', '4'))

    # Package data (taxonomy tables and bundled sample data)
    PACKAGE_ROOT = os.path.dirname(__file__)
    RULES_DIR = os.getenv('RULES_DIR', os.path.join(PACKAGE_ROOT, 'rules'))
    SAMPLE_DATA_DIR = os.getenv('SAMPLE_DATA_DIR', os.path.join(PACKAGE_ROOT, 'data'))
    TEMPLATE_DIR = os.path.join(PACKAGE_ROOT, 'templates')

    # Web Configuration
    MAX_UPLOAD_BYTES = int(os.getenv('MAX_UPLOAD_BYTES', str(16 * 1024 * 1024)))
    PORT = int(os.getenv('PORT', '8080'))
    FLASK_DEBUG = os.getenv('FLASK_DEBUG', '0').lower() in ('1', 'true')
