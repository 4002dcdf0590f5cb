"""Data erasure request letters (DPDPA for India, GDPR for the EU)."""
import datetime
import logging
from typing import Dict, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .config import Config

logger = logging.getLogger(__name__)

DEFAULT_DATA_TYPES = (
    'Device identifiers (AAID, IMEI)',
    'Location data (GPS coordinates, cell tower data)',
    'Browsing history and in-app activity',
    'Contact list data',
    'Usage patterns and behavioral profiles',
    'IP addresses and network metadata',
)

SUBJECTS = {
    'dpdpa': 'Data Erasure Request Under DPDPA 2023 - {user_name}',
    'gdpr': 'Right to Erasure Request Under GDPR Article 17 - {user_name}',
}

_env = Environment(
    loader=FileSystemLoader(Config.TEMPLATE_DIR),
    undefined=StrictUndefined,
    keep_trailing_newline=False,
    autoescape=False,
)


def generate_deletion_request(
    regime: str,
    user_name: str,
    user_email: str,
    company: str,
    data_types: Optional[Sequence[str]] = None,
    date: Optional[datetime.date] = None,
) -> Dict[str, str]:
    """Render an erasure request addressed to ``company``.

    Args:
        regime: 'dpdpa' or 'gdpr'
        user_name: Requester's full name
        user_email: Requester's email
        company: Company receiving the request
        data_types: Data categories to list (default: DEFAULT_DATA_TYPES)
        date: Letter date (default: today)

    Returns:
        Dict with 'subject' and 'body'

    Raises:
        ValueError: unknown regime or missing requester details
    """
    regime = regime.lower()
    if regime not in SUBJECTS:
        raise ValueError(f"Unknown regime: {regime}")
    if not (user_name and user_email and company):
        raise ValueError("user_name, user_email and company are required")

    template = _env.get_template(f"deletion/{regime}.txt")
    body = template.render(
        company=company,
        user_name=user_name,
        user_email=user_email,
        data_types=list(data_types or DEFAULT_DATA_TYPES),
        date=date or datetime.date.today(),
    )
    logger.info("Generated %s erasure request for %s", regime, company)
    return {'subject': SUBJECTS[regime].format(user_name=user_name), 'body': body.rstrip('\n')}
