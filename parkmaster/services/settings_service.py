import copy
import logging
from numbers import Number

from flask import current_app

from ..extensions import db
from ..models.settings import AppSettings, SETTINGS_KEY
from ..utils.calculations import VEHICLE_TYPES

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    'siteName': 'Park Master Pro',
    'pricing': {
        'car': {'baseHours': 2, 'baseFee': 50, 'extraHourFee': 25},
        'bike': {'baseHours': 2, 'baseFee': 20, 'extraHourFee': 10},
        'rickshaw': {'baseHours': 2, 'baseFee': 30, 'extraHourFee': 15},
    },
    'credentials': {
        'username': 'admin',
        'password': 'admin123',
    },
    'viewMode': 'grid',
}

PRICING_FIELDS = ('baseHours', 'baseFee', 'extraHourFee')
VIEW_MODES = ('grid', 'list')


def default_settings():
    return copy.deepcopy(DEFAULT_SETTINGS)


def ensure_default_settings():
    row = db.session.get(AppSettings, SETTINGS_KEY)
    if row is None:
        db.session.add(AppSettings(key=SETTINGS_KEY, value=default_settings()))
        db.session.commit()
        logger.info("Default settings initialized")


def get_settings():
    row = db.session.get(AppSettings, SETTINGS_KEY)
    if row is None:
        return default_settings()
    return copy.deepcopy(row.value)


def get_pricing():
    return get_settings().get('pricing') or DEFAULT_SETTINGS['pricing']


def validate_settings(data):
    """Return an error message, or None if data is a usable settings object."""
    if not isinstance(data, dict):
        return 'Settings must be an object'

    if 'siteName' in data and not isinstance(data['siteName'], str):
        return 'siteName must be a string'

    pricing = data.get('pricing')
    if not isinstance(pricing, dict):
        return 'pricing is required'
    for vehicle_type in VEHICLE_TYPES:
        rule = pricing.get(vehicle_type)
        if not isinstance(rule, dict):
            return f'pricing for {vehicle_type} is required'
        for field in PRICING_FIELDS:
            value = rule.get(field)
            if isinstance(value, bool) or not isinstance(value, Number) or value < 0:
                return f'pricing.{vehicle_type}.{field} must be a non-negative number'

    credentials = data.get('credentials')
    if not isinstance(credentials, dict):
        return 'credentials are required'
    if not credentials.get('username') or not credentials.get('password'):
        return 'credentials need a username and password'

    if data.get('viewMode', 'grid') not in VIEW_MODES:
        return 'viewMode must be grid or list'
    return None


def stage_settings(data):
    """Write settings into the current session without committing."""
    row = db.session.get(AppSettings, SETTINGS_KEY)
    if row is None:
        db.session.add(AppSettings(key=SETTINGS_KEY, value=copy.deepcopy(data)))
    else:
        row.value = copy.deepcopy(data)


def replace_settings(data):
    error = validate_settings(data)
    if error:
        return None, error
    stage_settings(data)
    db.session.commit()
    logger.info("Settings replaced")
    return get_settings(), None


def effective_credentials():
    """Stored credentials with the deployment-time overrides applied."""
    credentials = get_settings().get('credentials') or {}
    username = current_app.config.get('ADMIN_USERNAME') or credentials.get('username')
    password = current_app.config.get('ADMIN_PASSWORD') or credentials.get('password')
    return username, password
