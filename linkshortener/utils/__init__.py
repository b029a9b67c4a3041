from linkshortener.utils.config import app_env, app_name, app_prefix, load_settings, Settings
from linkshortener.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from linkshortener.utils.shortener import generate_shortcode
from linkshortener.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'app_env',
    'app_name',
    'app_prefix',
    'load_settings',
    'Settings',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
