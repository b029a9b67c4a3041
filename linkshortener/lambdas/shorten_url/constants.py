# Structured log events / error codes
INVALID_JSON = 'INVALID_JSON'
MISSING_URL = 'MISSING_URL'
URL_VALIDATION_FAILED = 'URL_VALIDATION_FAILED'
SHORTCODE_SPACE_EXHAUSTED = 'SHORTCODE_SPACE_EXHAUSTED'
LINK_STORE_ERROR = 'LINK_STORE_ERROR'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
LINK_CREATED = 'LINK_CREATED'
