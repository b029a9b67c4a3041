# Structured log events / error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
LINK_INVALIDATED = 'LINK_INVALIDATED'
LINK_STORE_ERROR = 'LINK_STORE_ERROR'
CONFIGURATION_ERROR = 'CONFIGURATION_ERROR'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
