from linkshortener.services.link_creator import LinkCreator, RetryPolicy
from linkshortener.services.redirect_resolver import RedirectResolver


__all__ = [
    'LinkCreator',
    'RetryPolicy',
    'RedirectResolver',
]
