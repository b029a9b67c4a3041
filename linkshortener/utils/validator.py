"""URL safety validation (SSRF guard)

Decides whether a URL is well-formed and points at a public address, so the
service never stores or redirects to private networks, loopback, link-local
or multicast targets, or URLs carrying credentials.

Functions:
    validate_url(url, resolver=None) -> ValidationResult
        Run the validation steps below, stopping at the first failure.
    is_public_ip(address) -> bool
        Classify a literal IPv4/IPv6 address.
    canonicalize_url(url) -> str
        Normalize a valid URL (lower-cased scheme and host, default port dropped, '/' path).

Validation steps:
    1. Parse as an absolute URL                  -> 'Invalid URL'
    2. Scheme is http or https                   -> 'Invalid protocol'
    3. No userinfo ('user:pass@')                -> 'URL with authentication is not allowed'
    4. Literal IP host is public                 -> 'Private or invalid IP address'
       (numeric IPv4 shorthands such as 2130706433, 127.1 or 0x7f.0.0.1 are
       read the way browsers read them; malformed ones are 'Invalid URL')
    5. Domain host: A and AAAA lookups
       - both empty                              -> 'Domain does not resolve'
       - lookup failure other than no records    -> 'DNS resolution error'
       - any private/reserved address            -> 'Domain resolves to private IP address'

DNS answers can change after a link is created (DNS rebinding), so the
validator runs again whenever a redirect falls through to the durable store.

Example:
    >>> validate_url('http://127.0.0.1/')
    ValidationResult(valid=False, reason='Private or invalid IP address')
    >>> validate_url('ftp://example.com/')
    ValidationResult(valid=False, reason='Invalid protocol')
"""

import functools
import ipaddress
import logging
import re
from urllib.parse import urlsplit, urlunsplit, SplitResult

from linkshortener.models import ValidationResult
from linkshortener.exceptions import DnsResolutionError
from linkshortener.utils.dns import DnsResolver


logger = logging.getLogger(__name__)

INVALID_URL = 'Invalid URL'
INVALID_PROTOCOL = 'Invalid protocol'
AUTH_NOT_ALLOWED = 'URL with authentication is not allowed'
PRIVATE_IP = 'Private or invalid IP address'
DOMAIN_DOES_NOT_RESOLVE = 'Domain does not resolve'
DNS_RESOLUTION_ERROR = 'DNS resolution error'
DOMAIN_RESOLVES_TO_PRIVATE_IP = 'Domain resolves to private IP address'

ALLOWED_SCHEMES = frozenset({'http', 'https'})
DEFAULT_PORTS = {'http': 80, 'https': 443}

DECIMAL_DIGITS = re.compile(r'[0-9]+')
OCTAL_DIGITS = re.compile(r'[0-7]+')
HEX_DIGITS = re.compile(r'[0-9a-fA-F]+')
HEX_NUMBER = re.compile(r'0[xX][0-9a-fA-F]*')

# fmt: off
BLOCKED_IPV4_NETWORKS = tuple(ipaddress.IPv4Network(n) for n in (
    '10.0.0.0/8',       # private
    '172.16.0.0/12',    # private
    '192.168.0.0/16',   # private
    '127.0.0.0/8',      # loopback
    '169.254.0.0/16',   # link-local
    '0.0.0.0/8',        # "this" network
    '224.0.0.0/3',      # multicast, reserved and broadcast (>= 224.0.0.0)
))

BLOCKED_IPV6_NETWORKS = tuple(ipaddress.IPv6Network(n) for n in (
    '::/128',           # unspecified
    '::1/128',          # loopback
    'fc00::/7',         # unique local
    'fe80::/10',        # link-local
    'ff00::/8',         # multicast
))
# fmt: on


@functools.cache
def _default_resolver() -> DnsResolver:
    return DnsResolver()


def is_public_ip(address: str | ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    """Return True unless the address is private, reserved or unparseable.

    IPv4-mapped IPv6 addresses (::ffff:a.b.c.d) are judged by their IPv4 part.
    """
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False

    if isinstance(ip, ipaddress.IPv6Address):
        if ip.ipv4_mapped is not None:
            return is_public_ip(ip.ipv4_mapped)
        return not any(ip in network for network in BLOCKED_IPV6_NETWORKS)

    return not any(ip in network for network in BLOCKED_IPV4_NETWORKS)


def _parse(url: str) -> SplitResult | None:
    if not isinstance(url, str) or not url.strip():
        return None
    try:
        parts = urlsplit(url.strip())
        parts.port  # raises ValueError on a non-numeric or out of range port
    except ValueError:
        return None
    if not parts.scheme:
        return None
    return parts


def _ipv4_number(label: str) -> int:
    """Parse one dotted part the way browsers do: '0x' hex, leading-zero octal, else decimal"""
    if label[:2].lower() == '0x':
        digits, radix, pattern = label[2:], 16, HEX_DIGITS
    elif len(label) > 1 and label.startswith('0'):
        digits, radix, pattern = label[1:], 8, OCTAL_DIGITS
    else:
        digits, radix, pattern = label, 10, DECIMAL_DIGITS

    if not digits:
        if radix == 10:
            raise ValueError('empty IPv4 part')
        return 0
    if not pattern.fullmatch(digits):
        raise ValueError(f'invalid IPv4 part {label!r}')
    return int(digits, radix)


def _numeric_ipv4(hostname: str) -> ipaddress.IPv4Address | None:
    """Read the shorthand IPv4 hosts browsers accept ('2130706433', '127.1', '0x7f.0.0.1').

    Returns None for hosts whose last label isn't a number (regular domains).

    Raises:
        ValueError: The host ends in a number but isn't a valid IPv4 address.
    """
    labels = hostname.split('.')
    if len(labels) > 1 and labels[-1] == '':
        labels.pop()
    if not (DECIMAL_DIGITS.fullmatch(labels[-1]) or HEX_NUMBER.fullmatch(labels[-1])):
        return None
    if len(labels) > 4:
        raise ValueError(f'too many IPv4 parts in {hostname!r}')

    *head, last = [_ipv4_number(label) for label in labels]
    if any(part > 255 for part in head) or last >= 256 ** (4 - len(head)):
        raise ValueError(f'IPv4 part out of range in {hostname!r}')

    value = last
    for position, part in enumerate(head):
        value += part << (8 * (3 - position))
    return ipaddress.IPv4Address(value)


def _ip_literal(hostname: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Return the IP address a host denotes, or None if it's a domain name.

    Raises:
        ValueError: The host looks numeric but isn't a valid address.
    """
    try:
        return ipaddress.ip_address(hostname)
    except ValueError:
        if ':' in hostname:
            return None
    return _numeric_ipv4(hostname)


def validate_url(url: str, resolver: DnsResolver | None = None) -> ValidationResult:
    """Validate that a URL is well-formed and resolves only to public addresses.

    Args:
        url (str):
            Candidate URL.
        resolver (DnsResolver | None):
            DNS resolver used for domain hosts. Defaults to a process-wide
            dnspython-backed resolver.

    Returns:
        ValidationResult: `valid=True`, or `valid=False` with the failing step's reason.
    """
    # 1- Parse
    parts = _parse(url)
    if parts is None:
        return ValidationResult(valid=False, reason=INVALID_URL)

    # 2- Scheme (urlsplit lower-cases it)
    if parts.scheme not in ALLOWED_SCHEMES:
        return ValidationResult(valid=False, reason=INVALID_PROTOCOL)

    # 3- Embedded credentials, even empty ones ('https://@host')
    if '@' in parts.netloc:
        return ValidationResult(valid=False, reason=AUTH_NOT_ALLOWED)

    hostname = parts.hostname
    if not hostname:
        return ValidationResult(valid=False, reason=INVALID_URL)

    # 4- Literal IP host, including numeric shorthands ('127.1' is loopback)
    try:
        ip = _ip_literal(hostname)
    except ValueError:
        return ValidationResult(valid=False, reason=INVALID_URL)
    if ip is not None:
        if not is_public_ip(ip):
            return ValidationResult(valid=False, reason=PRIVATE_IP)
        return ValidationResult(valid=True)

    # 5- Domain host: both families are looked up, failures fail closed
    resolver = resolver or _default_resolver()
    try:
        ipv4_addresses = resolver.resolve_a(hostname)
        ipv6_addresses = resolver.resolve_aaaa(hostname)
    except DnsResolutionError:
        return ValidationResult(valid=False, reason=DNS_RESOLUTION_ERROR)

    if not ipv4_addresses and not ipv6_addresses:
        return ValidationResult(valid=False, reason=DOMAIN_DOES_NOT_RESOLVE)

    for address in [*ipv4_addresses, *ipv6_addresses]:
        if not is_public_ip(address):
            logger.info('Domain resolves to a private address.', extra={'hostname': hostname, 'address': address})
            return ValidationResult(valid=False, reason=DOMAIN_RESOLVES_TO_PRIVATE_IP)

    # 6- Valid
    return ValidationResult(valid=True)


def canonicalize_url(url: str) -> str:
    """Return the canonical form of a URL that passed validate_url()

    Example:
        >>> canonicalize_url('HTTPS://Example.COM:443')
        'https://example.com/'
    """
    parts = urlsplit(url.strip())
    host = parts.hostname or ''
    ip = _ip_literal(host) if host else None
    if isinstance(ip, ipaddress.IPv4Address):
        host = str(ip)
    netloc = f'[{host}]' if ':' in host else host
    if parts.port is not None and parts.port != DEFAULT_PORTS.get(parts.scheme):
        netloc = f'{netloc}:{parts.port}'
    return urlunsplit((parts.scheme, netloc, parts.path or '/', parts.query, parts.fragment))
