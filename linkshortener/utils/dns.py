"""DNS lookups for URL validation

Wraps a dnspython resolver so A and AAAA lookups can be done independently
with a bounded lifetime, while keeping "no records" apart from real failures.

Classes:
    DnsResolver:
        resolve_a(hostname) -> list[str]
        resolve_aaaa(hostname) -> list[str]

    Both return an empty list when the name doesn't exist (NXDOMAIN) or has no
    records of the requested type (NoAnswer), and raise DnsResolutionError on
    anything else (timeouts, SERVFAIL, no reachable nameservers).

Example:
    >>> resolver = DnsResolver(timeout=2.0)
    >>> resolver.resolve_a('example.com')
    ['93.184.215.14']
    >>> resolver.resolve_aaaa('ipv4only.example')
    []
"""

import logging

import dns.exception
import dns.resolver

from linkshortener.constants import Timeout
from linkshortener.exceptions import DnsResolutionError


logger = logging.getLogger(__name__)


class DnsResolver:
    def __init__(self, timeout: float = Timeout.DNS, resolver: dns.resolver.Resolver | None = None):
        if resolver is None:
            resolver = dns.resolver.Resolver()
            resolver.lifetime = timeout
        self.resolver = resolver

    def resolve_a(self, hostname: str) -> list[str]:
        return self._resolve(hostname, 'A')

    def resolve_aaaa(self, hostname: str) -> list[str]:
        return self._resolve(hostname, 'AAAA')

    def _resolve(self, hostname: str, rdtype: str) -> list[str]:
        try:
            answer = self.resolver.resolve(hostname, rdtype)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return []
        except dns.exception.DNSException as e:
            logger.warning(
                'DNS lookup failed.',
                extra={'hostname': hostname, 'rdtype': rdtype, 'error': e.__class__.__name__},
            )
            raise DnsResolutionError(f'{rdtype} lookup for {hostname} failed ({e.__class__.__name__}).') from e

        return [rdata.address for rdata in answer]
