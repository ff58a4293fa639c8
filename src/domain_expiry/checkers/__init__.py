"""
Expiry probes.

WHOIS lookups for root domains and TLS handshakes for certificate hosts.
"""

from .base_checker import BaseChecker, ProbeError, EXPECTED_ERRORS, is_expected_error
from .whois import WhoisChecker, WhoisClient, parse_whois_expiry
from .ssl import SSLChecker, parse_certificate

__all__ = [
    'BaseChecker',
    'ProbeError',
    'EXPECTED_ERRORS',
    'is_expected_error',
    'WhoisChecker',
    'WhoisClient',
    'parse_whois_expiry',
    'SSLChecker',
    'parse_certificate',
]
