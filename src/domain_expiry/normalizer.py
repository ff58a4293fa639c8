"""
Hostname normalization for expiry monitoring.

Derives the two probe candidate sets from raw hostnames: registrable root
domains for WHOIS lookups and concrete hosts for TLS certificate inspection.
"""

import ipaddress
import logging
import re
from typing import Iterable, Optional, Set, Tuple

import tldextract

logger = logging.getLogger(__name__)

# DNS-only record labels, never TLS endpoints
TXT_PATTERNS = frozenset({'_dmarc', '_domainkey', '_acme-challenge', '_spf'})

WILDCARD_PREFIX = '*.'
WILDCARD_PROBE_LABEL = 'test'

_LABEL_RE = re.compile(r'^[\w-]{1,63}$')

# Bundled public suffix snapshot only, no network fetch at runtime
_extract = tldextract.TLDExtract(suffix_list_urls=())


def _clean(hostname: str) -> str:
    domain = hostname.strip().lower()
    # Fully qualified form: drop the root label
    if domain.endswith('.'):
        domain = domain[:-1]
    return domain


def _is_parsable(domain: str) -> bool:
    if not domain or len(domain) > 253:
        return False
    return all(_LABEL_RE.match(label) for label in domain.split('.'))


def _is_ip_address(domain: str) -> bool:
    try:
        ipaddress.ip_address(domain)
    except ValueError:
        return False
    return True


def root_of(hostname: str) -> Optional[str]:
    """
    Derive the registrable root domain used as the WHOIS probe key.

    The wildcard marker is dropped, the name is parsed against the public
    suffix list and the last two labels of the registrable domain are kept.
    Multi-label suffixes such as ``co.uk`` therefore collapse to the suffix
    itself; this approximation is intentional.

    Args:
        hostname: Raw hostname from a source

    Returns:
        Root domain (e.g. ``example.com``) or None if the input cannot be parsed
    """
    domain = _clean(hostname)
    if domain.startswith(WILDCARD_PREFIX):
        domain = domain[len(WILDCARD_PREFIX):]

    if not _is_parsable(domain) or _is_ip_address(domain):
        return None

    labels = domain.split('.')
    if len(labels) < 2:
        return None

    ext = _extract(domain)
    if ext.suffix:
        if not ext.domain:
            # The name is a public suffix itself
            return None
        registrable = f"{ext.domain}.{ext.suffix}"
    else:
        # Unknown TLD: treat the last label as the suffix
        registrable = '.'.join(labels[-2:])

    parts = registrable.split('.')
    return '.'.join(parts[-2:])


def ssl_candidate_of(hostname: str) -> Optional[str]:
    """
    Turn a hostname into a host eligible for certificate inspection.

    Wildcards become a concrete ``test.`` host, TXT-record style names are
    rejected, as is anything with fewer than two labels.
    """
    domain = _clean(hostname)
    if domain.startswith(WILDCARD_PREFIX):
        domain = f"{WILDCARD_PROBE_LABEL}.{domain[len(WILDCARD_PREFIX):]}"

    labels = domain.split('.')
    if any(label in TXT_PATTERNS for label in labels):
        return None

    if len(labels) < 2:
        return None

    return domain


def normalize_hostnames(hostnames: Iterable[str]) -> Tuple[Set[str], Set[str]]:
    """
    Build the deduplicated root-domain and SSL-candidate sets.

    Args:
        hostnames: Merged hostnames from all sources

    Returns:
        Tuple of (root domains, ssl candidates)
    """
    roots: Set[str] = set()
    candidates: Set[str] = set()

    for hostname in hostnames:
        root = root_of(hostname)
        if root:
            roots.add(root)
        else:
            logger.debug(f"Skipping WHOIS probe for unparsable hostname: {hostname!r}")

        candidate = ssl_candidate_of(hostname)
        if candidate:
            candidates.add(candidate)

    return roots, candidates
