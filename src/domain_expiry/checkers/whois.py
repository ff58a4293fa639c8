"""
WHOIS checker for domain registration expiry.

Queries WHOIS servers for a root domain and extracts the expiration
timestamp from the free-text response.
"""

import asyncio
import logging
import re
import time
from datetime import datetime, timezone
from typing import Dict, Optional

import whois

from .base_checker import BaseChecker, ProbeError, to_ascii_hostname

logger = logging.getLogger(__name__)

# Checked in order against each lowercased response line
EXPIRY_PATTERNS = (
    "paid-till:",
    "registry expiry date:",
    "expiry date:",
    "registrar registration expiration date:",
    "expiration date:",
    "expires:",
    "expire:",
    "expiration time:",
)

DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%Y.%m.%d",
    "%d-%b-%Y",
    "%d.%m.%Y",
    "%d/%m/%Y",
)

_RFC3339_RE = re.compile(
    r'^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$'
)


def parse_rfc3339(value: str) -> Optional[datetime]:
    """
    Parse an RFC 3339 timestamp into an aware UTC datetime.

    Args:
        value: Candidate timestamp string

    Returns:
        Parsed datetime or None if the value is not RFC 3339
    """
    match = _RFC3339_RE.match(value)
    if not match:
        return None

    date_part, time_part, fraction, offset = match.groups()
    if offset in ('Z', 'z'):
        offset = '+00:00'
    # fromisoformat only accepts 3 or 6 fractional digits on older interpreters
    fraction = f".{(fraction or '')[:6].ljust(6, '0')}"

    try:
        parsed = datetime.fromisoformat(f"{date_part}T{time_part}{fraction}{offset}")
    except ValueError:
        return None
    return parsed.astimezone(timezone.utc)


def parse_date_value(value: str) -> Optional[datetime]:
    """
    Parse a WHOIS date value.

    RFC 3339 is tried first, then every format in DATE_FORMATS as a full
    date-time, then the same formats as plain dates. Plain dates are taken
    as the last second of the day in UTC.
    """
    parsed = parse_rfc3339(value)
    if parsed:
        return parsed

    for fmt in DATE_FORMATS:
        if '%H' not in fmt:
            continue
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue

    for fmt in DATE_FORMATS:
        if '%H' in fmt:
            continue
        try:
            day = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return day.replace(hour=23, minute=59, second=59, tzinfo=timezone.utc)

    return None


def parse_whois_expiry(whois_text: str) -> datetime:
    """
    Extract the expiration timestamp from a raw WHOIS response.

    Lines are scanned top to bottom; the first line containing one of
    EXPIRY_PATTERNS (case-insensitive) whose value parses wins.

    Args:
        whois_text: Raw WHOIS response

    Returns:
        Expiration date as an aware UTC datetime

    Raises:
        ProbeError: If no line carries a parsable expiry date
    """
    for line in whois_text.splitlines():
        line_trimmed = line.strip()
        line_lower = line_trimmed.lower()

        if not any(pattern in line_lower for pattern in EXPIRY_PATTERNS):
            continue

        colon_pos = line_trimmed.find(':')
        if colon_pos == -1:
            continue

        parsed = parse_date_value(line_trimmed[colon_pos + 1:].strip())
        if parsed:
            return parsed

        logger.debug(f"Unparsable WHOIS expiry line: {line_trimmed!r}")

    raise ProbeError("Could not parse expiry date from WHOIS")


def load_server_map(data: Dict[str, object]) -> Dict[str, str]:
    """
    Normalize a WHOIS server list.

    Values may be plain host names or objects with a ``host`` key; entries
    without a host are dropped.
    """
    servers = {}
    for tld, value in data.items():
        host = value.get('host') if isinstance(value, dict) else value
        if isinstance(host, str) and host:
            servers[str(tld).lower().lstrip('.')] = host
    return servers


class WhoisClient:
    """
    Blocking WHOIS client built once per process.

    Domains whose suffix appears in the server map are queried directly on
    that server; everything else goes through python-whois' own server
    discovery.
    """

    def __init__(self, servers: Optional[Dict[str, str]] = None, timeout: float = 10):
        self.servers = dict(servers or {})
        self.timeout = timeout
        self._nic = whois.NICClient()

    def server_for(self, domain: str) -> Optional[str]:
        """Return the configured server for the longest matching suffix."""
        labels = domain.split('.')
        for i in range(1, len(labels)):
            suffix = '.'.join(labels[i:])
            if suffix in self.servers:
                return self.servers[suffix]
        return None

    def lookup(self, domain: str) -> str:
        """
        Query WHOIS for a domain and return the raw response text.

        Raises:
            OSError: On socket failures
        """
        server = self.server_for(domain)
        if server:
            logger.debug(f"Querying {server} for {domain}")
            return self._nic.whois(
                domain,
                server,
                0,
                quiet=True,
                timeout=self.timeout,
                ignore_socket_errors=False,
            )
        return self._nic.whois_lookup(
            None,
            domain,
            0,
            quiet=True,
            ignore_socket_errors=False,
            timeout=self.timeout,
        )


class WhoisChecker(BaseChecker):
    """
    Checker for domain registration expiry.

    Uses a shared WhoisClient; the blocking query runs in the event loop's
    thread pool so many roots can be probed at once.
    """

    def __init__(self, client: WhoisClient):
        super().__init__(timeout=client.timeout)
        self.client = client

    async def check(self, domain: str) -> datetime:
        """
        Look up the expiration date of a root domain.

        Args:
            domain: Root domain to query

        Returns:
            Expiration date as an aware UTC datetime

        Raises:
            ProbeError: If the response has no parsable expiry date
            OSError: On network failures
        """
        check_start_time = time.time()
        logger.debug(f"Starting WHOIS check for domain: {domain}")

        query = to_ascii_hostname(domain)

        loop = asyncio.get_running_loop()
        whois_text = await loop.run_in_executor(None, self.client.lookup, query)
        query_time = time.time() - check_start_time
        logger.debug(f"WHOIS query completed for {domain} in {query_time:.3f}s")

        expiration_date = parse_whois_expiry(whois_text or '')
        logger.debug(f"Domain {domain} expires at {expiration_date.isoformat()}")
        return expiration_date
