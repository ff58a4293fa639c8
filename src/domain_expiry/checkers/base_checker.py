"""
Base checker infrastructure for expiry probing.

Provides the abstract base class shared by the WHOIS and TLS probes, the
probe exception type and the classification of expected network failures.
"""

from abc import ABC, abstractmethod
from typing import Any

import idna

# Failures that are part of normal operation (unreachable hosts, dead DNS
# records, servers refusing SNI). Matched as case-sensitive substrings of the
# error message.
EXPECTED_ERRORS = (
    "timed out",
    "Connection timed out",
    "Connection refused",
    "tlsv1 unrecognized name",
    "tlsv1 alert internal error",
    "Name has no usable address",
    "failed to lookup address",
    "Host is unreachable",
    # The same conditions as reported by the system resolver and socket layer
    "Name or service not known",
    "No address associated with hostname",
    "Temporary failure in name resolution",
    "No route to host",
)


class ProbeError(Exception):
    """Raised when a probe cannot produce an expiration date."""


def is_expected_error(message: str) -> bool:
    """
    Check whether a probe error message matches the expected-failure list.

    Args:
        message: Error message produced by a probe

    Returns:
        True if the failure should be suppressed from notifications
    """
    return any(pattern in message for pattern in EXPECTED_ERRORS)


def describe_error(error: BaseException) -> str:
    """Render an exception as a non-empty message."""
    return str(error) if str(error) else f"{type(error).__name__} occurred"


def to_ascii_hostname(hostname: str) -> str:
    """
    Convert a hostname to its ASCII (punycode) form.

    Only labels with non-ASCII characters go through UTS 46 conversion; ASCII
    labels are passed through untouched so DNS-valid names that IDNA 2008
    rejects (underscores, "--" in positions 3-4) can still be probed.

    Raises:
        ProbeError: If a non-ASCII label cannot be converted
    """
    labels = []
    for label in hostname.split('.'):
        if label.isascii():
            labels.append(label)
            continue
        try:
            labels.append(idna.encode(label, uts46=True).decode('ascii'))
        except idna.IDNAError as e:
            raise ProbeError(f"IDN conversion failed: {e}") from e
    return '.'.join(labels)


class BaseChecker(ABC):
    """
    Abstract base class for expiry probes.

    Each probe receives one candidate, performs its network I/O off the event
    loop and either returns the parsed result or raises.
    """

    def __init__(self, timeout: float = 10):
        """
        Initialize the checker.

        Args:
            timeout: Network timeout in seconds (default: 10)
        """
        self.timeout = timeout

    @abstractmethod
    async def check(self, target: str) -> Any:
        """
        Probe the specified target.

        Args:
            target: Root domain or hostname to probe

        Returns:
            Probe-specific result

        Raises:
            ProbeError: If the expiration data cannot be obtained
            OSError: On network failures
        """
        pass
