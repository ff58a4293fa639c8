"""Data models for expiry probing and notification."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class CertificateInfo:
    """Fields extracted from a peer leaf certificate."""
    expiration_date: datetime
    serial: str  # Upper-case hex
    issuer: str  # Issuer organization or "Unknown"


@dataclass
class DomainExpiryResult:
    """Outcome of a WHOIS probe for one root domain."""
    root_domain: str
    expiration_date: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class CertExpiryResult:
    """Outcome of a TLS probe for one hostname."""
    hostname: str
    certificate: Optional[CertificateInfo] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class DomainEntry:
    """Expiring domain, ready for notifiers."""
    hostname: str
    expiration_date: str  # RFC 3339
    days: int  # Negative when already expired


@dataclass
class CertEntry:
    """Expiring certificate, ready for notifiers.

    ``duplicate_count`` is the number of probed hostnames presenting this
    serial; a certificate seen on a single host reports 1.
    """
    serial: str
    issuer: str
    hostname: str
    expiration_date: str  # RFC 3339
    days: int
    duplicate_count: int = 1
