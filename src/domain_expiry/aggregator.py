"""
Result aggregation for expiry probes.

Turns raw probe outcomes into threshold-filtered, deduplicated and ordered
notification entries plus one failure summary per probe category.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from .checkers.base_checker import is_expected_error
from .i18n import DEFAULT_LANGUAGE, translate
from .models import CertEntry, CertExpiryResult, DomainEntry, DomainExpiryResult

logger = logging.getLogger(__name__)

# Reported regardless of the configured thresholds
DOMAIN_SAFETY_DAYS = 3  # days < 3
SSL_SAFETY_DAYS = 1  # days <= 1


def days_until(expiration_date: datetime, now: datetime) -> int:
    """
    Whole days from now until expiration, rounded down.

    Negative once expired; naive datetimes are taken as UTC.
    """
    if expiration_date.tzinfo is None:
        expiration_date = expiration_date.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (expiration_date - now).days


def format_failures(failed: Set[str], one_key: str, many_key: str, language: str) -> str:
    """Summarize failed hosts: singular phrasing for one, count and list otherwise."""
    hosts = sorted(failed)
    if len(hosts) == 1:
        return translate(one_key, language, host=hosts[0])
    return translate(
        many_key,
        language,
        count=len(hosts),
        hosts='\n'.join(f"- {host}" for host in hosts),
    )


class ResultAggregator:
    """
    Collects probe results for one run.

    Domain entries are keyed by root domain, certificate entries by serial so
    one certificate served on several hosts yields a single entry with a
    duplicate count.
    """

    def __init__(
        self,
        alarm_days: int,
        ssl_alarm_days: int,
        language: str = DEFAULT_LANGUAGE,
        now: Optional[datetime] = None
    ):
        """
        Initialize the aggregator.

        Args:
            alarm_days: Report domains with fewer remaining days
            ssl_alarm_days: Report certificates with at most this many days left
            language: Language for failure summaries
            now: Reference time (default: current UTC time)
        """
        self.alarm_days = alarm_days
        self.ssl_alarm_days = ssl_alarm_days
        self.language = language
        self.now = now or datetime.now(timezone.utc)

        self._domains: Dict[str, DomainEntry] = {}
        self._certs: Dict[str, CertEntry] = {}
        self.domain_failed: Set[str] = set()
        self.ssl_failed: Set[str] = set()

    def add_domain_result(self, result: DomainExpiryResult) -> None:
        """Threshold a WHOIS result or record its failure."""
        if result.failed:
            if self._is_reportable_failure(result.error, result.root_domain, "domain"):
                self.domain_failed.add(result.root_domain)
            return

        days = days_until(result.expiration_date, self.now)
        logger.debug(f"Domain {result.root_domain} expires in {days} days")

        if days < self.alarm_days or days < DOMAIN_SAFETY_DAYS:
            self._domains[result.root_domain] = DomainEntry(
                hostname=result.root_domain,
                expiration_date=result.expiration_date.isoformat(),
                days=days,
            )

    def add_cert_result(self, result: CertExpiryResult) -> None:
        """Threshold a certificate result, merging hosts that share a serial."""
        if result.failed:
            if self._is_reportable_failure(result.error, result.hostname, "SSL"):
                self.ssl_failed.add(result.hostname)
            return

        cert = result.certificate
        days = days_until(cert.expiration_date, self.now)
        logger.debug(f"Certificate {cert.serial} on {result.hostname} expires in {days} days")

        if days <= self.ssl_alarm_days or days <= SSL_SAFETY_DAYS:
            previous = self._certs.get(cert.serial)
            duplicate_count = previous.duplicate_count + 1 if previous else 1

            self._certs[cert.serial] = CertEntry(
                serial=cert.serial,
                issuer=cert.issuer,
                hostname=result.hostname,
                expiration_date=cert.expiration_date.isoformat(),
                days=days,
                duplicate_count=duplicate_count,
            )

    def domain_entries(self) -> List[DomainEntry]:
        """Expiring domains, most urgent first."""
        return sorted(self._domains.values(), key=lambda entry: entry.days)

    def cert_entries(self) -> List[CertEntry]:
        """Expiring certificates, most urgent first."""
        return sorted(self._certs.values(), key=lambda entry: entry.days)

    def failure_messages(self) -> List[str]:
        """One summary message per probe category that had unexpected failures."""
        messages = []
        if self.domain_failed:
            messages.append(format_failures(
                self.domain_failed,
                "error.domain_failed_one",
                "error.domain_failed_many",
                self.language,
            ))
        if self.ssl_failed:
            messages.append(format_failures(
                self.ssl_failed,
                "error.cert_failed_one",
                "error.cert_failed_many",
                self.language,
            ))
        return messages

    def _is_reportable_failure(self, error: str, target: str, kind: str) -> bool:
        if is_expected_error(error):
            logger.debug(f"Expected {kind} check error for {target} (skipped): {error}")
            return False

        logger.warning(f"Unexpected {kind} check error for {target}: {error}")
        return True
