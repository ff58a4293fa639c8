"""
Executor layer for expiry monitoring.

Drives one monitoring run: loads hostnames from every source, probes all
root domains and certificate hosts concurrently, aggregates the outcomes and
dispatches them to every notifier.
"""

import asyncio
import logging
import time
from datetime import datetime
from typing import List, Optional, Set

from .aggregator import ResultAggregator
from .checkers.base_checker import describe_error
from .checkers.ssl import SSLChecker
from .checkers.whois import WhoisChecker
from .i18n import DEFAULT_LANGUAGE, translate
from .models import CertEntry, CertExpiryResult, DomainEntry, DomainExpiryResult
from .normalizer import normalize_hostnames
from .notifiers.base import BaseNotifier
from .sources.base import BaseSource

logger = logging.getLogger(__name__)


class DomainCheckerExecutor:
    """
    Runs a single monitoring pass.

    A new executor is built for every run; nothing survives between runs.
    Probes are the only concurrent part: one task per root domain and per
    certificate host, with no concurrency cap.
    """

    def __init__(
        self,
        sources: List[BaseSource],
        notifiers: List[BaseNotifier],
        whois_checker: WhoisChecker,
        ssl_checker: SSLChecker,
        alarm_days: int,
        ssl_alarm_days: int,
        language: str = DEFAULT_LANGUAGE
    ):
        """
        Initialize the executor.

        Args:
            sources: Hostname sources, queried in order
            notifiers: Notifiers, called in registration order
            whois_checker: Domain expiry probe
            ssl_checker: Certificate expiry probe
            alarm_days: Domain alarm threshold in days
            ssl_alarm_days: Certificate alarm threshold in days
            language: Language for run error messages
        """
        self.sources = sources
        self.notifiers = notifiers
        self.whois_checker = whois_checker
        self.ssl_checker = ssl_checker
        self.alarm_days = alarm_days
        self.ssl_alarm_days = ssl_alarm_days
        self.language = language

    async def run(self, now: Optional[datetime] = None) -> None:
        """
        Execute one full run.

        Never raises for source, probe or notifier failures; those are
        reported to the notifiers or logged.

        Args:
            now: Reference time for day calculations (default: current time)
        """
        start_time = time.time()

        hostnames, source_errors = await self.load_hostnames()

        for message in source_errors:
            self.notify_exception(message)

        if not hostnames:
            logger.warning("No hostnames loaded from any source")
            if source_errors:
                await self.commit()
            return

        logger.info(f"Loaded {len(hostnames)} hostname(s)")

        roots, ssl_hostnames = normalize_hostnames(hostnames)
        logger.debug(f"Probing {len(roots)} root domain(s) and {len(ssl_hostnames)} SSL host(s)")

        aggregator = ResultAggregator(
            alarm_days=self.alarm_days,
            ssl_alarm_days=self.ssl_alarm_days,
            language=self.language,
            now=now,
        )

        domain_results, cert_results = await asyncio.gather(
            self.probe_domains(roots),
            self.probe_certificates(ssl_hostnames),
        )

        for result in domain_results:
            aggregator.add_domain_result(result)

        for result in cert_results:
            aggregator.add_cert_result(result)

        for message in aggregator.failure_messages():
            self.notify_exception(message)

        for entry in aggregator.domain_entries():
            self.notify_expiring_domain(entry)

        for entry in aggregator.cert_entries():
            self.notify_expiring_cert(entry)

        await self.commit()

        logger.info(f"Check completed in {time.time() - start_time:.2f}s")

    async def load_hostnames(self):
        """
        Merge hostnames from all sources.

        Returns:
            Tuple of (lowercased hostname set, formatted source error messages)
        """
        hostnames: Set[str] = set()
        source_errors: List[str] = []

        for source in self.sources:
            try:
                domains = await source.get_domains()
            except Exception as e:
                logger.error(f"Failed to load domains from {source.source_name}: {e}", exc_info=True)
                source_errors.append(translate(
                    "error.source_failed",
                    self.language,
                    source=source.source_name,
                    error=describe_error(e),
                ))
                continue

            hostnames.update(h.strip().lower() for h in domains if h and h.strip())

        return hostnames, source_errors

    async def probe_domains(self, roots: Set[str]) -> List[DomainExpiryResult]:
        """Probe every root domain concurrently."""
        ordered = sorted(roots)
        results = await asyncio.gather(
            *(self._check_domain(root) for root in ordered),
            return_exceptions=True
        )
        return self._collect(ordered, results, "WHOIS")

    async def probe_certificates(self, hostnames: Set[str]) -> List[CertExpiryResult]:
        """Probe every certificate host concurrently."""
        ordered = sorted(hostnames)
        results = await asyncio.gather(
            *(self._check_certificate(hostname) for hostname in ordered),
            return_exceptions=True
        )
        return self._collect(ordered, results, "SSL")

    async def _check_domain(self, root: str) -> DomainExpiryResult:
        try:
            expiration_date = await self.whois_checker.check(root)
        except Exception as e:
            return DomainExpiryResult(root_domain=root, error=describe_error(e))
        return DomainExpiryResult(root_domain=root, expiration_date=expiration_date)

    async def _check_certificate(self, hostname: str) -> CertExpiryResult:
        try:
            certificate = await self.ssl_checker.check(hostname)
        except Exception as e:
            return CertExpiryResult(hostname=hostname, error=describe_error(e))
        return CertExpiryResult(hostname=hostname, certificate=certificate)

    @staticmethod
    def _collect(targets: List[str], results: list, kind: str) -> list:
        """Drop crashed tasks; each loses only its own host's result."""
        collected = []
        for target, result in zip(targets, results):
            if isinstance(result, BaseException):
                logger.error(f"{kind} probe task for {target} crashed: {describe_error(result)}")
                continue
            collected.append(result)
        return collected

    def notify_exception(self, message: str) -> None:
        for notifier in self.notifiers:
            notifier.record_exception(message)

    def notify_expiring_domain(self, entry: DomainEntry) -> None:
        for notifier in self.notifiers:
            notifier.record_expiring_domain(entry)

    def notify_expiring_cert(self, entry: CertEntry) -> None:
        for notifier in self.notifiers:
            notifier.record_expiring_cert(entry)

    async def commit(self) -> None:
        """Commit every notifier; a failing commit does not stop the others."""
        for notifier in self.notifiers:
            try:
                await notifier.commit()
            except Exception as e:
                logger.error(f"Commit failed for {type(notifier).__name__}: {describe_error(e)}", exc_info=True)
