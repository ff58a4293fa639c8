"""
Service wiring.

Turns configuration variants into concrete sources and notifiers and builds
a fresh executor for every run. The WHOIS client is created once and shared
by all runs.
"""

import logging
from typing import List, Optional

from .checkers.ssl import SSLChecker
from .checkers.whois import WhoisChecker, WhoisClient
from .config import (
    ConsoleNotifierConfig,
    FileSourceConfig,
    NotifierConfig,
    SelectelSourceConfig,
    ServiceConfig,
    SourceConfig,
    TelegramNotifierConfig,
    load_whois_servers,
)
from .executor import DomainCheckerExecutor
from .notifiers import BaseNotifier, ConsoleNotifier, TelegramNotifier
from .sources import BaseSource, FileSource, SelectelSource

logger = logging.getLogger(__name__)


def build_source(conf: SourceConfig) -> BaseSource:
    """Create the source for a configuration variant."""
    if isinstance(conf, FileSourceConfig):
        return FileSource(conf.filename)
    if isinstance(conf, SelectelSourceConfig):
        return SelectelSource(
            account_id=conf.account_id,
            password=conf.password,
            project_name=conf.project_name,
            user=conf.user,
        )
    raise TypeError(f"Unsupported source configuration: {type(conf).__name__}")


def build_notifier(conf: NotifierConfig, language: str) -> BaseNotifier:
    """Create the notifier for a configuration variant."""
    if isinstance(conf, ConsoleNotifierConfig):
        return ConsoleNotifier(language=language)
    if isinstance(conf, TelegramNotifierConfig):
        return TelegramNotifier(
            bot_token=conf.bot_token,
            chat_id=conf.chat_id,
            retries=conf.retries,
            retry_interval=conf.retry_interval,
            language=language,
        )
    raise TypeError(f"Unsupported notifier configuration: {type(conf).__name__}")


class Services:
    """Holds process-wide objects and builds per-run executors."""

    def __init__(self, config: ServiceConfig, whois_client: Optional[WhoisClient] = None):
        self.config = config
        self.whois_client = whois_client or self._create_whois_client()

    def _create_whois_client(self) -> WhoisClient:
        servers = {}
        if self.config.whois_servers:
            servers = load_whois_servers(self.config.whois_servers)
            logger.info(f"Loaded {len(servers)} WHOIS server(s) from {self.config.whois_servers}")
        return WhoisClient(servers=servers, timeout=self.config.whois_timeout)

    def sources(self) -> List[BaseSource]:
        return [build_source(conf) for conf in self.config.sources.values()]

    def notifiers(self) -> List[BaseNotifier]:
        return [build_notifier(conf, self.config.language) for conf in self.config.notifiers.values()]

    def domain_checker(
        self,
        sources: Optional[List[BaseSource]] = None,
        notifiers: Optional[List[BaseNotifier]] = None
    ) -> DomainCheckerExecutor:
        """
        Build an executor with fresh sources and notifiers.

        Args:
            sources: Override the configured sources
            notifiers: Override the configured notifiers
        """
        return DomainCheckerExecutor(
            sources=self.sources() if sources is None else sources,
            notifiers=self.notifiers() if notifiers is None else notifiers,
            whois_checker=WhoisChecker(self.whois_client),
            ssl_checker=SSLChecker(),
            alarm_days=self.config.alarm_days,
            ssl_alarm_days=self.config.ssl_alarm_days,
            language=self.config.language,
        )
