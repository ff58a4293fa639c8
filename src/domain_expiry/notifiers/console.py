"""Notifier that prints expiring entries to the terminal with Rich."""

import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

from ..i18n import DEFAULT_LANGUAGE
from ..models import CertEntry, DomainEntry
from .base import BaseNotifier

logger = logging.getLogger(__name__)


def get_theme() -> Theme:
    """Rich theme used for console notifications."""
    return Theme({
        "urgent": "bold red",
        "warning": "yellow",
        "error": "bold red",
        "host": "bold cyan",
        "dim": "dim",
    })


class ConsoleNotifier(BaseNotifier):
    """
    Prints a panel per section (certificates, domains, errors) on commit.

    Never fails a run: formatting problems are logged per entry.
    """

    def __init__(self, language: str = DEFAULT_LANGUAGE, console: Optional[Console] = None):
        super().__init__(language)
        self.console = console or Console(theme=get_theme())

    def format_cert(self, entry: CertEntry) -> str:
        more = f" (+{entry.duplicate_count - 1})" if entry.duplicate_count > 1 else ""
        return (
            f"{self.t('entry.certificate')} {entry.serial} ({entry.issuer}) "
            f"{entry.hostname}{more}: {self.format_expiry(entry.days)}"
        )

    def format_domain(self, entry: DomainEntry) -> str:
        return f"- {self.t('entry.domain')} {entry.hostname}: {self.format_expiry(entry.days)}"

    async def commit(self) -> None:
        ssl_messages = self._format_all(self.ssl_entries, self.format_cert, "SSL")
        domain_messages = self._format_all(self.domain_entries, self.format_domain, "domain")
        error_messages = list(self.errors)

        if not (ssl_messages or domain_messages or error_messages):
            logger.warning(self.t("entry.nothing_to_send"))
            return

        logger.info(
            f"Reporting {len(ssl_messages)} certificate(s), {len(domain_messages)} domain(s), "
            f"{len(error_messages)} error(s)"
        )

        if ssl_messages:
            self._print_section(self.t("header.certs"), ssl_messages, "warning")

        if domain_messages:
            self._print_section(self.t("header.domains"), domain_messages, "warning")

        if error_messages:
            self._print_section(self.t("header.errors"), error_messages, "error")

    def _print_section(self, title: str, messages: list, style: str) -> None:
        body = Text("\n".join(messages))
        panel = Panel(
            body,
            title=f"[bold]{title}[/bold]",
            border_style=style,
            padding=(0, 1)
        )
        self.console.print(panel)
