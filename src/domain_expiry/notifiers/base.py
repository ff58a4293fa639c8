"""
Base notifier infrastructure.

Notifiers buffer expiring entries and error messages during a run and
deliver them in a single commit at the end.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, List, TypeVar

from ..i18n import DEFAULT_LANGUAGE, plural_days, translate
from ..models import CertEntry, DomainEntry

logger = logging.getLogger(__name__)

T = TypeVar('T')


class NotifierError(Exception):
    """Raised by commit() when buffered notifications could not be delivered."""


class BaseNotifier(ABC):
    """
    Abstract base class for notifiers.

    The record_* methods only buffer; no I/O happens before commit().
    """

    def __init__(self, language: str = DEFAULT_LANGUAGE):
        self.language = language
        self.ssl_entries: List[CertEntry] = []
        self.domain_entries: List[DomainEntry] = []
        self.errors: List[str] = []

    def record_expiring_cert(self, entry: CertEntry) -> None:
        self.ssl_entries.append(entry)

    def record_exception(self, message: str) -> None:
        self.errors.append(message)

    def record_expiring_domain(self, entry: DomainEntry) -> None:
        self.domain_entries.append(entry)

    @abstractmethod
    async def commit(self) -> None:
        """
        Deliver everything buffered during the run.

        Raises:
            NotifierError: If delivery finally failed
        """
        pass

    def format_days(self, n: int) -> str:
        """Day word matching ``n`` in the notifier's language."""
        return plural_days(n, self.language)

    def format_expiry(self, days: int) -> str:
        """Render "expires in N days" or "expired N days ago"."""
        key = "entry.expires_in" if days >= 0 else "entry.expired_ago"
        return translate(key, self.language, days=abs(days), day_word=self.format_days(days))

    def t(self, key: str, **kwargs) -> str:
        return translate(key, self.language, **kwargs)

    def _format_all(self, entries: List[T], formatter: Callable[[T], str], kind: str) -> List[str]:
        """Format entries one by one; a failing entry is logged and skipped."""
        messages = []
        for entry in entries:
            try:
                messages.append(formatter(entry))
            except Exception as e:
                logger.error(f"Failed to format {kind} entry {entry!r}: {e}")
        return messages
