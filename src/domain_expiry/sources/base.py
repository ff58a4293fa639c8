"""
Base infrastructure for hostname sources.

A source yields raw hostnames to monitor; it may fail with any I/O or parse
error and must be safe to call on every run.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List


class SourceError(Exception):
    """Raised when a source cannot provide its hostnames."""


class BaseSource(ABC):
    """Abstract base class for hostname sources."""

    #: Stable identifier used in log and error text
    source_name: str = "BaseSource"

    @abstractmethod
    async def get_domains(self) -> List[str]:
        """
        Load hostnames from the source.

        Returns:
            List of raw hostnames

        Raises:
            Exception: Any I/O or parse failure
        """
        pass


class StaticSource(BaseSource):
    """In-memory hostname list, used for ad-hoc checks."""

    source_name = "StaticSource"

    def __init__(self, hostnames: Iterable[str]):
        self.hostnames = [h.strip() for h in hostnames if h and h.strip()]

    async def get_domains(self) -> List[str]:
        return list(self.hostnames)
