"""Hostname source backed by a plain text file."""

import asyncio
import logging
from pathlib import Path
from typing import List

from .base import BaseSource, SourceError

logger = logging.getLogger(__name__)


class FileSource(BaseSource):
    """
    Reads one hostname per line.

    Lines are trimmed, blank lines skipped and duplicates removed. Relative
    paths resolve against the working directory.
    """

    source_name = "FileSource"

    def __init__(self, filename: str):
        self.filename = filename

    async def get_domains(self) -> List[str]:
        path = Path(self.filename)
        loop = asyncio.get_running_loop()

        try:
            content = await loop.run_in_executor(None, self._read, path)
        except OSError as e:
            raise SourceError(f"Failed to read file: {path}: {e}") from e

        domains = list(dict.fromkeys(
            line.strip() for line in content.splitlines() if line.strip()
        ))
        logger.debug(f"Loaded {len(domains)} hostname(s) from {path}")
        return domains

    @staticmethod
    def _read(path: Path) -> str:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
