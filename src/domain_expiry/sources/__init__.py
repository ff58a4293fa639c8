"""
Hostname sources.

Each source yields raw hostnames; the executor merges them into one set.
"""

from .base import BaseSource, SourceError, StaticSource
from .file import FileSource
from .selectel import SelectelSource

__all__ = ['BaseSource', 'SourceError', 'StaticSource', 'FileSource', 'SelectelSource']
