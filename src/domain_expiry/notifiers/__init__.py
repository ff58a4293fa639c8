"""
Notifiers.

Each notifier buffers entries and errors during a run and delivers them on
commit.
"""

from .base import BaseNotifier, NotifierError
from .console import ConsoleNotifier
from .telegram import TelegramNotifier

__all__ = ['BaseNotifier', 'NotifierError', 'ConsoleNotifier', 'TelegramNotifier']
