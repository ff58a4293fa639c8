"""
Domain & Certificate Expiry Monitor

Periodically checks WHOIS registration expiry and TLS certificate expiry for
hostnames collected from pluggable sources and alerts through pluggable
notifiers.
"""

__version__ = "0.1.0"

from .executor import DomainCheckerExecutor
from .aggregator import ResultAggregator
from .normalizer import root_of, ssl_candidate_of, normalize_hostnames
from .config import ServiceConfig, LogConfig, load_config
from .services import Services

__all__ = [
    'DomainCheckerExecutor',
    'ResultAggregator',
    'root_of',
    'ssl_candidate_of',
    'normalize_hostnames',
    'ServiceConfig',
    'LogConfig',
    'load_config',
    'Services',
]
