"""
CLI entry point for the expiry monitor.

Runs the configured monitor once or on a schedule, or checks a few hosts
ad hoc without a configuration file.
"""

import asyncio
import logging
import sys
from typing import Optional, Tuple

import click

from .config import (
    ConsoleNotifierConfig,
    LogConfig,
    ServiceConfig,
    VALID_LOG_LEVELS,
    load_config,
)
from .i18n import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from .logging_setup import setup_logging
from .scheduler import run_once, run_periodic
from .services import Services
from .sources import StaticSource

# Configure module logger
logger = logging.getLogger(__name__)


def create_adhoc_config(
    alarm_days: int,
    ssl_alarm_days: int,
    language: str,
    log_level: str
) -> ServiceConfig:
    """
    Create a configuration for an ad-hoc check.

    Reports through the console notifier only; the hostnames are supplied
    separately as a static source.
    """
    return ServiceConfig(
        alarm_days=alarm_days,
        ssl_alarm_days=ssl_alarm_days,
        sources={},
        notifiers={'console': ConsoleNotifierConfig()},
        language=language,
        log_config=LogConfig(log_level=log_level, use_color=True),
    )


@click.group()
def cli() -> None:
    """
    Domain & certificate expiry monitor

    Checks WHOIS registration expiry and TLS certificate expiry for every
    hostname the configured sources provide and alerts via the configured
    notifiers.
    """
    pass


@cli.command(name='run')
@click.option(
    '-c', '--config',
    'config_path',
    type=click.Path(),
    help='Path to configuration file (YAML/JSON). Defaults to $CONFIG_PATH or config.yml'
)
@click.option(
    '--single-shot',
    is_flag=True,
    default=False,
    help='Run one check and exit instead of running on a schedule'
)
@click.option(
    '--log-level',
    type=click.Choice(sorted(VALID_LOG_LEVELS), case_sensitive=False),
    default=None,
    help='Override the configured logging level'
)
def run_command(config_path: Optional[str], single_shot: bool, log_level: Optional[str]) -> None:
    """
    Run the expiry monitor.

    Examples:

        # Run on the configured schedule
        domain-expiry run -c config.yml

        # Run a single check
        domain-expiry run --single-shot
    """
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(f"Configuration error: {e}")

    if log_level:
        config.log_config.log_level = log_level.lower()
    setup_logging(config.log_config)

    try:
        services = Services(config)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(f"Configuration error: {e}")

    try:
        if single_shot:
            logger.info("Starting single-shot expiry check")
            asyncio.run(run_once(services))
        else:
            asyncio.run(run_periodic(services, config.check_interval_hours))
    except KeyboardInterrupt:
        logger.info("Monitoring stopped")
    except Exception as e:
        error_msg = str(e) if str(e) else f"{type(e).__name__} occurred"
        logger.error(f"Unexpected error: {error_msg}", exc_info=True)
        sys.exit(1)


@cli.command(name='check')
@click.option(
    '-d', '--domain',
    'domains',
    multiple=True,
    required=True,
    help='Hostname to check (repeatable)'
)
@click.option(
    '--alarm-days',
    type=int,
    default=30,
    show_default=True,
    help='Report domains expiring in fewer days'
)
@click.option(
    '--ssl-alarm-days',
    type=int,
    default=14,
    show_default=True,
    help='Report certificates expiring within this many days'
)
@click.option(
    '--language',
    type=click.Choice(sorted(SUPPORTED_LANGUAGES), case_sensitive=False),
    default=DEFAULT_LANGUAGE,
    show_default=True,
    help='Message language'
)
@click.option(
    '--log-level',
    type=click.Choice(sorted(VALID_LOG_LEVELS), case_sensitive=False),
    default='warning',
    show_default=True,
    help='Logging level'
)
def check_command(
    domains: Tuple[str, ...],
    alarm_days: int,
    ssl_alarm_days: int,
    language: str,
    log_level: str
) -> None:
    """
    Check hostnames ad hoc and print the results.

    Examples:

        domain-expiry check -d example.com -d www.example.org
    """
    config = create_adhoc_config(alarm_days, ssl_alarm_days, language.lower(), log_level.lower())
    setup_logging(config.log_config)

    services = Services(config)
    executor = services.domain_checker(sources=[StaticSource(domains)])
    asyncio.run(executor.run())


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
