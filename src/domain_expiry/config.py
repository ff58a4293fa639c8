"""Configuration management for expiry monitoring."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .checkers.whois import load_server_map
from .i18n import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

DEFAULT_CONFIG_PATH = "config.yml"
CONFIG_PATH_ENV = "CONFIG_PATH"
ENV_PREFIX = "APP_"
ENV_SEPARATOR = "__"

VALID_LOG_LEVELS = {'debug', 'info', 'warning', 'error', 'critical'}


@dataclass
class LogConfig:
    """Logging settings."""

    log_level: str = "info"
    use_color: bool = False
    logstash_host: Optional[str] = None
    logstash_port: Optional[int] = None
    app_name: Optional[str] = None


@dataclass
class FileSourceConfig:
    """Hostnames listed one per line in a local file."""

    filename: str


@dataclass
class SelectelSourceConfig:
    """Hostnames from Selectel DNS zones."""

    account_id: str
    password: str
    project_name: str
    user: str


@dataclass
class TelegramNotifierConfig:
    """Telegram Bot API delivery."""

    bot_token: str
    chat_id: str
    retries: int = 5
    retry_interval: float = 1.0


@dataclass
class ConsoleNotifierConfig:
    """Terminal output."""


SourceConfig = Union[FileSourceConfig, SelectelSourceConfig]
NotifierConfig = Union[TelegramNotifierConfig, ConsoleNotifierConfig]


@dataclass
class ServiceConfig:
    """Complete service configuration."""

    alarm_days: int
    ssl_alarm_days: int
    sources: Dict[str, SourceConfig] = field(default_factory=dict)
    notifiers: Dict[str, NotifierConfig] = field(default_factory=dict)
    check_interval_hours: float = 24
    language: str = DEFAULT_LANGUAGE
    whois_servers: Optional[str] = None
    whois_timeout: float = 10
    log_config: LogConfig = field(default_factory=LogConfig)


def _read_structured_file(path: Path) -> Any:
    """Parse a YAML or JSON file by extension."""
    with open(path, 'r', encoding='utf-8') as f:
        content = f.read()

    if path.suffix in ['.yaml', '.yml']:
        return yaml.safe_load(content)
    if path.suffix == '.json':
        return json.loads(content)
    raise ValueError(f"Unsupported file format: {path.suffix}. Use .yaml, .yml, or .json")


def apply_env_overrides(data: Dict[str, Any], environ: Mapping[str, str], prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """
    Overlay APP_* environment variables onto configuration data.

    ``APP_ALARM_DAYS=7`` sets ``alarm_days``; ``__`` separates nested keys,
    e.g. ``APP_NOTIFIERS__TG__BOT_TOKEN``. Values are kept as strings; typed
    settings convert them when the configuration is parsed.

    Args:
        data: Parsed configuration (modified in place)
        environ: Environment mapping
        prefix: Variable prefix

    Returns:
        The updated configuration
    """
    for name, raw_value in sorted(environ.items()):
        if not name.startswith(prefix):
            continue

        keys = [key.lower() for key in name[len(prefix):].split(ENV_SEPARATOR) if key]
        if not keys:
            continue

        target = data
        for key in keys[:-1]:
            if not isinstance(target.get(key), dict):
                target[key] = {}
            target = target[key]
        target[keys[-1]] = raw_value

    return data


def load_config(file_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> ServiceConfig:
    """
    Load and parse the service configuration.

    The file is the explicit path, else $CONFIG_PATH, else config.yml in the
    working directory. A missing file is tolerated as long as the environment supplies the
    required settings.

    Args:
        file_path: Path to the configuration file
        environ: Environment mapping (default: os.environ)

    Returns:
        Parsed ServiceConfig object

    Raises:
        ValueError: If the file format is invalid or validation fails
    """
    environ = os.environ if environ is None else environ
    path = Path(file_path or environ.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)

    data: Dict[str, Any] = {}
    try:
        if path.exists():
            loaded = _read_structured_file(path)
            if loaded is not None:
                if not isinstance(loaded, dict):
                    raise ValueError("Configuration root must be an object/dictionary")
                data = loaded
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax: {str(e)}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON syntax at line {e.lineno}, column {e.colno}: {e.msg}")
    except OSError as e:
        raise ValueError(f"Failed to read configuration file: {str(e)}")

    apply_env_overrides(data, environ)

    if not data:
        raise ValueError(f"No configuration found: {path} does not exist and no {ENV_PREFIX}* variables are set")

    return parse_config(data)


def _coerce_int(value: Any) -> Any:
    """Convert an integer given as a string (environment override); other values pass through."""
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return value
    return value


def _coerce_number(value: Any) -> Any:
    value = _coerce_int(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return value
    return value


def _coerce_bool(value: Any, key: str) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', 'yes', 'on', '1'):
            return True
        if lowered in ('false', 'no', 'off', '0', ''):
            return False
        raise ValueError(f"'{key}' must be a boolean, got {value!r}")
    return bool(value)


def _require_int(data: Dict[str, Any], key: str) -> int:
    if key not in data:
        raise ValueError(f"Missing required '{key}' setting")
    value = _coerce_int(data[key])
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' must be an integer, got {value!r}")
    return value


def _require_str(data: Dict[str, Any], key: str, context: str) -> str:
    value = data.get(key)
    if value is None:
        raise ValueError(f"{context}: missing required '{key}' field")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{context}: '{key}' must be a non-empty string")
    return value


def parse_source(name: str, data: Any) -> SourceConfig:
    """
    Parse one source entry.

    The variant comes from an explicit ``type`` key or is inferred from the
    fields present.
    """
    context = f"Source '{name}'"
    if not isinstance(data, dict):
        raise ValueError(f"{context} must be an object/dictionary")

    source_type = data.get('type')
    if source_type is None:
        if 'filename' in data:
            source_type = 'file'
        elif 'account_id' in data:
            source_type = 'selectel'
        else:
            raise ValueError(f"{context}: cannot determine source type")

    if source_type == 'file':
        return FileSourceConfig(filename=_require_str(data, 'filename', context))
    if source_type == 'selectel':
        return SelectelSourceConfig(
            account_id=_require_str(data, 'account_id', context),
            password=_require_str(data, 'password', context),
            project_name=_require_str(data, 'project_name', context),
            user=_require_str(data, 'user', context),
        )
    raise ValueError(f"{context}: unknown source type '{source_type}'")


def parse_notifier(name: str, data: Any) -> NotifierConfig:
    """
    Parse one notifier entry.

    An empty entry (or ``type: console``) is the console notifier; entries
    with ``bot_token`` and ``chat_id`` are Telegram.
    """
    context = f"Notifier '{name}'"
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"{context} must be an object/dictionary")

    notifier_type = data.get('type')
    if notifier_type is None:
        notifier_type = 'telegram' if 'bot_token' in data or 'chat_id' in data else 'console'

    if notifier_type == 'console':
        return ConsoleNotifierConfig()
    if notifier_type == 'telegram':
        retries = _coerce_int(data.get('retries', 5))
        if isinstance(retries, bool) or not isinstance(retries, int) or retries < 0:
            raise ValueError(f"{context}: 'retries' must be a non-negative integer")
        retry_interval = _coerce_number(data.get('retry_interval', 1.0))
        if isinstance(retry_interval, bool) or not isinstance(retry_interval, (int, float)) or retry_interval < 0:
            raise ValueError(f"{context}: 'retry_interval' must be a non-negative number")
        return TelegramNotifierConfig(
            bot_token=_require_str(data, 'bot_token', context),
            chat_id=_require_str(data, 'chat_id', context),
            retries=retries,
            retry_interval=float(retry_interval),
        )
    raise ValueError(f"{context}: unknown notifier type '{notifier_type}'")


def parse_log_config(data: Any) -> LogConfig:
    """Parse the ``log_config`` section."""
    if data is None:
        return LogConfig()
    if not isinstance(data, dict):
        raise ValueError("'log_config' must be an object/dictionary")

    log_level = str(data.get('log_level', 'info')).lower()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{log_level}'. "
            f"Valid levels are: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    port = _coerce_int(data.get('logstash_port'))
    if port is not None and (isinstance(port, bool) or not isinstance(port, int)):
        raise ValueError(f"'logstash_port' must be an integer, got {port!r}")

    return LogConfig(
        log_level=log_level,
        use_color=_coerce_bool(data.get('use_color', False), 'use_color'),
        logstash_host=data.get('logstash_host'),
        logstash_port=port,
        app_name=data.get('app_name'),
    )


def parse_config(data: Dict[str, Any]) -> ServiceConfig:
    """
    Build a ServiceConfig from parsed data.

    Raises:
        ValueError: If validation fails with descriptive error message
    """
    sources_data = data.get('sources') or {}
    if not isinstance(sources_data, dict):
        raise ValueError("'sources' must be a mapping of name to source settings")

    notifiers_data = data.get('notifiers') or {}
    if not isinstance(notifiers_data, dict):
        raise ValueError("'notifiers' must be a mapping of name to notifier settings")

    interval = _coerce_number(data.get('check_interval_hours', 24))
    if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
        raise ValueError(f"'check_interval_hours' must be positive, got {interval!r}")

    language = str(data.get('language', DEFAULT_LANGUAGE)).lower()
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError(
            f"Unsupported language '{language}'. "
            f"Valid languages are: {', '.join(sorted(SUPPORTED_LANGUAGES))}"
        )

    whois_timeout = _coerce_number(data.get('whois_timeout', 10))
    if isinstance(whois_timeout, bool) or not isinstance(whois_timeout, (int, float)) or whois_timeout <= 0:
        raise ValueError(f"'whois_timeout' must be positive, got {whois_timeout!r}")

    return ServiceConfig(
        alarm_days=_require_int(data, 'alarm_days'),
        ssl_alarm_days=_require_int(data, 'ssl_alarm_days'),
        sources={name: parse_source(name, conf) for name, conf in sources_data.items()},
        notifiers={name: parse_notifier(name, conf) for name, conf in notifiers_data.items()},
        check_interval_hours=interval,
        language=language,
        whois_servers=data.get('whois_servers'),
        whois_timeout=whois_timeout,
        log_config=parse_log_config(data.get('log_config')),
    )


def load_whois_servers(file_path: str) -> Dict[str, str]:
    """
    Load a WHOIS server list (TLD -> host) from YAML or JSON.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file cannot be parsed
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"WHOIS server list not found: {file_path}")

    try:
        data = _read_structured_file(path)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid WHOIS server list {file_path}: {e}")

    if not isinstance(data, dict):
        raise ValueError("WHOIS server list must be an object mapping TLDs to hosts")

    return load_server_map(data)
