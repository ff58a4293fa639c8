"""
Message catalogue for notifications and run errors.

English is the default; Russian carries the operator-facing
wording together with its Slavic day-count pluralization.
"""

SUPPORTED_LANGUAGES = frozenset({"en", "ru"})
DEFAULT_LANGUAGE = "en"


# Structure: {message_key: {language_code: template}}
TRANSLATIONS: dict[str, dict[str, str]] = {
    # Run errors
    "error.source_failed": {
        "en": "Failed to load domains from source: {source}.\n{error}",
        "ru": "Ошибка загрузки из источника: {source}.\n{error}",
    },
    "error.domain_failed_one": {
        "en": "Domain check failed: {host}",
        "ru": "Ошибка проверки домена: {host}",
    },
    "error.domain_failed_many": {
        "en": "Failed to check {count} domains\n{hosts}",
        "ru": "Ошибка проверки {count} доменов\n{hosts}",
    },
    "error.cert_failed_one": {
        "en": "Certificate check failed: {host}",
        "ru": "Ошибка проверки сертификата: {host}",
    },
    "error.cert_failed_many": {
        "en": "Failed to check {count} SSL certificates\n{hosts}",
        "ru": "Ошибка проверки {count} SSL-сертификатов\n{hosts}",
    },

    # Section headers
    "header.certs": {
        "en": "SSL certificates expiring:",
        "ru": "Срок действия SSL‑сертификатов истекает:",
    },
    "header.domains": {
        "en": "Domains expiring:",
        "ru": "Срок действия доменов истекает:",
    },
    "header.errors": {
        "en": "Errors occurred:",
        "ru": "Произошли ошибки:",
    },

    # Entry wording
    "entry.expires_in": {
        "en": "Expires in: {days} {day_word}",
        "ru": "Истекает через: {days} {day_word}",
    },
    "entry.expired_ago": {
        "en": "Expired: {days} {day_word} ago",
        "ru": "Истёк: {days} {day_word} назад",
    },
    "entry.certificate": {
        "en": "Certificate",
        "ru": "Сертификат",
    },
    "entry.domain": {
        "en": "Domain",
        "ru": "Домен",
    },
    "entry.issuer": {
        "en": "Issuer",
        "ru": "Издатель",
    },
    "entry.host": {
        "en": "Host",
        "ru": "Хост",
    },
    "entry.nothing_to_send": {
        "en": "No messages to send",
        "ru": "Отсутствуют сообщения для отправки",
    },
}


def normalize_language(language: str) -> str:
    """Return a supported language code, falling back to the default."""
    code = (language or DEFAULT_LANGUAGE).strip().lower()
    return code if code in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def translate(key: str, language: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Look up and format a message.

    Args:
        key: Message key from TRANSLATIONS
        language: Language code
        **kwargs: Template parameters

    Returns:
        Formatted message; the key itself if it is unknown
    """
    templates = TRANSLATIONS.get(key)
    if templates is None:
        return key

    template = templates.get(normalize_language(language), templates[DEFAULT_LANGUAGE])
    return template.format(**kwargs) if kwargs else template


def plural_days(n: int, language: str = DEFAULT_LANGUAGE) -> str:
    """
    Pick the word for "day" matching a count.

    Russian: 11-14 -> "дней", ends in 1 -> "день", ends in 2-4 -> "дня",
    otherwise "дней". English: "day" for one, "days" otherwise.
    """
    n = abs(n)
    if normalize_language(language) == "ru":
        if 11 <= n % 100 <= 14:
            return "дней"
        if n % 10 == 1:
            return "день"
        if n % 10 in (2, 3, 4):
            return "дня"
        return "дней"

    return "day" if n == 1 else "days"
