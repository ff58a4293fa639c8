"""
Notifier that delivers expiring entries to a Telegram chat.

Entries are rendered as HTML, grouped per section and split into chunks that
fit the Bot API message limit. Each message is retried a fixed number of
times with a fixed pause.
"""

import asyncio
import html
import logging
from typing import Any, Dict, List

import aiohttp

from ..i18n import DEFAULT_LANGUAGE
from ..models import CertEntry, DomainEntry
from .base import BaseNotifier, NotifierError

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org/bot{token}/sendMessage"

MAX_MESSAGE_LENGTH = 4096
SEPARATOR = "\n\n"

ICON_WARNING = "🟡"
ICON_URGENT = "🔴"


def chunk_messages(header: str, messages: List[str], limit: int = MAX_MESSAGE_LENGTH) -> List[List[str]]:
    """
    Split messages into groups that fit the limit together with the header.

    A single message longer than the limit still gets its own chunk.
    """
    separator_length = len(SEPARATOR)
    chunks: List[List[str]] = []
    current: List[str] = []
    current_length = len(header) + separator_length

    for msg in messages:
        msg_length = len(msg) + separator_length
        if current_length + msg_length > limit:
            if current:
                chunks.append(current)
            current = [msg]
            current_length = len(header) + separator_length + msg_length
        else:
            current.append(msg)
            current_length += msg_length

    if current:
        chunks.append(current)

    return chunks


class TelegramNotifier(BaseNotifier):
    """Sends buffered entries through the Telegram Bot API on commit."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        retries: int = 5,
        retry_interval: float = 1.0,
        language: str = DEFAULT_LANGUAGE,
        timeout: float = 3.0,
        connect_timeout: float = 1.0
    ):
        """
        Initialize the notifier.

        Args:
            bot_token: Bot API token
            chat_id: Target chat id
            retries: Extra attempts per message after the first one
            retry_interval: Pause between attempts in seconds
            language: Message language
            timeout: Total request timeout in seconds
            connect_timeout: Connect timeout in seconds
        """
        super().__init__(language)
        self.chat_id = chat_id
        self.retries = retries
        self.retry_interval = retry_interval
        self.api_url = API_URL.format(token=bot_token)
        self.client_timeout = aiohttp.ClientTimeout(total=timeout, connect=connect_timeout)

    def _icon(self, days: int) -> str:
        return ICON_WARNING if days > 2 else ICON_URGENT

    def format_cert(self, entry: CertEntry) -> str:
        hostname = html.escape(entry.hostname)
        more = f" (+{entry.duplicate_count - 1})" if entry.duplicate_count > 1 else ""
        return (
            f"{self._icon(entry.days)} <b>{self.t('entry.certificate')} {html.escape(entry.serial)}</b>\n"
            f"├ {self.t('entry.issuer')}: <code>{html.escape(entry.issuer)}</code>\n"
            f"├ {self.t('entry.host')}: <a href=\"https://{hostname}\">{hostname}</a>{more}\n"
            f"└ <b>{self.format_expiry(entry.days)}</b>"
        )

    def format_domain(self, entry: DomainEntry) -> str:
        hostname = html.escape(entry.hostname)
        return (
            f"{self._icon(entry.days)} <b>{self.t('entry.domain')}</b>: "
            f"<a href=\"https://{hostname}\">{hostname}</a>\n"
            f"└ <b>{self.format_expiry(entry.days)}</b>"
        )

    def format_error(self, message: str) -> str:
        return f"{ICON_URGENT} <code>{html.escape(message)}</code>"

    async def commit(self) -> None:
        ssl_messages = self._format_all(self.ssl_entries, self.format_cert, "SSL")
        domain_messages = self._format_all(self.domain_entries, self.format_domain, "domain")
        error_messages = self._format_all(self.errors, self.format_error, "error")

        if not (ssl_messages or domain_messages or error_messages):
            logger.debug("Nothing to send to Telegram")
            return

        async with aiohttp.ClientSession(timeout=self.client_timeout) as session:
            if ssl_messages:
                await self.send_messages(session, f"⚠️ <b>{self.t('header.certs')}</b>", ssl_messages)
            if domain_messages:
                await self.send_messages(session, f"⚠️ <b>{self.t('header.domains')}</b>", domain_messages)
            if error_messages:
                await self.send_messages(session, f"{ICON_URGENT} <b>{self.t('header.errors')}</b>", error_messages)

    async def send_messages(self, session: aiohttp.ClientSession, header: str, messages: List[str]) -> None:
        """Send a section as one or more numbered messages."""
        chunks = chunk_messages(header, messages)

        for i, chunk in enumerate(chunks):
            prefix = f"[{i + 1}/{len(chunks)}] " if len(chunks) > 1 else ""
            await self.send_message(session, f"{prefix}{header}{SEPARATOR}{SEPARATOR.join(chunk)}")

    async def send_message(self, session: aiohttp.ClientSession, text: str) -> None:
        """
        Send one message, retrying on failure.

        Raises:
            NotifierError: When all attempts failed
        """
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }

        for attempt in range(self.retries + 1):
            try:
                status = await self._post(session, payload)
                if 200 <= status < 300:
                    return
                logger.error(f"Telegram API returned status: {status}")
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f"Failed to send Telegram message: {e}")

            if attempt == self.retries:
                break

            await asyncio.sleep(self.retry_interval)

        logger.error("Telegram delivery attempts exhausted")
        raise NotifierError(f"Failed to send message after {self.retries} retries")

    async def _post(self, session: aiohttp.ClientSession, payload: Dict[str, Any]) -> int:
        async with session.post(self.api_url, json=payload) as response:
            return response.status
