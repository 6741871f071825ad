"""Telegram notification service for price alerts and refresh logs."""
import asyncio
import html
import logging
import ssl

import aiohttp
import certifi

from ..config import TelegramConfig

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

# Telegram rejects messages longer than this many characters.
MAX_MESSAGE_LENGTH = 4096


class TelegramNotifier:
    """Send portfolio notifications through Telegram bots.

    Alerts go through the (unmuted) alert bot; refresh summaries go through
    the log bot and are silent by default.
    """

    def __init__(self, config: TelegramConfig, timeout: float = 10) -> None:
        self.alert_bot_token = config.alert_bot_token
        self.log_bot_token = config.log_bot_token
        self.chat_id = config.chat_id
        self.timeout = timeout

    @staticmethod
    def _render(message: str, subject: str = "") -> str:
        # Reports contain "P&L" and similar, which HTML parse mode rejects unescaped.
        body = html.escape(message, quote=False)
        if subject:
            body = f"<b>{html.escape(subject, quote=False)}</b>\n\n{body}"
        return body[:MAX_MESSAGE_LENGTH]

    async def _send_message(self, text: str, bot_token: str, silent: bool = False) -> bool:
        if not bot_token or not self.chat_id:
            logger.warning("Telegram credentials not configured")
            return False

        url = f"{TELEGRAM_API_URL}/bot{bot_token}/sendMessage"
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_notification": silent,
        }

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.post(
                    url, json=payload, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status == 200:
                        return True
                    logger.error("Failed to send Telegram message: HTTP %s", response.status)
                    return False
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Telegram request failed: %s", e)
            return False

    async def send_alert(self, message: str, subject: str = "") -> bool:
        """Send a price alert (audible)."""
        if await self._send_message(self._render(message, subject), self.alert_bot_token):
            logger.info("Telegram alert sent")
            return True
        return False

    async def send_log(self, message: str, silent: bool = True) -> bool:
        """Send a refresh summary through the log bot."""
        if await self._send_message(self._render(message), self.log_bot_token, silent=silent):
            logger.debug("Telegram log sent")
            return True
        return False
