"""Mail and HTTP transports used by the email and webhook channels."""

from __future__ import annotations

import abc
import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from typing import Any

import aiohttp
import structlog

from eventrelay.channels.exceptions import TransportError
from eventrelay.core.config import EmailConfig, WebhookConfig

logger = structlog.get_logger(__name__)


class MailTransport(abc.ABC):
    """Sends one multipart (HTML + text) message."""

    @abc.abstractmethod
    async def send(self, to: str, subject: str, html_body: str, text_body: str) -> None:
        """Send a message. Raises TransportError, and only that, on failure."""

    async def close(self) -> None:
        """Release resources. No-op by default."""


class HttpTransport(abc.ABC):
    """Issues JSON POST requests."""

    @abc.abstractmethod
    async def post(self, url: str, headers: dict[str, str], json_body: dict[str, Any]) -> int:
        """POST *json_body* to *url* and return the response status code.

        Raises TransportError when no response was obtained; no other
        exception type escapes.
        """

    async def close(self) -> None:
        """Release resources. No-op by default."""


class SmtpMailTransport(MailTransport):
    """SMTP delivery via :mod:`smtplib`, run in a worker thread."""

    def __init__(self, config: EmailConfig) -> None:
        self._config = config

    def build_message(self, to: str, subject: str, html_body: str, text_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._config.from_address
        msg["To"] = to
        msg.set_content(text_body)
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _send_sync(self, msg: EmailMessage) -> None:
        cfg = self._config
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.timeout_secs) as server:
            if cfg.use_starttls:
                server.starttls(context=ssl.create_default_context())
            password = cfg.password.get_secret_value()
            if cfg.username and password:
                server.login(cfg.username, password)
            server.send_message(msg)

    async def send(self, to: str, subject: str, html_body: str, text_body: str) -> None:
        msg = self.build_message(to, subject, html_body, text_body)
        try:
            await asyncio.to_thread(self._send_sync, msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP send to {to} failed: {exc}") from exc
        logger.debug("smtp_message_sent", to=to, host=self._config.smtp_host)


class AiohttpTransport(HttpTransport):
    """JSON POST over a lazily created, reused :class:`aiohttp.ClientSession`."""

    def __init__(self, config: WebhookConfig | None = None) -> None:
        self._config = config or WebhookConfig()
        self._session: aiohttp.ClientSession | None = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.timeout_secs),
                headers={"User-Agent": self._config.user_agent},
            )
        return self._session

    async def post(self, url: str, headers: dict[str, str], json_body: dict[str, Any]) -> int:
        try:
            session = self._get_session()
            async with session.post(url, json=json_body, headers=headers) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    logger.warning("http_post_rejected", url=url, status=resp.status, body=body[:200])
                return resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            raise TransportError(f"POST {url} failed: {exc!r}") from exc

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
