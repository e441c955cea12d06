"""Tests for the SMTP and aiohttp transports — mocked sessions and servers."""

from __future__ import annotations

import smtplib
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest
from pydantic import SecretStr

from eventrelay.channels.exceptions import TransportError
from eventrelay.channels.transports import AiohttpTransport, SmtpMailTransport
from eventrelay.core.config import EmailConfig, WebhookConfig


# ── Helpers ─────────────────────────────────────────────────────


def _email_config(**kw: object) -> EmailConfig:
    defaults: dict[str, object] = {
        "enabled": True,
        "from_address": "relay@example.com",
        "smtp_host": "smtp.example.com",
        "smtp_port": 2525,
        "username": "relay",
        "password": SecretStr("pw"),
    }
    defaults.update(kw)
    return EmailConfig(**defaults)  # type: ignore[arg-type]


def _mock_response(status: int = 200, text: str = "ok") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _mock_smtp() -> tuple[MagicMock, MagicMock]:
    server = MagicMock()
    smtp_cls = MagicMock()
    smtp_cls.return_value.__enter__.return_value = server
    smtp_cls.return_value.__exit__.return_value = False
    return smtp_cls, server


# ── SmtpMailTransport ───────────────────────────────────────────


class TestSmtpMailTransport:
    def test_build_message_is_multipart(self) -> None:
        transport = SmtpMailTransport(_email_config())
        msg = transport.build_message("ops@example.com", "subj", "<p>hi</p>", "hi")
        assert msg["To"] == "ops@example.com"
        assert msg["From"] == "relay@example.com"
        assert msg["Subject"] == "subj"
        assert msg.is_multipart()
        assert msg.get_body(preferencelist=("html",)) is not None

    async def test_send_uses_starttls_and_login(self) -> None:
        smtp_cls, server = _mock_smtp()
        transport = SmtpMailTransport(_email_config())
        with patch("eventrelay.channels.transports.smtplib.SMTP", smtp_cls):
            await transport.send("ops@example.com", "subj", "<p>hi</p>", "hi")
        smtp_cls.assert_called_once_with("smtp.example.com", 2525, timeout=15.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("relay", "pw")
        server.send_message.assert_called_once()

    async def test_send_without_credentials_skips_login(self) -> None:
        smtp_cls, server = _mock_smtp()
        transport = SmtpMailTransport(_email_config(username="", use_starttls=False))
        with patch("eventrelay.channels.transports.smtplib.SMTP", smtp_cls):
            await transport.send("ops@example.com", "subj", "<p>hi</p>", "hi")
        server.starttls.assert_not_called()
        server.login.assert_not_called()

    async def test_smtp_error_raises_transport_error(self) -> None:
        smtp_cls, server = _mock_smtp()
        server.send_message.side_effect = smtplib.SMTPException("mailbox unavailable")
        transport = SmtpMailTransport(_email_config())
        with patch("eventrelay.channels.transports.smtplib.SMTP", smtp_cls):
            with pytest.raises(TransportError, match="mailbox unavailable"):
                await transport.send("ops@example.com", "subj", "<p>hi</p>", "hi")

    async def test_connection_error_raises_transport_error(self) -> None:
        smtp_cls = MagicMock(side_effect=ConnectionRefusedError("refused"))
        transport = SmtpMailTransport(_email_config())
        with patch("eventrelay.channels.transports.smtplib.SMTP", smtp_cls):
            with pytest.raises(TransportError):
                await transport.send("ops@example.com", "subj", "<p>hi</p>", "hi")


# ── AiohttpTransport ────────────────────────────────────────────


class TestAiohttpTransport:
    async def test_post_returns_status(self) -> None:
        transport = AiohttpTransport(WebhookConfig())
        mock_session = MagicMock()
        mock_session.post = MagicMock(return_value=_mock_response(202))
        mock_session.closed = False
        transport._session = mock_session

        status = await transport.post(
            "https://hooks.example.com", {"X-Event-Id": "e1"}, {"eventId": "e1"}
        )
        assert status == 202
        call_args = mock_session.post.call_args
        assert call_args[0][0] == "https://hooks.example.com"
        assert call_args[1]["json"] == {"eventId": "e1"}
        assert call_args[1]["headers"] == {"X-Event-Id": "e1"}

    async def test_error_status_is_returned_not_raised(self) -> None:
        transport = AiohttpTransport()
        mock_resp = _mock_response(500, "internal error")
        mock_session = MagicMock()
        mock_session.post = MagicMock(return_value=mock_resp)
        mock_session.closed = False
        transport._session = mock_session

        assert await transport.post("https://hooks.example.com", {}, {}) == 500
        mock_resp.text.assert_awaited_once()

    async def test_client_error_raises_transport_error(self) -> None:
        transport = AiohttpTransport()
        mock_session = MagicMock()
        mock_session.post = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))
        mock_session.closed = False
        transport._session = mock_session

        with pytest.raises(TransportError, match="refused"):
            await transport.post("https://hooks.example.com", {}, {})

    async def test_os_error_raises_transport_error(self) -> None:
        transport = AiohttpTransport()
        mock_session = MagicMock()
        mock_session.post = MagicMock(side_effect=OSError("network unreachable"))
        mock_session.closed = False
        transport._session = mock_session

        with pytest.raises(TransportError, match="network unreachable"):
            await transport.post("https://hooks.example.com", {}, {})

    async def test_close_session(self) -> None:
        transport = AiohttpTransport()
        mock_session = AsyncMock()
        mock_session.closed = False
        transport._session = mock_session

        await transport.close()
        mock_session.close.assert_awaited_once()
        assert transport._session is None

    async def test_close_when_no_session(self) -> None:
        await AiohttpTransport().close()  # should not raise

    async def test_lazy_session_creation(self) -> None:
        transport = AiohttpTransport()
        assert transport._session is None
        session = transport._get_session()
        assert session is not None
        await transport.close()
