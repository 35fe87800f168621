# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the email channel and the credential notifier."""

from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import pytest
from pydantic import SecretStr

from src.core.config import SMTPSettings
from src.infrastructure.notifications import CredentialNotifier, EmailChannel
from src.infrastructure.notifications.channels.base import (
    ChannelResult,
    ChannelType,
    DeliveryStatus,
    NotificationPayload,
)

SEND_PATH = "src.infrastructure.notifications.channels.email.aiosmtplib.send"


@pytest.fixture
def smtp_settings() -> SMTPSettings:
    return SMTPSettings(
        host="smtp.example.com",
        port=587,
        username="mailer",
        password=SecretStr("smtp-secret"),
        from_email="no-reply@example.com",
        from_name="Colegio San José",
    )


@pytest.fixture
def payload() -> NotificationPayload:
    return NotificationPayload(
        notification_type="credentials",
        title="Credenciales de acceso",
        message="Se ha creado su cuenta.",
        recipient_email="mjperez@example.com",
        recipient_name="María José Pérez Gómez",
        data={"Usuario": "mperezg", "Contraseña": "Ab3!<xY9"},
    )


class TestEmailChannel:
    """Tests for EmailChannel.send."""

    @pytest.mark.asyncio
    async def test_send_success(self, smtp_settings, payload) -> None:
        """Test a delivered message is SENT with its message id."""
        channel = EmailChannel(smtp_settings)

        with patch(SEND_PATH, new_callable=AsyncMock) as mock_send:
            result = await channel.send(payload)

        assert result.status == DeliveryStatus.SENT
        assert result.is_success is True
        assert result.message_id is not None
        mock_send.assert_awaited_once()

        message = mock_send.await_args.args[0]
        kwargs = mock_send.await_args.kwargs
        assert message["To"] == "mjperez@example.com"
        assert message["Subject"] == "Credenciales de acceso"
        assert "no-reply@example.com" in message["From"]
        assert kwargs["hostname"] == "smtp.example.com"
        assert kwargs["password"] == "smtp-secret"
        assert kwargs["start_tls"] is True

    @pytest.mark.asyncio
    async def test_body_contains_data_rows(self, smtp_settings, payload) -> None:
        """Test both parts list the data rows, HTML escaped in HTML."""
        channel = EmailChannel(smtp_settings)

        with patch(SEND_PATH, new_callable=AsyncMock) as mock_send:
            await channel.send(payload)

        plain, html_part = mock_send.await_args.args[0].get_payload()
        plain_text = plain.get_payload(decode=True).decode("utf-8")
        html_text = html_part.get_payload(decode=True).decode("utf-8")

        assert "Usuario: mperezg" in plain_text
        assert "Contraseña: Ab3!<xY9" in plain_text
        assert "Ab3!&lt;xY9" in html_text
        assert "Hola María José Pérez Gómez" in html_text

    @pytest.mark.asyncio
    async def test_smtp_error_is_failed_result(self, smtp_settings, payload) -> None:
        """Test SMTP errors produce FAILED instead of raising."""
        channel = EmailChannel(smtp_settings)

        with patch(SEND_PATH, new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = aiosmtplib.SMTPException("relay denied")
            result = await channel.send(payload)

        assert result.status == DeliveryStatus.FAILED
        assert "relay denied" in result.error_message

    @pytest.mark.asyncio
    async def test_connection_error_is_failed_result(self, smtp_settings, payload) -> None:
        """Test network errors produce FAILED instead of raising."""
        channel = EmailChannel(smtp_settings)

        with patch(SEND_PATH, new_callable=AsyncMock) as mock_send:
            mock_send.side_effect = ConnectionRefusedError("refused")
            result = await channel.send(payload)

        assert result.status == DeliveryStatus.FAILED

    @pytest.mark.asyncio
    async def test_not_configured_is_skipped(self, payload) -> None:
        """Test an unconfigured channel skips without connecting."""
        channel = EmailChannel(SMTPSettings(host=None))

        with patch(SEND_PATH, new_callable=AsyncMock) as mock_send:
            result = await channel.send(payload)

        assert result.status == DeliveryStatus.SKIPPED
        mock_send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_recipient_is_skipped(self, smtp_settings, payload) -> None:
        """Test a payload without address is skipped."""
        payload.recipient_email = ""
        channel = EmailChannel(smtp_settings)

        with patch(SEND_PATH, new_callable=AsyncMock) as mock_send:
            result = await channel.send(payload)

        assert result.status == DeliveryStatus.SKIPPED
        mock_send.assert_not_awaited()


class TestCredentialNotifier:
    """Tests for CredentialNotifier.send_credentials."""

    @pytest.mark.asyncio
    async def test_payload(self) -> None:
        """Test the payload carries username and secret as data rows."""
        channel = MagicMock()
        channel.send = AsyncMock(
            return_value=ChannelResult(channel=ChannelType.EMAIL, status=DeliveryStatus.SENT)
        )
        notifier = CredentialNotifier(channel)

        result = await notifier.send_credentials(
            "mjperez@example.com",
            "mperezg",
            "Ab3!xY9z",
            "María José Pérez Gómez",
        )

        assert result.is_success is True
        sent = channel.send.await_args.args[0]
        assert sent.notification_type == "credentials"
        assert sent.title == "Credenciales de acceso"
        assert sent.recipient_email == "mjperez@example.com"
        assert sent.recipient_name == "María José Pérez Gómez"
        assert sent.data == {"Usuario": "mperezg", "Contraseña": "Ab3!xY9z"}

    @pytest.mark.asyncio
    async def test_returns_channel_failure(self) -> None:
        """Test channel failures are returned unchanged."""
        failure = ChannelResult(
            channel=ChannelType.EMAIL,
            status=DeliveryStatus.FAILED,
            error_message="SMTP error",
        )
        channel = MagicMock()
        channel.send = AsyncMock(return_value=failure)

        result = await CredentialNotifier(channel).send_credentials("a@example.com", "aruiz", "x", "")

        assert result is failure
        assert channel.send.await_args.args[0].recipient_name is None
