# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Credential notification sent to newly provisioned users.

The message carries the generated username and temporary secret. The
secret is part of the email body only and is never logged.
"""

import logging

from src.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    NotificationPayload,
)
from src.infrastructure.notifications.channels.email import EmailChannel

logger = logging.getLogger(__name__)

CREDENTIALS_NOTIFICATION = "credentials"
CREDENTIALS_SUBJECT = "Credenciales de acceso"
CREDENTIALS_MESSAGE = (
    "Se ha creado su cuenta en el sistema de gestión académica.\n"
    "Use las siguientes credenciales para ingresar y cambie su contraseña "
    "después del primer acceso."
)


class CredentialNotifier:
    """Sends login credentials through a notification channel."""

    def __init__(self, channel: BaseChannel | None = None) -> None:
        """Initialize the notifier.

        Args:
            channel: Delivery channel. Defaults to an ``EmailChannel``
                configured from the environment.
        """
        self._channel = channel or EmailChannel()

    async def send_credentials(
        self,
        recipient_email: str,
        username: str,
        secret: str,
        full_name: str,
    ) -> ChannelResult:
        """Send the credentials of a new account.

        Args:
            recipient_email: Destination address.
            username: Generated username.
            secret: Generated temporary secret.
            full_name: Display name of the recipient.

        Returns:
            ChannelResult of the delivery attempt.
        """
        payload = NotificationPayload(
            notification_type=CREDENTIALS_NOTIFICATION,
            title=CREDENTIALS_SUBJECT,
            message=CREDENTIALS_MESSAGE,
            recipient_email=recipient_email,
            recipient_name=full_name or None,
            data={"Usuario": username, "Contraseña": secret},
        )

        result = await self._channel.send(payload)
        logger.info(
            "Credential notification for %s: status=%s",
            username,
            result.status.value,
        )
        return result
