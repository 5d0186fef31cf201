"""
Console notification adapter - Implements NotificationTransport protocol.

This module provides a console-based implementation of the domain's
notification port, logging messages to stdout for demo purposes.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleNotificationTransport:
    """
    Implements NotificationTransport protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - prints messages to stdout.
    """

    def send(
        self,
        recipient_guid: int,
        address: str,
        subject: str,
        body: str,
        channel: str = "email",
    ) -> None:
        """
        Log a message to console (simulates delivery).

        In production, this would be replaced with an SMTP adapter.
        Messages are logged at INFO level to be visible in container logs.

        Args:
            recipient_guid: Account the message is for
            address: Delivery address (email)
            subject: Message subject
            body: Message body
            channel: Delivery channel name
        """
        logger.info(
            "[NOTIFICATION] Channel: %s To: %s (guid=%s) Subject: %s\n%s",
            channel,
            address,
            recipient_guid,
            subject,
            body,
        )
