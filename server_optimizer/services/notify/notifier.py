"""
Privileged Notifier

Delivers FPS change notifications to admins and developers only.
The audience filter lives here so no host implementation can turn a
change notification into a broadcast.
"""

from typing import Any

from server_optimizer.common.logging_setup import get_service_logger
from server_optimizer.services.host import HostAdapter, Member

from .catalog import FALLBACK_LANGUAGE, MessageCatalog

logger = get_service_logger("notify")


class Notifier:
    """Renders catalog messages and sends them to privileged members"""

    def __init__(
        self,
        host: HostAdapter,
        catalog: MessageCatalog,
        language: str = FALLBACK_LANGUAGE,
        prefix: str = "",
    ):
        self.host = host
        self.catalog = catalog
        self.language = language
        self.prefix = prefix

    def text(self, key: str, **params: Any) -> str:
        """Message in the configured language, without the chat prefix"""
        return self.catalog.format(key, self.language, **params)

    def render(self, key: str, **params: Any) -> str:
        return f"{self.prefix}{self.text(key, **params)}"

    def privileged_members(self) -> list[Member]:
        return [m for m in self.host.get_connected_members() if m.privileged]

    def notify_privileged(self, key: str, **params: Any) -> int:
        """
        Send a message to every connected admin/developer.

        Args:
            key: Catalog message key
            **params: Template parameters

        Returns:
            Number of members the message was sent to
        """
        text = self.render(key, **params)
        sent = 0

        for member in self.privileged_members():
            self.host.send_message(member, text)
            sent += 1

        logger.debug(
            f"Notified {sent} privileged members: {key}",
            extra={"message_key": key, "recipients": sent},
        )
        return sent
