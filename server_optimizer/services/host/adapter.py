"""
Host Adapter Interface

The game server the optimizer controls. Implementations supply the
player count, accept fps.limit commands and deliver chat messages.
All calls are expected to be fast, local and non-blocking.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Member:
    """A connected player"""
    member_id: str
    display_name: str = ""
    is_admin: bool = False
    is_developer: bool = False

    @property
    def privileged(self) -> bool:
        """Admins and developers receive FPS change notifications"""
        return self.is_admin or self.is_developer


class HostAdapter(ABC):
    """Base class for game server hosts"""

    @abstractmethod
    def get_current_load(self) -> int:
        """Number of connected players"""
        pass

    @abstractmethod
    def apply_output_value(self, value: int) -> None:
        """Run `fps.limit <value>` on the server"""
        pass

    @abstractmethod
    def get_connected_members(self) -> list[Member]:
        """All currently connected players"""
        pass

    @abstractmethod
    def send_message(self, member: Member, text: str) -> None:
        """Send a chat message to a single player"""
        pass
