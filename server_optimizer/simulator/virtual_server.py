"""
Virtual Game Server

Simulates a game server for running the optimizer without a real host:
1. Players connect and disconnect, firing load-change listeners
2. fps.limit commands are recorded (and can be made to fail)
3. Chat messages are kept per player
4. Chat commands are routed to the registered command handler
"""

from typing import Any, Awaitable, Callable

from server_optimizer.common.exceptions import ApplyError, HostError
from server_optimizer.common.logging_setup import get_service_logger
from server_optimizer.services.commands import CommandHandler
from server_optimizer.services.host import HostAdapter, Member

logger = get_service_logger("simulator")

LoadListener = Callable[[], Awaitable[Any]]


class VirtualServer(HostAdapter):
    """
    In-memory game server.

    Set `fail_applies` or `fail_load_reads` to make the corresponding
    host call raise.
    """

    def __init__(self, name: str = "Virtual Server", initial_fps: int = 60):
        self.name = name
        self.fps_limit = initial_fps
        self.applied_values: list[int] = []
        self.messages: list[tuple[str, str]] = []

        self.fail_applies = False
        self.fail_load_reads = False

        self._players: dict[str, Member] = {}
        self._load_listeners: list[LoadListener] = []
        self._command_handler: CommandHandler | None = None

    # ── Wiring ────────────────────────────────────────────────────────

    def add_load_listener(self, listener: LoadListener) -> None:
        """Called after every join and every leave"""
        self._load_listeners.append(listener)

    def set_command_handler(self, handler: CommandHandler) -> None:
        self._command_handler = handler

    # ── Player sessions ───────────────────────────────────────────────

    async def connect(self, member: Member) -> None:
        self._players[member.member_id] = member
        logger.debug(f"{member.display_name or member.member_id} connected ({len(self._players)} online)")
        await self._fire_load_changed()

    async def disconnect(self, member_id: str) -> None:
        if self._players.pop(member_id, None) is None:
            return
        logger.debug(f"{member_id} disconnected ({len(self._players)} online)")
        await self._fire_load_changed()

    def get_member(self, member_id: str) -> Member | None:
        return self._players.get(member_id)

    async def _fire_load_changed(self) -> None:
        for listener in self._load_listeners:
            await listener()

    # ── Commands ──────────────────────────────────────────────────────

    async def chat(self, member: Member, text: str) -> list[str]:
        """
        Player chat. Commands are answered privately to the sender.

        Returns:
            Reply lines sent back to the player
        """
        if self._command_handler is None or not self._command_handler.is_command(text):
            return []

        replies = await self._command_handler.handle(member, text)
        for reply in replies:
            self.send_message(member, reply)
        return replies

    async def console(self, command: str) -> list[str]:
        """Server console command"""
        if self._command_handler is None:
            return []

        replies = await self._command_handler.handle(None, command)
        for reply in replies:
            logger.info(reply)
        return replies

    def messages_for(self, member_id: str) -> list[str]:
        return [text for recipient, text in self.messages if recipient == member_id]

    # ── HostAdapter ───────────────────────────────────────────────────

    def get_current_load(self) -> int:
        if self.fail_load_reads:
            raise HostError("player list unavailable")
        return len(self._players)

    def apply_output_value(self, value: int) -> None:
        if self.fail_applies:
            raise ApplyError(value)
        self.fps_limit = value
        self.applied_values.append(value)
        logger.debug(f"fps.limit {value}")

    def get_connected_members(self) -> list[Member]:
        return list(self._players.values())

    def send_message(self, member: Member, text: str) -> None:
        self.messages.append((member.member_id, text))
