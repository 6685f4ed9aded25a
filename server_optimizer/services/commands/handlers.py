"""
Command Handlers

Chat/console commands for the optimizer:
    so.status   (serveroptimizer.status)   current FPS, players, mode
    so.toggle   (serveroptimizer.toggle)   enable/disable dynamic adjustment
    so.help     (serveroptimizer.help, so) command and permission listing

Permission checks happen here; a denied command never reaches the
control loop.
"""

from typing import Awaitable, Callable

from server_optimizer.common.config import PERMISSION_STATUS, PERMISSION_TOGGLE
from server_optimizer.common.exceptions import ControlError, PermissionDeniedError
from server_optimizer.common.logging_setup import get_service_logger, log_command
from server_optimizer.services.control.loop import ControlLoop
from server_optimizer.services.host import Member
from server_optimizer.services.notify import Notifier

from .permissions import PERMISSION_DESCRIPTIONS, PermissionRegistry

logger = get_service_logger("commands")

CommandFunc = Callable[[Member | None], Awaitable[list[str]]]


class CommandHandler:
    """Dispatches optimizer commands to the control loop"""

    def __init__(
        self,
        loop: ControlLoop,
        notifier: Notifier,
        permissions: PermissionRegistry,
    ):
        self.loop = loop
        self.notifier = notifier
        self.permissions = permissions

        self._commands: dict[str, tuple[str, CommandFunc]] = {}
        self._register("status", self.cmd_status, "serveroptimizer.status", "so.status")
        self._register("toggle", self.cmd_toggle, "serveroptimizer.toggle", "so.toggle")
        self._register("help", self.cmd_help, "serveroptimizer.help", "so.help", "so")

    def _register(self, name: str, func: CommandFunc, *aliases: str) -> None:
        for alias in aliases:
            self._commands[alias] = (name, func)

    @property
    def commands(self) -> list[str]:
        return sorted(self._commands)

    def is_command(self, text: str) -> bool:
        return self._normalize(text) in self._commands

    @staticmethod
    def _normalize(text: str) -> str:
        parts = text.strip().split()
        return parts[0].lstrip("/").lower() if parts else ""

    async def handle(self, member: Member | None, command: str) -> list[str]:
        """
        Run a command for a member (None for the server console).

        Args:
            member: Invoking member, or None for the console
            command: Command text, with or without a leading slash

        Returns:
            Reply lines; empty for unknown commands
        """
        entry = self._commands.get(self._normalize(command))
        if entry is None:
            return []

        name, func = entry
        member_id = member.member_id if member else None

        try:
            replies = await func(member)
        except PermissionDeniedError as e:
            log_command(logger, name, member_id, allowed=False)
            logger.debug(e.message)
            return [self.notifier.text("No Permission")]

        log_command(logger, name, member_id, allowed=True)
        return replies

    # ── Commands ──────────────────────────────────────────────────────

    async def cmd_status(self, member: Member | None) -> list[str]:
        self.permissions.require(member, PERMISSION_STATUS)

        snapshot = self.loop.status_snapshot()
        return [
            self.notifier.render("Status Header"),
            self.notifier.text("Status Current FPS", fps=snapshot.current_value),
            self.notifier.text("Status Player Count", players=snapshot.current_load),
            self.notifier.text("Status Dynamic Mode", mode=self._mode_text(snapshot.enabled)),
        ]

    async def cmd_toggle(self, member: Member | None) -> list[str]:
        self.permissions.require(member, PERMISSION_TOGGLE)

        try:
            enabled = await self.loop.toggle()
        except ControlError as e:
            logger.warning(f"Toggle rejected: {e.message}")
            return []

        if enabled:
            return [self.notifier.render("Toggle On")]

        return [
            self.notifier.render("Toggle Off"),
            self.notifier.render("Default FPS Restored", fps=self.loop.config.max_fps),
        ]

    async def cmd_help(self, member: Member | None) -> list[str]:
        snapshot = self.loop.status_snapshot()
        mode = "Enabled" if snapshot.enabled else "Disabled"

        if member is None:
            return [
                "ServerOptimizer Help (Console):",
                "- so.status - View current server status",
                "- so.toggle - Enable/disable dynamic adjustment",
                "- so.help - View this help",
                f"Current FPS: {snapshot.current_value}, Dynamic adjustment: {mode}",
            ]

        lines = [
            self.notifier.render("Help Header"),
            "",
            "Available commands:",
            "- /so.status - View current server status",
            "- /so.toggle - Enable/disable dynamic adjustment",
            "- /so.help - View this help",
            "",
            "Permissions:",
        ]
        lines.extend(f"- {perm}: {desc}" for perm, desc in PERMISSION_DESCRIPTIONS.items())
        lines.extend(["", f"Server FPS: {snapshot.current_value}"])

        if member.is_admin:
            config = self.loop.config
            lines.extend([
                "",
                "Admin information:",
                f"- Current FPS: {snapshot.current_value}",
                f"- Players: {snapshot.current_load}",
                f"- Dynamic adjustment: {mode}",
                f"- Base FPS: {config.base_fps}",
                f"- Maximum FPS: {config.max_fps}",
                f"- FPS without players: {config.idle_fps}",
                f"- Increment per player: {config.fps_increment_per_player}",
            ])

        return lines

    def _mode_text(self, enabled: bool) -> str:
        return self.notifier.text("Enabled" if enabled else "Disabled")
