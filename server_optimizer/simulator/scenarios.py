"""
Simulation Scenarios

Scripted join/leave/chat sequences that drive a VirtualServer so the
control loop can be watched reacting to player load.
"""

import asyncio
from dataclasses import dataclass

from server_optimizer.common.logging_setup import get_service_logger
from server_optimizer.services.host import Member

from .virtual_server import VirtualServer

logger = get_service_logger("simulator.scenarios")


@dataclass(frozen=True)
class ScenarioStep:
    """One scripted event"""
    action: str  # join, leave, chat, console, wait
    member: Member | None = None
    member_id: str = ""
    text: str = ""
    seconds: float = 0.0


def _player(index: int) -> Member:
    return Member(member_id=f"7656119{index:010d}", display_name=f"player{index}")


ADMIN = Member(member_id="76561190000000001", display_name="admin", is_admin=True)
MODERATOR = Member(member_id="76561190000000002", display_name="moderator")


def quiet_night() -> list[ScenarioStep]:
    """A couple of players drop in and leave; the server idles"""
    return [
        ScenarioStep("join", member=_player(1)),
        ScenarioStep("wait", seconds=2),
        ScenarioStep("join", member=_player(2)),
        ScenarioStep("wait", seconds=2),
        ScenarioStep("leave", member_id=_player(1).member_id),
        ScenarioStep("leave", member_id=_player(2).member_id),
        ScenarioStep("wait", seconds=2),
    ]


def busy_evening() -> list[ScenarioStep]:
    """Load climbs past the max_fps clamp, then drains"""
    steps = [ScenarioStep("join", member=ADMIN)]
    for i in range(1, 31):
        steps.append(ScenarioStep("join", member=_player(i)))
    steps.append(ScenarioStep("wait", seconds=3))
    for i in range(1, 31, 2):
        steps.append(ScenarioStep("leave", member_id=_player(i).member_id))
    steps.append(ScenarioStep("chat", member=ADMIN, text="/so.status"))
    steps.append(ScenarioStep("leave", member_id=ADMIN.member_id))
    return steps


def admin_session() -> list[ScenarioStep]:
    """Admin checks status and toggles; a regular player is refused"""
    return [
        ScenarioStep("join", member=ADMIN),
        ScenarioStep("join", member=MODERATOR),
        ScenarioStep("chat", member=ADMIN, text="/so.status"),
        ScenarioStep("chat", member=MODERATOR, text="/so.toggle"),
        ScenarioStep("chat", member=ADMIN, text="/so.toggle"),
        ScenarioStep("wait", seconds=2),
        ScenarioStep("chat", member=ADMIN, text="/so.toggle"),
        ScenarioStep("chat", member=ADMIN, text="/so.help"),
        ScenarioStep("console", text="so.help"),
        ScenarioStep("leave", member_id=MODERATOR.member_id),
        ScenarioStep("leave", member_id=ADMIN.member_id),
    ]


SCENARIOS = {
    "quiet_night": quiet_night,
    "busy_evening": busy_evening,
    "admin_session": admin_session,
}


def get_scenario(name: str) -> list[ScenarioStep]:
    try:
        return SCENARIOS[name]()
    except KeyError as exc:
        raise ValueError(f"Unknown scenario '{name}'. Available: {sorted(SCENARIOS)}") from exc


async def run_scenario(
    server: VirtualServer,
    steps: list[ScenarioStep],
    step_delay: float = 0.5,
) -> None:
    """
    Play scenario steps against a server.

    Args:
        server: Server to drive
        steps: Steps to play, in order
        step_delay: Pause between steps in seconds
    """
    for step in steps:
        if step.action == "join" and step.member:
            await server.connect(step.member)
        elif step.action == "leave":
            await server.disconnect(step.member_id)
        elif step.action == "chat" and step.member:
            replies = await server.chat(step.member, step.text)
            for reply in replies:
                logger.info(f"[{step.member.display_name}] {reply}")
        elif step.action == "console":
            await server.console(step.text)
        elif step.action == "wait":
            await asyncio.sleep(step.seconds)
            continue
        else:
            logger.warning(f"Skipping malformed step: {step}")
            continue

        logger.info(
            f"{step.action}: {server.get_current_load()} online, fps.limit={server.fps_limit}"
        )
        if step_delay > 0:
            await asyncio.sleep(step_delay)
