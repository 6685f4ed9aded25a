"""
Tests for the virtual server and scripted scenarios.
"""

from unittest.mock import AsyncMock

import pytest

from server_optimizer.common.exceptions import ApplyError, HostError
from server_optimizer.services.commands import CommandHandler, PermissionRegistry
from server_optimizer.services.host import Member
from server_optimizer.simulator import SCENARIOS, ScenarioStep, VirtualServer, get_scenario, run_scenario
from server_optimizer.simulator.scenarios import ADMIN, MODERATOR


def without_waits(steps):
    return [step for step in steps if step.action != "wait"]


class TestVirtualServer:
    @pytest.mark.asyncio
    async def test_join_and_leave_fire_listeners(self):
        server = VirtualServer()
        listener = AsyncMock()
        server.add_load_listener(listener)

        await server.connect(Member("p1"))
        await server.connect(Member("p2"))
        await server.disconnect("p1")

        assert listener.await_count == 3
        assert server.get_current_load() == 1
        assert server.get_member("p2") == Member("p2")

    @pytest.mark.asyncio
    async def test_leave_of_unknown_member_is_ignored(self):
        server = VirtualServer()
        listener = AsyncMock()
        server.add_load_listener(listener)

        await server.disconnect("ghost")

        listener.assert_not_awaited()

    def test_apply_records_history(self):
        server = VirtualServer(initial_fps=30)
        server.apply_output_value(27)
        server.apply_output_value(29)

        assert server.fps_limit == 29
        assert server.applied_values == [27, 29]

    def test_failure_injection(self):
        server = VirtualServer()
        server.fail_applies = True
        server.fail_load_reads = True

        with pytest.raises(ApplyError):
            server.apply_output_value(27)
        with pytest.raises(HostError):
            server.get_current_load()
        assert server.applied_values == []

    @pytest.mark.asyncio
    async def test_chat_without_handler(self):
        server = VirtualServer()
        assert await server.chat(Member("p1"), "/so.status") == []
        assert await server.console("so.status") == []

    @pytest.mark.asyncio
    async def test_plain_chat_is_not_a_command(self, loop, notifier):
        server = loop.host
        server.set_command_handler(CommandHandler(loop, notifier, PermissionRegistry()))
        await loop.start()

        assert await server.chat(Member("p1"), "hello everyone") == []
        assert server.messages == []


class TestScenarios:
    def test_registry(self):
        assert set(SCENARIOS) == {"quiet_night", "busy_evening", "admin_session"}
        assert all(isinstance(step, ScenarioStep) for step in get_scenario("busy_evening"))

    def test_unknown_scenario(self):
        with pytest.raises(ValueError):
            get_scenario("apocalypse")

    @pytest.mark.asyncio
    async def test_busy_evening_reaches_max_and_drains(self, loop, notifier):
        server = loop.host
        server.set_command_handler(CommandHandler(loop, notifier, PermissionRegistry()))
        await loop.start()

        await run_scenario(server, without_waits(get_scenario("busy_evening")), step_delay=0)

        assert 60 in server.applied_values
        assert server.applied_values.count(60) == 1
        # 15 players left after the admin logs off
        assert server.fps_limit == 48
        assert server.messages_for(ADMIN.member_id)[-4] == "[ServerOptimizer] ServerOptimizer Status:"

    @pytest.mark.asyncio
    async def test_admin_session(self, loop, notifier):
        server = loop.host
        server.set_command_handler(CommandHandler(loop, notifier, PermissionRegistry()))
        await loop.start()

        await run_scenario(server, without_waits(get_scenario("admin_session")), step_delay=0)

        assert "You don't have permission to use this command" in server.messages_for(MODERATOR.member_id)
        assert "[ServerOptimizer] Dynamic FPS adjustment disabled" in server.messages_for(ADMIN.member_id)
        assert "[ServerOptimizer] Dynamic FPS adjustment enabled" in server.messages_for(ADMIN.member_id)
        assert server.fps_limit == 9

    @pytest.mark.asyncio
    async def test_malformed_step_is_skipped(self, server):
        await run_scenario(server, [ScenarioStep("dance"), ScenarioStep("join", member=Member("p1"))], 0)
        assert server.get_current_load() == 1

    @pytest.mark.asyncio
    async def test_quiet_night(self, loop):
        await loop.start()

        await run_scenario(loop.host, without_waits(get_scenario("quiet_night")), step_delay=0)

        assert loop.host.applied_values == [9, 27, 29, 27, 9]
