"""
Shared fixtures: a fast configuration, a virtual server and a wired
control loop.
"""

import pytest
import pytest_asyncio

from server_optimizer.common.config import OptimizerConfig
from server_optimizer.services.control import ControlLoop
from server_optimizer.services.host import Member
from server_optimizer.services.notify import MessageCatalog, Notifier
from server_optimizer.simulator import VirtualServer


@pytest.fixture
def config():
    """Default tuning with the delayed re-evaluation turned off."""
    return OptimizerConfig(
        force_initialization=False,
        show_init_message=False,
        check_interval_s=3600.0,
    )


@pytest.fixture(scope="session")
def catalog():
    return MessageCatalog.load()


@pytest.fixture
def server():
    return VirtualServer(initial_fps=30)


@pytest.fixture
def notifier(server, catalog, config):
    return Notifier(server, catalog, language="en", prefix=config.chat_prefix)


@pytest.fixture
def admin():
    return Member(member_id="admin-1", display_name="admin", is_admin=True)


@pytest.fixture
def developer():
    return Member(member_id="dev-1", display_name="dev", is_developer=True)


@pytest.fixture
def players():
    return [Member(member_id=f"player-{i}", display_name=f"player{i}") for i in range(50)]


@pytest_asyncio.fixture
async def loop(config, server, notifier):
    control = ControlLoop(config, server, notifier)
    server.add_load_listener(control.on_load_changed)
    yield control
    await control.stop()
