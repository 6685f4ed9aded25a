"""
Tests for the service wiring and the health/state HTTP endpoints.
"""

import pytest
import yaml
from aiohttp.test_utils import TestClient, TestServer

from server_optimizer.common.config import OptimizerConfig
from server_optimizer.service import OptimizerService
from server_optimizer.services.config import ConfigStore
from server_optimizer.services.control import LoopState
from server_optimizer.services.host import Member
from server_optimizer.simulator import VirtualServer


def write_config(path, **overrides):
    data = OptimizerConfig(
        force_initialization=False,
        show_init_message=False,
        check_interval_s=3600.0,
    ).to_dict()
    data.update(overrides)
    path.write_text(yaml.safe_dump(data))


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config.yaml"
    write_config(path)
    return path


@pytest.mark.asyncio
async def test_start_and_stop(config_path, catalog):
    server = VirtualServer()
    service = OptimizerService(server, ConfigStore(config_path), catalog, health_server=False)

    await service.start()
    assert service.running
    assert service.loop.state is LoopState.RUNNING_ENABLED
    assert server.fps_limit == 9

    await service.stop()
    assert not service.running
    assert service.loop.state is LoopState.STOPPED
    assert server.fps_limit == 60


@pytest.mark.asyncio
async def test_unsupported_language_falls_back_and_saves(tmp_path, catalog):
    path = tmp_path / "config.yaml"
    write_config(path, default_language="xx")
    service = OptimizerService(VirtualServer(), ConfigStore(path), catalog, health_server=False)

    await service.start()

    assert service.config.default_language == "en"
    assert service.notifier.language == "en"
    assert yaml.safe_load(path.read_text())["default_language"] == "en"

    await service.stop()


@pytest.mark.asyncio
@pytest.mark.parametrize("language", ["ja", "ko", "pl", "sv", "zh-CN", "no", "sr-Cyrl"])
async def test_non_european_languages_are_kept(tmp_path, catalog, language):
    path = tmp_path / "config.yaml"
    write_config(path, default_language=language)
    service = OptimizerService(VirtualServer(), ConfigStore(path), catalog, health_server=False)

    await service.start()
    await service.stop()

    assert service.config.default_language == language
    assert service.notifier.language == language
    assert yaml.safe_load(path.read_text())["default_language"] == language


@pytest.mark.asyncio
async def test_supported_language_is_used(tmp_path, catalog):
    path = tmp_path / "config.yaml"
    write_config(path, default_language="fr")
    service = OptimizerService(VirtualServer(), ConfigStore(path), catalog, health_server=False)

    await service.start()

    assert service.notifier.language == "fr"
    await service.stop()


@pytest.mark.asyncio
async def test_toggle_is_persisted(config_path, catalog):
    server = VirtualServer()
    service = OptimizerService(server, ConfigStore(config_path), catalog, health_server=False)
    await service.start()

    await service.loop.toggle()

    assert yaml.safe_load(config_path.read_text())["enabled"] is False
    await service.stop()


@pytest.mark.asyncio
async def test_health_endpoint(config_path, catalog):
    server = VirtualServer()
    service = OptimizerService(server, ConfigStore(config_path), catalog, health_server=False)
    await service.start()
    # No load listener wired: the reported player count is read live
    await server.connect(Member("p1"))

    async with TestClient(TestServer(service.build_app())) as client:
        resp = await client.get("/health")
        assert resp.status == 200
        body = await resp.json()

    assert body["status"] == "healthy"
    assert body["loop_state"] == "running_enabled"
    assert body["current_fps"] == 9
    assert body["players"] == 1

    await service.stop()


@pytest.mark.asyncio
async def test_state_endpoint(config_path, catalog):
    service = OptimizerService(VirtualServer(), ConfigStore(config_path), catalog, health_server=False)
    await service.start()
    await service.loop.toggle()

    async with TestClient(TestServer(service.build_app())) as client:
        resp = await client.get("/state")
        body = await resp.json()

    assert body["loop_state"] == "running_disabled"
    assert body["enabled"] is False
    assert body["current_value"] == 60
    assert body["scheduler"]["name"] == "fps-check"

    await service.stop()


@pytest.mark.asyncio
async def test_health_after_stop(config_path, catalog):
    service = OptimizerService(VirtualServer(), ConfigStore(config_path), catalog, health_server=False)
    await service.start()
    await service.stop()

    async with TestClient(TestServer(service.build_app())) as client:
        body = await (await client.get("/health")).json()

    assert body["status"] == "unhealthy"
    assert body["loop_state"] == "stopped"


@pytest.mark.asyncio
async def test_request_shutdown_ends_run(config_path, catalog):
    service = OptimizerService(VirtualServer(), ConfigStore(config_path), catalog, health_server=False)
    service.request_shutdown()

    await service.run()

    assert not service.running
