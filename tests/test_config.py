"""
Tests for configuration loading, validation and persistence.
"""

import yaml

from server_optimizer.common.config import OptimizerConfig, load_optimizer_config
from server_optimizer.services.config import ConfigStore, ConfigValidator


class TestLoadOptimizerConfig:
    def test_empty_mapping_gives_defaults(self):
        config = load_optimizer_config({})
        assert config == OptimizerConfig()

    def test_non_mapping_gives_defaults(self):
        assert load_optimizer_config(None) == OptimizerConfig()
        assert load_optimizer_config(["enabled"]) == OptimizerConfig()

    def test_invalid_fields_fall_back_individually(self):
        config = load_optimizer_config({
            "idle_fps": "fast",
            "base_fps": 30,
            "max_fps": -1,
            "check_interval_s": 0,
            "enabled": "maybe",
            "fps_increment_per_player": 2,
        })

        assert config.idle_fps == 9
        assert config.base_fps == 30
        assert config.max_fps == 60
        assert config.check_interval_s == 30.0
        assert config.enabled is True
        assert config.fps_increment_per_player == 2.0

    def test_fractional_fps_falls_back(self):
        config = load_optimizer_config({"idle_fps": 12.7, "max_fps": 90.0, "neutral_fps": float("inf")})

        assert config.idle_fps == 9
        assert config.max_fps == 90
        assert isinstance(config.max_fps, int)
        assert config.neutral_fps == 60

    def test_fractional_fps_from_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("base_fps: 30.5\nmax_fps: 75\n")

        config = ConfigStore(path).load()

        assert config.base_fps == 26
        assert config.max_fps == 75

    def test_string_booleans(self):
        config = load_optimizer_config({"enabled": "off", "notify_on_change": "yes"})
        assert config.enabled is False
        assert config.notify_on_change is True

    def test_service_section(self):
        config = load_optimizer_config({"service": {"health_port": 9100, "log_format": "text"}})
        assert config.service.health_port == 9100
        assert config.service.log_format == "text"
        assert config.service.health_host == "127.0.0.1"

    def test_invalid_service_section(self):
        config = load_optimizer_config({"service": "nope"})
        assert config.service.health_port == 8090

    def test_permissions_single_string(self):
        config = load_optimizer_config({"permissions": {123: "serveroptimizer.status"}})
        assert config.permissions == {"123": ["serveroptimizer.status"]}

    def test_max_below_base_is_kept(self):
        config = load_optimizer_config({"base_fps": 50, "max_fps": 40})
        assert config.max_fps == 40


class TestConfigValidator:
    def test_defaults_are_valid(self):
        is_valid, errors = ConfigValidator().validate(OptimizerConfig().to_dict())
        assert is_valid
        assert errors == []

    def test_reports_bad_values(self):
        is_valid, errors = ConfigValidator().validate({
            "idle_fps": -1,
            "max_fps": "sixty",
            "check_interval_s": 0,
            "enabled": "yes",
            "fps_increment_per_player": True,
        })

        assert not is_valid
        assert "Invalid idle_fps: must be non-negative" in errors
        assert "Invalid max_fps: must be a number" in errors
        assert "Invalid check_interval_s: must be > 0" in errors
        assert "Invalid enabled: must be true or false" in errors
        assert "Invalid fps_increment_per_player: must be a number" in errors

    def test_reports_fractional_fps(self):
        is_valid, errors = ConfigValidator().validate({"idle_fps": 12.7, "max_fps": 60.0})

        assert not is_valid
        assert errors == ["Invalid idle_fps: must be a whole number"]

    def test_reports_unknown_keys(self):
        _, errors = ConfigValidator().validate({"fps_limit": 30})
        assert errors == ["Unknown setting: fps_limit"]

    def test_reports_unknown_permissions(self):
        _, errors = ConfigValidator().validate({"permissions": {"p1": ["serveroptimizer.kick"]}})
        assert errors == ["Unknown permission for p1: serveroptimizer.kick"]

    def test_max_below_base_is_not_an_error(self):
        is_valid, _ = ConfigValidator().validate({"base_fps": 50, "max_fps": 40})
        assert is_valid


class TestConfigStore:
    def test_missing_file_writes_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"

        config = ConfigStore(path).load()

        assert config == OptimizerConfig()
        assert path.exists()
        assert yaml.safe_load(path.read_text())["base_fps"] == 26

    def test_loads_values_from_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("enabled: false\nmax_fps: 90\nidle_fps: bad\n")

        config = ConfigStore(path).load()

        assert config.enabled is False
        assert config.max_fps == 90
        assert config.idle_fps == 9

    def test_unparseable_file_is_replaced(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("enabled: [true\n")

        config = ConfigStore(path).load()

        assert config == OptimizerConfig()
        assert yaml.safe_load(path.read_text())["enabled"] is True

    def test_non_mapping_root_is_replaced(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- 1\n- 2\n")

        assert ConfigStore(path).load() == OptimizerConfig()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert ConfigStore(path).load() == OptimizerConfig()

    def test_save_then_load(self, tmp_path):
        store = ConfigStore(tmp_path / "nested" / "config.yaml")
        original = OptimizerConfig(
            enabled=False,
            default_language="de",
            permissions={"p1": ["serveroptimizer.toggle"]},
        )

        store.save(original)

        assert store.load() == original
        assert not (tmp_path / "nested" / "config.yaml.tmp").exists()
