"""Unit tests for workdeck_planner.engine.config — workdeck.yaml loading & validation."""

import pytest

from workdeck_planner.engine import config as cfg_mod
from workdeck_planner.engine.config import (
    DEFAULT_BASE_URL,
    TOKEN_STORAGE_KEY,
    ApiConfig,
    LoggingConfig,
    PlannerConfig,
    get_config,
    load_config,
)
from workdeck_planner.engine.errors import ConfigError


class TestConfigModels:
    """Pydantic model defaults and validators."""

    def test_defaults(self):
        config = PlannerConfig()
        assert config.environment == "dev"
        assert config.api.base_url == DEFAULT_BASE_URL
        assert config.api.timeout == 30.0
        assert config.token.key == TOKEN_STORAGE_KEY
        assert config.logging.level == "INFO"

    def test_base_url_trailing_slash_stripped(self):
        assert ApiConfig(base_url="https://api.workdeck.com/").base_url == "https://api.workdeck.com"

    def test_base_url_requires_scheme(self):
        with pytest.raises(ValueError):
            ApiConfig(base_url="api.workdeck.com")

    def test_log_level_uppercased(self):
        assert LoggingConfig(level="debug").level == "DEBUG"

    def test_invalid_environment(self):
        with pytest.raises(ValueError):
            PlannerConfig(environment="qa")

    def test_token_path_expanded(self):
        config = PlannerConfig()
        assert "~" not in str(config.token.resolved_path)


class TestLoadConfig:
    """File loading and environment overrides."""

    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(str(tmp_path / "workdeck.yaml"))
        assert config.api.base_url == DEFAULT_BASE_URL

    def test_planner_wrapper(self, tmp_path):
        path = tmp_path / "workdeck.yaml"
        path.write_text(
            "planner:\n"
            "  environment: staging\n"
            "  api:\n"
            "    base_url: https://staging.workdeck.test/\n",
            encoding="utf-8",
        )
        config = load_config(str(path))
        assert config.environment == "staging"
        assert config.api.base_url == "https://staging.workdeck.test"

    def test_unwrapped_root(self, tmp_path):
        path = tmp_path / "workdeck.yaml"
        path.write_text("name: Team Board\n", encoding="utf-8")
        assert load_config(str(path)).name == "Team Board"

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "workdeck.yaml"
        path.write_text("planner:\n  api:\n    timeout: 5\n", encoding="utf-8")
        monkeypatch.setenv("WORKDECK_BASE_URL", "https://prod.workdeck.test")
        monkeypatch.setenv("WORKDECK_ENV", "prod")
        config = load_config(str(path))
        assert config.api.base_url == "https://prod.workdeck.test"
        assert config.api.timeout == 5.0
        assert config.environment == "prod"

    def test_invalid_value_raises_config_error(self, tmp_path):
        path = tmp_path / "workdeck.yaml"
        path.write_text("planner:\n  environment: qa\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_non_mapping_root_raises(self, tmp_path):
        path = tmp_path / "workdeck.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_malformed_yaml_raises_config_error(self, tmp_path):
        path = tmp_path / "workdeck.yaml"
        path.write_text("planner: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            load_config(str(path))
        assert "Invalid YAML" in exc_info.value.message
        assert exc_info.value.context["path"] == str(path)

    def test_non_mapping_planner_section_raises(self, tmp_path):
        path = tmp_path / "workdeck.yaml"
        path.write_text("planner: 42\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_get_config_caches(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        first = get_config()
        assert get_config() is first
        assert cfg_mod._config is first

    def test_discovers_file_in_parent(self, tmp_path, monkeypatch):
        (tmp_path / "workdeck.yaml").write_text("planner:\n  name: Found\n", encoding="utf-8")
        child = tmp_path / "a" / "b"
        child.mkdir(parents=True)
        monkeypatch.chdir(child)
        assert load_config().name == "Found"
