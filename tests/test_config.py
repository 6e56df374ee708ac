"""Tests for configuration loading and merging."""

from pathlib import Path
from unittest.mock import patch

import yaml

from yabp.config.init import (
    copy_default_agents,
    discover_agent_dirs,
    get_package_agents_path,
)
from yabp.config.loader import (
    apply_env_overrides,
    get_home_config_path,
    get_local_config_path,
    get_registry_path,
    home_config_exists,
    load_config,
    load_yaml_config,
    resolve_dir,
    save_config,
    settings_from_config,
)
from yabp.config.schema import DEFAULT_CONFIG, YabpConfig


class TestYabpConfig:
    """Tests for YabpConfig dataclass."""

    def test_default_config_values(self) -> None:
        """Test that DEFAULT_CONFIG has expected values."""
        assert DEFAULT_CONFIG.agents_dir == "~/.yabp/agents"
        assert DEFAULT_CONFIG.projects_dir == "~/yabp-projects"
        assert DEFAULT_CONFIG.engine == "cursor"
        assert DEFAULT_CONFIG.simulation is True
        assert DEFAULT_CONFIG.executable_policy == "nested"
        assert DEFAULT_CONFIG.api_key is None

    def test_merge_prefers_other_values(self) -> None:
        """Test that merge prefers values from 'other' when set."""
        base = YabpConfig(engine="cursor", simulation=True)
        override = YabpConfig(engine="claude", simulation=False)
        merged = base.merge(override)

        assert merged.engine == "claude"
        assert merged.simulation is False

    def test_merge_preserves_base_when_other_is_none(self) -> None:
        """Test that merge preserves base values when other is None."""
        base = YabpConfig(engine="cursor", agents_dir="/agents")
        merged = base.merge(YabpConfig(engine="claude"))

        assert merged.engine == "claude"
        assert merged.agents_dir == "/agents"

    def test_merge_returns_new_instance(self) -> None:
        """Test that merge returns a new instance, not mutating originals."""
        base = YabpConfig(engine="cursor")
        merged = base.merge(YabpConfig(api_key="k"))

        assert merged is not base
        assert base.api_key is None

    def test_to_dict_excludes_none(self) -> None:
        """Test that to_dict omits unset values."""
        assert YabpConfig(engine="claude").to_dict() == {"engine": "claude"}

    def test_from_dict_ignores_unknown_keys(self) -> None:
        """Test that from_dict ignores unknown keys and bad policies."""
        config = YabpConfig.from_dict(
            {"engine": "claude", "parallel": 4, "executable_policy": "all"}
        )

        assert config.engine == "claude"
        assert config.executable_policy is None

    def test_from_dict_coerces_types(self) -> None:
        """Test that from_dict coerces values to the declared types."""
        config = YabpConfig.from_dict(
            {"agents_dir": 123, "simulation": 0, "executable_policy": "listed"}
        )

        assert config.agents_dir == "123"
        assert config.simulation is False
        assert config.executable_policy == "listed"

    def test_repr_masks_api_key(self) -> None:
        """Test that the API key never appears in the repr."""
        text = repr(YabpConfig(engine="cursor", api_key="sk-secret"))

        assert "sk-secret" not in text
        assert "api_key='***'" in text


class TestConfigPaths:
    """Tests for config file locations."""

    def test_home_paths(self, tmp_path: Path) -> None:
        """Test that home paths live under ~/.yabp."""
        with patch("yabp.config.loader.Path.home", return_value=tmp_path):
            assert get_home_config_path() == tmp_path / ".yabp" / "config.yaml"
            assert get_registry_path() == tmp_path / ".yabp" / "projects.yaml"
            assert home_config_exists() is False

    def test_get_local_config_path(self, tmp_path: Path) -> None:
        """Test that local config is read from the working directory."""
        with patch("yabp.config.loader.Path.cwd", return_value=tmp_path):
            assert get_local_config_path() == tmp_path / ".yabp" / "config.yaml"


class TestConfigLoading:
    """Tests for config file loading."""

    def test_load_yaml_config_returns_dict(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("engine: claude\n")

        assert load_yaml_config(config_file) == {"engine": "claude"}

    def test_load_yaml_config_returns_none_for_missing_file(self, tmp_path: Path) -> None:
        assert load_yaml_config(tmp_path / "missing.yaml") is None

    def test_load_yaml_config_returns_none_for_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("engine: [unclosed\n")

        assert load_yaml_config(config_file) is None

    def test_load_config_uses_defaults_when_no_files(self, tmp_path: Path) -> None:
        """Test that load_config uses defaults when no config files exist."""
        home_config = tmp_path / "home" / ".yabp" / "config.yaml"
        local_config = tmp_path / "local" / ".yabp" / "config.yaml"

        with (
            patch("yabp.config.loader.get_home_config_path", return_value=home_config),
            patch(
                "yabp.config.loader.get_local_config_path", return_value=local_config
            ),
        ):
            config = load_config()

            assert config == DEFAULT_CONFIG

    def test_load_config_local_overrides_home(self, tmp_path: Path) -> None:
        """Test that local config overrides home config values."""
        home_config = tmp_path / "home" / ".yabp" / "config.yaml"
        local_config = tmp_path / "local" / ".yabp" / "config.yaml"

        home_config.parent.mkdir(parents=True)
        home_config.write_text("engine: claude\nsimulation: false\n")

        local_config.parent.mkdir(parents=True)
        local_config.write_text("simulation: true\n")

        with (
            patch("yabp.config.loader.get_home_config_path", return_value=home_config),
            patch(
                "yabp.config.loader.get_local_config_path", return_value=local_config
            ),
        ):
            config = load_config()

            # Home value preserved
            assert config.engine == "claude"
            # Local override applied
            assert config.simulation is True
            # Defaults still apply
            assert config.agents_dir == "~/.yabp/agents"


class TestEnvironment:
    """Tests for environment overrides and executor settings."""

    def test_apply_env_overrides(self) -> None:
        environ = {
            "YABP_API_KEY": "sk-env",
            "YABP_AGENTS_DIR": "/srv/agents",
            "YABP_PROJECTS_DIR": "",
        }

        config = apply_env_overrides(DEFAULT_CONFIG, environ)

        assert config.api_key == "sk-env"
        assert config.agents_dir == "/srv/agents"
        assert config.projects_dir == "~/yabp-projects"

    def test_settings_from_config(self) -> None:
        config = YabpConfig(engine="claude", api_key="k", simulation=False)

        settings = settings_from_config(config, environ={"PATH": "/bin"})

        assert settings.engine == "claude"
        assert settings.api_key == "k"
        assert settings.simulation is False
        assert dict(settings.environ) == {"PATH": "/bin"}

    def test_settings_simulation_override(self) -> None:
        settings = settings_from_config(DEFAULT_CONFIG, simulation=False, environ={})

        assert settings.simulation is False
        assert settings.engine == "cursor"

    def test_unset_simulation_means_simulate(self) -> None:
        assert settings_from_config(YabpConfig(), environ={}).simulation is True

    def test_resolve_dir_expands_user(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))

        assert resolve_dir(None, "~/agents") == tmp_path / "agents"
        assert resolve_dir("/abs", "~/agents") == Path("/abs")


class TestConfigSaving:
    """Tests for config file saving."""

    def test_save_config_excludes_none_values(self, tmp_path: Path) -> None:
        """Test that save_config writes only values that are set."""
        config_file = tmp_path / ".yabp" / "config.yaml"

        save_config(YabpConfig(engine="claude", simulation=False), config_file)

        with config_file.open() as f:
            data = yaml.safe_load(f)
        assert data == {"engine": "claude", "simulation": False}


class TestDefaultAgents:
    """Tests for installing the bundled agents."""

    def test_bundled_agents_are_discovered(self) -> None:
        agents = discover_agent_dirs(get_package_agents_path())

        assert {"devops-engineer", "pm-framework", "qa-engineer"} <= set(agents)

    def test_copy_default_agents_keeps_existing(self, tmp_path: Path) -> None:
        existing = tmp_path / "qa-engineer"
        existing.mkdir()
        (existing / "metadata.yaml").write_text("name: Mine\n")

        copied = copy_default_agents(tmp_path)

        assert "qa-engineer" not in copied
        assert "devops-engineer" in copied
        assert (existing / "metadata.yaml").read_text() == "name: Mine\n"
        assert (tmp_path / "devops-engineer" / "metadata.yaml").exists()
