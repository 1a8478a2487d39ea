"""Tests for settings loading."""

import json

import pytest
import yaml

from dataforge import (
    CompositeDiscoveryProvider,
    ConfigurationError,
    EntryPointDiscoveryProvider,
    ForgeSettings,
    ReferenceDiscoveryProvider,
    build_discovery_provider,
    load_settings,
)
from dataforge.discovery import DEFAULT_ENTRY_POINT_GROUP


class TestForgeSettings:
    """Test the settings dataclass."""

    def test_defaults(self):
        """Test default values."""
        settings = ForgeSettings()

        assert settings.entry_point_group == DEFAULT_ENTRY_POINT_GROUP
        assert settings.use_entry_points is True
        assert settings.extensions == []
        assert settings.register_builtins is True
        assert settings.default_seed is None

    def test_from_dict(self):
        """Test building from a dictionary."""
        settings = ForgeSettings.from_dict({
            "use_entry_points": False,
            "extensions": ["myapp.forge:RetailExtension"],
            "default_seed": 7,
        })

        assert settings.use_entry_points is False
        assert settings.extensions == ["myapp.forge:RetailExtension"]
        assert settings.default_seed == 7

    def test_unknown_keys(self):
        """Test unknown keys are rejected."""
        with pytest.raises(ConfigurationError, match="Unknown settings: colour") as exc_info:
            ForgeSettings.from_dict({"colour": "blue"})

        assert exc_info.value.context["unknown"] == ["colour"]

    def test_extensions_string_is_split(self):
        """Test a comma separated string is accepted for extensions."""
        settings = ForgeSettings.from_dict({"extensions": "a:One, b:Two"})
        assert settings.extensions == ["a:One", "b:Two"]

    @pytest.mark.parametrize(
        "data",
        [
            {"entry_point_group": ""},
            {"use_entry_points": "sometimes"},
            {"use_entry_points": 1.0},
            {"register_builtins": 0.0},
            {"register_builtins": 2},
            {"register_builtins": None},
            {"extensions": [1, 2]},
            {"default_seed": "seven"},
            {"default_seed": True},
        ],
    )
    def test_invalid_values(self, data):
        """Test invalid values are rejected."""
        with pytest.raises(ConfigurationError):
            ForgeSettings.from_dict(data)

    def test_integer_flags(self):
        """Test plain 0 and 1 are accepted as booleans."""
        settings = ForgeSettings.from_dict({"use_entry_points": 0, "register_builtins": 1})
        assert settings.use_entry_points is False
        assert settings.register_builtins is True

    def test_to_dict(self):
        """Test round trip through a dictionary."""
        settings = ForgeSettings(default_seed=3)
        assert ForgeSettings.from_dict(settings.to_dict()) == settings


class TestLoadSettings:
    """Test loading from files and the environment."""

    def test_defaults_without_sources(self):
        """Test defaults when nothing is configured."""
        assert load_settings() == ForgeSettings()

    def test_yaml_file(self, temp_dir):
        """Test loading a YAML file."""
        path = temp_dir / "dataforge.yaml"
        path.write_text(yaml.safe_dump({"use_entry_points": False, "default_seed": 11}))

        settings = load_settings(path)

        assert settings.use_entry_points is False
        assert settings.default_seed == 11

    def test_json_file(self, temp_dir):
        """Test loading a JSON file."""
        path = temp_dir / "dataforge.json"
        path.write_text(json.dumps({"extensions": ["myapp.forge:RetailExtension"]}))

        assert load_settings(path).extensions == ["myapp.forge:RetailExtension"]

    def test_empty_yaml_file(self, temp_dir):
        """Test an empty file yields defaults."""
        path = temp_dir / "empty.yml"
        path.write_text("")
        assert load_settings(path) == ForgeSettings()

    def test_missing_file(self, temp_dir):
        """Test a missing file."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings(temp_dir / "missing.yaml")

    def test_unsupported_format(self, temp_dir):
        """Test unsupported file suffixes."""
        path = temp_dir / "dataforge.toml"
        path.write_text("use_entry_points = false")

        with pytest.raises(ConfigurationError, match="Unsupported settings file format"):
            load_settings(path)

    def test_malformed_file(self, temp_dir):
        """Test unparsable content."""
        path = temp_dir / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Cannot read settings file"):
            load_settings(path)

    def test_non_mapping_file(self, temp_dir):
        """Test files must hold a mapping."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            load_settings(path)

    def test_environment_overrides(self, monkeypatch):
        """Test DATAFORGE_ variables."""
        monkeypatch.setenv("DATAFORGE_USE_ENTRY_POINTS", "no")
        monkeypatch.setenv("DATAFORGE_EXTENSIONS", "a:One,b:Two")
        monkeypatch.setenv("DATAFORGE_DEFAULT_SEED", "42")
        monkeypatch.setenv("DATAFORGE_ENTRY_POINT_GROUP", "custom.group")

        settings = load_settings()

        assert settings.use_entry_points is False
        assert settings.extensions == ["a:One", "b:Two"]
        assert settings.default_seed == 42
        assert settings.entry_point_group == "custom.group"

    def test_environment_beats_file(self, temp_dir, monkeypatch):
        """Test environment variables take precedence over the file."""
        path = temp_dir / "dataforge.yaml"
        path.write_text("default_seed: 1\nregister_builtins: false\n")
        monkeypatch.setenv("DATAFORGE_DEFAULT_SEED", "2")

        settings = load_settings(path)

        assert settings.default_seed == 2
        assert settings.register_builtins is False

    def test_config_path_from_environment(self, temp_dir, monkeypatch):
        """Test DATAFORGE_CONFIG selects the settings file."""
        path = temp_dir / "dataforge.yaml"
        path.write_text("default_seed: 5\n")
        monkeypatch.setenv("DATAFORGE_CONFIG", str(path))

        assert load_settings().default_seed == 5

    def test_environment_ignored(self, monkeypatch):
        """Test use_env=False ignores the environment."""
        monkeypatch.setenv("DATAFORGE_DEFAULT_SEED", "42")
        assert load_settings(use_env=False).default_seed is None

    def test_invalid_environment_value(self, monkeypatch):
        """Test invalid environment values are reported."""
        monkeypatch.setenv("DATAFORGE_REGISTER_BUILTINS", "maybe")
        with pytest.raises(ConfigurationError):
            load_settings()


class TestBuildDiscoveryProvider:
    """Test discovery built from settings."""

    def test_entry_points_and_references(self):
        """Test both providers are chained."""
        settings = ForgeSettings(extensions=["dataforge.example_extension:ExampleExtension"])

        provider = build_discovery_provider(settings)

        assert isinstance(provider, CompositeDiscoveryProvider)
        kinds = [type(child) for child in provider.providers]
        assert kinds == [EntryPointDiscoveryProvider, ReferenceDiscoveryProvider]

    def test_entry_points_disabled(self):
        """Test entry points can be switched off."""
        settings = ForgeSettings(
            use_entry_points=False,
            extensions=["dataforge.example_extension:ExampleExtension"],
        )

        extensions = build_discovery_provider(settings).discover()

        assert [extension.name for extension in extensions] == ["example-extension"]

    def test_nothing_configured(self):
        """Test an empty provider when all discovery is off."""
        provider = build_discovery_provider(ForgeSettings(use_entry_points=False))
        assert provider.discover() == []
