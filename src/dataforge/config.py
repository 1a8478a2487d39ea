"""Settings for the process-wide registry.

Settings come from an optional YAML or JSON file and from environment
variables. Environment variables take precedence.

Environment variable format:
    DATAFORGE_<FIELD>

Examples:
    - DATAFORGE_USE_ENTRY_POINTS=false
    - DATAFORGE_EXTENSIONS=myapp.forge:RetailExtension,myapp.forge:HrExtension
    - DATAFORGE_CONFIG=/etc/dataforge.yaml (settings file to load)

Example settings file:
    ```yaml
    entry_point_group: dataforge.extensions
    use_entry_points: true
    register_builtins: true
    extensions:
      - myapp.forge:RetailExtension
    ```
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml  # type: ignore[import-untyped]

from dataforge.discovery import (
    DEFAULT_ENTRY_POINT_GROUP,
    CompositeDiscoveryProvider,
    DiscoveryProvider,
    EntryPointDiscoveryProvider,
    ReferenceDiscoveryProvider,
)
from dataforge.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "DATAFORGE_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG"


@dataclass
class ForgeSettings:
    """Registry and discovery settings.

    Attributes:
        entry_point_group: Entry point group scanned for extensions
        use_entry_points: Whether to scan installed entry points
        extensions: Extra ``"module:Class"`` extension references
        register_builtins: Register built-in generators in the default factory
        default_seed: Seed applied by batch generation when none is given
    """

    entry_point_group: str = DEFAULT_ENTRY_POINT_GROUP
    use_entry_points: bool = True
    extensions: List[str] = field(default_factory=list)
    register_builtins: bool = True
    default_seed: int | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ForgeSettings":
        """Build settings from a dictionary.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown settings: {', '.join(unknown)}",
                context={"unknown": unknown, "known": sorted(known)},
            )

        settings = cls(**data)
        settings.validate()
        return settings

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def validate(self) -> None:
        if not isinstance(self.entry_point_group, str) or not self.entry_point_group:
            raise ConfigurationError(
                "entry_point_group must be a non-empty string",
                context={"entry_point_group": self.entry_point_group},
            )
        for flag in ("use_entry_points", "register_builtins"):
            value = getattr(self, flag)
            if isinstance(value, bool):
                continue
            if type(value) is int and value in (0, 1):
                setattr(self, flag, bool(value))
            else:
                raise ConfigurationError(
                    f"{flag} must be a boolean",
                    context={flag: value},
                )
        if isinstance(self.extensions, str):
            self.extensions = _split_list(self.extensions)
        if not isinstance(self.extensions, list) or not all(
            isinstance(ref, str) for ref in self.extensions
        ):
            raise ConfigurationError(
                "extensions must be a list of 'module:Class' strings",
                context={"extensions": self.extensions},
            )
        if self.default_seed is not None and (
            isinstance(self.default_seed, bool) or not isinstance(self.default_seed, int)
        ):
            raise ConfigurationError(
                "default_seed must be an integer",
                context={"default_seed": self.default_seed},
            )


def load_settings(
    path: Union[str, Path, None] = None,
    use_env: bool = True,
) -> ForgeSettings:
    """Load settings from a file and the environment.

    Args:
        path: YAML or JSON settings file. When omitted, ``DATAFORGE_CONFIG``
            is consulted; without either, defaults are used.
        use_env: Apply ``DATAFORGE_<FIELD>`` overrides

    Returns:
        Loaded settings

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if path is None and use_env:
        path = os.environ.get(CONFIG_ENV_VAR) or None

    data: Dict[str, Any] = {}
    if path is not None:
        data.update(_load_file(path))

    if use_env:
        data.update(_environment_overrides(data))

    return ForgeSettings.from_dict(data)


def build_discovery_provider(settings: ForgeSettings) -> DiscoveryProvider:
    """Build the discovery provider described by ``settings``."""
    providers: List[DiscoveryProvider] = []
    if settings.use_entry_points:
        providers.append(EntryPointDiscoveryProvider(settings.entry_point_group))
    if settings.extensions:
        providers.append(ReferenceDiscoveryProvider(settings.extensions))
    return CompositeDiscoveryProvider(providers)


def _load_file(path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(path).resolve()

    if not path.exists():
        raise ConfigurationError(
            f"Settings file not found: {path}",
            context={"path": str(path)},
        )

    suffix = path.suffix.lower()
    try:
        with open(path) as f:
            if suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported settings file format: {suffix}",
                    context={"path": str(path)},
                )
    except (yaml.YAMLError, json.JSONDecodeError, OSError) as e:
        raise ConfigurationError(
            f"Cannot read settings file {path}: {e}",
            context={"path": str(path)},
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Settings file must contain a mapping, got {type(data).__name__}",
            context={"path": str(path)},
        )

    logger.debug(f"Loaded settings from {path}")
    return data


def _environment_overrides(current: Dict[str, Any]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for settings_field in fields(ForgeSettings):
        env_var = f"{ENV_PREFIX}{settings_field.name.upper()}"
        if env_var not in os.environ:
            continue

        raw = os.environ[env_var]
        if settings_field.name == "extensions":
            overrides["extensions"] = _split_list(raw)
        elif settings_field.name == "entry_point_group":
            overrides["entry_point_group"] = raw
        else:
            overrides[settings_field.name] = _parse_value(raw)
    return overrides


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_value(value: str) -> Any:
    """Parse an environment variable value to bool, int, float, None or str."""
    if value.lower() in ["true", "yes"]:
        return True
    elif value.lower() in ["false", "no"]:
        return False
    elif value.lower() in ["", "none", "null"]:
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    return value


__all__ = [
    "ENV_PREFIX",
    "CONFIG_ENV_VAR",
    "ForgeSettings",
    "load_settings",
    "build_discovery_provider",
]
