"""
Configuration for WavCraft.

A YAML file supplies any subset of the ``audio``, ``generation``,
``processing`` and ``logging`` sections; missing keys fall back to
``get_default_config()``. String values may reference environment
variables as ``${VAR_NAME}``.
"""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

import yaml

from wavcraft.utils.errors import ConfigurationError

# Searched in order when no path is given
CONFIG_SEARCH_PATHS: Tuple[Path, ...] = (Path("config/config.yaml"), Path("config.yaml"))

_ENV_REFERENCE = re.compile(r'\$\{([^}]+)\}')


class ConfigManager:
    """
    Dot-notation access to a nested configuration mapping.

    ``from_file`` parses YAML and expands ``${VAR}`` references that are
    set in the environment; unset ones are left as written.
    """

    def __init__(self, config_dict: Optional[Dict[str, Any]] = None):
        self._config: Dict[str, Any] = config_dict or {}

    @classmethod
    def from_file(cls, file_path: Path) -> "ConfigManager":
        """
        Load a YAML configuration file.

        Raises:
            ConfigurationError: Missing file, invalid YAML, or a root that is not a mapping
        """
        file_path = Path(file_path)
        source = str(file_path)
        if not file_path.is_file():
            raise ConfigurationError(f"Configuration file not found: {file_path}", source)

        try:
            data = yaml.safe_load(file_path.read_text(encoding='utf-8'))
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}", source) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping, got {type(data).__name__}", source
            )

        return cls(_expand_env(data))

    def get(self, key: str, default: Any = None, required: bool = False) -> Any:
        """
        Look up ``section.key`` style paths.

        Raises:
            ConfigurationError: *required* is set and the key is absent
        """
        node: Any = self._config
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                if required:
                    raise ConfigurationError(
                        f"Required configuration key not found: {key}", config_key=key
                    )
                return default
            node = node[part]
        return node

    def get_section(self, key: str) -> Dict[str, Any]:
        """A whole section, or an empty dict when it is missing or not a mapping."""
        section = self.get(key)
        return section if isinstance(section, dict) else {}

    def set(self, key: str, value: Any) -> None:
        """Assign ``section.key``, creating intermediate sections."""
        *parents, leaf = key.split('.')
        node = self._config
        for part in parents:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        node[leaf] = value

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the configuration."""
        return copy.deepcopy(self._config)

    def validate(self, schema: Dict[str, Dict[str, Any]]) -> None:
        """
        Check values against *schema*.

        Each rule may give ``type`` (a type or tuple of types), ``required``,
        ``min``/``max`` bounds and ``choices``. Absent optional keys pass.

        Raises:
            ConfigurationError: First rule that fails
        """
        for key, rules in schema.items():
            value = self.get(key)
            if value is None:
                if rules.get("required", False):
                    raise ConfigurationError(
                        f"Required configuration missing: {key}", config_key=key
                    )
                continue

            problem = next(_check_value(value, rules), None)
            if problem:
                raise ConfigurationError(f"Invalid value for {key}: {problem}", config_key=key)


def _check_value(value: Any, rules: Dict[str, Any]) -> Iterator[str]:
    expected = rules.get("type")
    if expected and (not isinstance(value, expected) or isinstance(value, bool)):
        names = expected if isinstance(expected, tuple) else (expected,)
        yield (f"expected {' or '.join(t.__name__ for t in names)}, "
               f"got {type(value).__name__}")
        return

    if "choices" in rules and value not in rules["choices"]:
        yield f"{value!r} is not one of {list(rules['choices'])}"
    if "min" in rules and value < rules["min"]:
        yield f"{value} is below the minimum {rules['min']}"
    if "max" in rules and value > rules["max"]:
        yield f"{value} is above the maximum {rules['max']}"


def _expand_env(value: Any) -> Any:
    """Replace ``${VAR}`` in every string of a nested structure."""
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(
            lambda match: os.environ.get(match.group(1), match.group(0)), value
        )
    return value


CONFIG_SCHEMA: Dict[str, Dict[str, Any]] = {
    "audio.max_file_size": {"type": int, "min": 1},
    "audio.supported_formats": {"type": list},
    "generation.sample_rate": {"type": int, "min": 1},
    "generation.bit_depth": {"type": int, "choices": (8, 16, 24, 32)},
    "generation.num_channels": {"type": int, "min": 1},
    "generation.amplitude": {"type": (int, float), "min": 0.0, "max": 1.0},
    "processing.normalize_target": {"type": (int, float), "min": 0.0, "max": 1.0},
    "processing.crossfade_duration": {"type": (int, float), "min": 0.0},
    "processing.loop_repetitions": {"type": int, "min": 1},
    "processing.batch_suffix": {"type": str},
    "logging.level": {"type": str, "choices": ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")},
    "logging.format": {"type": str, "choices": ("text", "json")},
    "logging.file": {"type": str},
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Defaults overlaid with a YAML file.

    Args:
        config_path: Explicit file; when None the first existing entry of
            ``CONFIG_SEARCH_PATHS`` is used, or the defaults alone

    Raises:
        ConfigurationError: File cannot be read or fails ``CONFIG_SCHEMA``
    """
    if config_path is None:
        found = next((path for path in CONFIG_SEARCH_PATHS if path.is_file()), None)
        if found is None:
            return get_default_config()
        config_path = str(found)

    manager = ConfigManager.from_file(Path(config_path))
    manager.validate(CONFIG_SCHEMA)
    return _merge(get_default_config(), manager.to_dict())


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_default_config() -> Dict[str, Any]:
    """Built-in configuration used for any key the file leaves out."""
    return {
        "audio": {
            "supported_formats": [".wav", ".wave"],
            "max_file_size": 524288000,  # 500 MB
        },
        "generation": {
            "sample_rate": 44100,
            "bit_depth": 16,
            "num_channels": 1,
            "amplitude": 0.5,
        },
        "processing": {
            "normalize_target": 0.9,
            "crossfade_duration": 2.0,
            "loop_repetitions": 4,
            "batch_suffix": "_processed",
        },
        "logging": {
            "level": "INFO",
            "format": "text",
            "file": None,
        },
    }
