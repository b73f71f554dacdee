import copy
import logging
import pathlib
from typing import Any, Final, cast

import pydantic
import ruamel.yaml

from confswap import exceptions
from confswap.config import models

logger = logging.getLogger(__name__)

LOCAL_CONFIG_NAME: Final = ".confswap.yaml"

# Module-level cache of merged config per project root to avoid repeated disk I/O
_merged_config_cache: dict[pathlib.Path, models.ConfswapConfig] = {}


def get_global_config_path() -> pathlib.Path:
    """Get user-level config path (~/.config/confswap/config.yaml)."""
    return pathlib.Path.home() / ".config" / "confswap" / "config.yaml"


def get_local_config_path(root: pathlib.Path) -> pathlib.Path:
    """Get project-level config path (<root>/.confswap.yaml)."""
    return root / LOCAL_CONFIG_NAME


def _load_yaml(path: pathlib.Path) -> dict[str, Any]:
    """Load YAML mapping with error handling, empty dict if missing or empty."""
    if not path.exists():
        return {}

    try:
        yaml = ruamel.yaml.YAML(typ="safe")
        with path.open() as f:
            data: object = yaml.load(f)
    except ruamel.yaml.YAMLError as e:
        raise exceptions.ConfigError(f"Invalid YAML in {path}: {e}") from e
    except PermissionError:
        raise exceptions.ConfigError(f"Permission denied reading {path}") from None
    except OSError as e:
        raise exceptions.ConfigError(f"Error reading {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise exceptions.ConfigError(f"Expected a mapping at the top of {path}")
    return dict(cast("dict[str, Any]", data))


def load_config_file(path: pathlib.Path) -> dict[str, Any]:
    """Load YAML config, returns empty dict if missing."""
    return _load_yaml(path)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base, recursively for nested dicts."""
    result = copy.deepcopy(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            nested_override = cast("dict[str, Any]", val)
            result[key] = deep_merge(result[key], nested_override)
        else:
            result[key] = copy.deepcopy(val)
    return result


def _validate(data: dict[str, Any], source: str) -> models.ConfswapConfig:
    try:
        return models.ConfswapConfig.model_validate(data)
    except pydantic.ValidationError as e:
        raise exceptions.ConfigError(f"Invalid configuration ({source}): {e}") from e


def get_merged_config(root: pathlib.Path) -> models.ConfswapConfig:
    """Load and merge configs: defaults < global < local.

    Results are cached per root to avoid repeated disk I/O within a single command.
    Call clear_config_cache() to reset (e.g., in tests).
    """
    root = root.absolute()
    if (cached := _merged_config_cache.get(root)) is not None:
        return cached

    defaults = models.ConfswapConfig.get_default().model_dump(mode="json")

    global_data = load_config_file(get_global_config_path())
    merged = deep_merge(defaults, global_data)

    local_path = get_local_config_path(root)
    local_data = load_config_file(local_path)
    merged = deep_merge(merged, local_data)

    config = _validate(merged, str(local_path))
    _merged_config_cache[root] = config
    logger.debug(f"Loaded configuration for {root}: {config!r}")
    return config


def clear_config_cache() -> None:
    """Clear the merged config cache. Call this when config files change."""
    _merged_config_cache.clear()


def apply_overrides(
    config: models.ConfswapConfig, overrides: dict[str, Any]
) -> models.ConfswapConfig:
    """Return config with non-None overrides applied (e.g. from CLI options)."""
    present = {k: v for k, v in overrides.items() if v is not None}
    if not present:
        return config
    merged = deep_merge(config.model_dump(mode="json"), present)
    return _validate(merged, "command line")
