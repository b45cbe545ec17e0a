"""Store configuration with YAML support."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml

from store.schemas import StoreConfig


PASSWORD_ENV_VAR = "JSONVAULT_PASSWORD"


def load_config(yaml_path: str | Path) -> StoreConfig:
    """Load store configuration from a YAML file.

    Args:
        yaml_path: Path to YAML configuration file

    Returns:
        StoreConfig instance

    Raises:
        FileNotFoundError: If YAML file doesn't exist
        ValueError: If YAML is empty, not a mapping, or has invalid values
    """
    yaml_path = Path(yaml_path)

    if not yaml_path.exists():
        raise FileNotFoundError(f"Config file not found: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data:
        raise ValueError(f"Empty or invalid YAML file: {yaml_path}")
    if not isinstance(data, Mapping):
        raise ValueError(f"Config in {yaml_path} must be a mapping")

    try:
        return StoreConfig.from_dict(data)
    except Exception as e:
        raise ValueError(f"Invalid configuration in {yaml_path}: {e}") from e


def save_config(config: StoreConfig, yaml_path: str | Path) -> None:
    """Save store configuration to a YAML file, leaving out the password."""
    yaml_path = Path(yaml_path)
    yaml_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(exclude={"password"})

    with open(yaml_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, indent=2)


def resolve_config(
    config_path: str | Path | None = None,
    overrides: Mapping[str, object] | None = None,
) -> StoreConfig:
    """Combine a YAML file, the password environment variable and explicit overrides.

    Later sources win: file, then ``JSONVAULT_PASSWORD``, then *overrides*
    (``None`` values in *overrides* are ignored).
    """
    data: dict[str, object] = {}
    if config_path is not None:
        data.update(load_config(config_path).model_dump())
    env_password = os.environ.get(PASSWORD_ENV_VAR)
    if env_password:
        data["password"] = env_password
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return StoreConfig.from_dict(data)
