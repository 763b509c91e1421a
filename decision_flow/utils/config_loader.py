"""Configuration loading utilities."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv
from loguru import logger

from ..config.schemas import EditorConfig

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "DECISION_FLOW_BASE_URL": ("store", "base_url"),
    "DECISION_FLOW_STORE": ("store", "backend"),
    "DECISION_FLOW_TIMEOUT": ("store", "timeout"),
    "DECISION_FLOW_LOG_LEVEL": ("logging", "level"),
    "DECISION_FLOW_LOG_FILE": ("logging", "file_path"),
}

def load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """Load a single YAML file."""
    if file_path.exists():
        with open(file_path, 'r') as f:
            return yaml.safe_load(f) or {}
    return {}

def load_config_file(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from a YAML file or a directory of YAML files."""
    if config_path:
        path = Path(config_path)
    else:
        possible_paths = [
            Path.cwd() / "config",
            Path.cwd() / "config.yaml",
        ]

        for path in possible_paths:
            if path.exists():
                break
        else:
            logger.debug("No config file found, using defaults")
            return {}

    if path.is_dir():
        logger.info(f"Loading configuration from directory {path}")
        config_dict = {}

        # One file per section, config.yaml last so it wins
        section_files = {
            "store.yaml": "store",
            "editor.yaml": "editor",
            "placeholder.yaml": "placeholder",
            "logging.yaml": "logging",
        }
        for filename, key in section_files.items():
            file_path = path / filename
            if file_path.exists():
                logger.debug(f"Loading {file_path}")
                file_config = load_yaml_file(file_path)
                config_dict[key] = file_config.get(key, file_config)

        main_config = path / "config.yaml"
        if main_config.exists():
            logger.debug(f"Loading main config from {main_config}")
            config_dict = merge_configs(config_dict, load_yaml_file(main_config))

        return config_dict

    elif path.exists() and path.suffix in ['.yaml', '.yml']:
        logger.info(f"Loading configuration from {path}")
        return load_yaml_file(path)
    else:
        logger.warning(f"Config path {path} not found, using defaults")
        return {}

def load_env_overrides(env_file: Optional[str] = None) -> Dict[str, Any]:
    """Collect overrides from the environment (and an optional .env file)."""
    load_dotenv(env_file)

    overrides: Dict[str, Any] = {}
    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            overrides.setdefault(section, {})[key] = value
    return overrides

def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two configuration dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result

def load_config(config_path: Optional[str] = None, env_file: Optional[str] = None) -> EditorConfig:
    """Load and validate configuration."""
    config_dict = merge_configs(load_config_file(config_path), load_env_overrides(env_file))

    if not config_dict:
        logger.info("Using default configuration")
        return EditorConfig.default()

    try:
        default_dict = EditorConfig.default().model_dump()
        final_config = merge_configs(default_dict, config_dict)

        config = EditorConfig(**final_config)
        logger.success("Configuration loaded and validated successfully")
        return config
    except Exception as e:
        logger.error(f"Failed to validate configuration: {e}")
        logger.info("Falling back to default configuration")
        return EditorConfig.default()
