"""Configuration loading and management."""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from medtrans.core.exceptions import ConfigurationError
from medtrans.core.pipeline import PipelineConfig

logger = logging.getLogger(__name__)

# Environment variable -> (section, key)
ENV_MAPPINGS = {
    "MEDTRANS_MEDICAL_DICTIONARY": ("terminology", "medical_dictionary_path"),
    "MEDTRANS_GENERAL_DICTIONARY": ("terminology", "general_dictionary_path"),
    "MEDTRANS_MAX_WORKERS": ("pipeline", "max_workers"),
    "MEDTRANS_MAX_CLEANUP_ITERATIONS": ("pipeline", "max_cleanup_iterations"),
    "MEDTRANS_MAX_NORMALIZATION_PASSES": ("pipeline", "max_normalization_passes"),
    "MEDTRANS_ENABLE_GLOSSARY": ("output", "enable_glossary"),
    "MEDTRANS_GLOSSARY_MAX_TERMS": ("output", "glossary_max_terms"),
    "MEDTRANS_IMAGE_DPI": ("output", "image_dpi"),
    "MEDTRANS_FONT_SIZE": ("output", "font_size"),
    "MEDTRANS_ARABIC_FONT": ("output", "arabic_font_path"),
    "MEDTRANS_LOG_LEVEL": ("logging", "log_level"),
    "MEDTRANS_LOG_FILE": ("logging", "log_file"),
}


def load_config(config_path: Optional[Union[str, Path]] = None, env_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file (defaults to configs/default.yaml)
        env_file: Optional .env file; the nearest .env is used otherwise

    Returns:
        Configuration dictionary
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    if config_path is None:
        possible_paths = [
            Path("configs/default.yaml"),
            Path(__file__).parent.parent.parent / "configs" / "default.yaml"
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break
        else:
            return override_with_env(get_default_config())

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    config = merge_config(get_default_config(), loaded)
    logger.debug(f"Loaded configuration from {config_path}")
    return override_with_env(config)


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Output path
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def override_with_env(config: Dict[str, Any]) -> Dict[str, Any]:
    """Override config with MEDTRANS_* environment variables."""
    for env_var, (section, key) in ENV_MAPPINGS.items():
        value = os.getenv(env_var)
        if value is None or value == "":
            continue
        config.setdefault(section, {})[key] = yaml.safe_load(value)
        logger.debug(f"{env_var} overrides {section}.{key}")
    return config


def load_pipeline_config(config_path: Optional[Union[str, Path]] = None, **overrides: Any) -> PipelineConfig:
    """
    Load a PipelineConfig; keyword overrides whose value is not None win.

    Raises:
        ConfigurationError: if the resulting configuration is invalid
    """
    data = load_config(config_path)
    data = merge_config(data, {"overrides": {k: v for k, v in overrides.items() if v is not None}})
    try:
        config = PipelineConfig.from_dict(data)
        issues = config.validate()
    except (TypeError, AttributeError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    if issues:
        raise ConfigurationError("Invalid configuration: " + "; ".join(issues))
    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "terminology": {
            "medical_dictionary_path": None,
            "general_dictionary_path": None
        },
        "pipeline": {
            "max_workers": 1,
            "max_cleanup_iterations": 100,
            "max_normalization_passes": 5
        },
        "output": {
            "enable_glossary": True,
            "glossary_max_terms": 40,
            "image_dpi": 150,
            "font_size": 12,
            "arabic_font_path": None
        },
        "logging": {
            "log_level": "INFO",
            "log_file": None
        }
    }
