"""
Configuration loading utilities for the schema editor.

This module loads editor settings from config.yaml, merged over built-in
defaults, and falls back to the defaults when the file is missing or invalid.
"""

import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional
import logging
from copy import deepcopy

from .document_codec import SUPPORTED_EXPORT_FORMATS
from .exceptions import ConfigurationLoadError, log_error_with_context

logger = logging.getLogger(__name__)

CONFIG_FILE = Path("config.yaml")

LOGGING_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

# Global configuration cache
_config_cache: Optional[Dict[str, Any]] = None


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'Schema Editor',
            'version': '1.0.0',
            'debug': False
        },
        'editor': {
            'root_label': 'Root',
            'new_property_prefix': 'newProperty',
            'default_export_format': 'json',
            'export_indent': 2,
            'sample_document': None
        },
        'logging': {
            'level': 'INFO'
        }
    }


def read_config_file(config_path: Path) -> Dict[str, Any]:
    """
    Read a YAML configuration file without merging.

    Raises:
        ConfigurationLoadError: If the file cannot be read or parsed
    """
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationLoadError(config_path, e, f"YAML parsing error in {config_path}: {e}") from e
    except (IOError, OSError) as e:
        raise ConfigurationLoadError(config_path, e) from e

    if user_config is None:
        return {}
    if not isinstance(user_config, dict):
        raise ConfigurationLoadError(
            config_path,
            TypeError(f"expected a mapping, got {type(user_config).__name__}"),
            f"Configuration file is not a valid dictionary: {config_path}"
        )
    return user_config


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load editor configuration, merged over the defaults.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)

    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        config_path = CONFIG_FILE

    default_config = get_default_config()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return default_config

    try:
        user_config = read_config_file(config_path)
    except ConfigurationLoadError as e:
        log_error_with_context(e, "configuration load")
        logger.info("Using default configuration")
        return default_config

    if not user_config:
        logger.warning(f"Configuration file is empty: {config_path}")
        return default_config

    config = deep_merge(default_config, user_config)
    if not validate_config(config):
        logger.info("Using default configuration")
        return default_config

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary to validate

    Returns:
        True if configuration is valid, False otherwise
    """
    for section in ('app', 'editor', 'logging'):
        if not isinstance(config.get(section), dict):
            logger.warning(f"Missing required configuration section: {section}")
            return False

    editor = config['editor']

    prefix = editor.get('new_property_prefix')
    if not isinstance(prefix, str) or not prefix.strip():
        logger.warning("new_property_prefix must be a non-empty string")
        return False

    if not isinstance(editor.get('root_label'), str):
        logger.warning("root_label must be a string")
        return False

    export_format = editor.get('default_export_format')
    if export_format not in SUPPORTED_EXPORT_FORMATS:
        logger.warning(f"default_export_format must be one of {SUPPORTED_EXPORT_FORMATS}")
        return False

    try:
        indent = int(editor.get('export_indent'))
        if indent < 0:
            logger.warning("export_indent must not be negative")
            return False
    except (ValueError, TypeError):
        logger.warning("export_indent must be a valid integer")
        return False

    level = config['logging'].get('level')
    if not isinstance(level, str) or level.upper() not in LOGGING_LEVELS:
        logger.warning(f"logging.level must be one of {LOGGING_LEVELS}")
        return False

    return True


def get_config() -> Dict[str, Any]:
    """Return the cached configuration, loading it on first use."""
    global _config_cache

    if _config_cache is None:
        _config_cache = load_config()
    return _config_cache


def reload_config() -> None:
    """Clear the configuration cache so the next read goes back to disk."""
    global _config_cache
    _config_cache = None


def get_logging_level_name(config: Dict[str, Any]) -> str:
    """
    Get the logging level name for the application.

    ``app.debug`` forces DEBUG; otherwise ``logging.level`` is used.

    Args:
        config: Configuration dictionary

    Returns:
        Upper-case logging level name
    """
    if config.get('app', {}).get('debug'):
        return 'DEBUG'
    return str(config.get('logging', {}).get('level', 'INFO')).upper()


def get_config_value(section: str, key: str, default: Any = None) -> Any:
    """
    Read a single configuration value.

    Args:
        section: Configuration section name
        key: Key within the section
        default: Value returned when the section or key is missing

    Returns:
        Configured value or default
    """
    try:
        return get_config().get(section, {}).get(key, default)
    except AttributeError:
        logger.warning(f"Configuration section '{section}' is not a mapping")
        return default


@dataclass
class EditorSettings:
    """
    Editor settings taken from the 'editor' configuration section.

    Attributes:
        root_label: Label of the root breadcrumb
        new_property_prefix: Prefix for generated property names
        default_export_format: 'json' or 'yaml'
        export_indent: Indentation of exported documents
        sample_document: Optional path of a JSON document the host opens on start
    """
    root_label: str = 'Root'
    new_property_prefix: str = 'newProperty'
    default_export_format: str = 'json'
    export_indent: int = 2
    sample_document: Optional[Path] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'EditorSettings':
        """
        Create EditorSettings from a configuration dictionary.

        Example:
            config = {'editor': {'new_property_prefix': 'property'}}
            settings = EditorSettings.from_config(config)
        """
        editor = config.get('editor', {})
        sample = editor.get('sample_document')

        return cls(
            root_label=editor.get('root_label', 'Root'),
            new_property_prefix=editor.get('new_property_prefix', 'newProperty'),
            default_export_format=editor.get('default_export_format', 'json'),
            export_indent=int(editor.get('export_indent', 2)),
            sample_document=Path(sample) if sample else None
        )
