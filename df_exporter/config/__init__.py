"""
Animated DF Exporter Configuration Module

Loads and provides access to exporter configuration from exporter_config.yaml.
"""

import os
from typing import Optional
from dataclasses import dataclass, field

import yaml


DEFAULT_CODECLIENT_URL = 'ws://localhost:31375'


@dataclass
class CodeClientConfig:
    """CodeClient API connection configuration."""
    url: str = DEFAULT_CODECLIENT_URL
    response_window_ms: int = 1500
    connect_timeout: float = 5.0


@dataclass
class TemplateConfig:
    """Code template generation defaults."""
    author: str = 'Animated Java'
    version: int = 1
    item_id: str = 'minecraft:ender_chest'
    fallback_material: str = 'minecraft:stone'
    function_prefix: str = 'rig.init.'


@dataclass
class ExporterConfig:
    """Complete exporter configuration."""
    codeclient: CodeClientConfig = field(default_factory=CodeClientConfig)
    template: TemplateConfig = field(default_factory=TemplateConfig)


# Global config instance
_config: Optional[ExporterConfig] = None


def get_config_path() -> str:
    """Get the path to the default config file."""
    return os.path.join(os.path.dirname(__file__), 'exporter_config.yaml')


def load_config(config_path: Optional[str] = None) -> ExporterConfig:
    """
    Load exporter configuration from YAML file.

    Args:
        config_path: Path to config file (default: exporter_config.yaml in this directory)

    Returns:
        ExporterConfig instance
    """
    global _config

    if config_path is None:
        config_path = get_config_path()

    config = ExporterConfig()

    if os.path.exists(config_path):
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
        _apply_dict(config, data)

    _config = config
    return config


def get_config() -> ExporterConfig:
    """
    Get the current exporter configuration.

    Loads from file if not already loaded.
    """
    global _config
    if _config is None:
        load_config()
    return _config


def _apply_dict(config: ExporterConfig, data: dict) -> ExporterConfig:
    """Copy known keys from a nested dict onto a config instance."""
    # CodeClient settings
    cc = data.get('codeclient') or {}
    if 'url' in cc:
        config.codeclient.url = str(cc['url'])
    if 'response_window_ms' in cc:
        config.codeclient.response_window_ms = int(cc['response_window_ms'])
    if 'connect_timeout' in cc:
        config.codeclient.connect_timeout = float(cc['connect_timeout'])

    # Template settings
    tpl = data.get('template') or {}
    if 'author' in tpl:
        config.template.author = str(tpl['author'])
    if 'version' in tpl:
        config.template.version = int(tpl['version'])
    if 'item_id' in tpl:
        config.template.item_id = str(tpl['item_id'])
    if 'fallback_material' in tpl:
        config.template.fallback_material = str(tpl['fallback_material'])
    if 'function_prefix' in tpl:
        config.template.function_prefix = str(tpl['function_prefix'])

    return config


def config_to_dict(config: Optional[ExporterConfig] = None) -> dict:
    """
    Convert ExporterConfig to dictionary for JSON/YAML serialization.

    Args:
        config: ExporterConfig to convert (uses global if None)

    Returns:
        Dictionary representation of config
    """
    if config is None:
        config = get_config()

    return {
        'codeclient': {
            'url': config.codeclient.url,
            'response_window_ms': config.codeclient.response_window_ms,
            'connect_timeout': config.codeclient.connect_timeout,
        },
        'template': {
            'author': config.template.author,
            'version': config.template.version,
            'item_id': config.template.item_id,
            'fallback_material': config.template.fallback_material,
            'function_prefix': config.template.function_prefix,
        },
    }


def update_config_from_dict(data: dict) -> ExporterConfig:
    """
    Update the global config from a dictionary.

    Args:
        data: Dictionary with config values

    Returns:
        Updated ExporterConfig
    """
    global _config

    if _config is None:
        _config = ExporterConfig()

    return _apply_dict(_config, data)


__all__ = [
    'DEFAULT_CODECLIENT_URL',
    'ExporterConfig',
    'CodeClientConfig',
    'TemplateConfig',
    'load_config',
    'get_config',
    'get_config_path',
    'config_to_dict',
    'update_config_from_dict',
]
