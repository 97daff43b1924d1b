"""
Configuration management for tracker linking.

This module provides a structured configuration class, validation of raw
configuration data, and loaders that read JSON files and environment
variables and build a ready-to-use TrackerLinker.
"""

import os
import json
from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from pathlib import Path

from dotenv import load_dotenv, find_dotenv

from ..exceptions import ConfigurationError, ValidationError
from ..services.reference_matcher import DEFAULT_LINK_TEMPLATE
from ..services.tracker_linker import TrackerLinker

DEFAULT_URL_ENV_VAR = 'TRACKER_LINK_DEFAULT_URL'


@dataclass
class LinkerConfig:
    """
    Tracker linking configuration.

    Attributes:
        keywords: Mapping of keyword to tracker URL template
        default_url: URL template for bare '#123' references (optional)
        default_keyword: Keyword whose template bare references use (optional)
        allow_https: Whether https:// tracker URLs are accepted
        link_template: Format string for generated links, with {url} and {text}
    """
    keywords: Dict[str, str] = field(default_factory=dict)
    default_url: Optional[str] = field(default=None)
    default_keyword: Optional[str] = field(default=None)
    allow_https: bool = field(default=False)
    link_template: str = field(default=DEFAULT_LINK_TEMPLATE)

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.default_url and self.default_keyword:
            raise ValidationError("Only one of 'default_url' and 'default_keyword' can be set")

        if self.default_keyword and self.default_keyword.lower() not in {k.lower() for k in self.keywords}:
            raise ValidationError(
                f"Default keyword '{self.default_keyword}' is not one of the configured keywords"
            )

        for placeholder in ('{url}', '{text}'):
            if placeholder not in self.link_template:
                raise ValidationError(f"Link template must contain {placeholder}")

        try:
            self.link_template.format(url='', text='')
        except (KeyError, IndexError, ValueError, AttributeError) as e:
            raise ValidationError(f"Invalid link template '{self.link_template}': {e!r}")


class ConfigValidator:
    """
    Validates configuration data before creating config objects.
    """

    @staticmethod
    def validate_linker_data(data: Dict[str, Any]) -> None:
        """Validate the structure of raw linker configuration data."""
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        keywords = data.get('keywords', {})
        if not isinstance(keywords, dict):
            raise ConfigurationError("'keywords' must be a mapping of keyword to tracker URL")

        for keyword, url in keywords.items():
            if not isinstance(url, str) or not url.strip():
                raise ValidationError(f"Empty tracker URL for keyword '{keyword}'")

        for key in ('default_url', 'default_keyword', 'link_template'):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigurationError(f"'{key}' must be a string")


class ConfigLoader:
    """
    Loads and validates configuration from JSON files.
    """

    @staticmethod
    def load_from_file(config_path: str) -> LinkerConfig:
        """
        Load and validate configuration from JSON file.

        Args:
            config_path: Path to the configuration JSON file

        Returns:
            Validated LinkerConfig object

        Raises:
            ConfigurationError: If configuration file is missing or invalid
            ValidationError: If configuration data is invalid
        """
        return ConfigLoader.load_from_dict(ConfigLoader._read_json(config_path))

    @staticmethod
    def _read_json(config_path: str) -> Dict[str, Any]:
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        if not config_path.is_file():
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return json.load(f)

        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}")
        except PermissionError:
            raise ConfigurationError(f"Permission denied reading configuration file: {config_path}")
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"Configuration file encoding error: {e}")

    @staticmethod
    def load_from_dict(data: Dict[str, Any]) -> LinkerConfig:
        """
        Load and validate configuration from dictionary.

        Raises:
            ConfigurationError: If configuration data is malformed
            ValidationError: If configuration data is invalid
        """
        ConfigValidator.validate_linker_data(data)

        return LinkerConfig(
            keywords=dict(data.get('keywords', {})),
            default_url=data.get('default_url'),
            default_keyword=data.get('default_keyword'),
            allow_https=bool(data.get('allow_https', False)),
            link_template=data.get('link_template') or DEFAULT_LINK_TEMPLATE,
        )


class EnvConfigLoader(ConfigLoader):
    """
    Configuration loader that also reads the environment.

    Loads a .env file if present, and takes the default tracker URL from
    TRACKER_LINK_DEFAULT_URL when the configuration does not set a default.
    """

    @staticmethod
    def load_from_file(config_path: str) -> LinkerConfig:
        load_dotenv(find_dotenv(usecwd=True))
        data = ConfigLoader._read_json(config_path)
        return ConfigLoader.load_from_dict(EnvConfigLoader._load_default_from_env(data))

    @staticmethod
    def _load_default_from_env(data: Dict[str, Any]) -> Dict[str, Any]:
        if isinstance(data, dict) and not data.get('default_url') and not data.get('default_keyword'):
            env_url = os.getenv(DEFAULT_URL_ENV_VAR)
            if env_url:
                data['default_url'] = env_url
        return data


def build_linker(config: LinkerConfig) -> TrackerLinker:
    """
    Create a TrackerLinker from a configuration.

    Unlike the positional shorthand, a configuration with a single keyword
    does not implicitly alias the default search; the default is exactly
    what default_url or default_keyword says.

    Raises:
        ValidationError: If a keyword or URL template is invalid
    """
    linker = TrackerLinker(allow_https=config.allow_https, link_template=config.link_template)

    for keyword, url in config.keywords.items():
        try:
            linker.add_keyword(keyword, url)
        except ValidationError as e:
            raise ValidationError(f"Invalid search for keyword '{keyword}': {e}")

    if config.default_url:
        linker.set_default(config.default_url)
    elif config.default_keyword:
        linker.set_default_keyword(config.default_keyword)

    return linker
