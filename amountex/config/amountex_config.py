"""
AmountEx Configuration Management

This module provides configuration management for AmountEx.
"""

import copy
import os
import yaml
import logging
from typing import Dict, Any, Optional
from pathlib import Path

from amountex.exceptions import ConfigurationError

# Configure logging
logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ('none', 'openai', 'gemini', 'ollama')
SUPPORTED_POLICIES = ('exponential', 'linear')

# Environment variable -> dot-notation key
ENV_OVERRIDES = {
    'AMOUNTEX_LLM_PROVIDER': 'llm.provider',
    'AMOUNTEX_LLM_MODEL': 'llm.model',
    'OLLAMA_BASE_URL': 'llm.base_url',
    'AMOUNTEX_RETRY_POLICY': 'retry.policy',
    'AMOUNTEX_LOG_LEVEL': 'logging.level',
}


class AmountExConfig:
    """
    Manages system-wide configuration for AmountEx

    This class follows the singleton pattern to ensure only one configuration instance exists.
    It manages the LLM provider, retry policy, pipeline tunables and logging.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not hasattr(self, 'initialized'):
            self.logger = logging.getLogger(__name__)

            self.config: Dict[str, Any] = self.get_defaults()

            self.config_file = Path.home() / '.amountex' / 'config.yaml'
            if self.config_file.exists():
                self._load_config()

            self._apply_env_overrides()
            self.initialized = True

    @staticmethod
    def get_defaults() -> Dict[str, Any]:
        """Load the packaged default configuration"""
        default_config_path = Path(__file__).parent / 'default_config.yaml'
        with open(default_config_path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f)

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next access reloads configuration"""
        cls._instance = None

    @classmethod
    def from_file(cls, config_path: str) -> 'AmountExConfig':
        """Load configuration from file

        Args:
            config_path: Path to configuration file

        Returns:
            AmountExConfig instance
        """
        instance = cls()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
            instance._update_config_recursive(instance.config, file_config)
            instance._validate_config()
        except Exception as e:
            instance.logger.error(f"Failed to load configuration from {config_path}: {str(e)}")
            raise
        return instance

    @classmethod
    def setup(cls, **kwargs) -> 'AmountExConfig':
        """
        Set up AmountEx configuration

        Args:
            llm: LLM configuration
                - provider: 'none', 'openai', 'gemini' or 'ollama'
                - model: Model name
                - api_key: Provider API key
                - base_url: Ollama server URL
            retry: Retry configuration
                - policy: 'exponential' or 'linear'
                - max_attempts: Attempts per model call
            pipeline: Pipeline tunables
            logging: Logging configuration
                - level: Logging level
        """
        instance = cls()
        for section, values in kwargs.items():
            if isinstance(values, dict) and isinstance(instance.config.get(section), dict):
                instance._update_config_recursive(instance.config[section], values)
            else:
                instance.config[section] = values

        instance._validate_config()
        instance.logger.info("AmountEx configuration updated")
        return instance

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value

        Args:
            key: Configuration key (dot notation)
            default: Default value if key not found

        Returns:
            Configuration value
        """
        try:
            value = self.config
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Set configuration value

        Args:
            key: Configuration key (dot notation)
            value: Configuration value
        """
        keys = key.split('.')
        config = self.config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def get_llm_config(self) -> Dict[str, Any]:
        """Get LLM configuration with provider API keys resolved"""
        llm_config = dict(self.config.get('llm', {}))
        if not llm_config.get('api_key'):
            provider = llm_config.get('provider', 'none')
            env_key = {
                'openai': 'OPENAI_API_KEY',
                'gemini': 'GEMINI_API_KEY',
            }.get(provider)
            if env_key:
                llm_config['api_key'] = os.getenv(env_key)
        return llm_config

    def get_retry_config(self) -> Dict[str, Any]:
        """Get retry configuration"""
        return dict(self.config.get('retry', {}))

    def get_pipeline_config(self) -> Dict[str, Any]:
        """Get pipeline configuration"""
        return dict(self.config.get('pipeline', {}))

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration"""
        return dict(self.config.get('logging', {}))

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration"""
        return copy.deepcopy(self.config)

    def save(self, path: Optional[Path] = None) -> Path:
        """Save configuration to file (API keys are never written)"""
        target = Path(path) if path else self.config_file
        safe_config = self.get_all()
        safe_config.get('llm', {}).pop('api_key', None)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                yaml.dump(safe_config, f, default_flow_style=False, sort_keys=False)
            self.logger.info(f"Configuration saved to {target}")
        except Exception as e:
            self.logger.error(f"Failed to save configuration: {str(e)}")
            raise
        return target

    def validate(self) -> bool:
        """Validate configuration"""
        try:
            self._validate_config()
            return True
        except ConfigurationError as e:
            self.logger.error(f"Configuration validation failed: {str(e)}")
            return False

    def _load_config(self) -> None:
        """Load configuration from the user config file"""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {str(e)}")

        if file_config:
            self._update_config_recursive(self.config, file_config)
            self.logger.info(f"Configuration loaded from {self.config_file}")

        self._validate_config()

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides"""
        for env_name, key in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value:
                self.set(key, value)
        self._validate_config()

    def _validate_config(self) -> None:
        """Validate configuration structure and values"""
        if not isinstance(self.config, dict):
            raise ConfigurationError("Configuration must be a dictionary")

        for section in ('llm', 'retry', 'pipeline', 'logging'):
            if not isinstance(self.config.get(section), dict):
                raise ConfigurationError(f"Missing required configuration section: {section}")

        provider = str(self.config['llm'].get('provider', 'none')).lower()
        if provider not in SUPPORTED_PROVIDERS:
            raise ConfigurationError(
                f"Unsupported LLM provider: {provider}. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
            )
        self.config['llm']['provider'] = provider

        policy = self.config['retry'].get('policy', 'exponential')
        if policy not in SUPPORTED_POLICIES:
            raise ConfigurationError(f"Unsupported retry policy: {policy}")

        try:
            max_attempts = int(self.config['retry'].get('max_attempts', 3))
        except (TypeError, ValueError):
            raise ConfigurationError("retry.max_attempts must be an integer")
        if max_attempts < 1:
            raise ConfigurationError("retry.max_attempts must be at least 1")
        self.config['retry']['max_attempts'] = max_attempts

    def _update_config_recursive(self, base: Dict[str, Any], update: Dict[str, Any]) -> None:
        """Update configuration recursively"""
        for key, value in update.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._update_config_recursive(base[key], value)
            else:
                base[key] = value
