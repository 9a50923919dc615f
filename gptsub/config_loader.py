"""Handles loading configuration from YAML files and the environment."""

import yaml
import os
import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from .batch_planner import validate_batch_size
from .exceptions import ConfigurationError
from .prompt_builder import DEFAULT_PROMPT_TEMPLATE, TEXT_PLACEHOLDER
from .subtitle_io import check_output_format

logger = logging.getLogger(__name__)

TRANSPORTS = ("openai", "huggingface", "echo")

# Environment variable -> config key
ENV_OVERRIDES = {
    "GPTSUB_KEY": "api_key",
    "GPTSUB_BATCH_SIZE": "batch_size",
    "GPTSUB_LANGUAGE": "language",
    "GPTSUB_PROMPT": "prompt_template",
    "GPTSUB_OUTPUT_FORMAT": "output_format",
    "GPTSUB_MODEL": "model",
    "GPTSUB_TEMPERATURE": "temperature",
}

@dataclass
class TranslationConfig:
    """All settings for one run. Built once and handed to each component."""
    batch_size: int = 15
    language: str = "en-us"
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE
    output_format: str = "srt"
    transport: str = "openai"
    model: str = "gpt-4o-mini"
    temperature: float = 0.4
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    hf_model: str = "bigscience/mt0-base"
    device: str = "cuda"
    max_new_tokens: int = 1024
    encoding: str = "utf-8"
    log_dir: str = "logs"
    log_file: str = "gptsub.log"

    def validate(self) -> "TranslationConfig":
        """
        Checks the settings before any translation work starts.

        Returns:
            The same config, with ``output_format`` normalized.

        Raises:
            ConfigurationError: On the first invalid setting found.
        """
        validate_batch_size(self.batch_size)
        self.output_format = check_output_format(self.output_format)
        if self.transport not in TRANSPORTS:
            raise ConfigurationError(f"Unknown transport '{self.transport}'. Choose one of: {', '.join(TRANSPORTS)}.")
        if not isinstance(self.language, str) or not self.language.strip():
            raise ConfigurationError("Target language must be a non-empty string.")
        if not isinstance(self.prompt_template, str) or TEXT_PLACEHOLDER not in self.prompt_template:
            raise ConfigurationError(f"Prompt template must contain the {TEXT_PLACEHOLDER} placeholder.")
        if isinstance(self.temperature, bool) or not isinstance(self.temperature, (int, float)):
            raise ConfigurationError(f"Temperature must be a number, got {self.temperature!r}.")
        if self.transport == "openai" and not self.api_key:
            raise ConfigurationError("An API key is required for the openai transport (use --key or GPTSUB_KEY).")
        return self

def _coerce(key: str, value: Any) -> Any:
    """Converts string values (from the environment or CLI) to the field's type."""
    if not isinstance(value, str):
        return value
    try:
        if key in ("batch_size", "max_new_tokens"):
            return int(value)
        if key == "temperature":
            return float(value)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {key}: {value!r}") from e
    return value

def build_config(
    raw: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None
) -> TranslationConfig:
    """
    Merges file settings, environment variables and CLI overrides, in that order.

    Args:
        raw: Settings loaded from a config file. Unknown keys are ignored with a warning.
        env: Environment mapping. Defaults to ``os.environ``.
        overrides: Explicit values, typically from the command line. ``None`` values are skipped.

    Returns:
        A validated TranslationConfig.

    Raises:
        ConfigurationError: If any setting is invalid.
    """
    env = os.environ if env is None else env
    known = {f.name for f in fields(TranslationConfig)}
    values: Dict[str, Any] = {}

    for key, value in (raw or {}).items():
        if key not in known:
            logger.warning(f"Ignoring unknown configuration key: {key}")
            continue
        values[key] = value

    if env.get("OPENAI_API_KEY") and not values.get("api_key"):
        values["api_key"] = env["OPENAI_API_KEY"]
    for var, key in ENV_OVERRIDES.items():
        if env.get(var):
            values[key] = env[var]

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    values = {key: _coerce(key, value) for key, value in values.items()}
    return TranslationConfig(**values).validate()

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if config is None:
            logger.warning(f"Configuration file {config_path} is empty. Using defaults.")
            return {}
        if not isinstance(config, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config
