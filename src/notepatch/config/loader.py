"""Configuration loader with YAML and environment variable support.

This module provides a configuration loader that reads from ~/.config/notepatch/config.yaml
and allows environment variable overrides using NOTEPATCH_* prefix.

Environment variables:
- NOTEPATCH_NOTES_DIRECTORY: Override note storage directory
- NOTEPATCH_PROMPT_MAX_NOTE_CHARS: Override prompt note truncation length
- NOTEPATCH_PROMPT_HISTORY_MESSAGES: Override number of chat turns in prompts
- NOTEPATCH_PROMPT_ASSISTANT_NAME: Override assistant persona name
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml

from notepatch.models.config import Config

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "notepatch" / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to config file. If None, uses ~/.config/notepatch/config.yaml

    Returns:
        Validated Config object

    Raises:
        FileNotFoundError: If neither a config file nor overrides exist
        ValueError: If config file is invalid (pydantic ValidationError)
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if config_path.exists():
        with config_path.open() as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file must contain a mapping: {config_path}")
    else:
        data = {}

    data = _apply_env_overrides(data)

    if not data.get("notes"):
        raise FileNotFoundError(
            f"Configuration file not found at {config_path} and NOTEPATCH_NOTES_DIRECTORY not set.\n\n"
            f"Please create the file with the following format:\n\n"
            f"notes:\n"
            f"  directory: ~/Documents/notes\n\n"
            f"prompt:\n"
            f"  max_note_chars: 6000\n"
            f"  history_messages: 8\n"
        )

    config = Config(**data)
    logger.debug("config_loaded", path=str(config_path))
    return config


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Environment variables use the format: NOTEPATCH_SECTION_KEY
    For example: NOTEPATCH_NOTES_DIRECTORY sets data['notes']['directory']

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    notes = dict(data.get("notes") or {})
    prompt = dict(data.get("prompt") or {})

    if env_directory := os.getenv("NOTEPATCH_NOTES_DIRECTORY"):
        notes["directory"] = env_directory

    for key in ("max_note_chars", "history_messages"):
        if env_value := os.getenv(f"NOTEPATCH_PROMPT_{key.upper()}"):
            try:
                prompt[key] = int(env_value)
            except ValueError:
                logger.warning("config_env_override_ignored", variable=f"NOTEPATCH_PROMPT_{key.upper()}")

    if env_name := os.getenv("NOTEPATCH_PROMPT_ASSISTANT_NAME"):
        prompt["assistant_name"] = env_name

    result = dict(data)
    if notes:
        result["notes"] = notes
    if prompt:
        result["prompt"] = prompt
    return result
