"""Configuration loader for Mixpanel export ingestion."""

from pathlib import Path

import yaml

from src.configs.settings import get_settings

settings = get_settings()


def substitute_settings(content: str) -> str:
    """
    Replace ${KEY} placeholders with values from settings.

    Unset values become empty strings; SecretStr values are unwrapped.
    """
    for key, value in settings.model_dump().items():
        placeholder = f"${{{key}}}"
        if placeholder in content:
            if value is None:
                val_str = ""
            elif hasattr(value, "get_secret_value"):
                val_str = value.get_secret_value()
            else:
                val_str = str(value)
            content = content.replace(placeholder, val_str)
    return content


class Config:
    """Configuration for Mixpanel export ingestion."""

    INGESTION_CONFIG_PATH = settings.INGESTION_CONFIG_PATH


def load_yaml_config(path: Path) -> dict:
    """
    Read a YAML ingestion config, substituting settings placeholders.

    Raises:
        FileNotFoundError: If path does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing config at {path}")

    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(substitute_settings(f.read())) or {}
