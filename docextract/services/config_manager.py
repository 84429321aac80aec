import os
from pathlib import Path
from string import Template
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from docextract.models.config import AppConfig
from docextract.observability.logging import get_logger

logger = get_logger("config_manager")


class ConfigValidationError(Exception):
    """Configuration validation failed"""

    pass


class ConfigManager:
    """Loads the YAML run configuration with ${VAR} environment substitution"""

    def __init__(
        self,
        config_path: str = "config/docextract.yaml",
        load_env: bool = True,
    ):
        self.config_path = Path(config_path)
        self.env_loaded = not load_env
        self._config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """Load and validate configuration"""
        if self._config:
            return self._config

        # 1. Load environment (.env in the working directory)
        if not self.env_loaded:
            load_dotenv()
            self.env_loaded = True

        # 2. Check file existence
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        # 3. Read YAML
        try:
            raw_content = self.config_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigValidationError(f"Failed to read config file: {e}")

        # 4. Substitute env vars
        try:
            template = Template(raw_content)
            substituted_content = template.safe_substitute(os.environ)
            config_data = yaml.safe_load(substituted_content)
        except yaml.YAMLError as e:
            raise ConfigValidationError(
                f"Failed to parse YAML or substitute variables: {e}"
            )

        if not isinstance(config_data, dict):
            raise ConfigValidationError("Configuration file must contain a mapping")

        # 5. Validate with Pydantic
        try:
            self._config = AppConfig(**config_data)
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}")

        logger.info(
            "config_loaded",
            path=str(self.config_path),
            project_id=self._config.vertex.project_id,
            model_id=self._config.vertex.model_id,
        )
        return self._config
