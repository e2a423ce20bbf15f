"""Configuration management for EntityScope."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

USER_CONFIG_PATH = Path.home() / ".entityscope" / "config.yaml"
PROJECT_CONFIG_NAME = ".entityscope.yaml"

# Accepted value types for keys read from config files.
FILE_VALUE_TYPES: dict[str, type] = {
    "detect_depth": int,
    "excluded_dirs": list,
    "max_workers": int,
    "search_limit": int,
    "normalize_receivers": bool,
    "log_level": str,
    "json_logging": bool,
    "log_file": str,
}


def _valid_value(key: str, value: Any) -> bool:
    expected = FILE_VALUE_TYPES[key]
    if expected is not bool and isinstance(value, bool):
        return False
    if not isinstance(value, expected):
        return False
    if expected is list:
        return all(isinstance(item, str) for item in value)
    return True


class Config:
    """Configuration manager with hierarchy: CLI args > project config > user config > defaults."""

    def __init__(self):
        """Initialize configuration with default values."""
        self.detect_depth: int = 5
        self.excluded_dirs: list[str] = []
        self.max_workers: Optional[int] = None
        self.search_limit: int = 50
        self.normalize_receivers: bool = True
        self.log_level: str = "INFO"
        self.json_logging: bool = False
        self.log_file: Optional[str] = None

    @classmethod
    def load(
        cls,
        cli_args: Optional[dict[str, Any]] = None,
        user_config_path: Optional[Path] = None,
        project_config_path: Optional[Path] = None,
    ) -> "Config":
        """
        Load configuration from hierarchy: CLI args > project config > user config > defaults.

        Args:
            cli_args: Dictionary of CLI arguments to override config
            user_config_path: Override for ~/.entityscope/config.yaml
            project_config_path: Override for ./.entityscope.yaml

        Returns:
            Config instance with loaded values
        """
        config = cls()

        user_config_path = user_config_path or USER_CONFIG_PATH
        if user_config_path.exists():
            config._load_file(user_config_path, config)

        project_config_path = project_config_path or (Path.cwd() / PROJECT_CONFIG_NAME)
        if project_config_path.exists():
            config._load_file(project_config_path, config)

        if cli_args:
            for key, value in cli_args.items():
                if value is not None and hasattr(config, key):
                    setattr(config, key, value)

        return config

    def _load_file(self, config_path: Path, config: "Config") -> None:
        """Load configuration from a YAML or JSON file."""
        try:
            content = config_path.read_text(encoding="utf-8")
            if config_path.suffix in [".yaml", ".yml"]:
                data = yaml.safe_load(content)
            elif config_path.suffix == ".json":
                data = json.loads(content)
            else:
                return

            if not isinstance(data, dict):
                return

            for key, value in data.items():
                if key not in FILE_VALUE_TYPES or value is None:
                    continue
                if not _valid_value(key, value):
                    logger.warning(
                        f"Ignoring {key} in {config_path}: expected {FILE_VALUE_TYPES[key].__name__}, "
                        f"got {type(value).__name__}"
                    )
                    continue
                setattr(config, key, value)
        except (OSError, UnicodeDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable config file {config_path}: {e}")

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "detect_depth": self.detect_depth,
            "excluded_dirs": list(self.excluded_dirs),
            "max_workers": self.max_workers,
            "search_limit": self.search_limit,
            "normalize_receivers": self.normalize_receivers,
            "log_level": self.log_level,
            "json_logging": self.json_logging,
            "log_file": self.log_file,
        }

    def save(self, path: Path, format: str = "yaml") -> None:
        """
        Save configuration to file.

        Args:
            path: Path to save config file
            format: Format to save as ('yaml' or 'json')
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {k: v for k, v in self.to_dict().items() if v is not None}

        if format == "yaml":
            content = yaml.dump(data, default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(data, indent=2)

        path.write_text(content, encoding="utf-8")
