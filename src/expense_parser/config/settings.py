import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Any, Optional

# Package defaults (bundled with code)
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# User configs (working directory, or EXPENSE_PARSER_CONFIG_DIR)
USER_CONFIG_DIR = Path(os.getenv("EXPENSE_PARSER_CONFIG_DIR", Path.cwd() / "config"))

class ConfigLoader:
    """Load configuration with user overrides"""

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Load config with fallback: user config -> default config

        Args:
            config_name: Name of the config file (e.g., 'readers.json')

        Raises:
            FileNotFoundError: If no config file was found

        Returns:
            Parsed JSON configuration
        """
        user_config_path = USER_CONFIG_DIR / config_name
        if user_config_path.exists():
            with open(user_config_path) as f:
                return json.load(f)

        default_config_path = PACKAGE_CONFIG_DIR / config_name
        if default_config_path.exists():
            with open(default_config_path) as f:
                return json.load(f)

        raise FileNotFoundError(
            f"Config file '{config_name}' not found in:\n"
            f" - {user_config_path}\n"
            f" - {default_config_path}"
        )


    @staticmethod
    def load_readers_config():
        """Load document readers registry configuration"""
        return ConfigLoader.load_config('readers.json')

    @staticmethod
    def load_billers_config():
        """Load the default biller -> category seed"""
        return ConfigLoader.load_config('billers.json')

    @staticmethod
    def load_engine_config():
        """Load extraction engine tuning"""
        return ConfigLoader.load_config('engine.json')


@dataclass(frozen=True)
class EngineSettings:
    """
    Tunables for the extraction engine.

    Attributes:
        max_prompt_chars: Statement text sent to an AI extractor
        retry_prompt_chars: Smaller budget for the single retry
        context_window_lines: Lines after a date line that belong to its window
        merchant_max_length: Longest merchant/description label kept
        ai_enabled: Whether the user opted in to AI-assisted parsing
    """
    max_prompt_chars: int = 6000
    retry_prompt_chars: int = 3000
    context_window_lines: int = 3
    merchant_max_length: int = 50
    ai_enabled: bool = False

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> "EngineSettings":
        """
        Build settings from a config dict.

        Args:
            config: Optional config dict. If None, loads 'engine.json'
                from the ConfigLoader. Unknown keys are ignored.

        Example (testing):
            settings = EngineSettings.from_config({"ai_enabled": True})
        """
        if config is None:
            try:
                config = ConfigLoader.load_engine_config()
            except FileNotFoundError:
                config = {}

        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config.items() if k in known})
