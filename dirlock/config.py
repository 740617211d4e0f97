"""Configuration handler for dirlock"""

import logging
import os
from typing import Dict

import yaml

from .utils import DEFAULT_LOCK_NAME

logger = logging.getLogger(__name__)


class Config:
    """Configuration handler"""

    DEFAULT_CONFIG_FILE = '.dirlock.yml'
    DEFAULTS = {
        'lock_name': DEFAULT_LOCK_NAME,
        'create': True,
        'log_level': 'WARNING',
    }

    @staticmethod
    def load_config(datadir: str) -> Dict:
        """Load configuration from YAML file"""
        config_path = os.path.join(datadir, Config.DEFAULT_CONFIG_FILE)
        if not os.path.exists(config_path):
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config file {config_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {config_path}: expected a mapping")
            return {}
        return data

    @staticmethod
    def merge_config(file_config: Dict, cli_args: Dict) -> Dict:
        """Merge file config with CLI arguments, CLI args take precedence"""
        config = {
            'lock_name': cli_args.get('lock_name') or file_config.get('lock-name'),
            'create': cli_args.get('create') if cli_args.get('create') is not None else file_config.get('create'),
            'log_level': cli_args.get('log_level') or file_config.get('log-level'),
        }

        merged = dict(Config.DEFAULTS)
        merged.update({k: v for k, v in config.items() if v is not None})
        return merged
