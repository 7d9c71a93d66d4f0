"""Scan Core Configuration - Simple Configuration Management"""

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Optional, List

import yaml

from . import constants as const
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


# ===============================================================================
# CONFIGURATION DATA CLASSES
# ===============================================================================

@dataclass(frozen=True)
class WorkerSettings:
    """Fixed per-run settings handed to every worker"""
    cooldown_seconds: float = const.COOLDOWN_SECONDS
    max_connection_attempts: int = const.MAX_CONNECTION_ATTEMPTS
    reconnect_threshold: int = const.RECONNECT_THRESHOLD


@dataclass
class ScanConfig:
    """Main configuration settings"""

    # Files
    proxies_file: str = const.PROXIES_FILE
    results_file: str = const.RESULTS_FILE
    api_key_file: str = const.API_KEY_FILE
    proxy_source_url: str = const.PROXY_LIST_SOURCE_URL

    # Scanning settings
    max_group_id: int = const.MAX_GROUP_ID
    cooldown_seconds: float = const.COOLDOWN_SECONDS
    reconnect_threshold: int = const.RECONNECT_THRESHOLD
    max_connection_attempts: int = const.MAX_CONNECTION_ATTEMPTS
    request_timeout: float = const.DEFAULT_REQUEST_TIMEOUT
    stop_grace_seconds: float = const.DEFAULT_STOP_GRACE

    # Live settings (initial values)
    minimum_robux: int = const.DEFAULT_MINIMUM_ROBUX
    accept_premium_groups: bool = False

    # Logging settings
    log_level: str = const.DEFAULT_LOG_LEVEL
    log_file: str = "grouphunt.log"
    enable_file_logging: bool = False

    # Advanced settings
    user_agent: str = const.DEFAULT_USER_AGENT

    def worker_settings(self) -> WorkerSettings:
        return WorkerSettings(
            cooldown_seconds=self.cooldown_seconds,
            max_connection_attempts=self.max_connection_attempts,
            reconnect_threshold=self.reconnect_threshold,
        )


# ===============================================================================
# CONFIGURATION MANAGER
# ===============================================================================

class ConfigManager:
    """Simple configuration manager backed by a YAML (or JSON) file"""

    def __init__(self, config_path: Optional[str] = None, cli_overrides: Optional[Dict[str, Any]] = None):
        self.config_path = config_path or self._get_default_config_path()
        self.config = ScanConfig()
        self.cli_overrides = cli_overrides or {}
        self._load_config()

    def _get_default_config_path(self) -> str:
        """Default configuration file path, creating its directory"""
        config_path = Path.home() / ".grouphunt" / "config.yaml"
        config_path.parent.mkdir(exist_ok=True)
        return str(config_path)

    def _load_config(self):
        """Load configuration from file and apply CLI overrides"""
        if not os.path.exists(self.config_path):
            self._create_default_config()
        else:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    if self.config_path.endswith('.json'):
                        data = json.load(f)
                    else:
                        data = yaml.safe_load(f) or {}

                for key, value in data.items():
                    if hasattr(self.config, key):
                        setattr(self.config, key, value)
                    else:
                        logger.warning(f"Ignoring unknown configuration key: {key}")

            except (OSError, ValueError, yaml.YAMLError, AttributeError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}. Using default configuration.")

        self._apply_cli_overrides()

    def _apply_cli_overrides(self):
        """Apply CLI parameter overrides to configuration"""
        for key, value in self.cli_overrides.items():
            if hasattr(self.config, key) and value is not None:
                setattr(self.config, key, value)

    def _create_default_config(self):
        """Create default configuration file"""
        try:
            yaml_content = self._generate_yaml_with_comments(asdict(self.config))
            with open(self.config_path, 'w', encoding='utf-8') as f:
                f.write(yaml_content)
            logger.info(f"Created default configuration at: {self.config_path}")
        except OSError as e:
            logger.warning(f"Failed to create config file: {e}")

    def _generate_yaml_with_comments(self, data: Dict) -> str:
        """Generate YAML with helpful comments"""
        return f"""# GroupHunt Configuration File
# Generated automatically with default values

# Files
proxies_file: "{data['proxies_file']}"            # JSON array of proxy URIs
results_file: "{data['results_file']}"               # Found groups, sorted by robux
api_key_file: "{data['api_key_file']}"                  # Appended to every API request
proxy_source_url: "{data['proxy_source_url']}"

# Scanning Settings
max_group_id: {data['max_group_id']}                 # Candidate ids are drawn from [0, max_group_id)
cooldown_seconds: {data['cooldown_seconds']}               # Wait after a rate-limit response
reconnect_threshold: {data['reconnect_threshold']}               # Checks per cycle needed to keep retrying a proxy
max_connection_attempts: {data['max_connection_attempts']}           # Connection attempts per reconnect cycle
request_timeout: {data['request_timeout']}                # Per-request timeout (seconds)
stop_grace_seconds: {data['stop_grace_seconds']}             # Wait for workers before cancelling them

# Live Settings (initial values)
minimum_robux: {data['minimum_robux']}                     # Minimum funds before the ownership check
accept_premium_groups: {str(data['accept_premium_groups']).lower()}         # Accept Builders Club only groups

# Logging Settings
log_level: "{data['log_level']}"                # DEBUG, INFO, WARNING, ERROR
log_file: "{data['log_file']}"
enable_file_logging: {str(data['enable_file_logging']).lower()}

# Advanced Settings
user_agent: "{data['user_agent']}"
"""

    def save_config(self):
        """Save current configuration to file"""
        try:
            config_data = asdict(self.config)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                if self.config_path.endswith('.json'):
                    json.dump(config_data, f, indent=2)
                else:
                    yaml.dump(config_data, f, default_flow_style=False, indent=2)
            logger.info(f"Configuration saved to: {self.config_path}")
        except OSError as e:
            raise ConfigurationError(f"Failed to save config: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        return getattr(self.config, key, default)

    def set(self, key: str, value: Any):
        """Set configuration value"""
        if not hasattr(self.config, key):
            raise ValueError(f"Unknown configuration key: {key}")
        setattr(self.config, key, value)

    def update(self, **kwargs):
        """Update multiple configuration values"""
        for key, value in kwargs.items():
            self.set(key, value)

    def validate(self) -> List[str]:
        """Validate configuration settings"""
        errors = []

        if self.config.max_group_id <= 0:
            errors.append("max_group_id must be positive")
        if self.config.cooldown_seconds < 0:
            errors.append("cooldown_seconds cannot be negative")
        if self.config.request_timeout <= 0:
            errors.append("request_timeout must be positive")
        if self.config.stop_grace_seconds < 0:
            errors.append("stop_grace_seconds cannot be negative")

        if self.config.max_connection_attempts <= 0:
            errors.append("max_connection_attempts must be positive")
        if self.config.reconnect_threshold < 0:
            errors.append("reconnect_threshold cannot be negative")
        if self.config.minimum_robux < 0:
            errors.append("minimum_robux cannot be negative")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.config.log_level not in valid_log_levels:
            errors.append(f"log_level must be one of: {valid_log_levels}")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary"""
        return asdict(self.config)

    def __repr__(self) -> str:
        return f"ConfigManager(config_path='{self.config_path}')"


# ===============================================================================
# CONFIGURATION UTILITIES
# ===============================================================================

def create_cli_overrides(verbose=None, quiet=None, silent=None, proxies_file=None,
                         results_file=None, minimum=None, premium=None) -> Dict[str, Any]:
    """Create CLI overrides dictionary from common parameters"""
    overrides = {}

    if verbose:
        overrides['log_level'] = 'DEBUG'
    elif silent:
        overrides['log_level'] = 'ERROR'
    elif quiet:
        overrides['log_level'] = 'WARNING'

    if proxies_file is not None:
        overrides['proxies_file'] = proxies_file
    if results_file is not None:
        overrides['results_file'] = results_file
    if minimum is not None:
        overrides['minimum_robux'] = minimum
    if premium is not None:
        overrides['accept_premium_groups'] = premium

    return overrides


def read_api_key(path: str) -> Optional[str]:
    """Read the API key file; a missing file means no key"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            key = f.read().strip()
    except FileNotFoundError:
        logger.warning(f"API key file {path} not found; requests will be sent without a key")
        return None
    except OSError as e:
        raise ConfigurationError(f"Could not read API key file {path}: {e}") from e
    return key or None
