"""Configuration loader for secret-provisioner."""
import os
import logging
from pathlib import Path
from typing import Dict, Any, Optional
import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SECRET_PROVISIONER_CONFIG"
PROJECT_ENV_VAR = "GCP_PROJECT"


def default_config_path() -> Path:
    """Default config location following the XDG Base Directory layout."""
    return Path.home() / ".config" / "secret-provisioner" / "config.yml"


def _get_config_path(config_path: Optional[str] = None) -> Optional[Path]:
    """
    Resolve which config file to load.

    Priority order:
    1. Explicit path (--config)
    2. SECRET_PROVISIONER_CONFIG environment variable
    3. Default location: ~/.config/secret-provisioner/config.yml

    Returns:
        Path to the config file, or None if no explicit path was given and the
        default file does not exist

    Raises:
        ConfigError: If an explicitly requested config file doesn't exist
    """
    if config_path:
        path = Path(config_path).expanduser()
        if not path.is_file():
            raise ConfigError(f"Configuration file not found at: {path}")
        logger.debug(f"Using config from --config: {path}")
        return path

    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path).expanduser()
        if not path.is_file():
            raise ConfigError(f"Configuration file from {CONFIG_ENV_VAR} not found at: {path}")
        logger.debug(f"Using config from {CONFIG_ENV_VAR}: {path}")
        return path

    default_config = default_config_path()
    if default_config.is_file():
        logger.debug(f"Using default config location: {default_config}")
        return default_config

    return None


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load and validate the optional YAML configuration.

    Recognized sections:
        authentication: {type: service_account, service_account_path: ...}
        gcp: {project_id: ...}

    Returns:
        Configuration dict, empty if no config file is in use

    Raises:
        ConfigError: If the config file is unreadable, invalid, or points to a
            missing service account file
    """
    path = _get_config_path(config_path)
    if path is None:
        logger.debug("No config file found, using defaults")
        return {}

    try:
        with open(path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {path}: {e}") from e

    if config is None:
        logger.warning(f"Config file at {path} is empty")
        return {}

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {path} must contain a mapping")

    auth = config.get('authentication')
    if auth is not None:
        _validate_authentication(auth, path)

    gcp = config.get('gcp')
    if gcp is not None and not isinstance(gcp, dict):
        raise ConfigError(f"'gcp' section in {path} must be a mapping")

    logger.debug(f"Configuration loaded from {path}")
    return config


def _validate_authentication(auth: Any, config_path: Path) -> None:
    if not isinstance(auth, dict):
        raise ConfigError(f"'authentication' section in {config_path} must be a mapping")

    if auth.get('type') != 'service_account':
        raise ConfigError(
            f"Unsupported authentication type: {auth.get('type')}\n"
            f"Only 'service_account' is supported."
        )

    service_account_path = auth.get('service_account_path')
    if not service_account_path:
        raise ConfigError(
            "Missing 'authentication.service_account_path' in config\n"
            "Please specify the absolute path to your service account JSON file."
        )

    if not os.path.isfile(service_account_path):
        raise ConfigError(
            f"Service account file not found at: {service_account_path}\n"
            f"Please ensure the file exists or update the path in {config_path}"
        )


def get_service_account_path(config: Dict[str, Any]) -> Optional[str]:
    """Service account JSON path from config, or None to use application default credentials."""
    return (config.get('authentication') or {}).get('service_account_path')


def resolve_project_id(explicit: Optional[str], config: Dict[str, Any]) -> Optional[str]:
    """
    Resolve the target GCP project.

    Priority order:
    1. Explicit value (--project-id)
    2. GCP_PROJECT environment variable
    3. gcp.project_id from config

    Returns:
        Project ID, or None if not set anywhere
    """
    if explicit:
        return explicit

    env_project = os.getenv(PROJECT_ENV_VAR)
    if env_project:
        logger.debug(f"Using {PROJECT_ENV_VAR} from environment: {env_project}")
        return env_project

    project_id = (config.get('gcp') or {}).get('project_id')
    if project_id:
        logger.debug(f"Using project_id from config: {project_id}")
        return str(project_id)

    return None
