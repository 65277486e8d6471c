import os
import re
import yaml
from typing import Any, Dict, Optional
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator
import logging

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable -> config field
ENV_VARS = {
    "FLIGHT_DATA_URL": "flight_data_url",
    "LOKI_URL": "loki_url",
    "GRAFANA_TENANT_ID": "grafana_tenant_id",
    "GRAFANA_PASSWORD": "grafana_password",
    "POLL_INTERVAL": "poll_interval",
    "FETCH_TIMEOUT": "fetch_timeout",
    "PUSH_TIMEOUT": "push_timeout",
    "LOG_LEVEL": "log_level",
    "LOG_DIR": "log_dir",
}


def _expand_env_vars(text: str) -> str:
    """Expand environment variables including ${VAR:-default} syntax"""
    # Handle ${VAR:-default} syntax
    def replace_var(match):
        var_expr = match.group(1)
        if ':-' in var_expr:
            var_name, default_value = var_expr.split(':-', 1)
            return os.getenv(var_name, default_value)
        else:
            return os.getenv(var_expr, '')

    # Replace ${VAR:-default} and ${VAR}
    text = re.sub(r'\$\{([^}]+)\}', replace_var, text)

    # Handle simple $VAR syntax
    text = os.path.expandvars(text)

    return text


class Config(BaseModel):
    flight_data_url: str = Field(..., description="dump1090 aircraft.json URL")
    loki_url: str = Field(..., description="Loki base URL")
    grafana_tenant_id: str = ""
    grafana_password: str = ""
    poll_interval: float = Field(5.0, gt=0, description="Seconds between cycles")
    fetch_timeout: float = Field(30.0, gt=0)
    push_timeout: float = Field(10.0, gt=0)
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @field_validator("flight_data_url", "loki_url")
    @classmethod
    def _require_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @field_validator("log_dir")
    @classmethod
    def _empty_log_dir(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @property
    def has_auth(self) -> bool:
        return bool(self.grafana_tenant_id and self.grafana_password)


def _read_yaml(config_file: str) -> Dict[str, Any]:
    # Look for config file in config/ directory or current directory
    config_paths = [
        f"config/{config_file}",
        config_file,
        f"/app/config/{config_file}"  # Docker path
    ]

    config_path = None
    for path in config_paths:
        if os.path.exists(path):
            config_path = path
            break

    if not config_path:
        raise ConfigurationError("config_file", f"Config file not found: {config_file}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, 'r') as f:
        # Expand environment variables in YAML
        yaml_content = f.read()
        yaml_content = _expand_env_vars(yaml_content)
        try:
            config_data = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError("config_file", f"Invalid YAML in {config_path}: {e}")

    if not isinstance(config_data, dict):
        raise ConfigurationError("config_file", f"{config_path} must contain a mapping")

    return config_data


def load_config(config_file: Optional[str] = None, env_file: Optional[str] = None) -> Config:
    """Load configuration from .env, an optional YAML file and the environment.

    Environment variables win over YAML keys.
    """
    if load_dotenv(env_file or find_dotenv(usecwd=True)):
        logger.debug("Environment file loaded successfully")
    else:
        logger.debug("Environment file not found (this is normal in production)")

    if config_file is None:
        config_file = os.getenv("CONFIG_FILE")

    config_data: Dict[str, Any] = {}
    if config_file:
        config_data.update(_read_yaml(config_file))

    for env_name, field_name in ENV_VARS.items():
        value = os.getenv(env_name)
        if value is not None and value != "":
            config_data[field_name] = value

    try:
        return Config(**config_data)
    except ValidationError as e:
        error = e.errors()[0]
        item = ".".join(str(part) for part in error["loc"]) or "config"
        raise ConfigurationError(item, error["msg"], {"errors": e.errors(include_url=False)}) from e
