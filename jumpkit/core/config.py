from typing import Any, Dict, List, Optional
import os

import yaml

from jumpkit.core.errors import ConfigurationError
from jumpkit.core.models import Configuration, CredentialRule, EnvironmentRule
from jumpkit.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_REGIONS = ("us-east-1", "us-west-2")
CONFIG_ENV_VAR = "JUMPKIT_CONFIG"

EXAMPLE_CONFIG = """---
aws:
  regions:
    - us-east-1
    - us-west-2

  rds:
    # The first prefix match will be used.
    # The database name, unless specified, will be inferred from the host name.
    - prefix: staging
      database: <optional>
      user: <optional>
      password: <optional>

  environments:
    - prefix: staging2
      jumphost: jump.staging2.example.com
      region: us-west-2
    - prefix: staging
      jumphost: jump.example.com
      region: us-west-2
    # if not prefix, act as a catch all.
    - jumphost: jump.example.com
      region: us-east-1

ssh:
  connectTimeout: 10

tunnel:
  # seconds to wait for the local end of a database tunnel
  timeout: 30
"""


def default_config_path() -> str:
    return os.environ.get(CONFIG_ENV_VAR) or os.path.join(
        os.path.expanduser("~"), ".config", "jumpkit", "config.yml"
    )


def _value(raw: Any) -> Optional[str]:
    # Template placeholders such as "<optional>" count as unset
    if raw is None:
        return None
    text = str(raw).strip()
    if not text or (text.startswith("<") and text.endswith(">")):
        return None
    return text


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{key}' must be a mapping in the configuration file")
    return section


def _rules(section: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    rules = section.get(key) or []
    if not isinstance(rules, list) or not all(isinstance(r, dict) for r in rules):
        raise ConfigurationError(f"'aws.{key}' must be a list of mappings")
    return rules


def parse_configuration(data: Optional[Dict[str, Any]]) -> Configuration:
    """Build a :class:`Configuration` from the parsed YAML document.

    Rule order is preserved exactly as declared.
    """
    data = data or {}
    if not isinstance(data, dict):
        raise ConfigurationError("The configuration file must contain a mapping")

    aws = _section(data, "aws")
    ssh = _section(data, "ssh")
    tunnel = _section(data, "tunnel")

    regions = tuple(str(r) for r in (aws.get("regions") or []) if r) or DEFAULT_REGIONS

    environments = tuple(
        EnvironmentRule(
            prefix=_value(r.get("prefix")) or "",
            jump_host=_value(r.get("jumphost")) or "",
            region=_value(r.get("region")),
        )
        for r in _rules(aws, "environments")
    )
    credentials = tuple(
        CredentialRule(
            prefix=_value(r.get("prefix")) or "",
            database=_value(r.get("database")),
            user=_value(r.get("user")),
            password=_value(r.get("password")),
        )
        for r in _rules(aws, "rds")
    )

    try:
        raw_connect = ssh.get("connectTimeout")
        raw_tunnel = tunnel.get("timeout")
        connect_timeout = 10 if raw_connect is None else int(raw_connect)
        tunnel_timeout = 30.0 if raw_tunnel is None else float(raw_tunnel)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid timeout in configuration: {e}")

    return Configuration(
        regions=regions,
        environments=environments,
        credentials=credentials,
        ssh_connect_timeout=connect_timeout,
        tunnel_timeout=tunnel_timeout,
    )


def load_configuration(config_path: Optional[str] = None) -> Configuration:
    """
    Load the configuration from a YAML file, falling back to defaults when the
    file does not exist.
    """
    path = config_path or default_config_path()
    if not os.path.exists(path):
        logger.warning(f"No configuration found at {path}. Run `jumpkit config` for an example.")
        return Configuration()

    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {path}: {e}")

    return parse_configuration(data)
