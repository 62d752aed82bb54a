from __future__ import annotations

"""
Configuration Domain Management.

Loads the optional JSON configuration file, merges it over the built-in
defaults and applies command line overrides. Unknown keys are ignored and
malformed values fall back to defaults with a warning.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from zkfs.domain.constants import (
    ACL_POLICIES,
    DEFAULT_ACL_POLICY,
    DEFAULT_ADDRESS,
    DEFAULT_MAX_PAYLOAD_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
)
from zkfs.infra.fs import get_default_config_path

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------
def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Connectivity
        "address": DEFAULT_ADDRESS,
        "timeout": DEFAULT_TIMEOUT_SECONDS,

        # Node creation policy
        "acl": DEFAULT_ACL_POLICY,
        "max_payload_bytes": DEFAULT_MAX_PAYLOAD_BYTES,

        # Presentation
        "color": True,

        # Diagnostics
        "log_file": None,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from disk, merged over the defaults.

    Args:
        path: Explicit configuration file. Defaults to ~/.zkfs/config.json.

    Returns:
        Dict[str, Any]: The validated configuration.
    """
    conf = get_default_config()
    config_file = path or get_default_config_path()

    if not os.path.exists(config_file):
        if path:
            logger.warning(f"Config file '{config_file}' not found. Using defaults.")
        else:
            logger.debug("Config file not found. Returning defaults.")
        return conf

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to load config '{config_file}': {e}. Using defaults.")
        return conf

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return conf

    logger.debug(f"Configuration loaded from {config_file}")
    return merge_config(conf, data)


def merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge override values into the base configuration.

    Only known keys are merged; None values are skipped so that unset
    command line options keep the file or default value.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged and validated configuration.
    """
    out = dict(base)
    for k in get_default_config():
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return _validate(out)


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------
def _validate(conf: Dict[str, Any]) -> Dict[str, Any]:
    """Coerce values to their expected types, reverting invalid ones."""
    defaults = get_default_config()

    if not isinstance(conf.get("address"), str) or not conf["address"].strip():
        logger.warning("Invalid 'address' in configuration. Using default.")
        conf["address"] = defaults["address"]

    for key, cast in (("timeout", float), ("max_payload_bytes", int)):
        try:
            value = cast(conf[key])
            if value <= 0:
                raise ValueError(key)
            conf[key] = value
        except (TypeError, ValueError):
            logger.warning(f"Invalid '{key}' in configuration. Using default.")
            conf[key] = defaults[key]

    if conf.get("acl") not in ACL_POLICIES:
        logger.warning(f"Unknown ACL policy '{conf.get('acl')}'. Using '{DEFAULT_ACL_POLICY}'.")
        conf["acl"] = DEFAULT_ACL_POLICY

    if not isinstance(conf.get("color"), bool):
        logger.warning("Invalid 'color' in configuration. Using default.")
        conf["color"] = defaults["color"]

    return conf
