"""
Grid Mask Annotator - Configuration
-----------------------------------
Central place for settings read from the environment. Every value has a
default so the server starts with no configuration at all.
"""

import os
from typing import Any, Dict, Mapping, Optional

# body-parser limit of the original server (base64 PNG payloads)
MAX_CONTENT_LENGTH = 50 * 1024 * 1024


def _env_flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Build the Flask config dict from environment variables."""
    env = os.environ if environ is None else environ
    return {
        "HOST": env.get("GRIDMASK_HOST", "0.0.0.0"),
        "PORT": int(env.get("GRIDMASK_PORT", "5001")),
        "DEBUG": _env_flag(env.get("FLASK_DEBUG"), True),
        "MASKS_DIR": os.path.abspath(env.get("GRIDMASK_MASKS_DIR", "./masks")),
        "SAMPLES_DIR": env.get("GRIDMASK_SAMPLES_DIR") or None,
        "LOG_LEVEL": env.get("GRIDMASK_LOG_LEVEL", "INFO"),
        "LOG_FILE": env.get("GRIDMASK_LOG_FILE") or None,
        "INTERPOLATE_STROKES": _env_flag(env.get("GRIDMASK_INTERPOLATE"), False),
        "MAX_CONTENT_LENGTH": MAX_CONTENT_LENGTH,
    }
