import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    api_key: str
    app_id: Optional[str] = None
    timeout: float = 15


def _key_from_config_file(path: str) -> str:
    try:
        with open(path, encoding="utf-8") as fh:
            return (json.load(fh) or {}).get("key") or ""
    except FileNotFoundError:
        return ""
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return ""


def load_settings() -> Settings:
    """
    THEBUS_API_KEY wins; otherwise the "key" field of config.json
    (or the file named by THEBUS_CONFIG).
    """
    api_key = os.getenv("THEBUS_API_KEY") or _key_from_config_file(os.getenv("THEBUS_CONFIG", "config.json"))
    if not api_key:
        logger.warning("No TheBus API key configured; arrival requests will be rejected")

    return Settings(
        api_key=api_key,
        app_id=os.getenv("THEBUS_APP_ID") or None,
        timeout=float(os.getenv("THEBUS_TIMEOUT", "15")),
    )
