"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CATALOG_BACKENDS = ("sql", "kvs", "templated")
TEMPLATED_BACKEND = "templated"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).
    
    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)
    
    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback
    
    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name
    
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info("[settings] Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("[settings] Failed to read /run/secrets/%s: %s", secret_name, e)
    
    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.debug("[settings] Loaded %s from environment (fallback)", env_var)
            return secret_value
    
    return None


def _env_flag(var_name: str, default: str = "false") -> bool:
    return os.environ.get(var_name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RegisterConfig:
    """Identity register configuration container."""
    # keystone tool
    keystone_command: str = "keystone"
    insecure: bool = False
    
    # Catalog
    catalog_backend: str = "sql"
    
    # Service token context (exported as OS_SERVICE_ENDPOINT / OS_SERVICE_TOKEN)
    service_endpoint: Optional[str] = None
    service_token: Optional[str] = None
    
    # Identity endpoint used by user password checks
    auth_url: Optional[str] = None
    
    # Logging
    log_level: str = "INFO"
    
    def __post_init__(self):
        if self.catalog_backend not in CATALOG_BACKENDS:
            raise ValueError(
                f"Unknown catalog backend '{self.catalog_backend}' "
                f"(expected one of: {', '.join(CATALOG_BACKENDS)})"
            )
    
    @property
    def dynamic_catalog(self) -> bool:
        """True when services and endpoints can be registered through the CLI."""
        return self.catalog_backend != TEMPLATED_BACKEND


def load_settings() -> RegisterConfig:
    """Load register settings from environment and /run/secrets."""
    return RegisterConfig(
        keystone_command=os.environ.get("KEYSTONE_COMMAND", "keystone"),
        insecure=_env_flag("KEYSTONE_INSECURE"),
        catalog_backend=os.environ.get("IDENTITY_CATALOG_BACKEND", "sql").strip().lower(),
        service_endpoint=os.environ.get("OS_SERVICE_ENDPOINT") or None,
        service_token=_load_secret_from_file("os_service_token", "OS_SERVICE_TOKEN"),
        auth_url=os.environ.get("OS_AUTH_URL") or None,
        log_level=os.environ.get("REGISTER_LOG_LEVEL", "INFO").upper(),
    )
