"""Keystone user registration."""
from __future__ import annotations
import logging
from typing import Optional

from .base import Reconciler, TableParser
from .client import Credentials, KeystoneCommand
from .exceptions import CommandError, TenantNotFoundError
from .prettytable import parse_table

logger = logging.getLogger(__name__)


class UserReconciler(Reconciler):
    """Create users inside their tenant and keep their password current.
    
    Passwords cannot be read back from keystone, so an existing user's
    password is checked by requesting a token with it.
    """
    
    kind = "user"
    
    def __init__(self, command: KeystoneCommand, parse: TableParser = parse_table, *, auth_url: Optional[str] = None):
        """Initialize user reconciler.
        
        Args:
            command: Keystone command invoker
            parse: Table parser applied to listing output
            auth_url: Identity endpoint the password check authenticates against
        """
        super().__init__(command, parse)
        self.auth_url = auth_url
    
    def user_exists(self, tenant_uuid: str, username: str) -> bool:
        users = self.list_rows("user-list", {"tenant-id": tenant_uuid})
        return any(user.get("name") == username for user in users)
    
    def password_valid(self, user) -> bool:
        """Probe the declared password with a ``token-get`` as the user."""
        credentials = Credentials(user.name, user.password, user.tenant_name, self.auth_url)
        try:
            self.command.invoke("token-get", {}, credentials)
        except CommandError as exc:
            logger.debug("[user] Password check for '%s' failed: %s", user.name, exc)
            return False
        return True
    
    def ensure(self, user) -> bool:
        """Create the user or reset its password when the password check fails.
        
        Args:
            user: User descriptor
            
        Returns:
            True if the user was created or its password updated
            
        Raises:
            TenantNotFoundError: If the owning tenant does not exist
        """
        tenant_uuid = self.identity_uuid("tenant", "name", user.tenant_name)
        if not tenant_uuid:
            raise TenantNotFoundError(f"[user] Tenant '{user.tenant_name}' not found for user '{user.name}'")
        
        if not self.user_exists(tenant_uuid, user.name):
            self.command.invoke("user-create", {
                "name": user.name,
                "tenant-id": tenant_uuid,
                "pass": user.password,
                "enabled": user.enabled,
            })
            logger.info("[user] User '%s' created in tenant '%s'", user.name, user.tenant_name)
            return True
        
        if self.password_valid(user):
            logger.info("[user] User '%s' already exists with the declared password", user.name)
            return False
        
        self.command.invoke("user-password-update", {"pass": user.password, "": user.name})
        logger.info("[user] Password updated for user '%s'", user.name)
        return True
