"""Keystone role grants (user + tenant + role)."""
from __future__ import annotations
import logging

from .base import Reconciler
from .exceptions import RoleNotFoundError, TenantNotFoundError, UserNotFoundError

logger = logging.getLogger(__name__)


class RoleGrantReconciler(Reconciler):
    """Grant roles to users within a tenant.
    
    Tenant, user and role must all exist beforehand; none is created here.
    """
    
    kind = "role-grant"
    
    def ensure(self, grant) -> bool:
        """Idempotently grant a role to a user on a tenant.
        
        Args:
            grant: RoleGrant descriptor
            
        Returns:
            True if the role was granted
            
        Raises:
            TenantNotFoundError, UserNotFoundError, RoleNotFoundError: If a
                referenced object does not exist
        """
        tenant_uuid = self.identity_uuid("tenant", "name", grant.tenant_name)
        if not tenant_uuid:
            raise TenantNotFoundError(f"[role-grant] Tenant '{grant.tenant_name}' not found")
        user_uuid = self.identity_uuid("user", "name", grant.user_name)
        if not user_uuid:
            raise UserNotFoundError(f"[role-grant] User '{grant.user_name}' not found")
        role_uuid = self.identity_uuid("role", "name", grant.role_name)
        if not role_uuid:
            raise RoleNotFoundError(f"[role-grant] Role '{grant.role_name}' not found")
        
        assigned_role_uuid = self.identity_uuid(
            "user-role", "name", grant.role_name,
            {"tenant-id": tenant_uuid, "user-id": user_uuid},
        )
        if assigned_role_uuid == role_uuid:
            logger.info(
                "[role-grant] Role '%s' already granted to '%s' on '%s'",
                grant.role_name, grant.user_name, grant.tenant_name,
            )
            return False
        
        self.command.invoke("user-role-add", {
            "tenant-id": tenant_uuid,
            "role-id": role_uuid,
            "user-id": user_uuid,
        })
        logger.info("[role-grant] Granted role '%s' to '%s' on '%s'", grant.role_name, grant.user_name, grant.tenant_name)
        return True
