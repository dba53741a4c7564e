"""Keystone tenant registration."""
from __future__ import annotations
import logging

from .base import Reconciler

logger = logging.getLogger(__name__)


class TenantReconciler(Reconciler):
    """Create tenants that do not exist yet.
    
    Existing tenants are left untouched even when their description or
    enabled flag differ from the declaration.
    """
    
    kind = "tenant"
    
    def ensure(self, tenant) -> bool:
        """Idempotently create a tenant.
        
        Args:
            tenant: Tenant descriptor
            
        Returns:
            True if the tenant was created
        """
        tenant_uuid = self.identity_uuid("tenant", "name", tenant.name)
        if tenant_uuid:
            logger.info("[tenant] Tenant '%s' already exists (id=%s)", tenant.name, tenant_uuid)
            return False
        
        self.command.invoke("tenant-create", {
            "name": tenant.name,
            "description": tenant.description,
            "enabled": tenant.enabled,
        })
        logger.info("[tenant] Tenant '%s' created", tenant.name)
        return True
