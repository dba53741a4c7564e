"""Keystone role registration."""
from __future__ import annotations
import logging

from .base import Reconciler

logger = logging.getLogger(__name__)


class RoleReconciler(Reconciler):
    """Create roles that do not exist yet."""
    
    kind = "role"
    
    def ensure(self, role) -> bool:
        """Idempotently create a role.
        
        Args:
            role: Role descriptor
            
        Returns:
            True if the role was created
        """
        role_uuid = self.identity_uuid("role", "name", role.name)
        if role_uuid:
            logger.info("[role] Role '%s' already exists", role.name)
            return False
        
        self.command.invoke("role-create", {"name": role.name})
        logger.info("[role] Role '%s' created", role.name)
        return True
