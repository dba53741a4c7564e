"""EC2-style access/secret key registration."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .base import Reconciler
from .client import Credentials
from .exceptions import ParseError, TenantNotFoundError, UserNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Ec2Keys:
    """Keys returned by a fresh ``ec2-credentials-create``."""
    access: str
    secret: str

    def __repr__(self) -> str:
        return f"Ec2Keys(access={self.access!r})"


class Ec2CredentialReconciler(Reconciler):
    """Issue one EC2 key pair per user and tenant.
    
    Secrets of an existing key pair cannot be read back, so only a freshly
    created pair is returned.
    """
    
    kind = "ec2-credentials"
    
    def issue(self, ec2) -> Tuple[bool, Optional[Ec2Keys]]:
        """Create the key pair unless one already exists.
        
        Args:
            ec2: Ec2Credential descriptor
            
        Returns:
            (changed, keys) where keys is set only when a pair was created
            
        Raises:
            TenantNotFoundError: If the tenant does not exist
            UserNotFoundError: If the user is not a member of the tenant
            ParseError: If the create command printed no access/secret
        """
        tenant_uuid = self.identity_uuid("tenant", "name", ec2.tenant_name)
        if not tenant_uuid:
            raise TenantNotFoundError(f"[ec2] Tenant '{ec2.tenant_name}' not found")
        user_uuid = self.identity_uuid("user", "name", ec2.user_name, {"tenant-id": tenant_uuid})
        if not user_uuid:
            raise UserNotFoundError(f"[ec2] User '{ec2.user_name}' not found in tenant '{ec2.tenant_name}'")
        
        existing_access = self.identity_uuid(
            "ec2-credentials", "tenant", ec2.tenant_name, {"user-id": user_uuid}, "access",
        )
        if existing_access:
            logger.info("[ec2] Credentials for '%s' on '%s' already exist", ec2.user_name, ec2.tenant_name)
            return False, None
        
        admin = Credentials(ec2.admin_user, ec2.admin_password, ec2.admin_tenant_name, ec2.identity_endpoint)
        output = self.command.invoke(
            "ec2-credentials-create",
            {"user-id": user_uuid, "tenant-id": tenant_uuid},
            admin,
        )
        rows = self.parse(output)
        if not rows or "access" not in rows[0] or "secret" not in rows[0]:
            raise ParseError("[ec2] ec2-credentials-create printed no access/secret pair")
        logger.info("[ec2] Credentials for '%s' on '%s' created", ec2.user_name, ec2.tenant_name)
        return True, Ec2Keys(rows[0]["access"], rows[0]["secret"])
    
    def ensure(self, ec2) -> bool:
        changed, _ = self.issue(ec2)
        return changed
