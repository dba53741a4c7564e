"""Reconciliation facade: one ``ensure_*`` operation per identity object kind.

Usage:
    from identity_register.config import load_settings
    from identity_register.core.keystone import KeystoneCommand
    from identity_register.core.register import IdentityRegister
    from identity_register.core.descriptors import Tenant

    config = load_settings()
    register = IdentityRegister(KeystoneCommand.from_config(config), config)
    register.ensure_tenant(Tenant("service", "Service Tenant"))
    if register.updated:
        ...
"""
from __future__ import annotations
import logging
from typing import Callable, Dict, Optional

from identity_register.config import RegisterConfig

from .descriptors import Ec2Credential, Endpoint, Role, RoleGrant, Service, Tenant, User
from .keystone import (
    Ec2CredentialReconciler,
    Ec2Keys,
    EndpointReconciler,
    KeystoneCommand,
    Reconciler,
    RoleGrantReconciler,
    RoleReconciler,
    ServiceReconciler,
    TenantReconciler,
    UserReconciler,
    parse_table,
)
from .keystone.base import TableParser

logger = logging.getLogger(__name__)


class IdentityRegister:
    """Converge declared identity objects and remember whether anything changed.

    ``updated`` starts False and flips to True on the first state-changing
    command; the register never resets it.
    """

    def __init__(
        self,
        command: KeystoneCommand,
        config: Optional[RegisterConfig] = None,
        parse: TableParser = parse_table,
    ):
        """Initialize the register.

        Args:
            command: Keystone command invoker shared by all reconcilers
            config: Register settings (catalog backend, password check auth URL)
            parse: Table parser shared by all reconcilers
        """
        self.config = config or RegisterConfig()
        self.updated = False
        self.issued_ec2_credentials: Dict[str, Ec2Keys] = {}
        self.reconcilers: Dict[type, Reconciler] = {
            Tenant: TenantReconciler(command, parse),
            Service: ServiceReconciler(command, parse, dynamic_catalog=self.config.dynamic_catalog),
            Endpoint: EndpointReconciler(command, parse, dynamic_catalog=self.config.dynamic_catalog),
            Role: RoleReconciler(command, parse),
            User: UserReconciler(command, parse, auth_url=self.config.auth_url),
            RoleGrant: RoleGrantReconciler(command, parse),
            Ec2Credential: Ec2CredentialReconciler(command, parse),
        }
        self.handlers: Dict[type, Callable[[object], bool]] = {
            kind: reconciler.ensure for kind, reconciler in self.reconcilers.items()
        }
        self.handlers[Ec2Credential] = self._issue_ec2_credential

    def _record(self, changed: bool) -> bool:
        if changed:
            self.updated = True
        return changed

    def ensure(self, descriptor) -> bool:
        """Dispatch a descriptor to the handler registered for its type.

        Raises:
            TypeError: If no handler is registered for the descriptor's type
        """
        handler = self.handlers.get(type(descriptor))
        if handler is None:
            raise TypeError(f"No reconciler registered for {type(descriptor).__name__}")
        return self._record(handler(descriptor))

    def ensure_tenant(self, tenant: Tenant) -> bool:
        return self.ensure(tenant)

    def ensure_service(self, service: Service) -> bool:
        return self.ensure(service)

    def ensure_endpoint(self, endpoint: Endpoint) -> bool:
        return self.ensure(endpoint)

    def ensure_role(self, role: Role) -> bool:
        return self.ensure(role)

    def ensure_user(self, user: User) -> bool:
        return self.ensure(user)

    def ensure_role_grant(self, grant: RoleGrant) -> bool:
        return self.ensure(grant)

    def ensure_ec2_credential(self, ec2: Ec2Credential) -> bool:
        """Issue EC2 keys; freshly created keys land in ``issued_ec2_credentials``."""
        return self.ensure(ec2)

    def _issue_ec2_credential(self, ec2: Ec2Credential) -> bool:
        changed, keys = self.reconcilers[Ec2Credential].issue(ec2)
        if keys is not None:
            self.issued_ec2_credentials[ec2.user_name] = keys
        return changed

    def apply(self, manifest) -> bool:
        """Reconcile every object of a manifest in dependency order.

        Stops at the first error; objects already converged stay converged.

        Returns:
            True if any object changed during this call
        """
        changed = False
        for descriptor in manifest.ordered():
            changed = self.ensure(descriptor) or changed
        logger.info("[register] Manifest applied (changed=%s)", changed)
        return changed
