"""Keystone CLI reconciliation library.

This package drives the ``keystone`` command-line tool to converge identity
objects on a declared state. It never talks to the identity API directly.

Architecture:
- client.py: argument/environment building and process invocation
- prettytable.py: parsing of the tool's tabular output
- lookup.py: identifier search over parsed rows
- base.py: shared reconciler plumbing (invoker + parser injection)
- tenants.py, roles.py, services.py, endpoints.py, users.py, grants.py, ec2.py:
  one reconciler per object kind
- exceptions.py: typed exceptions for error handling

Usage:
    from identity_register.core.keystone import KeystoneCommand, TenantReconciler
    from identity_register.core.descriptors import Tenant
    
    command = KeystoneCommand(service_endpoint="http://keystone:35357/v2.0", service_token="ADMIN")
    changed = TenantReconciler(command).ensure(Tenant("service", "Service Tenant"))
"""
from .client import (
    CommandResult,
    Credentials,
    KeystoneCommand,
    SubprocessExecutor,
    render_options,
    mask_secrets,
)
from .exceptions import (
    RegisterError,
    CommandError,
    ParseError,
    DescriptorError,
    ObjectNotFoundError,
    TenantNotFoundError,
    UserNotFoundError,
    RoleNotFoundError,
    ServiceNotFoundError,
)
from .prettytable import parse_table
from .lookup import narrow_rows, search_uuid
from .base import Reconciler
from .tenants import TenantReconciler
from .roles import RoleReconciler
from .services import CatalogReconciler, ServiceReconciler
from .endpoints import EndpointReconciler
from .users import UserReconciler
from .grants import RoleGrantReconciler
from .ec2 import Ec2CredentialReconciler, Ec2Keys

__all__ = [
    # Client
    "CommandResult",
    "Credentials",
    "KeystoneCommand",
    "SubprocessExecutor",
    "render_options",
    "mask_secrets",
    
    # Exceptions
    "RegisterError",
    "CommandError",
    "ParseError",
    "DescriptorError",
    "ObjectNotFoundError",
    "TenantNotFoundError",
    "UserNotFoundError",
    "RoleNotFoundError",
    "ServiceNotFoundError",
    
    # Parsing and lookup
    "parse_table",
    "narrow_rows",
    "search_uuid",
    
    # Reconcilers
    "Reconciler",
    "TenantReconciler",
    "RoleReconciler",
    "CatalogReconciler",
    "ServiceReconciler",
    "EndpointReconciler",
    "UserReconciler",
    "RoleGrantReconciler",
    "Ec2CredentialReconciler",
    "Ec2Keys",
]
