"""YAML manifest of declared identity objects.

Example::

    tenants:
      - name: service
        description: Service Tenant
    roles:
      - name: admin
    services:
      - type: compute
        name: nova
        description: Nova Compute Service
    endpoints:
      - region: RegionOne
        service_type: compute
        public_url: http://nova:8774/v2/%(tenant_id)s
        internal_url: http://nova:8774/v2/%(tenant_id)s
        admin_url: http://nova:8774/v2/%(tenant_id)s
    users:
      - name: nova
        tenant: service
        password: secret
    role_grants:
      - user: nova
        tenant: service
        role: admin
    ec2_credentials:
      - user: nova
        tenant: service
        admin_tenant: admin
        admin_user: admin
        admin_password: secret
        identity_endpoint: http://keystone:35357/v2.0
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Union

import yaml

from .descriptors import Ec2Credential, Endpoint, Role, RoleGrant, Service, Tenant, User
from .keystone.exceptions import DescriptorError


def _tenant(entry: Dict[str, Any]) -> Tenant:
    return Tenant(entry.get("name"), entry.get("description"), entry.get("enabled", True))


def _service(entry: Dict[str, Any]) -> Service:
    return Service(entry.get("type"), entry.get("name"), entry.get("description"))


def _endpoint(entry: Dict[str, Any]) -> Endpoint:
    return Endpoint(
        entry.get("region"),
        entry.get("service_type"),
        entry.get("public_url"),
        entry.get("internal_url"),
        entry.get("admin_url"),
    )


def _role(entry: Dict[str, Any]) -> Role:
    return Role(entry.get("name"))


def _user(entry: Dict[str, Any]) -> User:
    return User(entry.get("name"), entry.get("tenant"), entry.get("password"), entry.get("enabled", True))


def _role_grant(entry: Dict[str, Any]) -> RoleGrant:
    return RoleGrant(entry.get("user"), entry.get("tenant"), entry.get("role"))


def _ec2_credential(entry: Dict[str, Any]) -> Ec2Credential:
    return Ec2Credential(
        entry.get("user"),
        entry.get("tenant"),
        entry.get("admin_tenant"),
        entry.get("admin_user"),
        entry.get("admin_password"),
        entry.get("identity_endpoint"),
    )


# Section name -> builder, in the order objects must be reconciled.
SECTIONS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "tenants": _tenant,
    "roles": _role,
    "services": _service,
    "endpoints": _endpoint,
    "users": _user,
    "role_grants": _role_grant,
    "ec2_credentials": _ec2_credential,
}


@dataclass
class Manifest:
    """Declared objects grouped by kind."""
    tenants: List[Tenant] = field(default_factory=list)
    roles: List[Role] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)
    endpoints: List[Endpoint] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    role_grants: List[RoleGrant] = field(default_factory=list)
    ec2_credentials: List[Ec2Credential] = field(default_factory=list)

    def ordered(self) -> Iterator[Any]:
        """Yield descriptors so that every object follows the ones it depends on."""
        for section in SECTIONS:
            yield from getattr(self, section)

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "Manifest":
        """Build a manifest from parsed YAML.

        Raises:
            DescriptorError: On unknown sections, non-list sections or bad entries
        """
        data = data or {}
        if not isinstance(data, dict):
            raise DescriptorError("Manifest must be a mapping of sections")
        unknown = sorted(set(data) - set(SECTIONS))
        if unknown:
            raise DescriptorError(f"Unknown manifest section(s): {', '.join(unknown)}")

        manifest = cls()
        for section, build in SECTIONS.items():
            entries = data.get(section) or []
            if not isinstance(entries, list):
                raise DescriptorError(f"Manifest section '{section}' must be a list")
            for index, entry in enumerate(entries):
                if not isinstance(entry, dict):
                    raise DescriptorError(f"{section}[{index}] must be a mapping")
                getattr(manifest, section).append(build(entry))
        return manifest


def load_manifest(path: Union[str, Path]) -> Manifest:
    """Read a YAML manifest file.

    Args:
        path: Manifest location

    Returns:
        Parsed manifest

    Raises:
        DescriptorError: If the YAML is invalid or describes malformed objects
    """
    with Path(path).open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise DescriptorError(f"Invalid manifest {path}: {exc}") from exc
    return Manifest.from_dict(data)
