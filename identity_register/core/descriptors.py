"""Declared identity objects.

Each descriptor is an immutable attribute bag for one object kind. Required
attributes are checked on construction so that no keystone command is ever
built from an incomplete declaration.
"""
from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Optional

from .keystone.exceptions import DescriptorError


def require_text(value, field: str, kind: str) -> str:
    """Validate a required string attribute.

    Args:
        value: Declared value
        field: Attribute name for error messages
        kind: Object kind for error messages

    Returns:
        The value, unchanged

    Raises:
        DescriptorError: If the value is missing, empty or not a string
    """
    if value is None or not isinstance(value, str) or not value.strip():
        raise DescriptorError(f"{kind} requires a non-empty '{field}'")
    return value


def _check(descriptor, kind: str, optional: tuple = ()) -> None:
    for f in fields(descriptor):
        value = getattr(descriptor, f.name)
        if f.type in ("bool", bool):
            if not isinstance(value, bool):
                raise DescriptorError(f"{kind} '{f.name}' must be a boolean")
            continue
        if f.name in optional:
            if value is not None and not isinstance(value, str):
                raise DescriptorError(f"{kind} '{f.name}' must be a string")
            continue
        require_text(value, f.name, kind)


@dataclass(frozen=True)
class Tenant:
    name: str
    description: Optional[str] = None
    enabled: bool = True

    def __post_init__(self):
        _check(self, "tenant", optional=("description",))


@dataclass(frozen=True)
class Service:
    type: str
    name: str
    description: Optional[str] = None

    def __post_init__(self):
        _check(self, "service", optional=("description",))


@dataclass(frozen=True)
class Endpoint:
    region: str
    service_type: str
    public_url: str
    internal_url: str
    admin_url: str

    def __post_init__(self):
        _check(self, "endpoint")


@dataclass(frozen=True)
class Role:
    name: str

    def __post_init__(self):
        _check(self, "role")


@dataclass(frozen=True)
class User:
    name: str
    tenant_name: str
    password: str
    enabled: bool = True

    def __post_init__(self):
        _check(self, "user")

    def __repr__(self) -> str:
        return f"User(name={self.name!r}, tenant_name={self.tenant_name!r}, enabled={self.enabled!r})"


@dataclass(frozen=True)
class RoleGrant:
    user_name: str
    tenant_name: str
    role_name: str

    def __post_init__(self):
        _check(self, "role grant")


@dataclass(frozen=True)
class Ec2Credential:
    """Access/secret key pair request for a user.

    Keys are created in an administrative context, so the admin identity and
    the identity endpoint it authenticates against are part of the declaration.
    """
    user_name: str
    tenant_name: str
    admin_tenant_name: str
    admin_user: str
    admin_password: str
    identity_endpoint: str

    def __post_init__(self):
        _check(self, "ec2 credential")

    def __repr__(self) -> str:
        return (
            f"Ec2Credential(user_name={self.user_name!r}, tenant_name={self.tenant_name!r}, "
            f"admin_user={self.admin_user!r})"
        )
