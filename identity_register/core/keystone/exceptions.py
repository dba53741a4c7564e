"""Keystone register exceptions for error handling."""
from __future__ import annotations

from typing import Optional, Sequence


class RegisterError(Exception):
    """Base exception for all register operations."""
    pass


class CommandError(RegisterError):
    """The keystone tool exited with a non-zero status.
    
    Attributes:
        exit_code: Process exit status
        stderr: Standard error captured from the tool
        args_vector: Argument vector that was executed (secrets masked)
    """
    
    def __init__(self, exit_code: int, stderr: str, args_vector: Optional[Sequence[str]] = None):
        self.exit_code = exit_code
        self.stderr = stderr
        self.args_vector = list(args_vector or [])
        super().__init__(f"{stderr.strip()} ({exit_code})")


class ParseError(RegisterError):
    """Tabular output did not have the expected row/column shape."""
    pass


class DescriptorError(RegisterError, ValueError):
    """Declared object is missing a required attribute or is malformed."""
    pass


class ObjectNotFoundError(RegisterError):
    """An object the declared one depends on does not exist."""
    pass


class TenantNotFoundError(ObjectNotFoundError):
    """Tenant does not exist."""
    pass


class UserNotFoundError(ObjectNotFoundError):
    """User does not exist (optionally within a tenant)."""
    pass


class RoleNotFoundError(ObjectNotFoundError):
    """Role does not exist."""
    pass


class ServiceNotFoundError(ObjectNotFoundError):
    """No catalog service is registered for the service type."""
    pass
