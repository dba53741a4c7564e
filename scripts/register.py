"""Register identity objects through the keystone CLI.

This module serves as a CLI wrapper around identity_register.core services.
"""
from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from identity_register.config import RegisterConfig, load_settings
from identity_register.core.descriptors import (
    Ec2Credential,
    Endpoint,
    Role,
    RoleGrant,
    Service,
    Tenant,
    User,
)
from identity_register.core.keystone import KeystoneCommand, RegisterError
from identity_register.core.manifest import load_manifest
from identity_register.core.register import IdentityRegister
from scripts import audit

AUDIT_KINDS = {
    "apply": "manifest",
    "tenant": "tenant",
    "service": "service",
    "endpoint": "endpoint",
    "role": "role",
    "user": "user",
    "grant-role": "role-grant",
    "ec2-credentials": "ec2-credentials",
}


def create_register(config: RegisterConfig) -> IdentityRegister:
    """Build a register that runs the real keystone tool."""
    return IdentityRegister(KeystoneCommand.from_config(config), config)


def build_parser(defaults: RegisterConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Keystone identity register")
    parser.add_argument("--keystone", default=defaults.keystone_command, help="keystone executable")
    parser.add_argument("--insecure", action="store_true", default=defaults.insecure)
    parser.add_argument("--catalog-backend", default=defaults.catalog_backend)
    parser.add_argument("--service-endpoint", default=defaults.service_endpoint)
    parser.add_argument("--service-token", default=defaults.service_token)
    parser.add_argument("--auth-url", default=defaults.auth_url,
                       help="Identity endpoint used to check user passwords")
    parser.add_argument("--log-level", default=defaults.log_level)
    parser.add_argument("--operator", default="automation",
                       help="Operator identifier for audit logs (default: automation)")

    sub = parser.add_subparsers(dest="cmd")

    sa = sub.add_parser("apply")
    sa.add_argument("--manifest", required=True)

    st = sub.add_parser("tenant")
    st.add_argument("--name", required=True)
    st.add_argument("--description")
    st.add_argument("--disabled", action="store_true")

    ss = sub.add_parser("service")
    ss.add_argument("--type", required=True)
    ss.add_argument("--name", required=True)
    ss.add_argument("--description")

    se = sub.add_parser("endpoint")
    se.add_argument("--region", required=True)
    se.add_argument("--service-type", required=True)
    se.add_argument("--public-url", required=True)
    se.add_argument("--internal-url", required=True)
    se.add_argument("--admin-url", required=True)

    sr = sub.add_parser("role")
    sr.add_argument("--name", required=True)

    su = sub.add_parser("user")
    su.add_argument("--name", required=True)
    su.add_argument("--tenant", required=True)
    su.add_argument("--password", default=os.environ.get("REGISTER_USER_PASSWORD"))
    su.add_argument("--disabled", action="store_true")

    sg = sub.add_parser("grant-role")
    sg.add_argument("--user", required=True)
    sg.add_argument("--tenant", required=True)
    sg.add_argument("--role", required=True)

    sc = sub.add_parser("ec2-credentials")
    sc.add_argument("--user", required=True)
    sc.add_argument("--tenant", required=True)
    sc.add_argument("--admin-tenant", default=os.environ.get("OS_TENANT_NAME", "admin"))
    sc.add_argument("--admin-user", default=os.environ.get("OS_USERNAME", "admin"))
    sc.add_argument("--admin-password", default=os.environ.get("OS_PASSWORD"))
    sc.add_argument("--identity-endpoint", default=defaults.auth_url)

    return parser


def descriptor_from_args(args: argparse.Namespace):
    """Translate a per-kind sub-command into its descriptor."""
    if args.cmd == "tenant":
        return Tenant(args.name, args.description, not args.disabled)
    if args.cmd == "service":
        return Service(args.type, args.name, args.description)
    if args.cmd == "endpoint":
        return Endpoint(args.region, args.service_type, args.public_url, args.internal_url, args.admin_url)
    if args.cmd == "role":
        return Role(args.name)
    if args.cmd == "user":
        return User(args.name, args.tenant, args.password, not args.disabled)
    if args.cmd == "grant-role":
        return RoleGrant(args.user, args.tenant, args.role)
    if args.cmd == "ec2-credentials":
        return Ec2Credential(
            args.user, args.tenant, args.admin_tenant, args.admin_user,
            args.admin_password, args.identity_endpoint,
        )
    raise ValueError(f"Unknown command: {args.cmd}")


def _subject(args: argparse.Namespace) -> str:
    if args.cmd == "apply":
        return args.manifest
    if args.cmd == "service":
        return args.type
    if args.cmd == "endpoint":
        return f"{args.service_type}@{args.region}"
    if args.cmd in ("grant-role", "ec2-credentials"):
        return args.user
    return args.name


def main() -> None:
    """Command-line entry point."""
    parser = build_parser(load_settings())
    args = parser.parse_args()

    if not args.cmd:
        parser.print_help()
        return

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = RegisterConfig(
            keystone_command=args.keystone,
            insecure=args.insecure,
            catalog_backend=args.catalog_backend,
            service_endpoint=args.service_endpoint,
            service_token=args.service_token,
            auth_url=args.auth_url,
            log_level=args.log_level,
        )
    except ValueError as e:
        parser.error(str(e))

    kind = AUDIT_KINDS[args.cmd]
    subject = _subject(args)
    register = create_register(config)
    try:
        if args.cmd == "apply":
            changed = register.apply(load_manifest(args.manifest))
        else:
            changed = register.ensure(descriptor_from_args(args))
    except (RegisterError, OSError) as e:
        print(f"[{kind}] Error: {e}", file=sys.stderr)
        audit.safe_log_register_event(
            kind,
            subject,
            operator=args.operator,
            details={"error": str(e)},
            success=False,
        )
        sys.exit(1)

    audit.safe_log_register_event(
        kind,
        subject,
        operator=args.operator,
        changed=changed,
        details={"ec2_issued": sorted(register.issued_ec2_credentials)} if register.issued_ec2_credentials else None,
    )

    print("changed" if changed else "unchanged")
    for user_name, keys in register.issued_ec2_credentials.items():
        print(json.dumps({"user": user_name, "access": keys.access, "secret": keys.secret}))


if __name__ == "__main__":
    main()
