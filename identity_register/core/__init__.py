"""Core reconciliation logic.

Module Structure:
    - keystone/       : keystone CLI invoker, table parser and per-kind reconcilers
    - descriptors.py  : immutable declarations of identity objects
    - manifest.py     : YAML manifest loading
    - register.py     : reconciliation facade with the mutation flag

Import explicitly when needed:
    from identity_register.core.register import IdentityRegister
    from identity_register.core.manifest import load_manifest
    from identity_register.core.descriptors import Tenant, User
"""
