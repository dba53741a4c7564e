"""Identity register package.

To reconcile declared objects:
    from identity_register.core.register import IdentityRegister

To use the keystone CLI wrapper directly:
    from identity_register.core.keystone import KeystoneCommand, parse_table
"""
