"""SecureVault Meta information.
   SecureVault is the cryptographic core of a password manager: key
   derivation, vault encryption, session lifecycle and TOTP codes.
"""
__title__ = 'securevault'
__description__ = (
   'Cryptographic vault core: master password key derivation, '
   'AES-GCM vault encryption, auto-locking sessions and TOTP.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2026 SecureVault Developers'
__author__ = 'SecureVault Developers'
__license__ = 'Apache-2.0'
