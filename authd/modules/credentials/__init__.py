"""
Credentials Module - Black Box Interface

Purpose: Hash and verify user passwords
Interface: hash_password(), verify_password(), CredentialVerifier
Hidden: Hash algorithm, cost factor, salt handling

Replaceable with any slow salted one-way hash (argon2, scrypt).
"""

from .hashing import CredentialVerifier, hash_password, is_hashed, verify_password

__all__ = ["CredentialVerifier", "hash_password", "is_hashed", "verify_password"]
