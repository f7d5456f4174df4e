"""
Ledger Module - Black Box Interface

Purpose: Track which token ids are currently live
Interface: put(), get(), delete(), ttl()
Hidden: Key layout, TTL handling, store client

Replaceable with any key-value store offering per-key expiration.
"""

from .ledger import SessionLedger

__all__ = ["SessionLedger"]
