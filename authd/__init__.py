"""
authd - Token Lifecycle Service

Issues, verifies and revokes short-lived credentials for authenticated users.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- credentials: Password hashing and verification
- tokens: Claim sets, token codec and token minting
- ledger: Revocable TTL-backed record of live token ids
- users: User record store adapters
- auth: Request coordination and composition root
- dispatch: Message-queue request listener
- storage: Store connection management
"""

__version__ = "1.0.0"
