"""
User record models.

The write-side model carries a plaintext password and is never persisted;
the read-side model carries only the hashed credential.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_email(email: str) -> str:
    return email.strip().lower()


class NewUser(BaseModel):
    """User record as submitted on the write path."""

    email: str = Field(..., min_length=3, max_length=256)
    password: Optional[str] = Field(None, description="Plaintext password, never stored")
    user_id: Optional[str] = Field(None, description="Existing identity, if updating")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        v = normalize_email(v)
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v


class UserRecord(BaseModel):
    """Persisted user record as read by the auth coordinator."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    hashed_credential: str
