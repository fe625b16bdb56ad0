"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

import uuid
from pydantic import BaseModel, Field, field_validator, ConfigDict


class UserId(BaseModel):
    """
    User ID value object.

    Example:
        >>> user_id = UserId(value="user_123")
        >>> assert str(user_id) == "user_123"
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., min_length=1, description="User identifier")

    @field_validator("value")
    @classmethod
    def not_empty(cls, v: str) -> str:
        """Ensure not empty or whitespace."""
        if not v.strip():
            raise ValueError("UserId cannot be empty or whitespace")
        return v.strip()

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"UserId('{self.value}')"

    def __hash__(self) -> int:
        return hash(self.value)


class RecordId(BaseModel):
    """
    Analysis record ID value object.

    Format: "analysis_<12_hex_chars>"

    Example:
        >>> record_id = RecordId.generate()
        >>> assert record_id.value.startswith("analysis_")
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(
        ...,
        pattern=r"^analysis_[a-f0-9]{12}$",
        description="Analysis record identifier",
    )

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"RecordId('{self.value}')"

    def __hash__(self) -> int:
        return hash(self.value)

    @classmethod
    def generate(cls) -> RecordId:
        """Generate a new random record ID."""
        return cls(value=f"analysis_{uuid.uuid4().hex[:12]}")
