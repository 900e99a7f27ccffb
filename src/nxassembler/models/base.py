"""
Base model for all layout value types.

Provides the shared pydantic configuration: instances are immutable
once created and serialize to plain dicts and JSON.
"""

from pydantic import BaseModel, ConfigDict


class LayoutModel(BaseModel):
    """
    Base model for immutable layout values.

    Provides:
    - Frozen instances (hashable, no assignment after creation)
    - Strict rejection of unknown fields
    - JSON serialization helpers
    """

    model_config = ConfigDict(
        # Values are created once and never mutated
        frozen=True,
        # Reject misspelled keys instead of silently dropping them
        extra="forbid",
        # Populate by field name or alias
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self) -> str:
        """Convert to JSON string."""
        return self.model_dump_json(exclude_none=True)
