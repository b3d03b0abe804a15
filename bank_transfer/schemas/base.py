# ==============================================================================
# BASE SCHEMAS - Common Schema Patterns
# ==============================================================================

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    All schemas inherit from this class to ensure consistent
    validation and serialization behavior.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )
