"""Base Pydantic models for plan elements.

This module defines the foundational model classes used by capability
records, capability tables, and compiled plans. It enforces immutability
and strict schema validation so that a compiled plan is a plain value
that can be compared, hashed, and handed to an external renderer.
"""

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for all plan elements.

    Design principles enforced by this model:
        - Immutability: elements cannot be modified after creation.
          Two elements with the same field values are equal, which is
          what teardown deduplication relies on.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos in capability tables.
        - Dual naming: fields may be populated either by their Python
          name or by their camel-cased YAML alias.

    All plan models must inherit from this class.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='forbid',
        populate_by_name=True,
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
        - Tolerant schema handling: unknown environment variables are
          ignored so the surrounding environment can hold anything.

    All runtime settings models must inherit from this class.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
