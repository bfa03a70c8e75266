"""Model-level validation utilities for data integrity.

Reusable validators that enforce business rules at the ORM level, so
invalid amounts never reach the database regardless of which route or
service writes them.
"""


def non_negative(key: str, value):
    """Validate that a numeric value is >= 0."""
    if value is not None and value < 0:
        raise ValueError(f"{key} cannot be negative, got {value}")
    return value


def positive(key: str, value):
    """Validate that a numeric value is > 0."""
    if value is not None and value <= 0:
        raise ValueError(f"{key} must be positive, got {value}")
    return value
