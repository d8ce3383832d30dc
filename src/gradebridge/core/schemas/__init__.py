"""
Schemas Package

JSON schema definitions and validation for assignment and backup files.
"""

from .validator import (
    validate_assignment,
    validate_backup,
    ValidationError,
)

__all__ = [
    "validate_assignment",
    "validate_backup",
    "ValidationError",
]
