"""Core utilities: JSON (de)serialization of assignments and backups."""

from .serialization import (
    LoaderError,
    deserialize_assignment,
    load_assignment,
    load_submission_backup,
    serialize_assignment,
    write_submission_backup,
)

__all__ = [
    "LoaderError",
    "deserialize_assignment",
    "load_assignment",
    "load_submission_backup",
    "serialize_assignment",
    "write_submission_backup",
]
