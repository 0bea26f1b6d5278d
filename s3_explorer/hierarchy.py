from __future__ import annotations
"""Classify listing rows as directories or objects."""
from dataclasses import dataclass

from .models import NodeType, RawEntry

DELIMITER = "/"


class ClassificationError(ValueError):
    """Raised when a listing row has neither a key nor a common prefix."""


@dataclass(frozen=True)
class Classification:
    type: NodeType
    name: str
    full_path: str


def classify(entry: RawEntry, delimiter: str = DELIMITER) -> Classification:
    if not entry.key:
        if not entry.prefix:
            raise ClassificationError("Listing row has neither a key nor a common prefix")
        return Classification(type=NodeType.DIRECTORY, name=entry.prefix, full_path=entry.prefix)
    # Last non-empty segment, so a key like "a/b/" is named "b".
    name = entry.key.rstrip(delimiter).rsplit(delimiter, 1)[-1] if delimiter else entry.key
    return Classification(type=NodeType.OBJECT, name=name, full_path=entry.key)
