from __future__ import annotations
"""Data models representing listing rows and explorer nodes."""
from dataclasses import dataclass, field
import json
from enum import Enum
from typing import Any, Mapping, Optional, Union


class NodeType(str, Enum):
    DIRECTORY = "DIR"
    OBJECT = "OBJ"


@dataclass(frozen=True)
class AclRule:
    """A single grant on an object."""

    entity: str
    role: str

    def to_dict(self) -> dict[str, str]:
        return {"entity": self.entity, "role": self.role}


@dataclass(frozen=True)
class LifecyclePolicy:
    """Lifecycle rules configured on a bucket."""

    rules: tuple[Mapping[str, Any], ...] = ()

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {"rules": [dict(rule) for rule in self.rules]}

    def __hash__(self) -> int:
        # Rules are plain mappings; hash their canonical JSON form.
        return hash(json.dumps(self.to_dict(), sort_keys=True, default=str))


@dataclass(frozen=True)
class BucketMetadata:
    """Bucket-level attributes returned by a metadata request."""

    name: str
    lifecycle: LifecyclePolicy = field(default_factory=LifecyclePolicy)


@dataclass(frozen=True)
class RawEntry:
    """One row of a listing: either an object key or a common prefix."""

    key: str = ""
    prefix: str = ""
    size: int = 0
    owner: str = ""
    acl: tuple[AclRule, ...] = ()
    version_id: Optional[str] = None
    is_latest: bool = True

    @property
    def is_grouping(self) -> bool:
        return not self.key and bool(self.prefix)


@dataclass(frozen=True)
class DirectoryNode:
    """A common prefix shown as a directory. It has no backing object."""

    bucket: str
    name: str
    full_path: str
    lifecycle: LifecyclePolicy

    @property
    def type(self) -> NodeType:
        return NodeType.DIRECTORY

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucket": self.bucket,
            "ntype": self.type.value,
            "name": self.name,
            "fqpn": self.full_path,
            "acl": [],
            "lifecycle": self.lifecycle.to_dict(),
            "size": 0,
            "owner": "",
        }


@dataclass(frozen=True)
class ObjectNode:
    """A stored object within the current directory level."""

    bucket: str
    name: str
    full_path: str
    lifecycle: LifecyclePolicy
    acl: tuple[AclRule, ...] = ()
    size: int = 0
    owner: str = ""

    @property
    def type(self) -> NodeType:
        return NodeType.OBJECT

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucket": self.bucket,
            "ntype": self.type.value,
            "name": self.name,
            "fqpn": self.full_path,
            "acl": [rule.to_dict() for rule in self.acl],
            "lifecycle": self.lifecycle.to_dict(),
            "size": self.size,
            "owner": self.owner,
        }


Node = Union[DirectoryNode, ObjectNode]
