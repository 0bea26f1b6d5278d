from __future__ import annotations
"""Single-level directory exploration over a flat bucket namespace."""
import json
import logging
from typing import Iterable, Protocol

from .hierarchy import DELIMITER, classify
from .models import (
    BucketMetadata,
    DirectoryNode,
    LifecyclePolicy,
    Node,
    NodeType,
    ObjectNode,
    RawEntry,
)
from .query import ListingBackend, query_entries


LOGGER = logging.getLogger(__name__)


class ExplorerBackend(ListingBackend, Protocol):
    def get_bucket_metadata(self, bucket_name: str, *, projection: str = "full") -> BucketMetadata: ...

    def list_buckets(self) -> list[str]: ...


def fetch_lifecycle(backend: ExplorerBackend, bucket_name: str) -> LifecyclePolicy:
    """Return the lifecycle policy of ``bucket_name`` from a metadata request."""

    return backend.get_bucket_metadata(bucket_name, projection="full").lifecycle


def build_node(bucket: str, entry: RawEntry, lifecycle: LifecyclePolicy) -> Node:
    classification = classify(entry, DELIMITER)
    if classification.type is NodeType.DIRECTORY:
        return DirectoryNode(
            bucket=bucket,
            name=classification.name,
            full_path=classification.full_path,
            lifecycle=lifecycle,
        )
    return ObjectNode(
        bucket=bucket,
        name=classification.name,
        full_path=classification.full_path,
        lifecycle=lifecycle,
        acl=entry.acl,
        size=entry.size,
        owner=entry.owner,
    )


class Explorer:
    """Presents one directory level of a bucket at a time.

    ``explore(bucket)`` returns the direct children of the bucket root;
    ``explore(bucket, "a/b/")`` returns the direct children of ``a/b/``. The
    prefix is used verbatim, so callers descending into a directory pass the
    DIRECTORY node's ``full_path``, which already ends with the delimiter.
    """

    def __init__(self, backend: ExplorerBackend):
        self._backend = backend

    def explore(self, bucket: str, prefix: str = "") -> list[Node]:
        lifecycle = fetch_lifecycle(self._backend, bucket)
        entries = query_entries(
            self._backend,
            bucket,
            prefix=prefix,
            delimiter=DELIMITER,
            include_versions=False,
            self_ignore=True,
        )
        nodes = [build_node(bucket, entry, lifecycle) for entry in entries]
        LOGGER.debug("Explored %s prefix=%r: %d nodes", bucket, prefix, len(nodes))
        return nodes

    def list_buckets(self) -> list[str]:
        return self._backend.list_buckets()

    def list_bucket(self, bucket: str) -> list[RawEntry]:
        """Return every object in ``bucket`` without directory grouping."""

        return query_entries(self._backend, bucket, prefix="", delimiter="", self_ignore=True)


def nodes_to_json(nodes: Iterable[Node], *, indent: int | None = None) -> str:
    return json.dumps([node.to_dict() for node in nodes], indent=indent, default=str)
