from __future__ import annotations
"""Scoped listing queries with self-reference filtering."""
import logging
from typing import Iterator, Protocol

from .models import RawEntry


LOGGER = logging.getLogger(__name__)


class ListingBackend(Protocol):
    def list_objects(
        self,
        bucket_name: str,
        *,
        prefix: str = "",
        delimiter: str = "",
        include_versions: bool = False,
    ) -> Iterator[RawEntry]: ...


def is_self_reference(entry: RawEntry, prefix: str, delimiter: str = "/") -> bool:
    """Return True when ``entry`` describes the queried prefix itself.

    Grouping rows that echo the prefix qualify, as does the placeholder object
    some tools create under a directory prefix's own key (``logs/``).
    """
    if not prefix:
        return False
    if entry.is_grouping:
        return entry.prefix == prefix
    return bool(delimiter) and prefix.endswith(delimiter) and entry.key == prefix


class ListingQuery:
    """Lazy, restartable view of one scoped listing.

    Each iteration issues a fresh request to the backend, so the query can be
    consumed more than once.
    """

    def __init__(
        self,
        backend: ListingBackend,
        bucket_name: str,
        *,
        prefix: str = "",
        delimiter: str = "",
        include_versions: bool = False,
        self_ignore: bool = True,
    ):
        self.backend = backend
        self.bucket_name = bucket_name
        self.prefix = prefix
        self.delimiter = delimiter
        self.include_versions = include_versions
        self.self_ignore = self_ignore

    def __iter__(self) -> Iterator[RawEntry]:
        rows = self.backend.list_objects(
            self.bucket_name,
            prefix=self.prefix,
            delimiter=self.delimiter,
            include_versions=self.include_versions,
        )
        for entry in rows:
            if self.self_ignore and is_self_reference(entry, self.prefix, self.delimiter):
                LOGGER.debug("Skipping self reference %r in %s", self.prefix, self.bucket_name)
                continue
            yield entry

    def fetch(self) -> list[RawEntry]:
        """Drain every page into a list; errors propagate with nothing returned."""

        entries = list(self)
        LOGGER.debug(
            "Listed %d entries in %s prefix=%r delimiter=%r",
            len(entries),
            self.bucket_name,
            self.prefix,
            self.delimiter,
        )
        return entries


def query_entries(
    backend: ListingBackend,
    bucket_name: str,
    prefix: str = "",
    delimiter: str = "",
    include_versions: bool = False,
    self_ignore: bool = True,
) -> list[RawEntry]:
    """List ``bucket_name`` under ``prefix`` and return every row.

    Examples:
        - direct children of the bucket root: ``query_entries(b, "test", "", "/")``
        - direct children of ``test-1/``: ``query_entries(b, "test", "test-1/", "/")``
        - every key in the bucket: ``query_entries(b, "test", "", "")``
    """
    return ListingQuery(
        backend,
        bucket_name,
        prefix=prefix,
        delimiter=delimiter,
        include_versions=include_versions,
        self_ignore=self_ignore,
    ).fetch()
