from __future__ import annotations
"""Storage backend for S3-compatible services."""
import heapq
import logging
from typing import Callable, Iterator

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from .models import AclRule, BucketMetadata, LifecyclePolicy, RawEntry


LOGGER = logging.getLogger(__name__)

PAGE_SIZE = 1000
DEFAULT_MAX_ATTEMPTS = 3
NO_LIFECYCLE_CODES = {"NoSuchLifecycleConfiguration"}


class StorageBackend:
    """Read-only access to buckets, listings and bucket metadata.

    A single instance wraps one boto3 client and may be shared by concurrent
    callers. Retries are handled by botocore's ``standard`` retry mode; every
    call made here is an idempotent read.
    """

    def __init__(
        self,
        *,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        region_name: str | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        page_size: int = PAGE_SIZE,
        fetch_acl: bool = True,
        client_factory: Callable[..., object] | None = None,
    ):
        self._client_factory = client_factory or boto3.client
        self._page_size = max(1, min(int(page_size), PAGE_SIZE))
        self._fetch_acl = fetch_acl
        self._client = self._create_client(
            endpoint_url=endpoint_url,
            access_key=access_key,
            secret_key=secret_key,
            region_name=region_name,
            max_attempts=max_attempts,
        )

    @property
    def client(self):
        return self._client

    def _create_client(
        self,
        *,
        endpoint_url: str | None,
        access_key: str | None,
        secret_key: str | None,
        region_name: str | None,
        max_attempts: int,
    ):
        config = Config(
            signature_version="s3v4",
            retries={"max_attempts": max(int(max_attempts), 1), "mode": "standard"},
        )
        kwargs = {"config": config}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
        if region_name:
            kwargs["region_name"] = region_name
        return self._client_factory("s3", **kwargs)

    def list_buckets(self) -> list[str]:
        """Return the available bucket names."""

        response = self._client.list_buckets()
        return [bucket["Name"] for bucket in response.get("Buckets", [])]

    def list_objects(
        self,
        bucket_name: str,
        *,
        prefix: str = "",
        delimiter: str = "",
        include_versions: bool = False,
    ) -> Iterator[RawEntry]:
        """Yield listing rows for ``bucket_name`` across every result page.

        Rows within a page come out in key order, with common prefixes merged
        between object keys the way the service sorts them.

        Raises:
            BotoCoreError | ClientError: when a page cannot be fetched.
        """
        if include_versions:
            return self._iter_versions(bucket_name, prefix=prefix, delimiter=delimiter)
        return self._iter_objects(bucket_name, prefix=prefix, delimiter=delimiter)

    def get_bucket_metadata(self, bucket_name: str, *, projection: str = "full") -> BucketMetadata:
        """Fetch bucket attributes, including its lifecycle policy.

        A bucket without lifecycle configuration gets an empty policy.
        """
        if projection != "full":
            raise ValueError("projection must be 'full'")

        LOGGER.debug("Fetching lifecycle configuration for bucket %s", bucket_name)
        try:
            response = self._client.get_bucket_lifecycle_configuration(Bucket=bucket_name)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code not in NO_LIFECYCLE_CODES:
                raise
            LOGGER.debug("Bucket %s has no lifecycle configuration", bucket_name)
            return BucketMetadata(name=bucket_name, lifecycle=LifecyclePolicy())
        rules = tuple(dict(rule) for rule in response.get("Rules", []))
        return BucketMetadata(name=bucket_name, lifecycle=LifecyclePolicy(rules=rules))

    def _iter_objects(self, bucket_name: str, *, prefix: str, delimiter: str) -> Iterator[RawEntry]:
        request_token: str | None = None
        page_number = 1
        while True:
            list_params = {"Bucket": bucket_name, "MaxKeys": self._page_size, "FetchOwner": True}
            if prefix:
                list_params["Prefix"] = prefix
            if delimiter:
                list_params["Delimiter"] = delimiter
            if request_token:
                list_params["ContinuationToken"] = request_token

            LOGGER.debug("Listing %s prefix=%r page=%d", bucket_name, prefix, page_number)
            response = self._client.list_objects_v2(**list_params)
            objects = (
                (obj["Key"], self._object_entry(bucket_name, obj))
                for obj in response.get("Contents", [])
            )
            groupings = (
                (common["Prefix"], RawEntry(prefix=common["Prefix"]))
                for common in response.get("CommonPrefixes", [])
            )
            for _, entry in heapq.merge(objects, groupings, key=lambda row: row[0]):
                yield entry

            request_token = response.get("NextContinuationToken")
            if not response.get("IsTruncated", False) or not request_token:
                break
            page_number += 1

    def _iter_versions(self, bucket_name: str, *, prefix: str, delimiter: str) -> Iterator[RawEntry]:
        key_marker: str | None = None
        version_marker: str | None = None
        while True:
            list_params = {"Bucket": bucket_name, "MaxKeys": self._page_size}
            if prefix:
                list_params["Prefix"] = prefix
            if delimiter:
                list_params["Delimiter"] = delimiter
            if key_marker:
                list_params["KeyMarker"] = key_marker
            if version_marker:
                list_params["VersionIdMarker"] = version_marker

            LOGGER.debug("Listing versions of %s prefix=%r", bucket_name, prefix)
            response = self._client.list_object_versions(**list_params)
            versions = (
                (version["Key"], self._object_entry(bucket_name, version))
                for version in response.get("Versions", [])
            )
            groupings = (
                (common["Prefix"], RawEntry(prefix=common["Prefix"]))
                for common in response.get("CommonPrefixes", [])
            )
            for _, entry in heapq.merge(versions, groupings, key=lambda row: row[0]):
                yield entry

            if not response.get("IsTruncated", False):
                break
            key_marker = response.get("NextKeyMarker")
            version_marker = response.get("NextVersionIdMarker")
            if not key_marker:
                break

    def _object_entry(self, bucket_name: str, obj: dict) -> RawEntry:
        owner = obj.get("Owner") or {}
        version_id = obj.get("VersionId")
        acl = self._get_object_acl(bucket_name, obj["Key"], version_id) if self._fetch_acl else ()
        return RawEntry(
            key=obj["Key"],
            size=int(obj.get("Size") or 0),
            owner=owner.get("DisplayName") or owner.get("ID") or "",
            acl=acl,
            version_id=version_id,
            is_latest=obj.get("IsLatest", True),
        )

    def _get_object_acl(self, bucket_name: str, key: str, version_id: str | None) -> tuple[AclRule, ...]:
        params = {"Bucket": bucket_name, "Key": key}
        if version_id and version_id != "null":
            params["VersionId"] = version_id
        response = self._client.get_object_acl(**params)
        return tuple(
            AclRule(entity=_grantee_name(grant.get("Grantee") or {}), role=grant.get("Permission", ""))
            for grant in response.get("Grants", [])
        )


def _grantee_name(grantee: dict) -> str:
    for field_name in ("DisplayName", "ID", "EmailAddress", "URI"):
        value = grantee.get(field_name)
        if value:
            return value
    return ""
