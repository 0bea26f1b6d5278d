from __future__ import annotations
"""Connection profiles, keychain secrets and startup credential checks."""
from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
from typing import Mapping

import keyring
from keyring.errors import KeyringError

LOGGER = logging.getLogger(__name__)

KEYCHAIN_SERVICE = "s3_explorer"
PROFILE_ENV = "S3_EXPLORER_PROFILE"
ACCESS_KEY_ENV = "AWS_ACCESS_KEY_ID"
SECRET_KEY_ENV = "AWS_SECRET_ACCESS_KEY"
ENDPOINT_ENV = "S3_ENDPOINT_URL"


class ConfigurationError(RuntimeError):
    """Raised when no usable credentials can be resolved at startup."""


@dataclass
class ConnectionProfile:
    """Credentials and endpoint for one S3-compatible service."""

    name: str
    endpoint_url: str
    access_key: str
    secret_key: str


class KeychainStore:
    """Reads and writes profile secrets in the OS keychain."""

    def __init__(self, service_name: str = KEYCHAIN_SERVICE):
        self._service_name = service_name

    def get_secret(self, profile_name: str) -> str:
        if not profile_name:
            return ""
        try:
            return keyring.get_password(self._service_name, profile_name) or ""
        except KeyringError:
            LOGGER.warning("Keychain lookup failed for profile %s", profile_name)
            return ""

    def set_secret(self, profile_name: str, secret_key: str) -> None:
        if not profile_name:
            return
        if not secret_key:
            self.delete_secret(profile_name)
            return
        try:
            keyring.set_password(self._service_name, profile_name, secret_key)
        except KeyringError:
            LOGGER.warning("Could not store secret for profile %s", profile_name)

    def delete_secret(self, profile_name: str) -> None:
        if not profile_name:
            return
        try:
            keyring.delete_password(self._service_name, profile_name)
        except KeyringError:
            return


class ProfileStorage:
    """JSON file of profiles; secrets live in the keychain, never in the file."""

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_explorer_connections.json"
        self._path = Path(storage_path)
        self._keychain = keychain or KeychainStore()

    def load(self) -> list[ConnectionProfile]:
        profiles: list[ConnectionProfile] = []
        sanitized: list[dict[str, str]] = []
        migrated = False
        for entry in self._read_entries():
            try:
                name = entry["name"]
                endpoint_url = entry["endpoint_url"]
                access_key = entry["access_key"]
            except (KeyError, TypeError):
                continue
            secret_key = entry.get("secret_key", "")
            if secret_key:
                migrated = True
                self._keychain.set_secret(name, secret_key)
            else:
                secret_key = self._keychain.get_secret(name)
            profiles.append(ConnectionProfile(name, endpoint_url, access_key, secret_key))
            sanitized.append({"name": name, "endpoint_url": endpoint_url, "access_key": access_key})
        if migrated:
            LOGGER.info("Moved plaintext secrets from %s into the keychain", self._path)
            self._write_data(sanitized)
        return profiles

    def get(self, name: str) -> ConnectionProfile:
        for profile in self.load():
            if profile.name == name:
                return profile
        raise ConfigurationError(f"Profile '{name}' does not exist")

    def save(self, profiles: list[ConnectionProfile]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        stale = {entry.get("name") for entry in self._read_entries() if isinstance(entry, dict)}
        data = []
        for profile in profiles:
            self._keychain.set_secret(profile.name, profile.secret_key)
            stale.discard(profile.name)
            data.append(
                {
                    "name": profile.name,
                    "endpoint_url": profile.endpoint_url,
                    "access_key": profile.access_key,
                }
            )
        for name in sorted(n for n in stale if isinstance(n, str) and n):
            self._keychain.delete_secret(name)
        self._write_data(data)

    def _read_entries(self) -> list:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return []
        return data if isinstance(data, list) else []

    def _write_data(self, data: list[dict[str, str]]) -> None:
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def resolve_connection(
    environ: Mapping[str, str] | None = None,
    storage: ProfileStorage | None = None,
    profile_name: str | None = None,
) -> ConnectionProfile:
    """Resolve the credentials to use from a named profile or the environment.

    A profile named explicitly or through ``S3_EXPLORER_PROFILE`` wins; otherwise
    ``AWS_ACCESS_KEY_ID`` and ``AWS_SECRET_ACCESS_KEY`` must both be set.

    Raises:
        ConfigurationError: when neither source yields complete credentials.
    """
    environ = os.environ if environ is None else environ
    name = profile_name or environ.get(PROFILE_ENV, "")
    if name:
        profile = (storage or ProfileStorage()).get(name)
        if not profile.secret_key:
            raise ConfigurationError(f"Profile '{name}' has no secret key in the keychain")
        return profile

    access_key = environ.get(ACCESS_KEY_ENV, "")
    secret_key = environ.get(SECRET_KEY_ENV, "")
    if not access_key or not secret_key:
        raise ConfigurationError(
            f"{PROFILE_ENV} or both {ACCESS_KEY_ENV} and {SECRET_KEY_ENV} must be set"
        )
    return ConnectionProfile(
        name="environment",
        endpoint_url=environ.get(ENDPOINT_ENV, ""),
        access_key=access_key,
        secret_key=secret_key,
    )
