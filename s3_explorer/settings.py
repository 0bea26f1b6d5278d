from __future__ import annotations
"""Application settings persistence helpers."""

from dataclasses import asdict, dataclass
import json
import logging
from pathlib import Path

LOGGER = logging.getLogger(__name__)


@dataclass
class AppSettings:
    """Simple container for persistent explorer settings."""

    max_attempts: int = 3
    fetch_acl: bool = True
    page_size: int = 1000
    region_name: str = ""


def _positive_int(value: object, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number <= 0:
        return default
    return number


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_explorer_settings.json"
        self._path = Path(storage_path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppSettings:
        if not self._path.exists():
            return AppSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            LOGGER.warning("Ignoring unreadable settings file %s", self._path)
            return AppSettings()
        if not isinstance(data, dict):
            return AppSettings()

        fetch_acl = data.get("fetch_acl", AppSettings.fetch_acl)
        region_name = data.get("region_name", AppSettings.region_name)
        return AppSettings(
            max_attempts=_positive_int(data.get("max_attempts"), AppSettings.max_attempts),
            fetch_acl=fetch_acl if isinstance(fetch_acl, bool) else AppSettings.fetch_acl,
            page_size=min(_positive_int(data.get("page_size"), AppSettings.page_size), 1000),
            region_name=region_name if isinstance(region_name, str) else AppSettings.region_name,
        )

    def save(self, settings: AppSettings) -> None:
        payload = asdict(settings)
        payload["max_attempts"] = max(int(settings.max_attempts), 1)
        payload["page_size"] = min(max(int(settings.page_size), 1), 1000)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            LOGGER.warning("Could not write settings file %s", self._path)
            return
