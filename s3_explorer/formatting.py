from __future__ import annotations
"""Text helpers for command-line output."""
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, metadata, version
from typing import Iterable

from .models import Node, NodeType

DIST_NAME = "s3-explorer"


@dataclass(frozen=True)
class PackageInfo:
    name: str
    version: str
    summary: str


def load_package_info(dist_name: str = DIST_NAME) -> PackageInfo:
    try:
        distribution_metadata = metadata(dist_name)
        package_version = version(dist_name)
    except PackageNotFoundError:
        return PackageInfo(
            name="S3 Explorer",
            version="",
            summary="Browse a bucket one directory level at a time.",
        )
    return PackageInfo(
        name=distribution_metadata.get("Name"),
        version=package_version,
        summary=distribution_metadata.get("Summary") or "",
    )


def format_size(size: int | None) -> str:
    if size is None:
        return "-"
    suffixes = ["B", "KB", "MB", "GB", "TB"]
    value = float(max(size, 0))
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}" if suffix != "B" else f"{int(value)} {suffix}"
        value /= 1024


def format_node_table(nodes: Iterable[Node]) -> str:
    """Render nodes as aligned ``TYPE  SIZE  OWNER  PATH`` rows."""

    rows = []
    for node in nodes:
        if node.type is NodeType.DIRECTORY:
            rows.append((node.type.value, "-", "-", node.full_path))
        else:
            rows.append((node.type.value, format_size(node.size), node.owner or "-", node.full_path))
    if not rows:
        return ""
    widths = [max(len(row[column]) for row in rows) for column in range(3)]
    return "\n".join(
        "  ".join(cell.ljust(width) for cell, width in zip(row[:3], widths)) + "  " + row[3]
        for row in rows
    )
