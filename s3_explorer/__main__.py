"""Command-line entry point for the S3 explorer."""
import argparse
import logging
import sys

from botocore.exceptions import BotoCoreError, ClientError

from .explorer import Explorer, nodes_to_json
from .formatting import format_node_table, load_package_info
from .hierarchy import ClassificationError
from .profiles import ConfigurationError, ProfileStorage, resolve_connection
from .services import StorageBackend
from .settings import SettingsStorage

LOGGER = logging.getLogger("s3_explorer")


def build_parser() -> argparse.ArgumentParser:
    info = load_package_info()
    parser = argparse.ArgumentParser(prog="s3_explorer", description=info.summary)
    parser.add_argument("bucket", nargs="?", help="Bucket to explore")
    parser.add_argument("--prefix", default="", help="Directory to list, e.g. 'logs/2024/'")
    parser.add_argument("--format", choices=("json", "table"), default="json")
    parser.add_argument("--list-buckets", action="store_true", help="Print bucket names and exit")
    parser.add_argument("--profile", help="Saved connection profile to use")
    parser.add_argument("--settings", help="Path to the settings JSON file")
    parser.add_argument("--connections", help="Path to the connection profiles JSON file")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {info.version or 'dev'}")
    return parser


def build_explorer(args: argparse.Namespace, backend_factory=StorageBackend) -> Explorer:
    settings = SettingsStorage(args.settings).load()
    profile = resolve_connection(storage=ProfileStorage(args.connections), profile_name=args.profile)
    backend = backend_factory(
        endpoint_url=profile.endpoint_url or None,
        access_key=profile.access_key,
        secret_key=profile.secret_key,
        region_name=settings.region_name or None,
        max_attempts=settings.max_attempts,
        page_size=settings.page_size,
        fetch_acl=settings.fetch_acl,
    )
    return Explorer(backend)


def main(argv=None, backend_factory=StorageBackend) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.list_buckets and not args.bucket:
        parser.error("a bucket is required unless --list-buckets is given")

    try:
        explorer = build_explorer(args, backend_factory)
    except (ConfigurationError, BotoCoreError, ValueError) as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        if args.list_buckets:
            print("\n".join(explorer.list_buckets()))
            return 0
        nodes = explorer.explore(args.bucket, args.prefix)
    except (BotoCoreError, ClientError, ClassificationError) as exc:
        LOGGER.exception("Failed to explore %s", args.bucket or "buckets")
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.format == "table":
        output = format_node_table(nodes)
        if output:
            print(output)
    else:
        print(nodes_to_json(nodes, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
