"""
Command-line interface for the Riak client.

Provides commands for reading, writing and querying keys in a bucket.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Dict, List

import structlog

from riakclient import __version__
from riakclient.config import RiakConfig, set_config
from riakclient.core.client import RiakClient
from riakclient.core.errors import RiakError


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Logs go to stderr so command output on stdout stays valid JSON
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        stream=sys.stderr,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="riak-client",
        description="Command-line access to a Riak bucket over HTTP",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--bucket", help="Bucket name (default: $SZ_RIAK_BUCKET)")
    parser.add_argument("--host", help="Riak host (default: $SZ_RIAK_HOST or 127.0.0.1)")
    parser.add_argument("--port", type=int, help="Riak HTTP port (default: $SZ_RIAK_PORT or 8098)")
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Maximum requests in flight for batch commands (default: 20)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=None,
        help="Output logs in JSON format",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    get_parser = subparsers.add_parser("get", help="Fetch a key")
    get_parser.add_argument("key")

    put_parser = subparsers.add_parser("put", help="Store a value")
    put_parser.add_argument("key")
    put_parser.add_argument("body", help="Value to store")
    put_parser.add_argument(
        "--json",
        action="store_true",
        help="Parse BODY as JSON and store it as application/json",
    )
    put_parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Extra request header (repeatable)",
    )

    delete_parser = subparsers.add_parser("delete", help="Delete a key")
    delete_parser.add_argument("key")

    batch_parser = subparsers.add_parser("batch-get", help="Fetch several keys")
    batch_parser.add_argument("keys", nargs="+")

    index_parser = subparsers.add_parser("index", help="Query a secondary index")
    index_parser.add_argument("name", help="Index name, e.g. email_bin or age_int")
    index_parser.add_argument("value", help="Exact value or range start")
    index_parser.add_argument("end", nargs="?", help="Range end")
    index_parser.add_argument("--return-terms", action="store_true", default=None)
    index_parser.add_argument("--max-results", type=int)
    index_parser.add_argument("--continuation")

    return parser


def build_config(args: argparse.Namespace) -> RiakConfig:
    """Build configuration from the arguments that were given; the rest comes from the environment."""
    overrides = {
        "bucket": args.bucket,
        "host": args.host,
        "port": args.port,
        "concurrency_limit": args.concurrency,
        "log_level": args.log_level,
        "log_json": args.log_json,
    }
    return RiakConfig(**{name: value for name, value in overrides.items() if value is not None})


def parse_headers(values: List[str]) -> Dict[str, str]:
    """Parse NAME:VALUE pairs."""
    headers = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise argparse.ArgumentTypeError(f"Invalid header: {value}")
        headers[name.strip()] = content.strip()
    return headers


async def run_command(args: argparse.Namespace, client: RiakClient) -> object:
    """Run a command and return its JSON-serializable output."""
    if args.command == "get":
        value = await client.get(args.key)
        return value.to_dict()

    if args.command == "put":
        body = json.loads(args.body) if args.json else args.body
        value = await client.put(args.key, body, parse_headers(args.header))
        return value.to_dict()

    if args.command == "delete":
        await client.delete(args.key)
        return {"deleted": args.key}

    if args.command == "batch-get":
        results = await client.batch_get(args.keys)
        return [r.value.to_dict() for r in results]

    if args.command == "index":
        result = await client.query_index(
            args.name,
            args.value,
            args.end,
            return_terms=args.return_terms,
            max_results=args.max_results,
            continuation=args.continuation,
        )
        return {
            "keys": result.keys,
            "results": [{term: key} for term, key in result.results],
            "continuation": result.continuation,
        }

    raise ValueError(f"Unknown command: {args.command}")


async def execute(args: argparse.Namespace, config: RiakConfig) -> object:
    async with RiakClient(config=config) as client:
        return await run_command(args, client)


def main(argv: List[str] = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = build_config(args)
    set_config(config)

    # Setup logging
    setup_logging(config.log_level, config.log_json)

    try:
        output = asyncio.run(execute(args, config))
    except (RiakError, argparse.ArgumentTypeError, json.JSONDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
