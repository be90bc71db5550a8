"""
Entry point for the flexmls client: performs a single API request.
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

from .application.domain import PaginatedCollection, ResponseCollection
from .application.exceptions import FlexmlsError
from .infrastructure.containers import Container

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Applies basic logging configuration."""
    logging.basicConfig(level=level)


def key_value(pair: str):
    """Parses a KEY=VALUE command line argument."""
    key, sep, value = pair.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got {pair!r}")
    return key, value


def to_jsonable(result):
    """Converts a request result into plain JSON-compatible data."""
    if isinstance(result, PaginatedCollection):
        paging = {
            field.name: getattr(result, field.name)
            for field in dataclasses.fields(result)
            if field.name not in ("results", "details")
        }
        return {
            "results": list(result),
            "details": list(result.details),
            "pagination": paging,
        }
    if isinstance(result, ResponseCollection):
        return {"results": list(result), "details": list(result.details)}
    return result


async def run_application(args: argparse.Namespace):
    """Wires the client using the DI container and performs the request."""

    container = Container()
    setup_logging(level=container.config().logging.level)

    options = dict(args.param or [])
    if args.count:
        options["_pagination"] = "count"
    body = json.loads(args.data) if args.data else None

    try:
        client = container.api_client()
        method = args.method.lower()
        if method in ("post", "put"):
            result = await getattr(client, method)(args.path, body, options)
        else:
            result = await getattr(client, method)(args.path, options)
    except FlexmlsError as e:
        logger.error(f"An application error occurred: {e!r}")
        sys.exit(1)
    finally:
        await container.http_client().aclose()

    print(json.dumps(to_jsonable(result), indent=2))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="flexmls API client")

    parser.add_argument(
        "method",
        type=str.upper,
        choices=["GET", "POST", "PUT", "DELETE"],
        help="HTTP method of the request.",
    )

    parser.add_argument(
        "path",
        help="Resource path without the version, e.g. /listings",
    )

    parser.add_argument(
        "--data",
        help="JSON body for POST and PUT requests (wrapped in the envelope).",
    )

    parser.add_argument(
        "--param",
        action="append",
        type=key_value,
        metavar="KEY=VALUE",
        help="Request option sent as a query parameter. Repeatable.",
    )

    parser.add_argument(
        "--count",
        action="store_true",
        help="Return only the total row count of the resource.",
    )

    cli_args = parser.parse_args()

    asyncio.run(run_application(cli_args))
