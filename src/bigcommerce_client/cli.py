#!/usr/bin/env python3
"""Command line access to the BigCommerce API.

Credentials and endpoints come from the ``BIGCOMMERCE_*`` environment
variables or a ``.env`` file.

Examples
--------
.. code-block:: bash

    # List five products
    bigcommerce-client call GET /v3/catalog/products -p limit=5

    # Update a product
    bigcommerce-client call PUT /v3/catalog/products/77 --json '{"price": 9.5}'

    # Exchange the code received on the auth callback
    bigcommerce-client token --code abc --scope "store_v2_products" \\
        --redirect-uri https://app.example.com/auth
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .config import get_settings
from .exceptions import BigcommerceError
from .http_client import BigcommerceClient
from .models import HttpMethod
from .utils.security import setup_secure_logging

logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_TOKEN_REFUSED = 2


def parse_param(value: str) -> tuple:
    """Parse a ``key=value`` command line parameter.

    :param value: Raw argument
    :type value: str
    :return: ``(key, value)``
    :rtype: tuple
    :raises argparse.ArgumentTypeError: If the argument has no ``=``
    """
    key, sep, raw = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {value!r}")
    return key, raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bigcommerce-client", description="BigCommerce API client"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Overrides LOG_LEVEL",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    call = subparsers.add_parser("call", help="Make an API call")
    call.add_argument(
        "method", type=str.upper, choices=[m.value for m in HttpMethod]
    )
    call.add_argument("path")
    call.add_argument(
        "-p",
        "--param",
        dest="params",
        action="append",
        type=parse_param,
        default=[],
        help="Parameter as key=value, repeatable",
    )
    call.add_argument("--json", dest="json_params", help="Parameters as a JSON object")

    token = subparsers.add_parser("token", help="Exchange an authorization code")
    token.add_argument("--code", required=True)
    token.add_argument("--scope", required=True)
    token.add_argument("--redirect-uri", required=True)
    return parser


def _collect_params(args: argparse.Namespace) -> Dict[str, Any]:
    params: Dict[str, Any] = {}
    if args.json_params:
        decoded = json.loads(args.json_params)
        if not isinstance(decoded, dict):
            raise ValueError("--json must be a JSON object")
        params.update(decoded)
    params.update(dict(args.params))
    return params


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line client.

    :param argv: Arguments, ``sys.argv[1:]`` when omitted
    :type argv: Optional[List[str]]
    :return: Process exit code
    :rtype: int
    """
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_secure_logging(level=args.log_level or settings.log_level)

    try:
        with BigcommerceClient.from_settings(settings) as client:
            if args.command == "token":
                grant = client.exchange_code(args.code, args.scope, args.redirect_uri)
                if grant is None:
                    logger.error("The token endpoint did not return an access token")
                    return EXIT_TOKEN_REFUSED
                print(grant.model_dump_json(indent=2))
                return 0

            result = client.call(args.method, args.path, _collect_params(args))
    except BigcommerceError as e:
        logger.error("%s", e.message)
        print(e.to_json(), file=sys.stderr)
        return EXIT_ERROR
    except ValueError as e:
        logger.error("Invalid parameters: %s", e)
        return EXIT_ERROR

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
