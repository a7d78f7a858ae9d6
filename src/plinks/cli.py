"""
Command line entry point for csv-to-plinks.

Subcommands:
- run:    read `name,amount_owed,item_ordered` rows, create one hosted payment
          link per row and write `Name,Amount,Payment Link` to a new file.
- check:  read a file produced by `run` and log the paid status of every link.

The API key is taken from --api-key or the MOLLIE_API_KEY environment variable.
Other knobs (base URL, currency, redirect URL, pacing delay) come from
PLINKS_* environment variables, see `plinks.envs.cli_env`.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, Sequence

import httpx
from pydantic import ValidationError

from .application.dtos import PaymentInfo, PaymentStatusResult
from .application.use_cases import PaymentLinkBatchService
from .domain.errors import PaymentLinkError
from .envs.cli_env import Settings, get_settings
from .infrastructure.mollie.payment_link_client import PaymentLinkClient
from .infrastructure.records import (
    open_output_file,
    read_input_records,
    read_payment_link_records,
    validate_file_paths,
    write_payment_rows,
)

logger = logging.getLogger(__name__)

API_KEY_ENV = "MOLLIE_API_KEY"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csv-to-plinks",
        description="Turn CSV rows into hosted payment links and check their status.",
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Enable debug logging"
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    api_key_default = os.environ.get(API_KEY_ENV)
    api_key_help = f"Payment provider API key (default: ${API_KEY_ENV})"

    run = sub.add_parser("run", help="Create a payment link for every input row")
    run.add_argument("-i", "--input", required=True, help="Input CSV file")
    run.add_argument(
        "-o", "--output", required=True, help="Output CSV file (must not exist)"
    )
    run.add_argument(
        "--api-key",
        default=api_key_default,
        required=api_key_default is None,
        help=api_key_help,
    )

    check = sub.add_parser("check", help="Log the paid status of generated links")
    check.add_argument("-i", "--input", required=True, help="CSV file written by `run`")
    check.add_argument(
        "--api-key",
        default=api_key_default,
        required=api_key_default is None,
        help=api_key_help,
    )
    return parser


def _make_service(
    api_key: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport],
) -> tuple[PaymentLinkClient, PaymentLinkBatchService]:
    client = PaymentLinkClient(
        api_key,
        base_url=settings.api_base_url,
        currency=settings.currency,
        redirect_url=settings.redirect_url,
        timeout=settings.http_timeout,
        transport=transport,
    )
    return client, PaymentLinkBatchService(client, delay=settings.request_delay)


async def create_links(
    input_path: str,
    output_path: str,
    api_key: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[PaymentInfo]:
    """Run the creation batch; file-level errors are raised before any request."""
    validate_file_paths(input_path, output_path)
    records = read_input_records(input_path)
    logger.debug("Loaded %d record(s) from %s", len(records), input_path)

    # The output file is claimed before the first request is sent
    out = open_output_file(output_path)
    with out:
        client, service = _make_service(api_key, settings, transport)
        try:
            async with client:
                payment_infos = await service.create_payment_links(records)
        except BaseException:
            out.close()
            os.remove(output_path)
            raise
        write_payment_rows(out, payment_infos)
    return payment_infos


async def check_links(
    input_path: str,
    api_key: str,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[PaymentStatusResult]:
    """Run the status check batch over a previously written results file."""
    validate_file_paths(input_path)
    records = read_payment_link_records(input_path)

    client, service = _make_service(api_key, settings, transport)
    async with client:
        return await service.check_payment_statuses(records)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.debug("Running csv-to-plinks: %s", args.command)

    try:
        settings = get_settings()
    except (ValueError, ValidationError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    try:
        if args.command == "run":
            asyncio.run(create_links(args.input, args.output, args.api_key, settings))
        else:
            asyncio.run(check_links(args.input, args.api_key, settings))
    except PaymentLinkError as e:
        logger.error("Error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
